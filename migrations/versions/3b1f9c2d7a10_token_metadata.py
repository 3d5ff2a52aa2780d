"""token metadata

Revision ID: 3b1f9c2d7a10
Revises:
Create Date: 2026-10-18 09:12:40.512338

"""
from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3b1f9c2d7a10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

TAGS = sa.JSON().with_variant(postgresql.ARRAY(sa.Text()), "postgresql")
SNAPSHOT = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _link_columns() -> list[sa.Column]:
    return [
        sa.Column(name, sa.String(length=255), nullable=True)
        for name in (
            "website_url",
            "twitter_url",
            "telegram_url",
            "discord_url",
            "whitepaper_url",
            "github_url",
        )
    ]


def upgrade() -> None:
    """Create token, metadata, draft and history tables."""
    op.create_table(
        "tokens",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("network", sa.String(length=32), nullable=False),
        sa.Column("address", sa.String(length=64), nullable=False),
        sa.Column("canonical_address", sa.String(length=64), nullable=False),
        sa.Column("owner_address", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=True),
        sa.Column("symbol", sa.String(length=20), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("network", "canonical_address", name="uq_tokens_network_address"),
    )
    op.create_index("ix_tokens_canonical_address", "tokens", ["canonical_address"])
    op.create_index("ix_tokens_owner_address", "tokens", ["owner_address"])

    op.create_table(
        "token_metadata",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("token_id", sa.Integer(), nullable=False),
        sa.Column("network", sa.String(length=32), nullable=False),
        sa.Column("token_address", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=True),
        sa.Column("symbol", sa.String(length=20), nullable=True),
        sa.Column("description", sa.String(length=300), nullable=True),
        sa.Column("logo_url", sa.Text(), nullable=True),
        *_link_columns(),
        sa.Column("tags", TAGS, nullable=False),
        sa.Column("verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("last_updated_by", sa.String(length=64), nullable=True),
        sa.Column("update_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["token_id"], ["tokens.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("token_id"),
        sa.UniqueConstraint("network", "token_address", name="uq_token_metadata_network_address"),
    )
    op.create_index("ix_token_metadata_token_address", "token_metadata", ["token_address"])
    op.create_index(
        "idx_token_metadata_tags",
        "token_metadata",
        ["tags"],
        postgresql_using="gin",
    )

    op.create_table(
        "temporary_metadata",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("session_id", sa.String(length=64), nullable=False),
        sa.Column("creator_address", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=True),
        sa.Column("symbol", sa.String(length=20), nullable=True),
        sa.Column("description", sa.String(length=300), nullable=True),
        sa.Column("logo_data", sa.Text(), nullable=True),
        *_link_columns(),
        sa.Column("tags", TAGS, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_temporary_metadata_session_id", "temporary_metadata", ["session_id"], unique=True
    )
    op.create_index(
        "ix_temporary_metadata_creator_address", "temporary_metadata", ["creator_address"]
    )
    op.create_index("ix_temporary_metadata_expires_at", "temporary_metadata", ["expires_at"])

    op.create_table(
        "token_metadata_history",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("token_id", sa.Integer(), nullable=False),
        sa.Column("network", sa.String(length=32), nullable=False),
        sa.Column("token_address", sa.String(length=64), nullable=False),
        sa.Column("updated_by", sa.String(length=64), nullable=False),
        sa.Column("update_timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("previous_data", SNAPSHOT, nullable=False),
        sa.ForeignKeyConstraint(["token_id"], ["tokens.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_token_metadata_history_token_id", "token_metadata_history", ["token_id"]
    )


def downgrade() -> None:
    """Drop the metadata tables."""
    op.drop_index("ix_token_metadata_history_token_id", table_name="token_metadata_history")
    op.drop_table("token_metadata_history")
    op.drop_index("ix_temporary_metadata_expires_at", table_name="temporary_metadata")
    op.drop_index("ix_temporary_metadata_creator_address", table_name="temporary_metadata")
    op.drop_index("ix_temporary_metadata_session_id", table_name="temporary_metadata")
    op.drop_table("temporary_metadata")
    op.drop_index("idx_token_metadata_tags", table_name="token_metadata")
    op.drop_index("ix_token_metadata_token_address", table_name="token_metadata")
    op.drop_table("token_metadata")
    op.drop_index("ix_tokens_owner_address", table_name="tokens")
    op.drop_index("ix_tokens_canonical_address", table_name="tokens")
    op.drop_table("tokens")
