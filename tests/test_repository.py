# tests/test_repository.py
"""Unit tests for SQL produced by the metadata repository."""

from sqlalchemy import select
from sqlalchemy.dialects import postgresql

from token_studio.models import TokenMetadata
from token_studio.repositories.metadata_repo import tag_contains


def test_tag_filter_uses_array_containment_on_postgresql():
    stmt = select(TokenMetadata).where(tag_contains("defi"))
    sql = str(stmt.compile(dialect=postgresql.dialect()))
    assert "token_metadata.tags @> " in sql
    assert "LIKE" not in sql
