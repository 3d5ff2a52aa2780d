# tests/conftest.py
from __future__ import annotations

import os
import tempfile
from collections.abc import Generator, Iterator
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

OWNER_ADDRESS = "0xAbCdEf0123456789aBcDeF0123456789AbCdEf01"
OTHER_ADDRESS = "0x" + "b" * 40
ADMIN_ADDRESS = "0x" + "c" * 40
TOKEN_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"

os.environ.setdefault("PYTEST_RUNNING", "true")
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SESSION_SWEEP_ENABLED", "false")
os.environ.setdefault("METADATA_ADMIN_ADDRESSES", f'["{ADMIN_ADDRESS}"]')
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="token-studio-uploads-"))
os.environ.setdefault("IPFS_API_TOKEN", "")

from token_studio.api.v1.dependencies import get_logo_storage_dep, get_owner_resolver_dep  # noqa: E402
from token_studio.core.security import create_access_token  # noqa: E402
from token_studio.db.session import Base  # noqa: E402
from token_studio.db.session import get_db as app_get_session  # noqa: E402
from token_studio.main import app as fastapi_app  # noqa: E402
from token_studio.models import Token  # noqa: E402
from token_studio.services.assets import AssetStorageConfig, LogoStorage  # noqa: E402
from token_studio.services.errors import OwnershipLookupError  # noqa: E402
from token_studio.utils.address import canonical_address  # noqa: E402

TEST_DB_URL = "sqlite://"

# Smallest valid PNG signature followed by filler bytes.
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


class FakeOwnerResolver:
    """In-memory owner lookup keyed by (network, canonical address)."""

    def __init__(self) -> None:
        self.owners: dict[tuple[str, str], str | Exception | None] = {}
        self.calls = 0

    def set_owner(self, network: str, address: str, owner: str | Exception | None) -> None:
        self.owners[(network, canonical_address(address))] = owner

    async def resolve_owner(self, token: Token) -> str | None:
        self.calls += 1
        owner = self.owners.get((token.network, token.canonical_address))
        if isinstance(owner, Exception):
            raise owner
        return owner

    async def close(self) -> None:
        return None


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def owner_resolver() -> FakeOwnerResolver:
    return FakeOwnerResolver()


@pytest.fixture()
def asset_config(tmp_path: Path) -> AssetStorageConfig:
    return AssetStorageConfig(
        max_bytes=1024 * 1024,
        upload_dir=tmp_path / "uploads",
        public_base_url="http://test",
        ipfs_upload_url=None,
        ipfs_api_token=None,
        ipfs_gateway_template="https://{cid}.ipfs.dweb.link",
        timeout_seconds=5.0,
    )


@pytest.fixture()
def logo_storage(asset_config: AssetStorageConfig) -> LogoStorage:
    return LogoStorage(asset_config)


@pytest.fixture(autouse=True)
def override_dependencies(
    app: FastAPI,
    db_session: Session,
    owner_resolver: FakeOwnerResolver,
    logo_storage: LogoStorage,
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_owner_resolver_dep] = lambda: owner_resolver
    app.dependency_overrides[get_logo_storage_dep] = lambda: logo_storage
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)
        app.dependency_overrides.pop(get_owner_resolver_dep, None)
        app.dependency_overrides.pop(get_logo_storage_dep, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


def auth_headers(address: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(address)}"}


@pytest.fixture()
def owner_headers() -> dict[str, str]:
    """Authorization headers for the wallet that owns the test token."""
    return auth_headers(OWNER_ADDRESS)


@pytest.fixture()
def other_headers() -> dict[str, str]:
    """Authorization headers for an unrelated wallet."""
    return auth_headers(OTHER_ADDRESS)


@pytest.fixture()
def admin_headers() -> dict[str, str]:
    """Authorization headers for a metadata administrator."""
    return auth_headers(ADMIN_ADDRESS)


@pytest.fixture()
def token(db_session: Session, owner_resolver: FakeOwnerResolver) -> Iterator[Token]:
    """A registered Ethereum token owned on-chain by OWNER_ADDRESS."""
    token = Token(
        network="ethereum",
        address=TOKEN_ADDRESS,
        canonical_address=canonical_address(TOKEN_ADDRESS),
        owner_address=canonical_address(OWNER_ADDRESS),
        name="Test Token",
        symbol="TEST",
    )
    db_session.add(token)
    db_session.commit()
    db_session.refresh(token)
    owner_resolver.set_owner("ethereum", TOKEN_ADDRESS, OWNER_ADDRESS)
    yield token


@pytest.fixture()
def rpc_down() -> OwnershipLookupError:
    return OwnershipLookupError("RPC request to ethereum failed: connection refused")
