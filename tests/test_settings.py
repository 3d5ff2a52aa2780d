# tests/test_settings.py
from token_studio.core import networks
from token_studio.core.settings import Settings, settings


def test_admin_addresses_are_canonical():
    configured = Settings(secret_key="x", metadata_admin_addresses=[" 0xABCdef ", "0x" + "1" * 40])
    assert configured.admin_address_set == frozenset({"0xabcdef", "0x" + "1" * 40})


def test_sync_url_for_tooling():
    configured = Settings(secret_key="x", database_url="postgresql+asyncpg://u:p@db/tokens")
    assert configured.database_url_sync == "postgresql+psycopg://u:p@db/tokens"


def test_testing_database_override():
    configured = Settings(
        secret_key="x",
        database_url="postgresql+psycopg://u:p@db/tokens",
        test_database_url="sqlite://",
        use_testing_database=True,
    )
    assert configured.effective_database_url == "sqlite://"


def test_rpc_overrides_apply(monkeypatch):
    monkeypatch.setattr(settings, "rpc_url_overrides", {"ethereum": "http://localhost:8545"})
    assert networks.get_network("ethereum").rpc_url == "http://localhost:8545"
    assert networks.get_network("bsc").rpc_url == "https://bsc-dataseed.binance.org"
    assert networks.get_network("dogechain") is None
