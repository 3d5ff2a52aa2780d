"""Application settings and configuration.

This module defines all configuration options for the Token Studio service.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Token Studio", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Security and authentication
    secret_key: str = Field(alias="SECRET_KEY")
    debug: bool = Field(default=False, alias="DEBUG")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    # Database configuration
    database_url: str = Field(default="sqlite:///./token_studio.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Addresses allowed to flag metadata as verified
    metadata_admin_addresses: list[str] = Field(
        default_factory=list,
        alias="METADATA_ADMIN_ADDRESSES",
    )

    # Pre-deployment draft sessions
    session_ttl_hours: int = Field(default=24, alias="SESSION_TTL_HOURS")
    session_sweep_enabled: bool = Field(default=True, alias="SESSION_SWEEP_ENABLED")
    session_sweep_interval_seconds: float = Field(
        default=3600.0,
        alias="SESSION_SWEEP_INTERVAL_SECONDS",
    )

    # Logo assets
    max_logo_bytes: int = Field(default=1024 * 1024, alias="MAX_LOGO_BYTES")
    upload_dir: str = Field(default="uploads", alias="UPLOAD_DIR")
    public_base_url: str = Field(default="http://localhost:8000", alias="PUBLIC_BASE_URL")
    ipfs_upload_url: str | None = Field(
        default="https://api.web3.storage/upload",
        alias="IPFS_UPLOAD_URL",
    )
    ipfs_api_token: str | None = Field(default=None, alias="IPFS_API_TOKEN")
    ipfs_gateway_template: str = Field(
        default="https://{cid}.ipfs.dweb.link",
        alias="IPFS_GATEWAY_TEMPLATE",
    )
    asset_http_timeout_seconds: float = Field(default=15.0, alias="ASSET_HTTP_TIMEOUT_SECONDS")

    # Chain RPC access for ownership checks
    rpc_http_timeout_seconds: float = Field(default=8.0, alias="RPC_HTTP_TIMEOUT_SECONDS")
    rpc_url_overrides: dict[str, str] = Field(
        default_factory=dict,
        alias="RPC_URL_OVERRIDES",
    )

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts asyncpg URLs to psycopg for synchronous database operations
        like Alembic migrations.
        """
        url = self.effective_database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url

    @property
    def admin_address_set(self) -> frozenset[str]:
        """Return the verify allow-list in canonical (lower-case) form."""
        return frozenset(address.strip().lower() for address in self.metadata_admin_addresses)


settings = Settings()  # type: ignore[call-arg]
