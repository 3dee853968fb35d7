"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str
    database_echo: bool = False

    # Redis (for Dramatiq and sync job locks)
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: str | None = None
    redis_db: int = 0

    # Bitquery (v1 GraphQL API key, v2 streaming OAuth token)
    bitquery_api_key: str | None = None
    bitquery_v2_token: str | None = None
    bitquery_api_url: str = "https://graphql.bitquery.io"
    bitquery_streaming_url: str = "https://streaming.bitquery.io/graphql"

    # Coinbase Developer Platform SQL API
    cdp_api_token: str | None = None
    cdp_sql_url: str = "https://api.cdp.coinbase.com/platform/v2/data/query/run"

    provider_request_timeout: float = Field(
        default=120.0,
        gt=0,
        description="Per-request timeout for provider queries in seconds",
    )

    # Application
    environment: str = "production"
    debug: bool = False
    log_level: str = "INFO"
    log_file: str = "logs/transfer_sync.log"
    health_check_port: int = Field(
        default=8081, ge=1, le=65535, description="Health check HTTP server port"
    )

    # Skips every scheduled run while enabled
    sync_maintenance_mode: bool = Field(
        default=False,
        description="Transfer sync maintenance mode flag",
    )
    sync_lock_enabled: bool = Field(
        default=True,
        description="Hold a Redis lock per job id while a sync run is active",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode="after")
    def set_debug_log_level(self) -> "Settings":
        """Force DEBUG logging when debug flag is on."""
        if self.debug:
            self.log_level = "DEBUG"
        return self


settings = Settings()
