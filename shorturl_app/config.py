from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Loading priority (highest to lowest):
    1. Environment variables
    2. .env file
    3. Default values below
    """

    # Environment
    environment: str = "development"
    debug: bool = True

    # Application
    app_name: str = "URL Shortener"
    app_version: str = "1.0.0"

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    # Store
    store_backend: str = "redis"  # Options: "redis", "sql", "memory"
    connection_string: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices(
            "url_shortener_connection_string",
            "connection_string",
        ),
    )
    redis_key_prefix: str = ""  # Empty means keys are the bare paths
    redis_socket_timeout: int = 2

    # Short URLs
    forwarder_base_url: Optional[str] = None  # Falls back to the request's own host
    require_forwarder_base_url: bool = False
    default_page_size: int = 100
    max_page_size: int = 1000

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None
    log_json: bool = False

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


# Create settings instance
settings = Settings()
