"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Attributes:
        app_name: Name of the application.
        debug: Enable debug mode.
        database_url: Database connection URL for the item store.
        secret_key: Secret key for signing anonymous session tokens.
        access_token_expire_minutes: Session token expiration time.
        algorithm: JWT signing algorithm.
        sheet_proxy_url: Relay URL template used to fetch spreadsheet exports.
            ``{url}`` is replaced by the URL-encoded export link. Empty means
            fetch the export link directly.
        import_fetch_timeout: Upper bound in seconds for the spreadsheet fetch.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "ProFlow"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"

    # Database
    database_url: str = "sqlite:///./proflow.db"

    # Security
    secret_key: str = "change-this-to-a-secure-secret-key"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 30

    cors_origins: list[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]

    # Spreadsheet import
    sheet_proxy_url: str = "https://api.allorigins.win/raw?url={url}"
    import_fetch_timeout: float = 30.0


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: Application settings.
    """
    return Settings()
