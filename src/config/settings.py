"""
Application settings with Pydantic v2 validation.

Loads configuration from environment variables with sensible defaults.
"""

from pathlib import Path
from typing import Any, Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Storage configuration."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    data_dir: Path = Path("data")
    db_name: str = "facturier.db"

    # SQLite settings
    pool_size: int = 5
    busy_timeout: int = 30000  # ms

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class InvoicingSettings(BaseSettings):
    """Invoice issuance configuration."""

    model_config = SettingsConfigDict(env_prefix="INVOICE_")

    number_prefix: str = "FACT"
    # IANA zone whose calendar date goes into invoice numbers
    number_timezone: str = "UTC"
    default_currency: str = "FCFA"
    default_issuer_name: str = "Mon Entreprise"

    # Upper bound on number candidates tried per issuance
    max_number_attempts: int = Field(default=10, ge=1)

    list_limit: int = 100

    @field_validator("number_timezone")
    @classmethod
    def check_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown time zone: {v}") from e
        return v

    @property
    def number_tz(self) -> ZoneInfo:
        return ZoneInfo(self.number_timezone)


class CatalogSettings(BaseSettings):
    """Product catalog configuration."""

    model_config = SettingsConfigDict(env_prefix="CATALOG_")

    search_limit: int = 10
    recent_limit: int = 10
    list_limit: int = 50


class APISettings(BaseSettings):
    """API server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 3001
    debug: bool = False
    cors_origins: list[str] = ["http://localhost:5173"]


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Facturier"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Sub-settings
    storage: StorageSettings = Field(default_factory=StorageSettings)
    invoicing: InvoicingSettings = Field(default_factory=InvoicingSettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    api: APISettings = Field(default_factory=APISettings)

    @field_validator("storage", mode="before")
    @classmethod
    def ensure_data_dir(cls, v: Any) -> StorageSettings:
        if isinstance(v, dict):
            settings = StorageSettings(**v)
        else:
            settings = v or StorageSettings()
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        return settings


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
