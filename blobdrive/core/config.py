"""
Configuration management using Pydantic Settings.
"""
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Library-wide settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    environment: str = Field(default="production", alias="ENVIRONMENT")

    # Logging Settings
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="json", alias="LOG_FORMAT")

    # Default disk used by DriveManager when none is named
    default_disk: str = Field(default="azure", alias="BLOBDRIVE_DEFAULT_DISK")

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment.lower() == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"


class AzureStorageConfig(BaseSettings):
    """
    Configuration of one Azure Blob Storage disk.

    Values are read from ``AZURE_STORAGE_*`` environment variables and can be
    overridden by passing the field names as keyword arguments.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
        frozen=True
    )

    driver: str = Field(default="azure", alias="AZURE_STORAGE_DRIVER")
    container: Optional[str] = Field(default=None, alias="AZURE_STORAGE_CONTAINER")

    # Credentials, resolved by blobdrive.storage.credentials
    connection_string: Optional[str] = Field(default=None, alias="AZURE_STORAGE_CONNECTION_STRING")
    azure_tenant_id: Optional[str] = Field(default=None, alias="AZURE_TENANT_ID")
    azure_client_id: Optional[str] = Field(default=None, alias="AZURE_CLIENT_ID")
    azure_client_secret: Optional[str] = Field(default=None, alias="AZURE_CLIENT_SECRET")
    name: Optional[str] = Field(default=None, alias="AZURE_STORAGE_ACCOUNT_NAME")
    key: Optional[str] = Field(default=None, alias="AZURE_STORAGE_ACCOUNT_KEY")
    local_address: Optional[str] = Field(default=None, alias="AZURE_STORAGE_LOCAL_ADDRESS")  # Azurite or other emulators

    # Driver behaviour
    sas_expiry_seconds: int = Field(default=3600, gt=0, alias="AZURE_STORAGE_SAS_EXPIRY_SECONDS")  # 1 hour
    delete_missing_ok: bool = Field(default=False, alias="AZURE_STORAGE_DELETE_MISSING_OK")
    max_concurrency: int = Field(default=1, ge=1, alias="AZURE_STORAGE_MAX_CONCURRENCY")

    @field_validator("local_address")
    @classmethod
    def strip_trailing_slash(cls, v: Optional[str]) -> Optional[str]:
        """Normalize the emulator address so container URLs join cleanly."""
        if v is not None:
            return v.rstrip("/")
        return v

    @property
    def service_url(self) -> str:
        """Blob service endpoint, overridden by ``local_address`` when set."""
        if self.local_address is not None:
            return self.local_address
        return f"https://{self.name}.blob.core.windows.net"


@lru_cache()
def get_settings() -> Settings:
    """Get cached library settings."""
    return Settings()


# Global settings instance
settings = get_settings()
