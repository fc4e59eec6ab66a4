"""Application settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from uberauth import __version__


class Settings(BaseSettings):
    """Settings loaded from ``UBER_*`` environment variables or ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="UBER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    client_id: str = ""
    redirect_uri: str = ""
    sdk_version: str = __version__
    auth_host: str = "https://auth.uber.com"

    # Deeplink schemes this application declares it may query; anything else
    # is reported with the caller's default (see DefaultConfigurationProvider).
    registered_app_schemes: list[str] = ["uber", "ubereats", "uberdriver"]

    callback_timeout: float = 300.0
    http_timeout: float = 30.0


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
