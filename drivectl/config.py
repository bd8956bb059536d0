from pathlib import Path
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
import logging
from functools import lru_cache

PROVIDERS = ("gdrive", "dropbox")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """
    Centralized application configuration with type validation.
    Reads DRIVECTL_* variables from the environment (or a .env file) and falls
    back to an OAuth client file kept in the config directory.
    """

    model_config = SettingsConfigDict(
        env_prefix="DRIVECTL_", env_file=".env", extra="ignore"
    )

    CREDENTIALS_FILE_NAME: str = "credentials.json"

    # --- General Settings ---
    CONFIG_DIR: Path = Path.home() / ".config" / "drivectl"
    DEFAULT_PROVIDER: str = "gdrive"  # "gdrive" or "dropbox"
    LOG_LEVEL: str = "WARNING"
    LOG_FILE: Optional[Path] = None

    # --- Google Drive Settings (optional) ---
    # Contents of the OAuth client file downloaded from the Google Cloud console.
    GDRIVE_CREDENTIALS_JSON: Optional[str] = None

    # --- Dropbox Settings (optional) ---
    DROPBOX_APP_KEY: Optional[str] = None
    DROPBOX_APP_SECRET: Optional[str] = None

    @model_validator(mode="before")
    def validate_provider_and_log_level(cls, values):
        provider = values.get("DEFAULT_PROVIDER")
        if provider is not None and provider not in PROVIDERS:
            raise ValueError("Invalid DEFAULT_PROVIDER. Must be 'gdrive' or 'dropbox'.")

        log_level = values.get("LOG_LEVEL")
        if log_level is not None:
            if str(log_level).upper() not in LOG_LEVELS:
                raise ValueError(f"Invalid LOG_LEVEL '{log_level}'.")
            values["LOG_LEVEL"] = str(log_level).upper()

        return values

    def model_post_init(self, __context):
        """
        After initial settings are loaded from the environment,
        try to load the Google OAuth client config from the config directory as a fallback.
        """
        if self.GDRIVE_CREDENTIALS_JSON:
            return
        credentials_file = self.CONFIG_DIR / self.CREDENTIALS_FILE_NAME
        if credentials_file.is_file():
            content = credentials_file.read_text().strip()
            if content:
                self.GDRIVE_CREDENTIALS_JSON = content
                logging.info(f"Found Google OAuth client config in file: {credentials_file}")

    @property
    def ACCOUNTS_DIR(self) -> Path:
        return self.CONFIG_DIR / "accounts"

    @property
    def CURRENT_ACCOUNT_FILE(self) -> Path:
        return self.CONFIG_DIR / "current_account"


@lru_cache()
def get_settings() -> Settings:
    """
    Returns a cached instance of the application settings.
    The first call to this function will initialize the settings.
    """
    settings = Settings()
    settings.CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    return settings
