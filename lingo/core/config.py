from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file explicitly
ENV_FILE_NAME = ".env"
env_path = Path(__file__).parent.parent.parent / ENV_FILE_NAME
load_dotenv(env_path, override=False)


class Settings(BaseSettings):
    DEFAULT_LOCALE: str = ""  # Empty: use the system locale
    FALLBACK_LOCALE: str = "en"
    LOCALES_DIR: str = ""  # Optional, extra catalogs overriding the packaged ones
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/lingo.db"
    PREFERENCE_SCOPE: str = "default"
    LOG_LEVEL: str = "INFO"
    LOG_FILE: bool = False

    @field_validator("FALLBACK_LOCALE", "PREFERENCE_SCOPE")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def upper_level(cls, v: str) -> str:
        return v.strip().upper()

    model_config = SettingsConfigDict(
        env_file=ENV_FILE_NAME,
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
