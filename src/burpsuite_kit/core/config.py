from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Library configuration loaded from environment variables or .env file."""

    model_config = SettingsConfigDict(env_prefix="BURPSUITE_KIT_", env_file=".env")

    # Reader settings
    read_chunk_size: int = Field(
        64 * 1024, gt=0, description="Bytes read from the source per tokenizer feed"
    )
    huge_tree: bool = Field(
        True, description="Allow text nodes larger than lxml's default 10 MB limit"
    )

    # Logging settings
    log_level: str = Field("INFO", description="Level for loggers from get_logger")

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value}")
        return level


@lru_cache()
def get_settings() -> Settings:
    """Return a singleton settings instance."""
    return Settings()


settings = get_settings()
