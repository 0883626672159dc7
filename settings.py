from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    LOG_LEVEL: str = "WARNING"

    # --- Pipeline limits ---
    # Raw model output above this size is rejected before extraction.
    MAX_RAW_TEXT_CHARS: int = 200_000

    # --- CLI output ---
    OUTPUT_INDENT: int = 2


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def reset_settings_cache() -> None:
    get_settings.cache_clear()
