"""Application configuration primitives."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import DEFAULT_METADATA_SCHEMA, DEFAULT_ORDER_ID, DEFAULT_STORAGE_URL, READY_DELAY_SECONDS


class Settings(BaseSettings):
    """Process configuration read from the ``IVCAP_*`` environment variables."""

    storage_url: str = DEFAULT_STORAGE_URL
    cache_url: str | None = None
    order_id: str = DEFAULT_ORDER_ID

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_json: bool = True
    ready_delay_seconds: float = READY_DELAY_SECONDS
    ready_timeout_seconds: float = 5.0
    local_dir: Path = Path(".")
    metadata_schema: str = DEFAULT_METADATA_SCHEMA

    model_config = SettingsConfigDict(env_prefix="IVCAP_", env_file=(), extra="ignore")

    @property
    def normalized_storage_url(self) -> str:
        return self.storage_url.rstrip("/")

    @property
    def normalized_cache_url(self) -> str | None:
        text = (self.cache_url or "").strip().rstrip("/")
        return text or None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()
