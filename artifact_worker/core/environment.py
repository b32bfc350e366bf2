"""Process-wide environment snapshot shared by every runtime component."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .config import Settings, get_settings
from .logging import LoggerProtocol, default_logger


@dataclass(slots=True, frozen=True)
class EnvironmentOptions:
    """Host-provided switches applied once when the environment is built.

    ``local_mode`` writes artifacts to the local file system instead of the
    storage service and skips the readiness probe. ``no_caching`` ignores the
    cache sidecar even when one is configured. ``logger`` replaces the default
    structlog adapter.
    """

    local_mode: bool = False
    no_caching: bool = False
    logger: LoggerProtocol | None = None


@dataclass(slots=True, frozen=True)
class Environment:
    local_mode: bool
    no_caching: bool
    logger: LoggerProtocol
    storage_url: str
    cache_url: str | None
    order_id: str
    local_dir: Path
    metadata_schema: str

    @property
    def caching_enabled(self) -> bool:
        return self.cache_url is not None


def build_environment(
    options: EnvironmentOptions | None = None,
    *,
    settings: Settings | None = None,
) -> Environment:
    """Resolve options and settings into an immutable :class:`Environment`."""
    resolved_options = options or EnvironmentOptions()
    resolved_settings = settings or get_settings()
    cache_url = None if resolved_options.no_caching else resolved_settings.normalized_cache_url
    return Environment(
        local_mode=resolved_options.local_mode,
        no_caching=resolved_options.no_caching,
        logger=resolved_options.logger or default_logger(),
        storage_url=resolved_settings.normalized_storage_url,
        cache_url=cache_url,
        order_id=resolved_settings.order_id,
        local_dir=resolved_settings.local_dir,
        metadata_schema=resolved_settings.metadata_schema,
    )
