"""Logging configuration helpers and the logger capability used by the runtime."""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

import structlog

from .config import Settings, get_settings

RUNTIME_LOGGER_NAME = "artifact_worker"


@runtime_checkable
class LoggerProtocol(Protocol):
    """Leveled logging capability the runtime expects from its host.

    Each method takes a %-style template and its positional arguments.
    """

    def error(self, fmt: str, *args: Any) -> None: ...

    def info(self, fmt: str, *args: Any) -> None: ...

    def debug(self, fmt: str, *args: Any) -> None: ...


class StructlogLogger:
    """Adapt a structlog logger to :class:`LoggerProtocol`.

    The rendered message becomes the structlog event; ``context`` is bound
    once and attached to every entry as structured fields.
    """

    def __init__(self, logger: Any, **context: Any) -> None:
        self._logger = logger.bind(**context) if context else logger

    def error(self, fmt: str, *args: Any) -> None:
        self._logger.error(_render(fmt, args))

    def info(self, fmt: str, *args: Any) -> None:
        self._logger.info(_render(fmt, args))

    def debug(self, fmt: str, *args: Any) -> None:
        self._logger.debug(_render(fmt, args))


def _render(fmt: str, args: tuple[Any, ...]) -> str:
    if not args:
        return fmt
    return fmt % args


def wrap_logger(logger: Any, **context: Any) -> StructlogLogger:
    """Wrap an existing structlog logger, binding ``context`` to every entry."""
    return StructlogLogger(logger, **context)


def default_logger() -> StructlogLogger:
    return StructlogLogger(get_logger(RUNTIME_LOGGER_NAME))


def configure_logging(
    level: str | None = None,
    *,
    settings: Settings | None = None,
    **context: Any,
) -> StructlogLogger:
    """Configure stdlib logging and structlog, then return the runtime logger.

    ``IVCAP_LOG_JSON=false`` switches the renderer to structlog's console
    output for local runs. ``context`` (for example the order id) is bound to
    the returned logger.
    """
    resolved_settings = settings or get_settings()
    effective_level = level or resolved_settings.log_level
    numeric_level = getattr(logging, effective_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            level=numeric_level,
        )
    root_logger.setLevel(numeric_level)

    renderer: Any = (
        structlog.processors.JSONRenderer() if resolved_settings.log_json else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        cache_logger_on_first_use=True,
    )
    return wrap_logger(get_logger(RUNTIME_LOGGER_NAME), **context)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger."""
    return structlog.get_logger(name)
