"""Shared core utilities for the artifact worker runtime."""

from .config import Settings, get_settings
from .constants import (
    ARTIFACT_ID_HEADER,
    CACHE_ID_HEADER,
    MAX_ATTEMPTS,
    META_DATA_FOR_ARTIFACT_HEADER,
    META_DATA_SCHEMA_HEADER,
    NAME_HEADER,
)
from .environment import Environment, EnvironmentOptions, build_environment
from .exceptions import (
    ArtifactWorkerError,
    EnvironmentNotReadyError,
    HttpError,
    HttpStatusError,
    PipeClosedError,
    ProtocolError,
    TransportError,
)
from .logging import LoggerProtocol, StructlogLogger, configure_logging, get_logger, wrap_logger
from .models import Consumer, Producer, PublishOutcome

__all__ = [
    "Settings",
    "get_settings",
    "ARTIFACT_ID_HEADER",
    "CACHE_ID_HEADER",
    "MAX_ATTEMPTS",
    "META_DATA_FOR_ARTIFACT_HEADER",
    "META_DATA_SCHEMA_HEADER",
    "NAME_HEADER",
    "Environment",
    "EnvironmentOptions",
    "build_environment",
    "ArtifactWorkerError",
    "EnvironmentNotReadyError",
    "HttpError",
    "HttpStatusError",
    "PipeClosedError",
    "ProtocolError",
    "TransportError",
    "LoggerProtocol",
    "StructlogLogger",
    "configure_logging",
    "get_logger",
    "wrap_logger",
    "Consumer",
    "Producer",
    "PublishOutcome",
]
