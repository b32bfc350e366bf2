"""
Runtime helpers for short-lived worker processes.

The package exposes building blocks for:
- waiting on the storage sidecar to become reachable,
- fetching input resources directly or through the cache sidecar,
- streaming artifacts to storage while they are still being produced,
- registering a JSON metadata record for every uploaded artifact.
"""

from .core.config import Settings, get_settings
from .core.environment import Environment, EnvironmentOptions, build_environment
from .core.models import PublishOutcome
from .runtime import WorkerRuntime

__all__ = [
    "Settings",
    "get_settings",
    "Environment",
    "EnvironmentOptions",
    "build_environment",
    "PublishOutcome",
    "WorkerRuntime",
]
