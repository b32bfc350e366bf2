from __future__ import annotations

from typing import Any, Callable

import httpx
import pytest

from artifact_worker.core.config import Settings
from artifact_worker.core.environment import Environment, EnvironmentOptions, build_environment

STORAGE_URL = "http://storage.test"


class RecordingLogger:
    """Format-only logger: each level takes a %-style template and positional args."""

    def __init__(self) -> None:
        self.records: list[tuple[str, str]] = []

    def error(self, fmt: str, *args: Any) -> None:
        self.records.append(("error", fmt % args if args else fmt))

    def info(self, fmt: str, *args: Any) -> None:
        self.records.append(("info", fmt % args if args else fmt))

    def debug(self, fmt: str, *args: Any) -> None:
        self.records.append(("debug", fmt % args if args else fmt))

    def levels(self, level: str) -> list[str]:
        return [message for lvl, message in self.records if lvl == level]


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: list[httpx.Request] = []

        def _handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_handler)

    @property
    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]


@pytest.fixture
def logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        storage_url=STORAGE_URL,
        cache_url=None,
        order_id="order-42",
        local_dir=tmp_path,
    )


@pytest.fixture
def make_env(settings: Settings, logger: RecordingLogger) -> Callable[..., Environment]:
    def _make(*, local_mode: bool = False, no_caching: bool = False, **overrides: Any) -> Environment:
        resolved = settings.model_copy(update=overrides) if overrides else settings
        options = EnvironmentOptions(local_mode=local_mode, no_caching=no_caching, logger=logger)
        return build_environment(options, settings=resolved)

    return _make


@pytest.fixture
def serve():
    clients: list[httpx.Client] = []

    def _serve(handler: Callable[[httpx.Request], httpx.Response]) -> tuple[RecordingTransport, httpx.Client]:
        transport = RecordingTransport(handler)
        client = httpx.Client(transport=transport)
        clients.append(client)
        return transport, client

    yield _serve
    for client in clients:
        client.close()
