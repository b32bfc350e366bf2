"""Custom exception hierarchy for the worker runtime."""

from __future__ import annotations

from typing import Any

import httpx


class ArtifactWorkerError(Exception):
    """Base error for the artifact worker runtime."""


class EnvironmentNotReadyError(ArtifactWorkerError):
    """Raised when the sidecars never answered the readiness probe."""

    def __init__(self, attempts: int, url: str) -> None:
        self.attempts = attempts
        self.url = url
        super().__init__(f"Environment doesn't seem to be ready after {attempts} attempt(s) - {url}")


class HttpError(ArtifactWorkerError):
    """Raised when a request to a sidecar could not be built, sent or accepted."""

    def __init__(
        self,
        message: str,
        *,
        request: httpx.Request | None = None,
        response: httpx.Response | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.request = request
        self.response = response
        self.cause = cause
        super().__init__(message)

    def __str__(self) -> str:
        message = super().__str__()
        if self.response is not None:
            return f"http response failed ({self.response.status_code}) - {message}"
        if self.request is not None:
            return f"http request failed ({self.request.method} {self.request.url}) - {message}"
        return message


class TransportError(HttpError):
    """Raised when the HTTP call itself could not be completed."""


class HttpStatusError(HttpError):
    """Raised when a response arrived with a failure status."""

    @property
    def status_code(self) -> int | None:
        return self.response.status_code if self.response is not None else None


class ProtocolError(ArtifactWorkerError):
    """Raised when a successful response violates the expected contract."""

    def __init__(self, message: str, *, response: Any | None = None) -> None:
        self.response = response
        super().__init__(message)


class PipeClosedError(ArtifactWorkerError, BrokenPipeError):
    """Raised on I/O against a pipe end that has been closed."""
