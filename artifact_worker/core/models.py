"""Shared data models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, BinaryIO, Callable, TypeVar

T = TypeVar("T")

Producer = Callable[[BinaryIO], Any]
Consumer = Callable[[BinaryIO], T]


@dataclass(slots=True)
class PublishOutcome:
    """Result of one publish call.

    ``error`` covers the artifact upload (transport, status, protocol or a
    failure while reading the source stream). ``metadata_error`` is reported
    separately because the artifact already exists on the server by then.
    """

    name: str
    artifact_id: str | None = None
    error: BaseException | None = None
    producer_error: BaseException | None = None
    metadata_error: BaseException | None = None
    metadata_registered: bool = False
    local: bool = False

    @property
    def uploaded(self) -> bool:
        return self.error is None and self.producer_error is None

    @property
    def ok(self) -> bool:
        return self.uploaded and self.metadata_error is None

    @property
    def failure(self) -> BaseException | None:
        return self.producer_error or self.error or self.metadata_error

    def raise_for_error(self, *, include_metadata: bool = False) -> None:
        """Re-raise the producer or upload failure, if any."""
        if self.producer_error is not None:
            raise self.producer_error
        if self.error is not None:
            raise self.error
        if include_metadata and self.metadata_error is not None:
            raise self.metadata_error
