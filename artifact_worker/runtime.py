"""Facade bundling the runtime components a worker process needs."""

from __future__ import annotations

import time
from contextlib import AbstractContextManager
from typing import Any, BinaryIO, Callable

import httpx

from artifact_worker.core.config import Settings, get_settings
from artifact_worker.core.constants import MAX_ATTEMPTS
from artifact_worker.core.environment import Environment, EnvironmentOptions, build_environment
from artifact_worker.core.models import Consumer, Producer, PublishOutcome, T
from artifact_worker.pipeline.async_publish import AsyncPublishPipeline, PublishHandle
from artifact_worker.publishing.metadata import MetadataRegistrar
from artifact_worker.publishing.publisher import ArtifactPublisher
from artifact_worker.readiness.gate import ReadinessGate
from artifact_worker.resources.fetcher import ResourceFetcher


class WorkerRuntime(AbstractContextManager["WorkerRuntime"]):
    """Entry point for worker processes: readiness, fetching and publishing."""

    def __init__(
        self,
        options: EnvironmentOptions | None = None,
        *,
        settings: Settings | None = None,
        client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._settings = settings or get_settings()
        self.environment: Environment = build_environment(options, settings=self._settings)
        self._owns_client = client is None
        # uploads have no size bound, so no timeout on the shared client
        self._client = client or httpx.Client(timeout=None)
        self.registrar = MetadataRegistrar(self.environment, self._client)
        self.publisher = ArtifactPublisher(self.environment, self._client, registrar=self.registrar)
        self.pipeline = AsyncPublishPipeline(self.environment, self.publisher)
        self.fetcher = ResourceFetcher(self.environment, self._client)
        self.readiness = ReadinessGate(
            self.environment,
            self._client,
            delay_seconds=self._settings.ready_delay_seconds,
            timeout_seconds=self._settings.ready_timeout_seconds,
            sleep=sleep,
        )

    # Context manager API -----------------------------------------------------
    def __exit__(self, exc_type, exc_value, traceback) -> None:  # type: ignore[override]
        self.close()

    def close(self) -> None:
        """Close the HTTP client when this runtime created it."""
        if self._owns_client:
            self._client.close()

    # Operations --------------------------------------------------------------
    def wait_for_environment_ready(self, max_attempts: int = MAX_ATTEMPTS) -> int:
        return self.readiness.wait_until_ready(max_attempts)

    def get_resource(self, reference: str, consumer: Consumer[T]) -> T:
        return self.fetcher.fetch(reference, consumer)

    def publish(self, name: str, content_type: str, source: BinaryIO, metadata: Any = None) -> PublishOutcome:
        return self.publisher.publish(name, content_type, source, metadata)

    def publish_async(self, name: str, content_type: str, metadata: Any, producer: Producer) -> PublishHandle:
        return self.pipeline.publish_async(name, content_type, metadata, producer)

    def publish_meta_for_artifact(self, name: str, artifact_id: str, metadata: Any) -> bool:
        return self.registrar.register(name, artifact_id, metadata)

    @property
    def order_id(self) -> str:
        return self.environment.order_id
