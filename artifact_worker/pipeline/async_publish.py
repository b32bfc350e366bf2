"""Run a body producer and the artifact upload concurrently over a pipe."""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any

from artifact_worker.core.constants import PIPE_CAPACITY
from artifact_worker.core.environment import Environment
from artifact_worker.core.models import Producer, PublishOutcome
from artifact_worker.publishing.publisher import ArtifactPublisher

from .pipe import PipeReader, PipeWriter, StreamPipe


class PublishHandle:
    """Join point for one asynchronous publish.

    Anything either side raises, ``SystemExit`` and ``KeyboardInterrupt``
    included, is recorded on the outcome rather than raised from ``wait``;
    ``PublishOutcome.raise_for_error`` re-raises it in the caller's thread.
    """

    def __init__(self, name: str, producer_future: Future, consumer_future: Future) -> None:
        self.name = name
        self._producer = producer_future
        self._consumer = consumer_future

    def done(self) -> bool:
        return self._producer.done() and self._consumer.done()

    def wait(self, timeout: float | None = None) -> PublishOutcome:
        """Block until both the producer and the upload finished."""
        _, pending = wait((self._producer, self._consumer), timeout=timeout)
        if pending:
            raise TimeoutError(f"publish of '{self.name}' still running after {timeout}s")
        return self.outcome

    @property
    def outcome(self) -> PublishOutcome:
        if not self.done():
            raise RuntimeError(f"publish of '{self.name}' has not finished")
        outcome: PublishOutcome = self._consumer.result()
        outcome.producer_error = self._producer.result()
        return outcome


class AsyncPublishPipeline:
    """Bridge a ``producer(writer)`` callback to :class:`ArtifactPublisher`."""

    def __init__(
        self,
        environment: Environment,
        publisher: ArtifactPublisher,
        *,
        capacity: int = PIPE_CAPACITY,
    ) -> None:
        self._env = environment
        self._publisher = publisher
        self._capacity = capacity

    def publish_async(
        self,
        name: str,
        content_type: str,
        metadata: Any,
        producer: Producer,
    ) -> PublishHandle:
        reader, writer = StreamPipe(self._capacity)
        executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix=f"publish-{name}")
        try:
            producer_future = executor.submit(self._produce, name, producer, writer)
            consumer_future = executor.submit(self._consume, name, content_type, metadata, reader)
        finally:
            executor.shutdown(wait=False)
        return PublishHandle(name, producer_future, consumer_future)

    def _produce(self, name: str, producer: Producer, writer: PipeWriter) -> BaseException | None:
        error: BaseException | None = None
        try:
            producer(writer)
        except BaseException as exc:  # pylint: disable=broad-except
            error = exc
        finally:
            writer.close_with_error(error)
        if error is not None and error is writer.reader_error:
            # the upload gave up first; its error is already on the outcome
            self._env.logger.debug("writing '%s' stopped - upload failed", name)
            return None
        if error is not None:
            self._env.logger.error("writing '%s' failed - %s", name, error)
            return error
        self._env.logger.debug("writing finished '%s'", name)
        return None

    def _consume(self, name: str, content_type: str, metadata: Any, reader: PipeReader) -> PublishOutcome:
        error: BaseException | None = None
        try:
            outcome = self._publisher.publish(name, content_type, reader, metadata)
        except BaseException as exc:  # pylint: disable=broad-except
            error = exc
            outcome = PublishOutcome(name=name, error=exc)
        finally:
            reader.close_with_error(error)
        if error is not None:
            self._env.logger.error("publishing '%s' failed - %s", name, error)
        else:
            self._env.logger.debug("published '%s' as '%s'", name, outcome.artifact_id)
        return outcome
