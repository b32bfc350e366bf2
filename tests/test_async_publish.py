from __future__ import annotations

import threading

import httpx
import pytest

from artifact_worker.core.exceptions import HttpStatusError, ProtocolError
from artifact_worker.core.models import PublishOutcome
from artifact_worker.pipeline import AsyncPublishPipeline
from artifact_worker.publishing import ArtifactPublisher


def storage(status: int = 200, artifact_id: str = "urn:artifact:7"):
    received: dict[str, bytes] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        received[request.url.path] = request.content
        if request.url.path.endswith("-meta.json"):
            return httpx.Response(200)
        return httpx.Response(status, headers={"X-Artifact-Id": artifact_id})

    return handler, received


def _pipeline(env, client, capacity: int = 1024) -> AsyncPublishPipeline:
    return AsyncPublishPipeline(env, ArtifactPublisher(env, client), capacity=capacity)


def test_streamed_bytes_reach_storage_unchanged(make_env, serve):
    handler, received = storage()
    transport, client = serve(handler)
    chunks = [f"chunk-{index:05d};".encode() * 20 for index in range(250)]

    def producer(writer) -> None:
        for chunk in chunks:
            writer.write(chunk)

    handle = _pipeline(make_env(), client).publish_async("big.bin", "application/octet-stream", {"n": 250}, producer)
    outcome = handle.wait(timeout=10)

    assert handle.done()
    assert outcome.ok
    assert outcome.artifact_id == "urn:artifact:7"
    assert outcome.metadata_registered
    assert received["/big.bin"] == b"".join(chunks)
    assert transport.paths == ["/big.bin", "/big.bin-meta.json"]


def test_producer_failure_fails_publish_without_metadata(make_env, serve):
    handler, _ = storage()
    transport, client = serve(handler)
    failure = RuntimeError("renderer crashed")

    def producer(writer) -> None:
        writer.write(b"half an image")
        raise failure

    outcome = _pipeline(make_env(), client).publish_async("image.png", "image/png", {"m": 1}, producer).wait(timeout=10)

    assert not outcome.uploaded
    assert outcome.producer_error is failure
    assert outcome.error is failure
    assert outcome.artifact_id is None
    assert not any(path.endswith("-meta.json") for path in transport.paths)
    with pytest.raises(RuntimeError, match="renderer crashed"):
        outcome.raise_for_error()


def test_upload_failure_is_reported_through_the_handle(make_env, serve):
    handler, _ = storage(status=500)
    transport, client = serve(handler)

    def producer(writer) -> None:
        writer.write(b"bytes")

    outcome = _pipeline(make_env(), client).publish_async("image.png", "image/png", {"m": 1}, producer).wait(timeout=10)

    assert outcome.producer_error is None
    assert isinstance(outcome.error, HttpStatusError)
    assert transport.paths == ["/image.png"]


class _GivingUpPublisher:
    """Reads a few bytes, then rejects the upload."""

    def publish(self, name, content_type, source, metadata) -> PublishOutcome:
        source.read(16)
        raise ProtocolError("rejected early")


def test_consumer_giving_up_does_not_deadlock_the_producer(make_env):
    env = make_env()
    pipeline = AsyncPublishPipeline(env, _GivingUpPublisher(), capacity=64)

    def producer(writer) -> None:
        for _ in range(10_000):
            writer.write(b"x" * 64)

    outcome = pipeline.publish_async("huge.bin", "application/octet-stream", None, producer).wait(timeout=10)

    assert isinstance(outcome.error, ProtocolError)
    assert outcome.producer_error is None
    assert outcome.failure is outcome.error


def test_producer_system_exit_is_recorded_instead_of_hanging(make_env, serve):
    handler, _ = storage()
    transport, client = serve(handler)

    def producer(writer) -> None:
        writer.write(b"x")
        raise SystemExit(3)

    outcome = _pipeline(make_env(), client).publish_async("image.png", "image/png", {"m": 1}, producer).wait(timeout=10)

    assert isinstance(outcome.producer_error, SystemExit)
    assert not outcome.uploaded
    assert not any(path.endswith("-meta.json") for path in transport.paths)
    with pytest.raises(SystemExit):
        outcome.raise_for_error()


def test_wait_with_timeout_while_producer_is_still_running(make_env, serve):
    handler, received = storage()
    _, client = serve(handler)
    release = threading.Event()

    def producer(writer) -> None:
        writer.write(b"first")
        release.wait(timeout=10)
        writer.write(b"-second")

    handle = _pipeline(make_env(), client).publish_async("slow.txt", "text/plain", None, producer)

    with pytest.raises(TimeoutError):
        handle.wait(timeout=0.05)
    assert not handle.done()
    with pytest.raises(RuntimeError):
        handle.outcome

    release.set()
    outcome = handle.wait(timeout=10)

    assert outcome.ok
    assert received["/slow.txt"] == b"first-second"


def test_local_mode_async_publish_writes_file(make_env, serve, tmp_path):
    handler, _ = storage()
    transport, client = serve(handler)

    def producer(writer) -> None:
        writer.write(b"local ")
        writer.write(b"content")

    outcome = _pipeline(make_env(local_mode=True), client).publish_async("out.txt", "text/plain", {"a": 1}, producer).wait(timeout=10)

    assert outcome.local
    assert outcome.uploaded
    assert (tmp_path / "out.txt").read_bytes() == b"local content"
    assert transport.requests == []
