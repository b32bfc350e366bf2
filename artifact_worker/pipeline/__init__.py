"""Streaming publish pipeline public API."""

from .async_publish import AsyncPublishPipeline, PublishHandle
from .pipe import PipeReader, PipeWriter, StreamPipe

__all__ = ["AsyncPublishPipeline", "PublishHandle", "PipeReader", "PipeWriter", "StreamPipe"]
