"""Wire-level constants shared with the storage and cache sidecars."""

from __future__ import annotations

from typing import Final

ARTIFACT_ID_HEADER: Final[str] = "X-Artifact-Id"
CACHE_ID_HEADER: Final[str] = "X-Cache-Id"
NAME_HEADER: Final[str] = "X-Name"
META_DATA_FOR_ARTIFACT_HEADER: Final[str] = "X-Meta-Data-For-Artifact"
META_DATA_SCHEMA_HEADER: Final[str] = "X-Meta-Data-Schema"

DEFAULT_STORAGE_URL: Final[str] = "http://localhost:8888"
DEFAULT_ORDER_ID: Final[str] = "???"
DEFAULT_METADATA_SCHEMA: Final[str] = "urn:schema:testing:image"
METADATA_SUFFIX: Final[str] = "-meta.json"

ARTIFACT_REFERENCE_PREFIX: Final[str] = "urn:"
READYZ_PATH: Final[str] = "/readyz"
MAX_ATTEMPTS: Final[int] = 10
READY_DELAY_SECONDS: Final[float] = 10.0

# 64 KiB read chunks and a 1 MiB pipe buffer
STREAM_CHUNK_SIZE: Final[int] = 64 * 1024
PIPE_CAPACITY: Final[int] = 1024 * 1024
