"""Download input resources from the storage service or through the cache sidecar."""

from __future__ import annotations

import base64

import httpx

from artifact_worker.core.constants import ARTIFACT_REFERENCE_PREFIX, CACHE_ID_HEADER
from artifact_worker.core.environment import Environment
from artifact_worker.core.exceptions import HttpStatusError, TransportError
from artifact_worker.core.models import Consumer, T

from .streams import open_chunk_reader


def encode_cache_key(url: str) -> str:
    """Return the unpadded URL-safe base64 form of ``url``."""
    return base64.urlsafe_b64encode(url.encode("utf-8")).decode("ascii").rstrip("=")


class ResourceFetcher:
    """Resolve artifact references and external URLs to byte streams."""

    def __init__(self, environment: Environment, client: httpx.Client) -> None:
        self._env = environment
        self._client = client

    def resolve_url(self, reference: str) -> str:
        if reference.startswith(ARTIFACT_REFERENCE_PREFIX):
            self._env.logger.info("downloading artifact - urn: %s", reference)
            return f"{self._env.storage_url}/{reference}"
        self._env.logger.info(
            "downloading remote content - url: %s, caching?: %s", reference, self._env.caching_enabled
        )
        if self._env.cache_url is not None:
            return f"{self._env.cache_url}/{encode_cache_key(reference)}"
        return reference

    def fetch(self, reference: str, consumer: Consumer[T]) -> T:
        """Stream the resource into ``consumer`` and return what it returns.

        The reader handed to ``consumer`` is closed once it returns, even when
        it raises; its exception propagates unchanged.
        """
        url = self.resolve_url(reference)
        try:
            with self._client.stream("GET", url) as response:
                if response.status_code != 200:
                    self._env.logger.error(
                        "getting resource failed - statusCode: %d url: %s", response.status_code, url
                    )
                    raise HttpStatusError(
                        f"GET {url} returned {response.status_code}",
                        request=response.request,
                        response=response,
                    )
                self._env.logger.debug(
                    "downloading '%s' succeeded - size: %s cache-id: %s",
                    url,
                    response.headers.get("Content-Length"),
                    response.headers.get(CACHE_ID_HEADER),
                )
                with open_chunk_reader(response.iter_bytes()) as reader:
                    return consumer(reader)
        except httpx.TransportError as exc:
            self._env.logger.error("GET failed - url: %s, err: %s", url, exc)
            raise TransportError(str(exc), request=_request_of(exc), cause=exc) from exc


def _request_of(exc: httpx.TransportError) -> httpx.Request | None:
    try:
        return exc.request
    except RuntimeError:
        return None
