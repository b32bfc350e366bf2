"""Register the JSON metadata record that accompanies an uploaded artifact."""

from __future__ import annotations

from typing import Any

import httpx
import pydantic_core
from pydantic import BaseModel

from artifact_worker.core.constants import (
    META_DATA_FOR_ARTIFACT_HEADER,
    META_DATA_SCHEMA_HEADER,
    METADATA_SUFFIX,
    NAME_HEADER,
)
from artifact_worker.core.environment import Environment
from artifact_worker.core.exceptions import HttpError, HttpStatusError, TransportError


def metadata_name(name: str) -> str:
    return f"{name}{METADATA_SUFFIX}"


def serialize_metadata(metadata: Any) -> bytes:
    """Return the JSON body for a metadata record."""
    if isinstance(metadata, BaseModel):
        return metadata.model_dump_json(by_alias=True, exclude_none=True).encode("utf-8")
    return pydantic_core.to_json(metadata)


class MetadataRegistrar:
    """PUT ``<name>-meta.json`` next to an artifact and link it by artifact id."""

    def __init__(self, environment: Environment, client: httpx.Client) -> None:
        self._env = environment
        self._client = client

    def register(self, name: str, artifact_id: str, metadata: Any) -> bool:
        """Upload ``metadata`` for ``artifact_id``; return ``False`` when there is none."""
        if metadata is None:
            return False

        json_name = metadata_name(name)
        url = f"{self._env.storage_url}/{json_name}"
        self._env.logger.debug("starting to upload metadata - url: %s artifact: %s", url, artifact_id)
        try:
            body = serialize_metadata(metadata)
            request = self._client.build_request(
                "PUT",
                url,
                content=body,
                headers={
                    "Content-Type": "application/json",
                    META_DATA_FOR_ARTIFACT_HEADER: artifact_id,
                    META_DATA_SCHEMA_HEADER: self._env.metadata_schema,
                    NAME_HEADER: json_name,
                },
            )
        except (TypeError, ValueError, httpx.InvalidURL) as exc:
            self._env.logger.error("creating request failed - %s", exc)
            raise HttpError(f"Cannot build metadata request for '{json_name}'", cause=exc) from exc

        try:
            response = self._client.send(request)
        except httpx.TransportError as exc:
            self._env.logger.error("upload metadata failed - %s", exc)
            raise TransportError(str(exc), request=request, cause=exc) from exc

        if response.status_code >= 300:
            self._env.logger.error("upload metadata failed - status: %d", response.status_code)
            raise HttpStatusError(
                f"PUT {url} returned {response.status_code}",
                request=request,
                response=response,
            )
        self._env.logger.info("successfully uploaded metadata '%s' - status: %d", json_name, response.status_code)
        return True
