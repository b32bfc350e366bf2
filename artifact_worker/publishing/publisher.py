"""Upload artifact streams to the storage service."""

from __future__ import annotations

from typing import Any, BinaryIO

import httpx

from artifact_worker.core.constants import ARTIFACT_ID_HEADER, NAME_HEADER
from artifact_worker.core.environment import Environment
from artifact_worker.core.exceptions import HttpStatusError, ProtocolError, TransportError
from artifact_worker.core.models import PublishOutcome
from artifact_worker.resources.streams import iter_stream

from .metadata import MetadataRegistrar


class ArtifactPublisher:
    """PUT a named byte stream and register its metadata once the server assigns an id."""

    def __init__(
        self,
        environment: Environment,
        client: httpx.Client,
        *,
        registrar: MetadataRegistrar | None = None,
    ) -> None:
        self._env = environment
        self._client = client
        self._registrar = registrar or MetadataRegistrar(environment, client)

    def publish(self, name: str, content_type: str, source: BinaryIO, metadata: Any = None) -> PublishOutcome:
        """Upload ``source`` as ``name``.

        Upload failures raise (:class:`TransportError`, :class:`HttpStatusError`,
        :class:`ProtocolError`, or whatever reading ``source`` raised). A failed
        metadata registration is logged and returned in
        ``PublishOutcome.metadata_error`` instead, since the artifact is already
        stored at that point.
        """
        if self._env.local_mode:
            return self._publish_local(name, source)

        url = f"{self._env.storage_url}/{name}"
        request = self._client.build_request(
            "PUT",
            url,
            content=iter_stream(source),
            headers={"Content-Type": content_type, NAME_HEADER: name},
        )
        try:
            response = self._client.send(request)
        except httpx.TransportError as exc:
            self._env.logger.error("upload failed - url: %s err: %s", url, exc)
            raise TransportError(str(exc), request=request, cause=exc) from exc

        if response.status_code >= 300:
            self._env.logger.error("save request failed - status: %d url: %s", response.status_code, url)
            raise HttpStatusError(
                f"PUT {url} returned {response.status_code}",
                request=request,
                response=response,
            )

        artifact_id = response.headers.get(ARTIFACT_ID_HEADER, "").strip()
        if not artifact_id:
            message = f"Missing '{ARTIFACT_ID_HEADER}' header"
            self._env.logger.error("%s - url: %s", message, url)
            raise ProtocolError(message, response=response)
        self._env.logger.info("successfully uploaded '%s' as '%s'", name, artifact_id)

        outcome = PublishOutcome(name=name, artifact_id=artifact_id)
        try:
            outcome.metadata_registered = self._registrar.register(name, artifact_id, metadata)
        except Exception as exc:  # pylint: disable=broad-except
            self._env.logger.error("metadata registration failed - artifact: %s err: %s", artifact_id, exc)
            outcome.metadata_error = exc
        return outcome

    def _publish_local(self, name: str, source: BinaryIO) -> PublishOutcome:
        path = self._env.local_dir / name
        data = source.read()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            # offline testing path, the write is best effort
            self._env.logger.error("writing local artifact '%s' failed - %s", path, exc)
        else:
            self._env.logger.info("wrote artifact to '%s' - size: %d", path, len(data))
        return PublishOutcome(name=name, local=True)
