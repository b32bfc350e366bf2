"""Artifact and metadata publishing helpers."""

from .metadata import MetadataRegistrar, metadata_name, serialize_metadata
from .publisher import ArtifactPublisher

__all__ = ["ArtifactPublisher", "MetadataRegistrar", "metadata_name", "serialize_metadata"]
