"""Resource fetching public API."""

from .fetcher import ResourceFetcher, encode_cache_key
from .streams import ChunkIteratorReader, iter_stream, open_chunk_reader

__all__ = ["ResourceFetcher", "encode_cache_key", "ChunkIteratorReader", "iter_stream", "open_chunk_reader"]
