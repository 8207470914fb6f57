"""
Payload splitting and chunk compression.
"""

from __future__ import annotations

import gzip

from meshtransfer.exceptions import CompressionError


def split_into_chunks(payload: bytes, chunk_size: int) -> list[bytes]:
    """
    Split payload into consecutive chunks of at most ``chunk_size`` bytes.

    Every chunk except the last is exactly ``chunk_size`` long. An empty
    payload yields a single empty chunk, so an empty message is still sent
    as one request.

    Raises:
        ValueError: If chunk_size is not positive.
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    if not payload:
        return [b""]

    view = memoryview(payload)
    return [bytes(view[i : i + chunk_size]) for i in range(0, len(payload), chunk_size)]


def compress_chunk(chunk: bytes, index: int = 0) -> bytes:
    """Gzip a single chunk. Any failure is fatal for the send."""
    try:
        return gzip.compress(chunk)
    except (MemoryError, TypeError, ValueError, OSError) as e:
        raise CompressionError(index, cause=e) from e


def compress_chunks(chunks: list[bytes]) -> list[bytes]:
    """Compress every chunk in order."""
    return [compress_chunk(chunk, index) for index, chunk in enumerate(chunks, start=1)]


def decompress_chunk(data: bytes) -> bytes:
    return gzip.decompress(data)
