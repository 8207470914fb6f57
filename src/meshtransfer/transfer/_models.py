"""
Models for the transfer engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator

from meshtransfer.exceptions import FailureKind


class ChunkRange(BaseModel):
    """Position of one chunk within its message (1-based)."""

    model_config = {"frozen": True}

    current: int = Field(ge=1)
    total: int = Field(ge=1)

    @model_validator(mode="after")
    def _current_within_total(self) -> ChunkRange:
        if self.current > self.total:
            raise ValueError(f"current ({self.current}) exceeds total ({self.total})")
        return self

    @classmethod
    def parse(cls, value: str) -> ChunkRange:
        """
        Parse the ``"<current>:<total>"`` wire form.

        Raises:
            ValueError: If the value is not two integers or violates
                ``1 <= current <= total``.
        """
        parts = value.strip().split(":")
        if len(parts) != 2:
            raise ValueError("expected '<current>:<total>'")
        try:
            current, total = (int(p) for p in parts)
        except ValueError:
            raise ValueError("chunk indices must be integers") from None
        return cls(current=current, total=total)

    @property
    def is_last(self) -> bool:
        return self.current == self.total

    def __str__(self) -> str:
        return f"{self.current}:{self.total}"


class UploadPhase(str, Enum):
    """Send-side state."""

    FIRST_CHUNK = "first_chunk"
    SUBSEQUENT_CHUNK = "subsequent_chunk"
    DONE = "done"


class DownloadPhase(str, Enum):
    """Receive-side state."""

    INITIAL = "initial"
    CHUNKED = "chunked"
    COMPLETE = "complete"


@dataclass
class DownloadState:
    """Accumulator and cursor for one receive operation."""

    phase: DownloadPhase = DownloadPhase.INITIAL
    accumulated: bytearray = field(default_factory=bytearray)
    next_index: int = 1
    total: int | None = None

    def append(self, chunk_range: ChunkRange, body: bytes) -> None:
        """Record a fetched chunk and advance the cursor."""
        self.accumulated.extend(body)
        self.total = chunk_range.total
        self.next_index = chunk_range.current + 1
        self.phase = DownloadPhase.COMPLETE if chunk_range.is_last else DownloadPhase.CHUNKED


class TransferStats(BaseModel):
    """Statistics from a transfer operation."""

    requests_count: int = 0
    chunks_count: int = 0
    bytes_transferred: int = 0


class TransferResult(BaseModel):
    """Outcome of a whole send, receive or listing operation."""

    success: bool
    status: int | None = None
    data: Any = None
    message_id: str | None = None
    error: str | None = None
    failure: FailureKind | None = None
    stats: TransferStats = Field(default_factory=TransferStats)

    @property
    def message_ids(self) -> list[str]:
        """Message ids from an inbox listing response."""
        if isinstance(self.data, dict):
            return list(self.data.get("messages", []))
        return []

    def __repr__(self) -> str:
        if self.success:
            return (
                f"TransferResult(ok, status={self.status}, "
                f"chunks={self.stats.chunks_count}, requests={self.stats.requests_count})"
            )
        return f"TransferResult(failed: {self.failure.value if self.failure else ''} {self.error})"

    def __str__(self) -> str:
        if self.success:
            lines = [f"Status: {self.status}"]
            if self.message_id:
                lines.append(f"Message: {self.message_id}")
            lines.append(f"Chunks: {self.stats.chunks_count}")
            lines.append(f"Bytes: {self.stats.bytes_transferred:,}")
            return "\n".join(lines)
        return f"Failed: {self.error}"
