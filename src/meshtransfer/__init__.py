"""
meshtransfer: chunked message transfer for mailbox-style exchange APIs.

Usage:
    >>> from meshtransfer import AsyncMeshClient
    >>>
    >>> async with AsyncMeshClient() as client:
    ...     result = await client.send_message(payload, recipient="X26ABC2")
    ...     message = await client.read_message(result.message_id)
"""

from __future__ import annotations

__version__ = "0.1.0"

from meshtransfer.client import AsyncMeshClient, MeshClient
from meshtransfer.config import MeshSettings, configure_settings, get_settings, reset_settings
from meshtransfer.exceptions import (
    ChunkRangeError,
    CompressionError,
    ErrorResponseError,
    FailureKind,
    MeshError,
    MissingMessageIdError,
    NoResponseError,
    ProtocolViolationError,
    RequestConstructionError,
    TransportFailureError,
)
from meshtransfer.headers import HeaderProvider, generate_headers
from meshtransfer.transfer import ChunkRange, TransferResult, TransferStats

__all__ = [
    "__version__",
    # Clients
    "AsyncMeshClient",
    "MeshClient",
    # Config
    "MeshSettings",
    "configure_settings",
    "get_settings",
    "reset_settings",
    # Headers
    "HeaderProvider",
    "generate_headers",
    # Models
    "ChunkRange",
    "TransferResult",
    "TransferStats",
    # Exceptions
    "MeshError",
    "ProtocolViolationError",
    "ChunkRangeError",
    "MissingMessageIdError",
    "CompressionError",
    "FailureKind",
    "TransportFailureError",
    "ErrorResponseError",
    "NoResponseError",
    "RequestConstructionError",
]
