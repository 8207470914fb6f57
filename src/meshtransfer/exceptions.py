"""
Exceptions for meshtransfer.

Two disjoint families:

- ProtocolViolationError: the server answered, but not the way the protocol
  requires. Fatal for the operation; always raised.
- TransportFailureError: the exchange itself failed (error response, no
  response, request could not be built). Caught by the transfer engine and
  reported through TransferResult so the caller can apply its own retry policy.
"""

from __future__ import annotations

from enum import Enum


class MeshError(Exception):
    """Base exception for all meshtransfer errors."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self._original_cause = cause

    def __str__(self) -> str:
        return self.message


# =============================================================================
# Protocol violations (fatal)
# =============================================================================


class ProtocolViolationError(MeshError):
    """Server responded with a status the protocol does not allow here."""

    def __init__(
        self,
        operation: str,
        status_code: int | None = None,
        message: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.operation = operation
        self.status_code = status_code
        if message is None:
            message = (
                f"Request '{operation}' completed but responded with "
                f"incorrect status: {status_code}"
            )
        super().__init__(message, cause)


class ChunkRangeError(ProtocolViolationError):
    """mex-chunk-range header is missing, malformed or out of sequence."""

    def __init__(self, operation: str, value: str | None, reason: str) -> None:
        self.value = value
        super().__init__(
            operation,
            message=f"Request '{operation}' returned invalid chunk range {value!r}: {reason}",
        )


class MissingMessageIdError(ProtocolViolationError):
    """First chunk of a multi-chunk upload was accepted without a message_id."""

    def __init__(self, operation: str, status_code: int | None = None) -> None:
        super().__init__(
            operation,
            status_code,
            message=(
                f"Request '{operation}' accepted the first chunk "
                "but returned no message_id"
            ),
        )


class CompressionError(ProtocolViolationError):
    """Chunk could not be compressed; nothing meaningful can be sent."""

    def __init__(self, chunk_index: int, cause: BaseException | None = None) -> None:
        self.chunk_index = chunk_index
        super().__init__(
            "compressChunk",
            message=f"Failed to compress chunk {chunk_index}: {cause}",
            cause=cause,
        )


# =============================================================================
# Transport failures (reported)
# =============================================================================


class FailureKind(str, Enum):
    """Sub-case of a transport failure."""

    ERROR_RESPONSE = "error_response"
    NO_RESPONSE = "no_response"
    REQUEST_CONSTRUCTION = "request_construction"


class TransportFailureError(MeshError):
    """Base class for failures of the HTTP exchange itself."""

    kind: FailureKind

    def __init__(
        self,
        operation: str,
        message: str,
        cause: BaseException | None = None,
    ) -> None:
        self.operation = operation
        super().__init__(message, cause)


class ErrorResponseError(TransportFailureError):
    """The server responded with a 4xx/5xx status."""

    kind = FailureKind.ERROR_RESPONSE

    def __init__(
        self,
        operation: str,
        status_code: int,
        reason: str = "",
        cause: BaseException | None = None,
    ) -> None:
        self.status_code = status_code
        self.reason = reason
        super().__init__(
            operation,
            f"Request failed with status code {status_code}: {reason}".rstrip(": "),
            cause,
        )


class NoResponseError(TransportFailureError):
    """The request was sent but no response was received."""

    kind = FailureKind.NO_RESPONSE

    def __init__(self, operation: str, cause: BaseException | None = None) -> None:
        detail = f" ({cause})" if cause else ""
        super().__init__(
            operation,
            f"No response was received for the request{detail}",
            cause,
        )


class RequestConstructionError(TransportFailureError):
    """The request could not be built (bad URL, unsupported scheme, bad header)."""

    kind = FailureKind.REQUEST_CONSTRUCTION

    def __init__(self, operation: str, cause: BaseException | None = None) -> None:
        super().__init__(
            operation,
            f"Request could not be constructed: {cause}",
            cause,
        )


__all__ = [
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
