"""
Receive side of the chunked transfer protocol.

A 200 on the initial fetch is the whole message. A 206 means the server is
delivering it in parts: the mex-chunk-range header says which part this is
and how many there are, and the remaining parts are fetched one by one.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from meshtransfer.exceptions import (
    ChunkRangeError,
    ProtocolViolationError,
    TransportFailureError,
)
from meshtransfer.logging import get_logger
from meshtransfer.transfer._config import (
    DEFAULT_REQUEST_TIMEOUT,
    HEADER_CHUNK_RANGE,
    OP_READ_MESSAGE,
    STATUS_OK,
    STATUS_PARTIAL_CONTENT,
)
from meshtransfer.transfer._http import failure_result, send_request
from meshtransfer.transfer._models import (
    ChunkRange,
    DownloadPhase,
    DownloadState,
    TransferResult,
    TransferStats,
)

if TYPE_CHECKING:
    import httpx

    from meshtransfer.transfer._endpoints import MailboxEndpoints

logger = get_logger(__name__)

CHUNK_STATUSES = frozenset({STATUS_OK, STATUS_PARTIAL_CONTENT})


def parse_chunk_range(value: str | None, expected_index: int, total: int | None) -> ChunkRange:
    """
    Parse and check a chunk range against the download cursor.

    Raises:
        ChunkRangeError: If the header is missing, malformed, not the chunk
            that was requested, or reports a different total than before.
    """
    if value is None:
        raise ChunkRangeError(OP_READ_MESSAGE, value, "header missing")
    try:
        chunk_range = ChunkRange.parse(value)
    except ValueError as e:
        raise ChunkRangeError(OP_READ_MESSAGE, value, str(e)) from e

    if chunk_range.current != expected_index:
        raise ChunkRangeError(OP_READ_MESSAGE, value, f"expected chunk {expected_index}")
    if total is not None and chunk_range.total != total:
        raise ChunkRangeError(OP_READ_MESSAGE, value, f"total changed from {total}")
    return chunk_range


class ChunkDownloader:
    """Fetches one message, reassembling it when it arrives in parts."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        endpoints: MailboxEndpoints,
        fresh_headers: Callable[[], dict[str, str]],
        *,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self._client = client
        self._endpoints = endpoints
        self._fresh_headers = fresh_headers
        self._timeout = timeout

    async def read(self, message_id: str) -> TransferResult:
        """
        Download a message.

        Returns:
            For a single-part message, the response status (200) and body.
            For a chunked message, status 206 and the concatenated bodies.
            A failed result on transport failure.

        Raises:
            ProtocolViolationError: Initial status not 200/206, a later chunk
                not 200/206, or an invalid chunk range.
        """
        stats = TransferStats()
        state = DownloadState()

        try:
            response = await self._get(self._endpoints.inbox_message(message_id), stats)

            if response.status_code == STATUS_OK:
                state.phase = DownloadPhase.COMPLETE
                stats.chunks_count = 1
                stats.bytes_transferred = len(response.content)
                return TransferResult(
                    success=True,
                    status=response.status_code,
                    data=response.content,
                    message_id=message_id,
                    stats=stats,
                )

            if response.status_code != STATUS_PARTIAL_CONTENT:
                raise ProtocolViolationError(OP_READ_MESSAGE, response.status_code)

            logger.debug("Message is chunked")
            state.phase = DownloadPhase.CHUNKED
            self._accept_chunk(response, state, stats)

            while state.phase is DownloadPhase.CHUNKED:
                url = self._endpoints.inbox_chunk(message_id, state.next_index)
                response = await self._get(url, stats)
                if response.status_code not in CHUNK_STATUSES:
                    raise ProtocolViolationError(OP_READ_MESSAGE, response.status_code)
                self._accept_chunk(response, state, stats)

        except TransportFailureError as e:
            return failure_result(e, stats)

        # Status stays 206 even though the message is now complete
        return TransferResult(
            success=True,
            status=STATUS_PARTIAL_CONTENT,
            data=bytes(state.accumulated),
            message_id=message_id,
            stats=stats,
        )

    async def _get(self, url: str, stats: TransferStats) -> httpx.Response:
        logger.debug(f"GET {url}")
        response = await send_request(
            self._client,
            OP_READ_MESSAGE,
            "GET",
            url,
            headers=self._fresh_headers(),
            timeout=self._timeout,
        )
        stats.requests_count += 1
        return response

    @staticmethod
    def _accept_chunk(
        response: httpx.Response,
        state: DownloadState,
        stats: TransferStats,
    ) -> None:
        chunk_range = parse_chunk_range(
            response.headers.get(HEADER_CHUNK_RANGE),
            expected_index=state.next_index,
            total=state.total,
        )
        state.append(chunk_range, response.content)
        stats.chunks_count += 1
        stats.bytes_transferred += len(response.content)
        logger.debug(f"chunk {chunk_range.current} of {chunk_range.total} downloaded")
