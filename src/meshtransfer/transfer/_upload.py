"""
Send side of the chunked transfer protocol.

The payload is split and compressed up front, then each chunk is POSTed in
order. The first request goes to the outbox collection; the server replies
with a message id which addresses every later chunk.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

from meshtransfer.exceptions import (
    MissingMessageIdError,
    ProtocolViolationError,
    TransportFailureError,
)
from meshtransfer.logging import get_logger
from meshtransfer.transfer._chunking import compress_chunks, split_into_chunks
from meshtransfer.transfer._config import (
    CHUNK_SIZE,
    CONTENT_ENCODING_GZIP,
    CONTENT_TYPE_OCTET_STREAM,
    DEFAULT_FILENAME,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_WORKFLOW_ID,
    HEADER_CHUNK_RANGE,
    HEADER_CONTENT_ENCODING,
    HEADER_CONTENT_TYPE,
    HEADER_FILENAME,
    HEADER_FROM,
    HEADER_TO,
    HEADER_WORKFLOW_ID,
    OP_SEND_CHUNKS,
    STATUS_ACCEPTED,
)
from meshtransfer.transfer._http import failure_result, response_data, send_request
from meshtransfer.transfer._models import (
    ChunkRange,
    TransferResult,
    TransferStats,
    UploadPhase,
)

if TYPE_CHECKING:
    import httpx

    from meshtransfer.transfer._endpoints import MailboxEndpoints

logger = get_logger(__name__)


def next_upload_phase(chunk_range: ChunkRange) -> UploadPhase:
    """Phase that follows a successfully sent chunk."""
    return UploadPhase.DONE if chunk_range.is_last else UploadPhase.SUBSEQUENT_CHUNK


class ChunkUploader:
    """
    Uploads one logical message as a sequence of compressed chunks.

    Example:
        >>> uploader = ChunkUploader(client, endpoints, fresh_headers, sender="X26ABC1")
        >>> result = await uploader.upload(payload, recipient="X26ABC2")
        >>> result.message_id
        '20240101120000000000_ABCDEF'
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        endpoints: MailboxEndpoints,
        fresh_headers: Callable[[], dict[str, str]],
        *,
        sender: str,
        chunk_size: int = CHUNK_SIZE,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        workflow_id: str = DEFAULT_WORKFLOW_ID,
        filename: str = DEFAULT_FILENAME,
    ) -> None:
        self._client = client
        self._endpoints = endpoints
        self._fresh_headers = fresh_headers
        self._sender = sender
        self._chunk_size = chunk_size
        self._timeout = timeout
        self._workflow_id = workflow_id
        self._filename = filename

    async def upload(self, payload: bytes, recipient: str) -> TransferResult:
        """
        Send payload to recipient.

        Args:
            payload: Raw message bytes.
            recipient: Destination mailbox id.

        Returns:
            TransferResult holding the final chunk's status and data, or a
            failed result describing a transport failure.

        Raises:
            ProtocolViolationError: A chunk was answered with a status other
                than 202, or the first response carried no message id.
            CompressionError: A chunk could not be compressed.
        """
        chunks = compress_chunks(split_into_chunks(payload, self._chunk_size))
        total = len(chunks)
        logger.debug(f"number of chunks: {total}")

        stats = TransferStats()
        phase = UploadPhase.FIRST_CHUNK
        message_id: str | None = None
        status: int | None = None
        data: Any = None

        try:
            for index, body in enumerate(chunks, start=1):
                chunk_range = ChunkRange(current=index, total=total)
                url = self._chunk_url(phase, message_id, index)
                logger.debug(f"Chunk {chunk_range}: POST {url}")

                response = await send_request(
                    self._client,
                    OP_SEND_CHUNKS,
                    "POST",
                    url,
                    headers=self._chunk_headers(recipient, chunk_range),
                    content=body,
                    timeout=self._timeout,
                )
                stats.requests_count += 1

                if response.status_code != STATUS_ACCEPTED:
                    raise ProtocolViolationError(OP_SEND_CHUNKS, response.status_code)

                status = response.status_code
                data = response_data(response, sniff_json=True)
                stats.chunks_count += 1
                stats.bytes_transferred += len(body)

                if phase is UploadPhase.FIRST_CHUNK:
                    message_id = self._extract_message_id(data, total)

                logger.debug(f"{index} Chunks sent successfully")
                phase = next_upload_phase(chunk_range)

        except TransportFailureError as e:
            return failure_result(e, stats)

        return TransferResult(
            success=True,
            status=status,
            data=data,
            message_id=message_id,
            stats=stats,
        )

    def _chunk_url(self, phase: UploadPhase, message_id: str | None, index: int) -> str:
        if phase is UploadPhase.FIRST_CHUNK:
            return self._endpoints.outbox()
        if message_id is None:
            raise MissingMessageIdError(OP_SEND_CHUNKS)
        return self._endpoints.outbox_chunk(message_id, index)

    def _chunk_headers(self, recipient: str, chunk_range: ChunkRange) -> dict[str, str]:
        # New provider call per request: the auth header carries a nonce
        headers = self._fresh_headers()
        headers.update(
            {
                HEADER_CONTENT_TYPE: CONTENT_TYPE_OCTET_STREAM,
                HEADER_FROM: self._sender,
                HEADER_TO: recipient,
                HEADER_WORKFLOW_ID: self._workflow_id,
                HEADER_FILENAME: self._filename,
                HEADER_CHUNK_RANGE: str(chunk_range),
                HEADER_CONTENT_ENCODING: CONTENT_ENCODING_GZIP,
            }
        )
        return headers

    @staticmethod
    def _extract_message_id(data: Any, total: int) -> str | None:
        message_id = data.get("message_id") if isinstance(data, dict) else None
        if message_id:
            return str(message_id)
        if total > 1:
            raise MissingMessageIdError(OP_SEND_CHUNKS, STATUS_ACCEPTED)
        return None
