"""
Mailbox client.

AsyncMeshClient wires settings, the header provider and an httpx client into
the transfer engine. MeshClient is the synchronous wrapper.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Awaitable, Callable, TypeVar

import httpx

from meshtransfer.config import MeshSettings, get_settings
from meshtransfer.exceptions import ProtocolViolationError, TransportFailureError
from meshtransfer.headers import HeaderProvider, bind_header_provider, generate_headers
from meshtransfer.logging import get_logger
from meshtransfer.transfer import (
    ChunkDownloader,
    ChunkUploader,
    MailboxEndpoints,
    TransferResult,
    TransferStats,
)
from meshtransfer.transfer._config import OP_LIST_MESSAGES, STATUS_OK
from meshtransfer.transfer._http import failure_result, response_data, send_request

if TYPE_CHECKING:
    from types import TracebackType

logger = get_logger(__name__)

T = TypeVar("T")


class AsyncMeshClient:
    """
    Asynchronous mailbox client.

    Each operation runs its requests strictly one after another; separate
    operations may run concurrently on the same client.

    Example:
        >>> async with AsyncMeshClient() as client:
        ...     sent = await client.send_message(b"hello", recipient="X26ABC2")
        ...     inbox = await client.inbox()
        ...     for message_id in inbox.message_ids:
        ...         message = await client.read_message(message_id)
    """

    def __init__(
        self,
        settings: MeshSettings | None = None,
        *,
        header_provider: HeaderProvider = generate_headers,
        http_client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize client.

        Args:
            settings: Settings to use (defaults to get_settings()).
            header_provider: Produces the per-request auth header set.
            http_client: Externally managed httpx client; not closed by us.
            transport: httpx transport for the internally created client.
        """
        self._settings = settings or get_settings()
        self._header_provider = header_provider
        self._http = http_client
        self._owns_http = http_client is None
        self._transport = transport

    @property
    def settings(self) -> MeshSettings:
        return self._settings

    @property
    def http(self) -> httpx.AsyncClient:
        """HTTP client, created on first use."""
        if self._http is None:
            self._http = httpx.AsyncClient(
                verify=self._settings.build_ssl_context(),
                timeout=self._settings.request_timeout,
                transport=self._transport,
            )
        return self._http

    @property
    def endpoints(self) -> MailboxEndpoints:
        return MailboxEndpoints(self._settings.url, self._mailbox_id())

    async def send_message(
        self,
        payload: bytes,
        recipient: str,
        *,
        workflow_id: str | None = None,
        filename: str | None = None,
        chunk_size: int | None = None,
    ) -> TransferResult:
        """
        Send payload to another mailbox, chunking it when needed.

        Args:
            payload: Message content.
            recipient: Destination mailbox id.
            workflow_id: mex-workflowid (defaults to settings.workflow_id).
            filename: mex-filename (defaults to settings.filename).
            chunk_size: Uncompressed bytes per chunk (defaults to settings.chunk_size).

        Returns:
            TransferResult for the final chunk, or a failed result.

        Raises:
            ProtocolViolationError: Server answered with an unexpected status.
        """
        uploader = ChunkUploader(
            self.http,
            self.endpoints,
            self._header_factory(),
            sender=self._mailbox_id(),
            chunk_size=chunk_size or self._settings.chunk_size,
            timeout=self._settings.request_timeout,
            workflow_id=workflow_id or self._settings.workflow_id,
            filename=filename or self._settings.filename,
        )
        return await uploader.upload(payload, recipient)

    async def read_message(self, message_id: str) -> TransferResult:
        """
        Download a message, reassembling it if it arrives in chunks.

        Raises:
            ProtocolViolationError: Server answered with an unexpected status
                or an invalid chunk range.
        """
        downloader = ChunkDownloader(
            self.http,
            self.endpoints,
            self._header_factory(),
            timeout=self._settings.request_timeout,
        )
        return await downloader.read(message_id)

    async def inbox(self) -> TransferResult:
        """
        List messages waiting in the inbox.

        Returns:
            TransferResult whose data is the decoded listing; see
            TransferResult.message_ids.

        Raises:
            ProtocolViolationError: Server answered with a non-200 success status.
        """
        stats = TransferStats()
        try:
            response = await send_request(
                self.http,
                OP_LIST_MESSAGES,
                "GET",
                self.endpoints.inbox(),
                headers=self._header_factory()(),
                timeout=self._settings.request_timeout,
            )
        except TransportFailureError as e:
            return failure_result(e, stats)

        stats.requests_count = 1
        if response.status_code != STATUS_OK:
            raise ProtocolViolationError(OP_LIST_MESSAGES, response.status_code)

        return TransferResult(
            success=True,
            status=response.status_code,
            data=response_data(response, sniff_json=True),
            stats=stats,
        )

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http and self._http is not None:
            await self._http.aclose()
            self._http = None

    async def __aenter__(self) -> AsyncMeshClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    def _mailbox_id(self) -> str:
        self._require_credentials()
        return self._settings.mailbox_id or ""

    def _require_credentials(self) -> None:
        if not self._settings.has_credentials:
            raise ValueError(
                "Mailbox credentials required. Set MESH_MAILBOX_ID, "
                "MESH_MAILBOX_PASSWORD and MESH_SHARED_KEY, or pass settings."
            )

    def _header_factory(self) -> Callable[[], dict[str, str]]:
        self._require_credentials()
        s = self._settings
        return bind_header_provider(
            self._header_provider,
            s.mailbox_id or "",
            s.mailbox_password or "",
            s.shared_key or "",
        )

    def __repr__(self) -> str:
        return f"<AsyncMeshClient url={self._settings.url!r} mailbox={self._settings.mailbox_id!r}>"


class MeshClient:
    """
    Synchronous mailbox client.

    Thin wrapper around AsyncMeshClient. Every call runs on its own event
    loop with its own HTTP client.

    Example:
        >>> client = MeshClient()
        >>> result = client.send_message(Path("report.csv").read_bytes(), "X26ABC2")
        >>> print(result)
    """

    def __init__(
        self,
        settings: MeshSettings | None = None,
        *,
        header_provider: HeaderProvider = generate_headers,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._header_provider = header_provider
        self._transport = transport

    @property
    def settings(self) -> MeshSettings:
        return self._settings

    def send_message(
        self,
        payload: bytes,
        recipient: str,
        *,
        workflow_id: str | None = None,
        filename: str | None = None,
        chunk_size: int | None = None,
    ) -> TransferResult:
        """Send payload to another mailbox. See AsyncMeshClient.send_message."""
        return self._run(
            lambda client: client.send_message(
                payload,
                recipient,
                workflow_id=workflow_id,
                filename=filename,
                chunk_size=chunk_size,
            )
        )

    def read_message(self, message_id: str) -> TransferResult:
        """Download a message. See AsyncMeshClient.read_message."""
        return self._run(lambda client: client.read_message(message_id))

    def inbox(self) -> TransferResult:
        """List inbox messages. See AsyncMeshClient.inbox."""
        return self._run(lambda client: client.inbox())

    def _run(self, call: Callable[[AsyncMeshClient], Awaitable[T]]) -> T:
        async def runner() -> T:
            async with AsyncMeshClient(
                self._settings,
                header_provider=self._header_provider,
                transport=self._transport,
            ) as client:
                return await call(client)

        return asyncio.run(runner())

    def __repr__(self) -> str:
        return f"<MeshClient url={self._settings.url!r} mailbox={self._settings.mailbox_id!r}>"


__all__ = ["AsyncMeshClient", "MeshClient"]
