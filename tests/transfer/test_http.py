"""Tests for single-request execution and failure mapping."""

import httpx
import pytest

from meshtransfer.exceptions import (
    ErrorResponseError,
    FailureKind,
    NoResponseError,
    RequestConstructionError,
)
from meshtransfer.transfer import MailboxEndpoints, TransferStats
from meshtransfer.transfer._http import failure_result, response_data, send_request


class TestSendRequest:
    """Tests for send_request."""

    @pytest.mark.asyncio
    async def test_success_returned(self, http_client, server):
        server.queue(httpx.Response(202, json={"message_id": "MSG1"}))

        response = await send_request(
            http_client, "op", "POST", "https://mesh.test/x", headers={}, timeout=1.0
        )

        assert response.status_code == 202

    @pytest.mark.asyncio
    async def test_non_error_status_not_judged(self, http_client, server):
        """Unexpected 2xx is left for the caller to reject."""
        server.queue(httpx.Response(204))

        response = await send_request(
            http_client, "op", "GET", "https://mesh.test/x", headers={}, timeout=1.0
        )

        assert response.status_code == 204

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [400, 403, 404, 500, 503])
    async def test_error_status(self, http_client, server, status):
        server.queue(httpx.Response(status))

        with pytest.raises(ErrorResponseError) as exc:
            await send_request(
                http_client, "op", "GET", "https://mesh.test/x", headers={}, timeout=1.0
            )

        assert exc.value.status_code == status
        assert exc.value.kind is FailureKind.ERROR_RESPONSE

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            httpx.ConnectError("refused"),
            httpx.ConnectTimeout("connect timeout"),
            httpx.ReadTimeout("read timeout"),
            httpx.RemoteProtocolError("server disconnected"),
        ],
    )
    async def test_no_response(self, http_client, server, error):
        server.queue(error)

        with pytest.raises(NoResponseError) as exc:
            await send_request(
                http_client, "op", "GET", "https://mesh.test/x", headers={}, timeout=1.0
            )

        assert exc.value._original_cause is error

    @pytest.mark.asyncio
    async def test_invalid_url(self, http_client, server):
        with pytest.raises(RequestConstructionError):
            await send_request(
                http_client, "op", "GET", "https://mesh.test/x\x00", headers={}, timeout=1.0
            )
        assert server.requests == []

    @pytest.mark.asyncio
    async def test_local_protocol_error(self, http_client, server):
        server.queue(httpx.LocalProtocolError("illegal header"))

        with pytest.raises(RequestConstructionError):
            await send_request(
                http_client, "op", "GET", "https://mesh.test/x", headers={}, timeout=1.0
            )

    @pytest.mark.asyncio
    async def test_timeout_applied_per_request(self, http_client, server):
        server.queue(httpx.Response(200))

        await send_request(
            http_client, "op", "GET", "https://mesh.test/x", headers={}, timeout=3.5
        )

        timeout = server.requests[0].extensions["timeout"]
        assert timeout["read"] == 3.5


class TestResponseData:
    """Tests for response body decoding."""

    def test_json(self):
        assert response_data(httpx.Response(202, json={"a": 1})) == {"a": 1}

    def test_bytes(self):
        response = httpx.Response(200, content=b"raw", headers={"content-type": "text/plain"})
        assert response_data(response) == b"raw"

    def test_empty(self):
        assert response_data(httpx.Response(202)) is None

    def test_bad_json_falls_back(self):
        response = httpx.Response(
            202,
            content=b"{not json",
            headers={"content-type": "application/json"},
            request=httpx.Request("POST", "https://mesh.test/x"),
        )
        assert response_data(response) == b"{not json"

    def test_sniff_json_ignores_content_type(self):
        response = httpx.Response(
            202, content=b'{"message_id": "MSG1"}', headers={"content-type": "text/plain"}
        )
        assert response_data(response) == b'{"message_id": "MSG1"}'
        assert response_data(response, sniff_json=True) == {"message_id": "MSG1"}

    def test_sniff_json_keeps_non_json_bytes(self):
        response = httpx.Response(202, content=b"\x1f\x8b raw", headers={"content-type": "text/plain"})
        assert response_data(response, sniff_json=True) == b"\x1f\x8b raw"


class TestFailureResult:
    """Tests for failure_result."""

    def test_error_response(self):
        result = failure_result(
            ErrorResponseError("op", 500, "Internal Server Error"),
            TransferStats(requests_count=1),
        )
        assert result.success is False
        assert result.status == 500
        assert result.failure is FailureKind.ERROR_RESPONSE
        assert result.stats.requests_count == 1

    def test_no_status_for_missing_response(self):
        result = failure_result(NoResponseError("op"), TransferStats())
        assert result.status is None
        assert result.failure is FailureKind.NO_RESPONSE


class TestMailboxEndpoints:
    """Tests for URL templates."""

    def test_urls(self):
        e = MailboxEndpoints("https://mesh.test/", "X26ABC1")
        assert e.outbox() == "https://mesh.test/messageexchange/X26ABC1/outbox"
        assert e.outbox_chunk("MSG1", 2) == "https://mesh.test/messageexchange/X26ABC1/outbox/MSG1/2"
        assert e.inbox() == "https://mesh.test/messageexchange/X26ABC1/inbox"
        assert e.inbox_message("MSG1") == "https://mesh.test/messageexchange/X26ABC1/inbox/MSG1"
        assert e.inbox_chunk("MSG1", 3) == "https://mesh.test/messageexchange/X26ABC1/inbox/MSG1/3"

    def test_message_id_is_one_segment(self):
        e = MailboxEndpoints("https://mesh.test", "X26ABC1")
        assert e.inbox_message("MSG#1") == "https://mesh.test/messageexchange/X26ABC1/inbox/MSG%231"
        assert e.inbox_chunk("a/b?c", 2) == "https://mesh.test/messageexchange/X26ABC1/inbox/a%2Fb%3Fc/2"
        assert e.outbox_chunk("..", 2) == "https://mesh.test/messageexchange/X26ABC1/outbox/%2E%2E/2"
        assert e.inbox_message("20240101_ABC.DEF") == (
            "https://mesh.test/messageexchange/X26ABC1/inbox/20240101_ABC.DEF"
        )
