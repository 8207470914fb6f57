"""
Pytest configuration and fixtures for meshtransfer tests.
"""

from __future__ import annotations

import itertools
import logging
from unittest.mock import MagicMock

import httpx
import pytest
import pytest_asyncio

from meshtransfer.config import MeshSettings
from meshtransfer.logging import ROOT_LOGGER_NAME
from meshtransfer.transfer import MailboxEndpoints

BASE_URL = "https://mesh.test"
MAILBOX_ID = "X26ABC1"
RECIPIENT_ID = "X26ABC2"


class FakeMailboxServer:
    """
    httpx.MockTransport handler replaying queued responses.

    Queue items may be an httpx.Response, an exception to raise, or a
    callable taking the request and returning either.
    """

    def __init__(self, responses: list | None = None) -> None:
        self._responses = list(responses or [])
        self.requests: list[httpx.Request] = []

    def queue(self, *responses) -> None:
        self._responses.extend(responses)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._responses:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")
        item = self._responses.pop(0)
        if callable(item) and not isinstance(item, httpx.Response):
            item = item(request)
        if isinstance(item, Exception):
            raise item
        return item

    @property
    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]


def chunk_response(status: int, body: bytes, chunk_range: str | None) -> httpx.Response:
    """Download response carrying a mex-chunk-range header."""
    headers = {"mex-chunk-range": chunk_range} if chunk_range is not None else {}
    return httpx.Response(status, content=body, headers=headers)


@pytest.fixture
def server() -> FakeMailboxServer:
    """Provide an empty fake server."""
    return FakeMailboxServer()


@pytest_asyncio.fixture
async def http_client(server):
    """Provide an httpx client routed to the fake server."""
    async with httpx.AsyncClient(transport=httpx.MockTransport(server)) as client:
        yield client


@pytest.fixture
def endpoints() -> MailboxEndpoints:
    """Provide endpoints for the test mailbox."""
    return MailboxEndpoints(BASE_URL, MAILBOX_ID)


@pytest.fixture
def header_provider() -> MagicMock:
    """Header provider returning a distinct nonce on every call."""
    counter = itertools.count(1)

    def _generate(mailbox_id, mailbox_password, shared_key):
        return {"authorization": f"NHSMESH {mailbox_id}:nonce-{next(counter)}"}

    return MagicMock(side_effect=_generate)


@pytest.fixture
def fresh_headers(header_provider):
    """Zero-argument header factory bound to test credentials."""
    from meshtransfer.headers import bind_header_provider

    return bind_header_provider(header_provider, MAILBOX_ID, "password", "shared-key")


@pytest.fixture
def settings() -> MeshSettings:
    """Settings with test credentials."""
    return MeshSettings(
        url=BASE_URL,
        mailbox_id=MAILBOX_ID,
        mailbox_password="password",
        shared_key="shared-key",
        chunk_size=4,
    )


@pytest.fixture
def reset_mesh_settings():
    """Reset settings singleton before and after test."""
    from meshtransfer.config import reset_settings

    reset_settings()
    yield
    reset_settings()


@pytest.fixture(autouse=True)
def _restore_logging():
    """Undo setup_logging() changes made by CLI tests."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    handlers = list(logger.handlers)
    level = logger.level
    yield
    logger.handlers = handlers
    logger.setLevel(level)
    logger.propagate = True
