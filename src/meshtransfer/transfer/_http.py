"""
Single-request execution shared by the upload and download loops.

Turns httpx outcomes into the transport failure hierarchy:

- 4xx/5xx response        -> ErrorResponseError
- timeout / network error -> NoResponseError
- unbuildable request     -> RequestConstructionError
"""

from __future__ import annotations

from typing import Any

import httpx

from meshtransfer.exceptions import (
    ErrorResponseError,
    NoResponseError,
    RequestConstructionError,
    TransportFailureError,
)
from meshtransfer.logging import get_logger
from meshtransfer.transfer._models import TransferResult, TransferStats

logger = get_logger(__name__)


async def send_request(
    client: httpx.AsyncClient,
    operation: str,
    method: str,
    url: str,
    *,
    headers: dict[str, str],
    timeout: float,
    content: bytes | None = None,
) -> httpx.Response:
    """
    Issue one request and return its response.

    Non-error statuses are returned as-is; the caller decides whether the
    status is acceptable for its phase.

    Raises:
        TransportFailureError: On an error response, a missing response, or a
            request that could not be constructed.
    """
    try:
        request = client.build_request(
            method,
            url,
            headers=headers,
            content=content,
            timeout=timeout,
        )
    except (httpx.InvalidURL, httpx.UnsupportedProtocol, TypeError, ValueError) as e:
        raise RequestConstructionError(operation, e) from e

    try:
        response = await client.send(request)
    except (httpx.UnsupportedProtocol, httpx.LocalProtocolError) as e:
        raise RequestConstructionError(operation, e) from e
    except httpx.RequestError as e:
        raise NoResponseError(operation, e) from e

    if response.is_error:
        raise ErrorResponseError(operation, response.status_code, response.reason_phrase)

    return response


def response_data(response: httpx.Response, *, sniff_json: bool = False) -> Any:
    """
    Decode a JSON body, fall back to raw bytes, or None when empty.

    With ``sniff_json`` the body is tried as JSON whatever its content-type.
    """
    if not response.content:
        return None
    declared_json = "json" in response.headers.get("content-type", "")
    if declared_json or sniff_json:
        try:
            return response.json()
        except ValueError:
            if declared_json:
                logger.warning(
                    f"Response declared JSON but could not be decoded (status {response.status_code})"
                )
    return response.content


def failure_result(error: TransportFailureError, stats: TransferStats) -> TransferResult:
    """Log a transport failure and wrap it as the operation's result."""
    logger.error(f"{error.operation}: {error.message}")
    return TransferResult(
        success=False,
        status=getattr(error, "status_code", None),
        error=error.message,
        failure=error.kind,
        stats=stats,
    )
