"""
Request header generation.

Every HTTP request needs its own header set because the authorization
token embeds a single-use nonce.
"""

from __future__ import annotations

import hashlib
import hmac
import platform
import uuid
from datetime import datetime, timezone
from typing import Callable, Mapping, Protocol

AUTH_SCHEMA_NAME = "NHSMESH"
ACCEPT_HEADER = "application/vnd.mesh.v2+json"
CLIENT_VERSION = "meshtransfer==0.1.0"


class HeaderProvider(Protocol):
    """Callable producing a fresh header set for one request."""

    def __call__(
        self,
        mailbox_id: str,
        mailbox_password: str,
        shared_key: str,
    ) -> Mapping[str, str]: ...


def build_auth_token(
    mailbox_id: str,
    mailbox_password: str,
    shared_key: str,
    nonce: str,
    nonce_count: int = 0,
    timestamp: str | None = None,
) -> str:
    """
    Build the authorization header value.

    Format: ``NHSMESH {mailbox}:{nonce}:{count}:{timestamp}:{hmac}`` where the
    HMAC-SHA256 is keyed with the shared key over
    ``{mailbox}:{nonce}:{count}:{password}:{timestamp}``.
    """
    if timestamp is None:
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M")

    hmac_msg = f"{mailbox_id}:{nonce}:{nonce_count}:{mailbox_password}:{timestamp}"
    digest = hmac.new(
        shared_key.encode("utf-8"),
        msg=hmac_msg.encode("utf-8"),
        digestmod=hashlib.sha256,
    ).hexdigest()

    return f"{AUTH_SCHEMA_NAME} {mailbox_id}:{nonce}:{nonce_count}:{timestamp}:{digest}"


def generate_headers(
    mailbox_id: str,
    mailbox_password: str,
    shared_key: str,
) -> dict[str, str]:
    """Default header provider. Returns a new dict with a new nonce on every call."""
    token = build_auth_token(
        mailbox_id,
        mailbox_password,
        shared_key,
        nonce=str(uuid.uuid4()),
    )
    return {
        "accept": ACCEPT_HEADER,
        "authorization": token,
        "mex-clientversion": CLIENT_VERSION,
        "mex-osname": platform.system(),
        "mex-osversion": platform.release(),
        "mex-osarchitecture": platform.machine(),
    }


def bind_header_provider(
    provider: HeaderProvider,
    mailbox_id: str,
    mailbox_password: str,
    shared_key: str,
) -> Callable[[], dict[str, str]]:
    """
    Bind credentials to a provider.

    The returned factory invokes the provider on every call and copies the
    result, so a header set is never shared between requests.
    """

    def fresh_headers() -> dict[str, str]:
        return dict(provider(mailbox_id, mailbox_password, shared_key))

    return fresh_headers


__all__ = [
    "HeaderProvider",
    "build_auth_token",
    "generate_headers",
    "bind_header_provider",
]
