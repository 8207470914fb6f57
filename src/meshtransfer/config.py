"""
Settings for meshtransfer.

Values come from keyword arguments, then MESH_* environment variables,
then the defaults below.

Example:
    >>> import os
    >>> os.environ["MESH_MAILBOX_ID"] = "X26ABC1"
    >>> reset_settings()
    >>> get_settings().mailbox_id
    'X26ABC1'
"""

from __future__ import annotations

import ssl
from pathlib import Path
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from meshtransfer.transfer._config import (
    CHUNK_SIZE,
    DEFAULT_FILENAME,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_WORKFLOW_ID,
)


class MeshSettings(BaseSettings):
    """Connection, credential and transfer settings."""

    model_config = SettingsConfigDict(
        env_prefix="MESH_",
        extra="ignore",
    )

    # Service
    url: str = "https://localhost:8700"

    # Credentials
    mailbox_id: str | None = None
    mailbox_password: str | None = None
    shared_key: str | None = None

    # TLS
    tls_enabled: bool = False
    client_cert: Path | None = None
    client_key: Path | None = None
    ca_cert: Path | None = None
    verify_ssl: bool = True

    # Transfer
    chunk_size: int = Field(default=CHUNK_SIZE, ge=1)
    request_timeout: float = Field(default=DEFAULT_REQUEST_TIMEOUT, ge=0.1, le=300.0)
    workflow_id: str = DEFAULT_WORKFLOW_ID
    filename: str = DEFAULT_FILENAME

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_json: bool = False

    @property
    def has_credentials(self) -> bool:
        """True when mailbox id, password and shared key are all set."""
        return bool(self.mailbox_id and self.mailbox_password and self.shared_key)

    def build_ssl_context(self) -> ssl.SSLContext | bool:
        """
        Build the value passed to httpx as ``verify``.

        With TLS disabled this is just ``verify_ssl``. With TLS enabled a
        context is created that trusts ``ca_cert`` (or the system store) and
        presents the client certificate when one is configured.
        """
        if not self.tls_enabled:
            return self.verify_ssl

        cafile = str(self.ca_cert) if self.ca_cert else None
        context = ssl.create_default_context(cafile=cafile)
        if not self.verify_ssl:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        if self.client_cert:
            context.load_cert_chain(
                certfile=str(self.client_cert),
                keyfile=str(self.client_key) if self.client_key else None,
            )
        return context


_settings: MeshSettings | None = None


def get_settings() -> MeshSettings:
    """Return the process-wide settings, creating them on first use."""
    global _settings
    if _settings is None:
        _settings = MeshSettings()
    return _settings


def configure_settings(**kwargs: Any) -> MeshSettings:
    """Replace the process-wide settings with explicitly configured ones."""
    global _settings
    _settings = MeshSettings(**kwargs)
    return _settings


def reset_settings() -> None:
    """Drop the cached settings; the next get_settings() re-reads the environment."""
    global _settings
    _settings = None


__all__ = [
    "MeshSettings",
    "get_settings",
    "configure_settings",
    "reset_settings",
]
