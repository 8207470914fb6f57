"""
Tests for settings (pydantic-settings).
"""

import os
import ssl
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from meshtransfer.config import (
    MeshSettings,
    configure_settings,
    get_settings,
    reset_settings,
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("MESH_"):
            monkeypatch.delenv(key)


class TestMeshSettings:
    """Tests for MeshSettings model."""

    def setup_method(self):
        reset_settings()

    def teardown_method(self):
        reset_settings()

    def test_default_values(self):
        settings = MeshSettings()

        assert settings.url == "https://localhost:8700"
        assert settings.mailbox_id is None
        assert settings.tls_enabled is False
        assert settings.verify_ssl is True
        assert settings.chunk_size == 10 * 1024 * 1024
        assert settings.request_timeout == 10.0
        assert settings.workflow_id == "API-DOCS-TEST"
        assert settings.filename == "message.txt.gz"
        assert settings.log_level == "INFO"
        assert settings.log_json is False

    def test_environment_variable_override(self):
        with patch.dict(os.environ, {
            "MESH_URL": "https://mesh.example",
            "MESH_MAILBOX_ID": "X26ABC1",
            "MESH_CHUNK_SIZE": "1024",
            "MESH_REQUEST_TIMEOUT": "30",
            "MESH_LOG_LEVEL": "DEBUG",
        }):
            settings = MeshSettings()

            assert settings.url == "https://mesh.example"
            assert settings.mailbox_id == "X26ABC1"
            assert settings.chunk_size == 1024
            assert settings.request_timeout == 30.0
            assert settings.log_level == "DEBUG"

    def test_validation_chunk_size_min(self):
        with pytest.raises(ValidationError):
            MeshSettings(chunk_size=0)

    def test_validation_request_timeout_min(self):
        with pytest.raises(ValidationError):
            MeshSettings(request_timeout=0.0)

    def test_validation_request_timeout_max(self):
        with pytest.raises(ValidationError):
            MeshSettings(request_timeout=301.0)

    def test_validation_log_level(self):
        with pytest.raises(ValidationError):
            MeshSettings(log_level="TRACE")

    def test_extra_fields_ignored(self):
        settings = MeshSettings(unknown_field="value")  # type: ignore
        assert settings.chunk_size == 10 * 1024 * 1024

    def test_env_prefix(self):
        assert MeshSettings.model_config.get("env_prefix") == "MESH_"

    def test_has_credentials(self):
        assert MeshSettings().has_credentials is False
        assert MeshSettings(
            mailbox_id="X26ABC1",
            mailbox_password="pw",
            shared_key="key",
        ).has_credentials is True


class TestBuildSSLContext:
    """Tests for TLS configuration."""

    def test_tls_disabled_returns_verify_flag(self):
        assert MeshSettings().build_ssl_context() is True
        assert MeshSettings(verify_ssl=False).build_ssl_context() is False

    def test_tls_enabled_returns_context(self):
        context = MeshSettings(tls_enabled=True).build_ssl_context()
        assert isinstance(context, ssl.SSLContext)
        assert context.verify_mode == ssl.CERT_REQUIRED

    def test_tls_without_verification(self):
        context = MeshSettings(tls_enabled=True, verify_ssl=False).build_ssl_context()
        assert context.check_hostname is False
        assert context.verify_mode == ssl.CERT_NONE


class TestSettingsSingleton:
    """Tests for settings singleton pattern."""

    def setup_method(self):
        reset_settings()

    def teardown_method(self):
        reset_settings()

    def test_get_settings_returns_same_instance(self):
        assert get_settings() is get_settings()

    def test_reset_settings_clears_singleton(self):
        first = get_settings()
        reset_settings()
        assert get_settings() is not first

    def test_configure_settings_creates_new_instance(self):
        original = get_settings()

        configured = configure_settings(mailbox_id="X26ABC9", chunk_size=2048)

        assert configured.mailbox_id == "X26ABC9"
        assert configured.chunk_size == 2048
        assert get_settings() is configured
        assert get_settings() is not original
