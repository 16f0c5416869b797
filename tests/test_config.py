"""
設定管理のテスト
"""

import pytest
from pydantic import ValidationError

from runway.api.dependencies import get_share_service, get_storage
from runway.adapters.storage.file import FileShareStorageAdapter
from runway.adapters.storage.memory import InMemoryShareStorage
from runway.core.config import (
    DEFAULT_TTL_SECONDS,
    MAX_BLOB_BYTES,
    MAX_TTL_SECONDS,
    SecuritySettings,
    ShareSettings,
    get_settings,
    reload_settings,
)


class TestDefaults:
    """既定値のテスト"""

    def test_share_defaults(self):
        settings = ShareSettings()

        assert settings.default_ttl_seconds == DEFAULT_TTL_SECONDS == 30 * 24 * 60 * 60
        assert settings.max_ttl_seconds == MAX_TTL_SECONDS
        assert settings.max_blob_bytes == MAX_BLOB_BYTES
        assert settings.sweep_interval_seconds == 3600
        assert settings.storage_backend == "memory"

    def test_settings_are_cached(self):
        assert get_settings() is get_settings()


class TestEnvironmentOverrides:
    """環境変数による上書き"""

    def test_share_settings_from_env(self, monkeypatch):
        monkeypatch.setenv("RUNWAY_SHARE_DEFAULT_TTL_SECONDS", "600")
        monkeypatch.setenv("RUNWAY_SHARE_SWEEP_INTERVAL_SECONDS", "30")

        settings = reload_settings()

        assert settings.share.default_ttl_seconds == 600
        assert settings.share.sweep_interval_seconds == 30

    def test_server_and_client_settings_from_env(self, monkeypatch):
        monkeypatch.setenv("API_PORT", "9000")
        monkeypatch.setenv("RUNWAY_SHARE_API_URL", "https://api.example/api/shares/")
        monkeypatch.setenv("RUNWAY_PUBLIC_BASE_URL", "https://runway.example/")

        settings = reload_settings()

        assert settings.api_port == 9000
        assert settings.share_api_url == "https://api.example/api/shares"
        assert settings.public_base_url == "https://runway.example"

    def test_invalid_backend_rejected(self, monkeypatch):
        monkeypatch.setenv("RUNWAY_SHARE_STORAGE_BACKEND", "redis")

        with pytest.raises(ValidationError):
            ShareSettings()

    def test_non_positive_ttl_rejected(self, monkeypatch):
        monkeypatch.setenv("RUNWAY_SHARE_DEFAULT_TTL_SECONDS", "0")

        with pytest.raises(ValidationError):
            ShareSettings()


class TestCorsOrigins:
    """CORS オリジンの解析"""

    def test_default_origins(self):
        assert "http://localhost:5173" in SecuritySettings().cors_origins

    def test_comma_separated(self, monkeypatch):
        monkeypatch.setenv("RUNWAY_CORS_ORIGINS", " https://a.example , https://b.example,, ")

        assert SecuritySettings().cors_origins == ["https://a.example", "https://b.example"]

    def test_empty(self, monkeypatch):
        monkeypatch.setenv("RUNWAY_CORS_ORIGINS", "")

        assert SecuritySettings().cors_origins == []


class TestStorageSelection:
    """設定に応じたストレージ選択"""

    def test_memory_by_default(self):
        assert isinstance(get_storage(), InMemoryShareStorage)

    def test_file_backend(self, monkeypatch, tmp_path):
        monkeypatch.setenv("RUNWAY_SHARE_STORAGE_BACKEND", "file")
        monkeypatch.setenv("RUNWAY_SHARE_DATA_DIR", str(tmp_path / "shares"))
        reload_settings()

        storage = get_storage()

        assert isinstance(storage, FileShareStorageAdapter)
        assert storage.data_dir == tmp_path / "shares"

    def test_service_uses_settings(self, monkeypatch):
        monkeypatch.setenv("RUNWAY_SHARE_MAX_BLOB_BYTES", "2048")
        reload_settings()

        assert get_share_service().max_blob_bytes == 2048


class TestForwardedFor:
    """X-Forwarded-For の信頼設定"""

    def test_disabled_by_default(self):
        assert SecuritySettings().trust_forwarded_for is False

    def test_enabled_from_env(self, monkeypatch):
        monkeypatch.setenv("RUNWAY_TRUST_FORWARDED_FOR", "true")

        assert SecuritySettings().trust_forwarded_for is True
