"""
API ミドルウェアのテスト
"""

import logging

import pytest
from fastapi.testclient import TestClient

from runway.api.main import create_app
from runway.core.config import RunwaySettings, SecuritySettings, ShareSettings


def _rate_limited_client(service, max_requests: int = 2, trust_forwarded_for: bool = False) -> TestClient:
    app = create_app(share_service=service, settings=RunwaySettings(
        share=ShareSettings(),
        security=SecuritySettings(
            rate_limit_enabled=True,
            rate_limit_requests=max_requests,
            rate_limit_window=60,
            trust_forwarded_for=trust_forwarded_for,
        ),
    ))
    return TestClient(app)


class TestRateLimit:
    """レート制限のテスト"""

    def test_exceeding_limit_returns_429(self, service):
        client = _rate_limited_client(service, max_requests=2)

        first = client.post("/api/shares", json={"encryptedData": "dGVzdA=="})
        second = client.post("/api/shares", json={"encryptedData": "dGVzdA=="})
        third = client.post("/api/shares", json={"encryptedData": "dGVzdA=="})

        assert first.status_code == 201
        assert first.headers["X-RateLimit-Remaining"] == "1"
        assert second.status_code == 201
        assert third.status_code == 429
        assert third.json()["detail"]["error"] == "too_many_requests"
        assert "Retry-After" in third.headers

    def test_health_is_exempt(self, service):
        """ヘルスチェックは制限対象外"""
        client = _rate_limited_client(service, max_requests=1)

        for _ in range(3):
            assert client.get("/health").status_code == 200

    def test_forwarded_for_ignored_by_default(self, service):
        """X-Forwarded-For を変えても制限を回避できない"""
        client = _rate_limited_client(service, max_requests=1)

        a = client.post("/api/shares", json={"encryptedData": "dGVzdA=="},
                        headers={"X-Forwarded-For": "10.0.0.1"})
        b = client.post("/api/shares", json={"encryptedData": "dGVzdA=="},
                        headers={"X-Forwarded-For": "10.0.0.2"})

        assert a.status_code == 201
        assert b.status_code == 429

    def test_forwarded_for_trusted_behind_proxy(self, service):
        """信頼するプロキシ配下ではクライアントごとに数える"""
        client = _rate_limited_client(service, max_requests=1, trust_forwarded_for=True)

        a = client.post("/api/shares", json={"encryptedData": "dGVzdA=="},
                        headers={"X-Forwarded-For": "10.0.0.1"})
        b = client.post("/api/shares", json={"encryptedData": "dGVzdA=="},
                        headers={"X-Forwarded-For": "10.0.0.2"})

        assert a.status_code == 201
        assert b.status_code == 201


class TestSecurityHeaders:
    """セキュリティヘッダーのテスト"""

    def test_headers_present(self, client):
        response = client.get("/health")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["Referrer-Policy"] == "no-referrer"
        assert response.headers["Content-Security-Policy"] == "default-src 'none'"

    def test_health_is_cacheable(self, client):
        """no-store は共有エンドポイントのみ"""
        response = client.get("/health")

        assert "Cache-Control" not in response.headers

    def test_error_responses_are_not_cached(self, client):
        response = client.get(f"/api/shares/{'0' * 32}")

        assert response.status_code == 404
        assert response.headers["Cache-Control"] == "no-store"


class TestShareAccessLog:
    """共有APIアクセスログのテスト"""

    @staticmethod
    def _access_records(caplog) -> list[logging.LogRecord]:
        return [r for r in caplog.records if getattr(r, "event_type", None) == "share_request"]

    def test_create_is_logged_without_payload(self, client, caplog):
        caplog.set_level(logging.INFO, logger="runway")

        client.post("/api/shares", json={"encryptedData": "c2VjcmV0LWJsb2I="})

        [record] = self._access_records(caplog)
        assert record.operation == "create"
        assert record.outcome == "created"
        assert record.status_code == 201
        assert "c2VjcmV0LWJsb2I=" not in caplog.text

    @pytest.mark.parametrize("share_id,outcome,logged_id", [
        ("0" * 32, "not_found", "0" * 32),
        ("not-a-share-id", "rejected", None),
    ])
    def test_get_outcome_and_share_id(self, client, caplog, share_id, outcome, logged_id):
        """形式が正しい共有IDだけを記録する"""
        caplog.set_level(logging.INFO, logger="runway")

        client.get(f"/api/shares/{share_id}")

        [record] = self._access_records(caplog)
        assert record.operation == "get"
        assert record.outcome == outcome
        assert record.share_id == logged_id

    def test_found(self, client, caplog):
        created = client.post("/api/shares", json={"encryptedData": "dGVzdA=="})
        caplog.set_level(logging.INFO, logger="runway")
        caplog.clear()

        client.get(f"/api/shares/{created.json()['id']}")

        [record] = self._access_records(caplog)
        assert record.outcome == "found"
        assert record.share_id == created.json()["id"]

    def test_rate_limited(self, service, caplog):
        client = _rate_limited_client(service, max_requests=1)
        client.post("/api/shares", json={"encryptedData": "dGVzdA=="})
        caplog.set_level(logging.INFO, logger="runway")
        caplog.clear()

        client.post("/api/shares", json={"encryptedData": "dGVzdA=="})

        [record] = self._access_records(caplog)
        assert record.outcome == "rate_limited"

    def test_system_endpoints_not_logged(self, client, caplog):
        caplog.set_level(logging.INFO, logger="runway")

        client.get("/health")

        assert self._access_records(caplog) == []
