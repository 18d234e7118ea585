"""Tests for fixed-window rate limiting."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from nomoji.services.kv_store import KVStore, StorageUnavailableError
from nomoji.services.rate_limit import (
    TIERS,
    RateLimitDecision,
    RateLimitTier,
    client_identity,
    consume,
    counter_key,
)
from tests.test_constants import TEST_USER_ID

NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=UTC)
NOW_MS = int(NOW.timestamp() * 1000)
TINY = RateLimitTier("tiny", 2)


def _at(moment: datetime):
    return patch("nomoji.services.kv_store.utcnow", return_value=moment)


def _request(path_params=None, headers=None, client_host="10.0.0.9"):
    request = MagicMock()
    request.path_params = path_params or {}
    request.headers = headers or {}
    request.client = MagicMock(host=client_host) if client_host else None
    return request


# ── consume ─────────────────────────────────────────────────────────


class TestConsume:
    def test_first_request_opens_window(self, db: Session) -> None:
        with _at(NOW):
            decision = consume(KVStore(db), TINY, "ip:1.2.3.4")
            stored = KVStore(db).get_json("rl:tiny:ip:1.2.3.4")
        assert decision == RateLimitDecision(
            allowed=True, limit=2, remaining=1, reset_at_ms=NOW_MS + 60_000
        )
        assert stored == {"count": 1, "resetAt": NOW_MS + 60_000}

    def test_over_limit_is_denied_with_retry_after(self, db: Session) -> None:
        store = KVStore(db)
        with _at(NOW):
            consume(store, TINY, "ip:a")
            consume(store, TINY, "ip:a")
        with _at(NOW + timedelta(seconds=20, milliseconds=500)):
            decision = consume(store, TINY, "ip:a")
        assert decision.allowed is False
        assert decision.remaining == 0
        assert decision.retry_after == 40

    def test_denied_request_does_not_increment(self, db: Session) -> None:
        store = KVStore(db)
        with _at(NOW):
            for _ in range(4):
                consume(store, TINY, "ip:a")
            assert store.get_json("rl:tiny:ip:a")["count"] == 2

    def test_window_resets_after_reset_at(self, db: Session) -> None:
        store = KVStore(db)
        with _at(NOW):
            consume(store, TINY, "ip:a")
            consume(store, TINY, "ip:a")
        with _at(NOW + timedelta(seconds=61)):
            decision = consume(store, TINY, "ip:a")
        assert decision.allowed is True
        assert decision.remaining == 1

    def test_identities_and_tiers_are_separate(self, db: Session) -> None:
        store = KVStore(db)
        with _at(NOW):
            consume(store, TINY, "ip:a")
            consume(store, TINY, "ip:a")
            assert consume(store, TINY, "ip:b").allowed is True
            assert consume(store, TIERS["moderate"], "ip:a").allowed is True

    def test_counter_expires_from_store(self, db: Session) -> None:
        store = KVStore(db)
        with _at(NOW):
            consume(store, TINY, "ip:a")
        with _at(NOW + timedelta(seconds=71)):
            assert store.get_json(counter_key(TINY, "ip:a")) is None

    def test_storage_failure_propagates(self) -> None:
        store = MagicMock()
        store.get_json.side_effect = StorageUnavailableError("down")
        with pytest.raises(StorageUnavailableError):
            consume(store, TINY, "ip:a")


class TestDecisionHeaders:
    def test_headers(self) -> None:
        decision = RateLimitDecision(
            allowed=True, limit=100, remaining=99, reset_at_ms=NOW_MS + 60_123
        )
        assert decision.headers() == {
            "X-RateLimit-Limit": "100",
            "X-RateLimit-Remaining": "99",
            "X-RateLimit-Reset": "2026-03-01T12:01:00.123Z",
        }


class TestTiers:
    def test_tier_budgets(self) -> None:
        assert {name: tier.max_requests for name, tier in TIERS.items()} == {
            "strict": 60,
            "moderate": 100,
            "relaxed": 300,
            "writes": 20,
        }
        assert all(tier.window_seconds == 60 for tier in TIERS.values())


# ── client_identity ─────────────────────────────────────────────────


class TestClientIdentity:
    def test_user_id_path_param_wins(self) -> None:
        request = _request({"user_id": "alice"}, {"cf-connecting-ip": "1.1.1.1"})
        assert client_identity(request) == "user:alice"

    def test_cf_connecting_ip(self) -> None:
        request = _request(headers={"cf-connecting-ip": "1.1.1.1", "x-forwarded-for": "2.2.2.2"})
        assert client_identity(request) == "ip:1.1.1.1"

    def test_first_forwarded_hop(self) -> None:
        request = _request(headers={"x-forwarded-for": "2.2.2.2, 3.3.3.3"})
        assert client_identity(request) == "ip:2.2.2.2"

    def test_socket_peer(self) -> None:
        assert client_identity(_request()) == "ip:10.0.0.9"

    def test_anonymous(self) -> None:
        assert client_identity(_request(client_host=None)) == "anonymous"


# ── RateLimiter dependency over HTTP ────────────────────────────────


class TestRateLimiterDependency:
    def test_disabled_by_default_in_tests(self, api_client: TestClient) -> None:
        response = api_client.get(f"/api/config/{TEST_USER_ID}")
        assert response.status_code == 200
        assert "X-RateLimit-Limit" not in response.headers

    def test_headers_on_allowed_request(
        self, api_client: TestClient, rate_limited_settings
    ) -> None:
        response = api_client.get(f"/api/config/{TEST_USER_ID}")
        assert response.status_code == 200
        assert response.headers["X-RateLimit-Limit"] == "100"
        assert response.headers["X-RateLimit-Remaining"] == "99"
        assert response.headers["X-RateLimit-Reset"].endswith("Z")

    def test_write_tier_exhaustion_returns_429(
        self, api_client: TestClient, rate_limited_settings
    ) -> None:
        for _ in range(TIERS["writes"].max_requests):
            ok = api_client.post(f"/api/config/{TEST_USER_ID}", json={"enabled": True})
            assert ok.status_code == 200
        response = api_client.post(f"/api/config/{TEST_USER_ID}", json={"enabled": False})
        assert response.status_code == 429
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "Rate limit exceeded. Please try again later."
        assert body["retryAfter"] >= 1
        assert response.headers["Retry-After"] == str(body["retryAfter"])
        assert response.headers["X-RateLimit-Remaining"] == "0"
        assert response.headers["X-RateLimit-Limit"] == "20"

    def test_write_limit_is_per_user(self, api_client: TestClient, rate_limited_settings) -> None:
        for _ in range(TIERS["writes"].max_requests):
            api_client.post(f"/api/config/{TEST_USER_ID}", json={"enabled": True})
        response = api_client.post("/api/config/someone-else", json={"enabled": True})
        assert response.status_code == 200

    def test_storage_failure_lets_request_through(
        self, api_client: TestClient, rate_limited_settings
    ) -> None:
        with patch(
            "nomoji.services.rate_limit.consume", side_effect=StorageUnavailableError("down")
        ):
            response = api_client.get(f"/api/config/{TEST_USER_ID}")
        assert response.status_code == 200
        assert "X-RateLimit-Limit" not in response.headers

    def test_development_profile_bypasses(
        self, api_client: TestClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        from nomoji.config import Settings

        monkeypatch.setenv("RATE_LIMIT_ENABLED", "true")
        monkeypatch.setenv("ENVIRONMENT", "development")
        with patch("nomoji.services.rate_limit.get_settings", return_value=Settings()):
            with patch("nomoji.services.rate_limit.consume") as mock_consume:
                response = api_client.get(f"/api/config/{TEST_USER_ID}")
        assert response.status_code == 200
        mock_consume.assert_not_called()
