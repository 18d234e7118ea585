"""Tests for config sharing routes."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

from fastapi.testclient import TestClient

NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=UTC)


def _at(moment: datetime):
    return patch("nomoji.services.kv_store.utcnow", return_value=moment)


class TestShareConfig:
    def test_share_returns_id_and_url(self, api_client: TestClient) -> None:
        response = api_client.post("/api/shared", json={"customRules": ["one"]})
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Config shared successfully"
        config_id = body["data"]["configId"]
        assert str(uuid.UUID(config_id)) == config_id
        assert body["data"]["url"] == f"https://nomoji.test/shared/{config_id}"

    def test_round_trip_before_expiry(self, api_client: TestClient) -> None:
        payload = {
            "enabled": True,
            "contexts": {"cli": {"enabled": False, "severity": "relaxed"}},
            "customRules": ["one", "two"],
        }
        with _at(NOW):
            config_id = api_client.post("/api/shared", json=payload).json()["data"]["configId"]
        with _at(NOW + timedelta(days=29)):
            response = api_client.get(f"/api/shared/{config_id}")
        assert response.status_code == 200
        assert response.json()["data"] == {"version": "1.0.0", **payload}

    def test_not_found_after_expiry(self, api_client: TestClient) -> None:
        with _at(NOW):
            config_id = api_client.post("/api/shared", json={}).json()["data"]["configId"]
        with _at(NOW + timedelta(days=31)):
            response = api_client.get(f"/api/shared/{config_id}")
        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Config not found"}

    def test_bad_body_returns_400(self, api_client: TestClient) -> None:
        response = api_client.post("/api/shared", json={"customRules": 5})
        assert response.status_code == 400


class TestGetSharedConfig:
    def test_unknown_id_returns_404(self, api_client: TestClient) -> None:
        response = api_client.get(f"/api/shared/{uuid.uuid4()}")
        assert response.status_code == 404

    def test_malformed_id_returns_400(self, api_client: TestClient) -> None:
        response = api_client.get("/api/shared/not-a-uuid")
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid config ID. Must be a valid UUID."

    def test_uppercase_id_accepted(self, api_client: TestClient) -> None:
        response = api_client.get(f"/api/shared/{str(uuid.uuid4()).upper()}")
        assert response.status_code == 404
