"""Tests for the rule and template download routes."""

from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from tests.test_constants import TEST_USER_ID


# ── /api/rules ──────────────────────────────────────────────────────


class TestPlainRules:
    def test_default_rules(self, api_client: TestClient) -> None:
        response = api_client.get(f"/api/rules/{TEST_USER_ID}")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert response.headers["content-disposition"] == 'inline; filename="nomoji-rules.txt"'
        assert response.text.startswith("EMOJI USAGE RULES:")

    def test_disabled_config_gives_empty_body(self, api_client: TestClient) -> None:
        api_client.post(f"/api/config/{TEST_USER_ID}", json={"enabled": False})
        response = api_client.get(f"/api/rules/{TEST_USER_ID}")
        assert response.status_code == 200
        assert response.text == ""

    def test_invalid_user_id(self, api_client: TestClient) -> None:
        assert api_client.get("/api/rules/x").status_code == 400


# ── /api/claude and /api/cursor-rules ───────────────────────────────


class TestMarkdownRules:
    @pytest.mark.parametrize("path", ["claude", "cursor-rules"])
    def test_served_as_mdc_attachment(self, api_client: TestClient, path: str) -> None:
        response = api_client.get(f"/api/{path}/{TEST_USER_ID}")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/markdown")
        assert response.headers["content-disposition"] == 'attachment; filename="nomoji.mdc"'
        assert response.text.startswith("---\n")

    def test_claude_subagent_ignores_disabled_flag(self, api_client: TestClient) -> None:
        api_client.post(f"/api/config/{TEST_USER_ID}", json={"enabled": False})
        response = api_client.get(f"/api/claude/{TEST_USER_ID}")
        assert "name: nomoji" in response.text
        assert "Active contexts: 6" in response.text

    def test_cursor_rules_reflect_stored_config(self, api_client: TestClient) -> None:
        api_client.post(f"/api/config/{TEST_USER_ID}/preset/relaxed")
        text = api_client.get(f"/api/cursor-rules/{TEST_USER_ID}").text
        assert "### Console\nEmojis may be used when appropriate." in text


class TestLegacyCursorRules:
    def test_deprecation_headers(self, api_client: TestClient) -> None:
        response = api_client.get(f"/api/cursorrules/{TEST_USER_ID}")
        assert response.status_code == 200
        assert response.headers["x-deprecated"] == "true"
        assert response.headers["x-replacement-endpoint"] == "/api/cursor-rules/:userId"
        assert response.headers["content-disposition"] == 'attachment; filename=".cursorrules"'
        assert response.text.startswith("# DEPRECATED")


# ── /api/template ───────────────────────────────────────────────────


class TestTemplate:
    @pytest.mark.parametrize(
        "assistant, marker",
        [
            ("claude", "name: nomoji"),
            ("cursor", "title: nomoji.dev - Emoji Control Rules"),
            ("copilot", "# Emoji Usage Guidelines"),
            ("gemini", "# Emoji Usage Rules"),
            ("openai", "# OpenAI API - System Instructions"),
            ("openai-codex", "# OpenAI Codex Configuration"),
            ("codeium", "EMOJI USAGE RULES:"),
            ("tabnine", "EMOJI USAGE RULES:"),
            ("generic", "EMOJI USAGE RULES:"),
        ],
    )
    def test_each_assistant(self, api_client: TestClient, assistant: str, marker: str) -> None:
        response = api_client.get(f"/api/template/{TEST_USER_ID}/{assistant}")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert marker in response.text

    def test_unknown_assistant_returns_400(self, api_client: TestClient) -> None:
        response = api_client.get(f"/api/template/{TEST_USER_ID}/clippy")
        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid assistant. Must be one of: claude,")


# ── /api/json ───────────────────────────────────────────────────────


class TestJson:
    def test_custom_rules_round_trip(self, api_client: TestClient) -> None:
        rules = ["Use [OK] instead of a checkmark", "No emojis in SQL comments"]
        api_client.post(f"/api/config/{TEST_USER_ID}", json={"customRules": rules})
        response = api_client.get(f"/api/json/{TEST_USER_ID}")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/json")
        payload = json.loads(response.text)
        assert payload["nomoji"]["config"]["customRules"] == rules
        assert "CUSTOM RULES:" in payload["nomoji"]["rules"]
