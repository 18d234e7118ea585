"""Tests for the default configuration, presets and config schemas."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from nomoji.defaults import (
    DEFAULT_CONFIG,
    PRESETS,
    all_preset_documents,
    default_config_document,
    preset_document,
)
from nomoji.schemas.config import (
    CONTEXT_NAMES,
    PRESET_NAMES,
    NomojiConfig,
    NomojiConfigUpdate,
    Severity,
)


class TestDefaultConfig:
    def test_has_all_contexts_in_order(self) -> None:
        assert list(default_config_document()["contexts"]) == list(CONTEXT_NAMES)

    def test_user_interface_disabled_and_allowed(self) -> None:
        document = default_config_document()
        assert document["contexts"]["userInterface"]["enabled"] is False
        assert document["exceptions"] == {"allowedEmojis": [], "allowedContexts": ["userInterface"]}

    def test_comments_moderate_others_strict(self) -> None:
        severities = {name: ctx.severity for name, ctx in DEFAULT_CONFIG.context_items()}
        assert severities["comments"] is Severity.MODERATE
        assert severities["logging"] is Severity.STRICT

    def test_no_metadata_or_custom_rules(self) -> None:
        document = default_config_document()
        assert "metadata" not in document
        assert "customRules" not in document

    def test_accessor_returns_fresh_copy(self) -> None:
        first = default_config_document()
        first["contexts"]["cli"]["enabled"] = False
        first["exceptions"]["allowedEmojis"].append("✅")
        second = default_config_document()
        assert second["contexts"]["cli"]["enabled"] is True
        assert second["exceptions"]["allowedEmojis"] == []

    def test_default_model_is_frozen(self) -> None:
        with pytest.raises(ValidationError):
            DEFAULT_CONFIG.enabled = False


class TestPresets:
    def test_names(self) -> None:
        assert tuple(PRESETS) == PRESET_NAMES
        assert set(all_preset_documents()) == set(PRESET_NAMES)

    def test_strict_enables_everything_strictly(self) -> None:
        for _, context in PRESETS["strict"].context_items():
            assert context.enabled is True
            assert context.severity is Severity.STRICT
        assert preset_document("strict")["exceptions"] == {
            "allowedEmojis": [],
            "allowedContexts": [],
        }

    def test_moderate_and_relaxed_keep_logging_strict(self) -> None:
        for name in ("moderate", "relaxed"):
            assert PRESETS[name].contexts.logging.severity is Severity.STRICT

    def test_relaxed_disables_console_and_commits(self) -> None:
        relaxed = PRESETS["relaxed"]
        assert relaxed.contexts.console.enabled is False
        assert relaxed.contexts.commit_messages.enabled is False
        assert relaxed.contexts.cli.enabled is True

    def test_presets_have_no_custom_messages(self) -> None:
        for preset in PRESETS.values():
            assert all(ctx.custom_message is None for _, ctx in preset.context_items())

    def test_preset_mapping_is_read_only(self) -> None:
        with pytest.raises(TypeError):
            PRESETS["extreme"] = DEFAULT_CONFIG

    def test_unknown_preset_document_raises(self) -> None:
        with pytest.raises(KeyError):
            preset_document("extreme")


class TestSchemas:
    def test_round_trip_camel_case(self) -> None:
        document = default_config_document()
        document["customRules"] = ["one"]
        document["metadata"] = {
            "createdAt": "2026-03-01T12:00:00.000000Z",
            "updatedAt": "2026-03-01T12:00:00.000000Z",
            "userId": "alice",
        }
        assert NomojiConfig.model_validate(document).to_document() == document

    def test_update_drops_server_controlled_fields(self) -> None:
        update = NomojiConfigUpdate.model_validate(
            {"version": "9.9.9", "metadata": {"createdAt": "x"}, "enabled": False}
        )
        assert update.to_partial() == {"enabled": False}

    def test_update_keeps_only_sent_fields(self) -> None:
        update = NomojiConfigUpdate.model_validate(
            {"contexts": {"cli": {"enabled": False, "severity": "relaxed"}}}
        )
        assert update.to_partial() == {
            "contexts": {"cli": {"enabled": False, "severity": "relaxed"}}
        }

    def test_update_rejects_wrong_types(self) -> None:
        with pytest.raises(ValidationError):
            NomojiConfigUpdate.model_validate({"customRules": "not a list"})
        with pytest.raises(ValidationError):
            NomojiConfigUpdate.model_validate({"enabled": "sometimes"})

    def test_update_rejects_unknown_context(self) -> None:
        with pytest.raises(ValidationError):
            NomojiConfigUpdate.model_validate(
                {"contexts": {"emails": {"enabled": True, "severity": "strict"}}}
            )
