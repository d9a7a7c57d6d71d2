"""Tests for configuration helpers."""

from pathlib import Path

import pytest

from mqtt_bridge.config import (
    PROJECT_ROOT,
    OperationPolicy,
    ReactionSettings,
    SourceSettings,
    parse_operation_policy,
    resolve_db_path,
)


class TestResolveDbPath:
    """Tests for resolve_db_path()."""

    def test_memory(self):
        assert resolve_db_path(":memory:") == ":memory:"

    def test_relative_path_anchored_at_project_root(self):
        assert resolve_db_path("03_data/x.db") == PROJECT_ROOT / "03_data/x.db"

    def test_absolute_path_kept(self, tmp_path):
        target = tmp_path / "x.db"
        assert resolve_db_path(str(target)) == Path(target)


class TestOperationPolicy:
    """Tests for parse_operation_policy()."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, OperationPolicy.INSERT),
            ("", OperationPolicy.INSERT),
            ("insert", OperationPolicy.INSERT),
            ("UPDATE", OperationPolicy.UPDATE),
            (" first_seen ", OperationPolicy.FIRST_SEEN),
        ],
    )
    def test_valid_values(self, value, expected):
        assert parse_operation_policy(value) == expected

    def test_invalid_value(self):
        with pytest.raises(ValueError, match="upsert"):
            parse_operation_policy("upsert")


class TestSourceSettings:
    """Tests for SourceSettings.from_env()."""

    def test_defaults(self, monkeypatch):
        for name in (
            "SOURCE_ID",
            "SOURCE_TOPIC",
            "SOURCE_NODE_LABEL",
            "SOURCE_ID_FIELD",
            "SOURCE_OPERATION_MODE",
        ):
            monkeypatch.delenv(name, raising=False)

        settings = SourceSettings.from_env()
        assert settings.node_label == "MqttMessage"
        assert settings.id_field == "id"
        assert settings.operation_policy == OperationPolicy.INSERT

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("SOURCE_ID", "mqtt-src")
        monkeypatch.setenv("SOURCE_TOPIC", "sensors/#")
        monkeypatch.setenv("SOURCE_NODE_LABEL", "SensorReading")
        monkeypatch.setenv("SOURCE_ID_FIELD", "device_id")
        monkeypatch.setenv("SOURCE_OPERATION_MODE", "first_seen")

        settings = SourceSettings.from_env()
        assert settings.source_id == "mqtt-src"
        assert settings.topic == "sensors/#"
        assert settings.node_label == "SensorReading"
        assert settings.id_field == "device_id"
        assert settings.operation_policy == OperationPolicy.FIRST_SEEN

    def test_invalid_mode_fails(self, monkeypatch):
        monkeypatch.setenv("SOURCE_OPERATION_MODE", "sometimes")
        with pytest.raises(ValueError):
            SourceSettings.from_env()


class TestReactionSettings:
    """Tests for ReactionSettings.from_env()."""

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("REACTION_ID", "mqtt-alert")
        monkeypatch.setenv("REACTION_TOPIC", "alerts/{{device_id}}")
        monkeypatch.setenv("REACTION_PAYLOAD_TEMPLATE", "Alert: {{device_id}}")
        monkeypatch.setenv("REACTION_QUERIES", "high-temp-alert, low-battery ,")

        settings = ReactionSettings.from_env()
        assert settings.reaction_id == "mqtt-alert"
        assert settings.topic == "alerts/{{device_id}}"
        assert settings.payload_template == "Alert: {{device_id}}"
        assert settings.queries == ["high-temp-alert", "low-battery"]

    def test_empty_payload_template_means_none(self, monkeypatch):
        monkeypatch.setenv("REACTION_PAYLOAD_TEMPLATE", "")
        assert ReactionSettings.from_env().payload_template is None

    def test_no_queries(self, monkeypatch):
        monkeypatch.delenv("REACTION_QUERIES", raising=False)
        assert ReactionSettings.from_env().queries == []
