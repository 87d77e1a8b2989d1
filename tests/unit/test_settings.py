"""Unit tests for environment-driven operator settings."""

import pytest
from pydantic import ValidationError

from iotdb_operator.settings import Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for var in (
        "IOTDB_OPERATOR_NAMESPACES",
        "NODE_LIST_TIMEOUT_SECONDS",
        "WEBHOOK_PORT",
        "ENABLE_WEBHOOKS",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)
    # Keep a developer's .env out of the picture
    monkeypatch.chdir(tmp_path)


def test_defaults():
    settings = Settings()

    assert settings.webhook_port == 9443
    assert settings.enable_webhooks is True
    assert settings.node_list_timeout_seconds == 8.0
    assert settings.watched_namespaces is None


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("WEBHOOK_PORT", "8443")
    monkeypatch.setenv("NODE_LIST_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("ENABLE_WEBHOOKS", "false")

    settings = Settings()

    assert settings.webhook_port == 8443
    assert settings.node_list_timeout_seconds == 2.5
    assert settings.enable_webhooks is False


def test_watched_namespaces_parsed(monkeypatch):
    monkeypatch.setenv("IOTDB_OPERATOR_NAMESPACES", "iotdb-a, iotdb-b,,")

    assert Settings().watched_namespaces == ["iotdb-a", "iotdb-b"]


def test_node_list_timeout_must_be_positive(monkeypatch):
    monkeypatch.setenv("NODE_LIST_TIMEOUT_SECONDS", "0")

    with pytest.raises(ValidationError):
        Settings()
