from __future__ import annotations

import logging

import pytest

from logging_config import SecretRedactingFormatter, redaction_values

TOKEN = "123456789:AAHfiqksKZ8WmR2zSjiQ7_v4TMAKdiHm9T0"


def _record(message: str, *args) -> logging.LogRecord:
    record = logging.LogRecord("domainbot", logging.INFO, __file__, 1, message, args, None)
    record.created = 0
    return record


def test_known_secrets_are_masked() -> None:
    formatter = SecretRedactingFormatter(["hash-value", "hash"])

    line = formatter.format(_record("api hash is %s", "hash-value"))

    assert "hash-value" not in line
    assert line.endswith("api hash is ***")


def test_token_shaped_strings_are_masked_without_configuration() -> None:
    formatter = SecretRedactingFormatter([])

    line = formatter.format(_record("login failed for %s", TOKEN))

    assert TOKEN not in line
    assert line.endswith("login failed for ***")


def test_token_ending_in_dash_is_masked_whole() -> None:
    token = "987654321:" + "A" * 34 + "-"
    formatter = SecretRedactingFormatter([])

    line = formatter.format(_record("token=%s", token))

    assert line.endswith("token=***")


def test_timestamps_are_utc() -> None:
    formatter = SecretRedactingFormatter([])

    assert formatter.format(_record("hello")).startswith("1970-01-01T00:00:00Z INFO domainbot: hello")


def test_bot_credentials_are_always_redacted(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BOT_TOKEN", TOKEN)
    monkeypatch.setenv("API_HASH", "deadbeef")
    monkeypatch.setenv("DB_PASSWORD", "hunter2")

    values = redaction_values({"redact": {"enabled": False, "patterns": ["DB_PASSWORD"]}})

    assert values == [TOKEN, "deadbeef"]


def test_configured_names_are_redacted_when_enabled(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("BOT_TOKEN", raising=False)
    monkeypatch.delenv("API_HASH", raising=False)
    monkeypatch.setenv("DB_PASSWORD", "hunter2")

    assert redaction_values({"redact": {"patterns": ["DB_PASSWORD", "UNSET_NAME"]}}) == ["hunter2"]
