"""Tests for structured logging and configuration helpers."""

import json
import logging

from config import get_config_value
from config.logging_config import StructuredLogFormatter, get_logger


def test_structured_formatter_emits_json_with_correlation_fields():
    record = logging.LogRecord("core.reply_chain", logging.WARNING, __file__, 1, "Reply tier %s failed", ("remote",), None)
    record.command_id = "1700000000000-1"
    record.reply_tier = "remote"
    record.extra_fields = {"error_type": "TransportFailure"}

    data = json.loads(StructuredLogFormatter().format(record))

    assert data["message"] == "Reply tier remote failed"
    assert data["level"] == "WARNING"
    assert data["command_id"] == "1700000000000-1"
    assert data["reply_tier"] == "remote"
    assert data["error_type"] == "TransportFailure"


def test_logger_adapter_merges_call_extra_with_defaults():
    adapter = get_logger("tests.logging")
    _, kwargs = adapter.process("msg", {"extra": {"reply_tier": "widget_fallback"}})

    assert kwargs["extra"] == {"command_id": "no_id", "reply_tier": "widget_fallback"}


def test_get_config_value_prefers_environment(monkeypatch):
    monkeypatch.setenv("TEST_CONTEXT_WINDOW", "4")
    assert get_config_value(["reply_chain", "context_window"], "TEST_CONTEXT_WINDOW", 10) == 4

    monkeypatch.delenv("TEST_CONTEXT_WINDOW")
    assert get_config_value(["reply_chain", "remote_path"], "TEST_CONTEXT_WINDOW", "/x") == "/api/chat"
    assert get_config_value(["missing", "key"], None, "fallback") == "fallback"
