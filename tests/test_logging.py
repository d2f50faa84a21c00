"""Tests for structured logging setup."""
import json
import pytest
import structlog
from policy_adapter.logging import get_logger, setup_logging


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


def test_json_log_fields(capsys):
    """Test JSON logs carry the standard fields."""
    setup_logging(json_output=True)
    get_logger().info("policy.loaded", count=2, filtered=False)

    line = capsys.readouterr().out.strip().splitlines()[-1]
    entry = json.loads(line)

    assert entry["event"] == "policy.loaded"
    assert entry["service"] == "policy-adapter"
    assert entry["level"] == "info"
    assert entry["count"] == 2
    assert "ts" in entry
    assert entry["func_name"] == "test_json_log_fields"


def test_console_output(capsys):
    """Test console rendering includes the event name."""
    setup_logging(json_output=False)
    get_logger().warning("policy.save_rejected", reason="filtered policy loaded")

    assert "policy.save_rejected" in capsys.readouterr().out
