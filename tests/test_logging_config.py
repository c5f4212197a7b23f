import json
import logging

from cdpspec.logging_config import JSONFormatter, TextFormatter, setup_logging


def make_record(msg, *args):
    return logging.LogRecord("cdpspec-api", logging.INFO, __file__, 10, msg, args, None)


def test_json_formatter_carries_session_fields():
    record = make_record("Catalog ready: %d models", 40)
    record.session_id = "abc123"
    record.duration_ms = 17
    entry = json.loads(JSONFormatter().format(record))
    assert entry["message"] == "Catalog ready: 40 models"
    assert entry["level"] == "INFO"
    assert entry["session_id"] == "abc123"
    assert entry["duration_ms"] == 17


def test_json_formatter_omits_missing_context():
    entry = json.loads(JSONFormatter().format(make_record("no context")))
    assert "session_id" not in entry
    assert "duration_ms" not in entry


def test_text_formatter_appends_session():
    record = make_record("Capture cancelled")
    record.session_id = "abc123"
    assert TextFormatter().format(record).endswith("Capture cancelled (session=abc123)")


def test_setup_logging_quiets_runtime_clients():
    setup_logging(level="debug", json_output=False)
    assert logging.getLogger().level == logging.DEBUG
    for name in ("postgrest", "supabase", "urllib3"):
        assert logging.getLogger(name).level == logging.WARNING
    assert isinstance(logging.getLogger().handlers[0].formatter, TextFormatter)
