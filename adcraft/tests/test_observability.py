"""
Logging and error-tracking helpers.
"""
import json
import logging
from unittest.mock import patch

from adcraft.logger import StructuredFormatter
from adcraft.sentry import _enrich_sentry_event, capture_storage_failure


def make_record(**extra):
    record = logging.LogRecord("adcraft", logging.INFO, __file__, 10, "Products updated: %s", (3,), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_structured_formatter_outputs_json():
    data = json.loads(StructuredFormatter().format(make_record()))

    assert data["level"] == "INFO"
    assert data["message"] == "Products updated: 3"
    assert "timestamp" in data


def test_structured_formatter_merges_context():
    record = make_record(context={"orphaned_avatars": 2, "is_valid": False})
    data = json.loads(StructuredFormatter().format(record))

    assert data["orphaned_avatars"] == 2
    assert data["is_valid"] is False


def test_enrich_sentry_event():
    event = {"exception": {"values": [{"type": "StorageError", "module": "adcraft.errors"}]}}
    enriched = _enrich_sentry_event(event, {})

    assert enriched["tags"]["system"] == "adcraft-data"
    assert enriched["fingerprint"][1:] == ["StorageError", "adcraft.errors"]


def test_capture_is_noop_without_dsn():
    with patch("adcraft.sentry.config.SENTRY_DSN", ""), \
         patch("adcraft.sentry.sentry_sdk.capture_message") as mock_capture:
        capture_storage_failure("products", "write", "disk full")
        mock_capture.assert_not_called()


def test_capture_reports_with_dsn():
    with patch("adcraft.sentry.config.SENTRY_DSN", "https://key@sentry.example/1"), \
         patch("adcraft.sentry.sentry_sdk.capture_message") as mock_capture:
        capture_storage_failure("products", "write", "disk full")
        mock_capture.assert_called_once()
        assert "products" in mock_capture.call_args[0][0]
