from __future__ import annotations

import json
import logging

from catalog_import.utils.logging import _json_formatter, configure_logging

EXPECTED_WRITTEN = 120
EXPECTED_BATCH_SIZE = 100


def _record(msg: str = "hello") -> logging.LogRecord:
    return logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


def test_json_formatter_promotes_standard_extra_fields() -> None:
    record = _record()
    record.written = EXPECTED_WRITTEN
    record.file = "DACH.POS"

    payload = json.loads(_json_formatter(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.logger"
    assert payload["message"] == "hello"
    assert payload["written"] == EXPECTED_WRITTEN
    assert payload["file"] == "DACH.POS"
    assert "lineno" not in payload


def test_json_formatter_supports_legacy_nested_extra_field() -> None:
    record = _record()
    record.extra = {"batch_size": EXPECTED_BATCH_SIZE}

    payload = json.loads(_json_formatter(record))

    assert payload["batch_size"] == EXPECTED_BATCH_SIZE
    assert "extra" not in payload


def test_json_formatter_keeps_umlauts_readable() -> None:
    payload = _json_formatter(_record("Gerüst"))

    assert "Gerüst" in payload


def test_configure_logging_sets_root_level() -> None:
    configure_logging(level="WARNING", json_logs=True)

    root = logging.getLogger()
    assert root.level == logging.WARNING
    assert any(h.formatter.__class__.__name__ == "JsonFormatter" for h in root.handlers)
