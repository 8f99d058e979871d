"""
Tests for logger configuration.

These tests verify:
1. The package logger is silent until configured
2. Levels resolve from arguments, then the environment
3. JSON output carries extra fields and survives byte values
"""

import json
import logging
import sys

import pytest

from shrapnel.codec import Extraction, make_codec
from shrapnel.engine import decompose
from shrapnel.fragment import Fragment
from shrapnel.logger import (
    LOG_LEVEL_ENV,
    LOGGER_NAME,
    JSONFormatter,
    logger,
    resolve_level,
    setup_logger,
)


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    for handler in list(logger.handlers):
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name=LOGGER_NAME,
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="splice %s",
        args=("skipped",),
        exc_info=None,
        func="splice",
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


# =============================================================================
# LEVEL RESOLUTION TESTS
# =============================================================================

class TestResolveLevel:
    """Test resolve_level()."""

    def test_explicit_name(self):
        assert resolve_level("debug") == logging.DEBUG

    def test_explicit_number(self):
        assert resolve_level(logging.INFO) == logging.INFO

    def test_environment_fallback(self, monkeypatch):
        monkeypatch.setenv(LOG_LEVEL_ENV, "INFO")
        assert resolve_level() == logging.INFO

    def test_default_is_warning(self, monkeypatch):
        monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
        assert resolve_level() == logging.WARNING

    def test_unknown_name_is_warning(self):
        assert resolve_level("chatty") == logging.WARNING


# =============================================================================
# SETUP TESTS
# =============================================================================

class TestSetupLogger:
    """Test setup_logger()."""

    def test_library_logger_has_null_handler(self):
        assert any(isinstance(h, logging.NullHandler) for h in logger.handlers)

    def test_setup_is_idempotent(self):
        setup_logger("INFO")
        setup_logger("DEBUG")

        streams = [h for h in logger.handlers if isinstance(h, logging.StreamHandler)]
        assert len(streams) == 1
        assert logger.level == logging.DEBUG

    def test_json_format_selects_formatter(self):
        log = setup_logger(json_format=True)
        streams = [h for h in log.handlers if isinstance(h, logging.StreamHandler)]
        assert isinstance(streams[0].formatter, JSONFormatter)


# =============================================================================
# JSON FORMATTER TESTS
# =============================================================================

class TestJSONFormatter:
    """Test JSONFormatter output."""

    def test_core_fields(self):
        payload = json.loads(JSONFormatter().format(make_record()))

        assert payload["level"] == "WARNING"
        assert payload["message"] == "splice skipped"
        assert payload["logger"] == LOGGER_NAME
        assert payload["function"] == "splice"
        assert "timestamp" in payload

    def test_extra_fields_are_copied(self):
        payload = json.loads(JSONFormatter().format(make_record(codec="base64", depth=3)))
        assert payload["codec"] == "base64"
        assert payload["depth"] == 3

    def test_bytes_are_rendered_with_repr(self):
        payload = json.loads(JSONFormatter().format(make_record(raw=b"\x00\xff")))
        assert payload["raw"] == "b'\\x00\\xff'"

    def test_exception_is_included(self):
        try:
            raise ValueError("bad input")
        except ValueError:
            record = make_record()
            record.exc_info = sys.exc_info()

        payload = json.loads(JSONFormatter().format(record))
        assert payload["exception"]["type"] == "ValueError"
        assert payload["exception"]["message"] == "bad input"


# =============================================================================
# ENGINE LOGGING TESTS
# =============================================================================

class TestEngineLogging:
    """Test that the engine reports through the package logger."""

    def test_depth_ceiling_warns(self, caplog):
        looping = make_codec(
            "loop",
            extract=lambda data: Extraction(candidates=(data,)),
            decode=None,
        )

        with caplog.at_level(logging.WARNING, logger=LOGGER_NAME):
            decompose(Fragment(contents=b"forever"), [looping], max_depth=2)

        assert "max_depth reached" in caplog.text
