"""Unit tests for structured logging."""

import json
import logging

from tracking_tags.core.logging_config import GenerationLogger, JSONFormatter


class TestJSONFormatter:
    def test_single_line_with_extra(self):
        record = logging.LogRecord("tracking_tags.test", logging.WARNING, __file__, 1, "line one\nline two", None, None)
        record.creative_id = "cr_1"

        output = JSONFormatter().format(record)

        assert "\n" not in output
        entry = json.loads(output)
        assert entry["level"] == "WARNING"
        assert entry["message"] == "line one\nline two"
        assert entry["extra"] == {"creative_id": "cr_1"}


class TestGenerationLogger:
    """Test generation run and data-quality records."""

    def test_generation_run(self, caplog):
        with caplog.at_level(logging.INFO, logger="tracking_tags.generation"):
            GenerationLogger().log_generation_run(
                "generate_for_order", True, details={"generated": 2}, duration_ms=1.5
            )

        data = json.loads(caplog.records[-1].getMessage())
        assert data["operation"] == "generate_for_order"
        assert data["details"] == {"generated": 2}
        assert data["duration_ms"] == 1.5
        assert caplog.records[-1].levelno == logging.INFO

    def test_failed_run_logs_error(self, caplog):
        with caplog.at_level(logging.INFO, logger="tracking_tags.generation"):
            GenerationLogger().log_generation_run("generate_for_asset", False, error="boom")

        assert caplog.records[-1].levelno == logging.ERROR
        assert json.loads(caplog.records[-1].getMessage())["error"] == "boom"

    def test_missing_click_url(self, caplog):
        with caplog.at_level(logging.WARNING, logger="tracking_tags.generation"):
            GenerationLogger().log_missing_click_url("cr_1", "https://advertiser.example.com/landing")

        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert record.issue == "missing_click_url"
        assert record.creative_id == "cr_1"
        assert "https://advertiser.example.com/landing" in record.getMessage()
