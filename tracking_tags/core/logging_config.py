"""Structured logging configuration for tag generation.

Supports two modes:
- Production: JSON format for log aggregation
- Development: Human-readable format
"""

import json
import logging
import os
from datetime import UTC, datetime
from typing import Any

# Standard LogRecord attributes excluded from the "extra" block
_STANDARD_ATTRS = {
    "name",
    "msg",
    "args",
    "created",
    "filename",
    "funcName",
    "levelname",
    "levelno",
    "lineno",
    "module",
    "msecs",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "stack_info",
    "exc_info",
    "exc_text",
    "thread",
    "threadName",
    "taskName",
    "message",
}


class JSONFormatter(logging.Formatter):
    """JSON log formatter for production environments.

    Outputs single-line JSON that log aggregators handle correctly.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        # Non-standard attributes passed via extra={}
        extra_fields = {k: v for k, v in record.__dict__.items() if k not in _STANDARD_ATTRS}
        if extra_fields:
            log_entry["extra"] = extra_fields

        return json.dumps(log_entry, default=str)


def setup_structured_logging() -> None:
    """Setup structured JSON logging for production environments.

    In production, configures the root logger to output single-line JSON so
    multiline tag markup in log messages is not split into separate entries.
    """
    is_production = bool(os.environ.get("FLY_APP_NAME") or os.environ.get("PRODUCTION"))

    if is_production:
        root_logger = logging.getLogger()
        root_logger.setLevel(logging.INFO)

        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        handler = logging.StreamHandler()
        handler.setFormatter(JSONFormatter())
        root_logger.addHandler(handler)

        for logger_name in ["werkzeug", "sqlalchemy.engine", "alembic"]:
            lib_logger = logging.getLogger(logger_name)
            lib_logger.handlers = []
            lib_logger.addHandler(handler)
            lib_logger.propagate = False

        logging.info("JSON structured logging enabled for production")
    else:
        # force=True ensures configuration is applied even if logging was already configured
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            force=True,
        )


class GenerationLogger:
    """Structured logger for generation runs and creative data-quality issues."""

    def __init__(self, logger_name: str = "tracking_tags.generation"):
        self.logger = logging.getLogger(logger_name)

    def log_generation_run(
        self,
        operation: str,
        success: bool,
        details: dict[str, Any] | None = None,
        error: str | None = None,
        duration_ms: float | None = None,
    ) -> None:
        """Log one orchestrator invocation with its counts."""
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "operation": operation,
            "success": success,
            "type": "tracking_generation",
        }

        if details:
            log_data["details"] = details

        if error:
            log_data["error"] = error

        if duration_ms is not None:
            log_data["duration_ms"] = duration_ms

        if success:
            self.logger.info(json.dumps(log_data, default=str))
        else:
            self.logger.error(json.dumps(log_data, default=str))

    def log_data_quality_issue(self, issue: str, creative_id: str, message: str, **context: Any) -> None:
        """Log a non-fatal problem with source data (the pair is still generated)."""
        self.logger.warning(
            f"[{issue}] creative {creative_id}: {message}",
            extra={"issue": issue, "creative_id": creative_id, **context},
        )

    def log_invalid_record(self, kind: str, record_id: str, errors: list[str]) -> None:
        """Log a stored record that could not be loaded; its pairs are counted as failed."""
        self.logger.warning(
            f"[invalid_{kind}] {kind} {record_id}: {'; '.join(errors)}",
            extra={"issue": f"invalid_{kind}", "record_id": record_id, "errors": errors},
        )

    def log_missing_click_url(self, creative_id: str, placeholder_url: str) -> None:
        self.log_data_quality_issue(
            "missing_click_url",
            creative_id,
            f"No click URL provided. Using placeholder {placeholder_url} - ads will not redirect to landing page!",
            placeholder_url=placeholder_url,
        )


# Global structured logger instance
generation_logger = GenerationLogger()
