"""Structured logging configuration."""

import logging
import sys
import time
from typing import Any
from datetime import datetime
from contextlib import contextmanager

import structlog
from structlog.stdlib import LoggerFactory

from .config import settings

# Event keys that may carry a live OTP or payment secret
REDACTED_KEYS = frozenset({"code", "otp", "razorpay_signature", "key_secret"})


def redact_secrets(logger, method_name, event_dict):
    """Mask OTP codes and gateway secrets before rendering."""
    for key in REDACTED_KEYS.intersection(event_dict):
        if event_dict[key] is not None:
            event_dict[key] = "***"
    return event_dict


def configure_logging() -> None:
    """Configure structured logging for the application."""

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            redact_secrets,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer() if settings.environment == "production"
            else structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()),
        ],
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level.upper()),
    )

    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.log_level == "DEBUG" else logging.WARNING
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


class PerformanceLogger:
    """Times API operations: one line per request, success or failure."""

    def __init__(self, logger_name: str = "performance"):
        self.logger = get_logger(logger_name)

    @contextmanager
    def log_operation_time(self, operation: str, **context: Any):
        """Context manager to log operation execution time.

        Args:
            operation: Name of the operation being timed
            **context: Additional context for logging
        """
        started = time.perf_counter()
        started_at = datetime.utcnow()

        try:
            yield
        except Exception as e:
            self.logger.warning(
                "Operation failed",
                operation=operation,
                duration_ms=round((time.perf_counter() - started) * 1000, 1),
                started_at=started_at.isoformat(),
                error_type=type(e).__name__,
                error_code=getattr(e, "code", None),
                **context
            )
            raise

        self.logger.info(
            "Operation completed",
            operation=operation,
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
            started_at=started_at.isoformat(),
            **context
        )


performance_logger = PerformanceLogger()
