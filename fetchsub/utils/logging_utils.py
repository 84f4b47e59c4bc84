"""
Logging utilities for the FetchSub API.

Provides a single configured logger for the service and a request-scoped
adapter so every line emitted while handling one extraction request carries
the same request ID.
"""
import logging
import uuid
from typing import Optional


def setup_logger(
    log_level: int = logging.INFO,
    logger_name: str = "fetchsub"
) -> logging.Logger:
    """
    Configure the service logger.

    Args:
        log_level: Logging level constant from logging module.
                  Defaults to logging.INFO (20).
        logger_name: Name for the logger instance. Defaults to "fetchsub".

    Returns:
        Configured Logger instance ready for use with get_request_logger().

    Example:
        >>> logger = setup_logger(log_level=logging.DEBUG)
        >>> req_logger = get_request_logger("req-123")
        >>> req_logger.info("Processing started")
        2025-06-06 10:30:45 | INFO | [req-123] Processing started
    """
    log_format = logging.Formatter(
        '%(asctime)s | %(levelname)s | [%(request_id)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logger = logging.getLogger(logger_name)
    logger.setLevel(log_level)

    # Prevent duplicate handlers if logger already configured
    if not logger.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(log_format)
        console_handler.addFilter(_DefaultRequestIdFilter())
        logger.addHandler(console_handler)

    return logger


class _DefaultRequestIdFilter(logging.Filter):
    """Fill in request_id for records logged without an adapter."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = "-"
        return True


def new_request_id() -> str:
    """Short random ID used to tag log lines for one request."""
    return uuid.uuid4().hex[:8]


def get_request_logger(
    request_id: str,
    base_logger: Optional[logging.Logger] = None
) -> logging.LoggerAdapter:
    """
    Create a logger adapter with the request ID for tracing.

    Args:
        request_id: Unique identifier for the request.
        base_logger: Optional base logger to wrap. If None, uses the
                    "fetchsub" logger.

    Returns:
        LoggerAdapter configured to inject request_id into all log messages.
    """
    if base_logger is None:
        base_logger = logging.getLogger("fetchsub")

    return logging.LoggerAdapter(base_logger, {"request_id": request_id})
