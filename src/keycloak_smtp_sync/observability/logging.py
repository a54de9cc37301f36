"""
Structured logging utilities for the SMTP sync process.

This module provides correlation ID tracking and structured log formatting
so that every log line produced by one sync action can be grouped together.
"""

import json
import logging
import uuid
from contextvars import ContextVar
from datetime import UTC, datetime

# Context variable for tracking correlation IDs across async operations
correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")

# Extra fields copied from log records into the JSON payload
STRUCTURED_FIELDS = (
    "namespace",
    "resource_name",
    "realm_name",
    "operation",
    "event_type",
    "resource_version",
    "duration",
    "error_type",
    "http_status",
    "response_body",
)


class CorrelationIDFilter(logging.Filter):
    """Logging filter that adds correlation ID to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Add correlation ID to the log record.

        Args:
            record: The log record to process

        Returns:
            True to allow the record to be processed
        """
        record.correlation_id = correlation_id.get()
        return True


class StructuredFormatter(logging.Formatter):
    """
    Structured JSON formatter for logs with correlation ID support.

    Formats log records as single-line JSON for log aggregation systems.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": getattr(record, "correlation_id", ""),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # extra= fields land as attributes on the record
        for field in STRUCTURED_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        return json.dumps(log_data, default=str)


def generate_correlation_id() -> str:
    """
    Generate a new correlation ID.

    Returns:
        Unique correlation ID string
    """
    return str(uuid.uuid4())[:8]  # Short 8-character ID for readability


def set_correlation_id(corr_id: str) -> str:
    """
    Set the correlation ID for the current context.

    Args:
        corr_id: Correlation ID to set

    Returns:
        The correlation ID that was set
    """
    correlation_id.set(corr_id)
    return corr_id


def get_correlation_id() -> str:
    """Get the current correlation ID, or empty string if none set."""
    return correlation_id.get("")


def setup_structured_logging(
    log_level: str = "INFO",
    enable_json_formatting: bool = True,
    correlation_id_enabled: bool = True,
) -> None:
    """
    Set up structured logging for the process.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        enable_json_formatting: Whether to use JSON formatting
        correlation_id_enabled: Whether to enable correlation ID tracking
    """
    root_logger = logging.getLogger()

    # Clear existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()

    if enable_json_formatting:
        formatter: logging.Formatter = StructuredFormatter()
    elif correlation_id_enabled:
        formatter = logging.Formatter(
            "%(asctime)s - %(correlation_id)s - %(name)s - %(levelname)s - %(message)s"
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    handler.setFormatter(formatter)

    if correlation_id_enabled:
        handler.addFilter(CorrelationIDFilter())

    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # Set specific logger levels for third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("kubernetes").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


class SyncLogger:
    """
    Logger for sync actions with structured logging support.

    Provides convenient methods for the start, success and failure of one
    secret-to-realm sync with correlation ID tracking.
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def log_sync_start(
        self,
        secret_name: str,
        namespace: str,
        realm_name: str,
        corr_id: str | None = None,
    ) -> str:
        """
        Log the start of a sync action and bind a correlation ID to it.

        Args:
            secret_name: Name of the changed Secret
            namespace: Namespace of the Secret
            realm_name: Realm that will be updated
            corr_id: Optional correlation ID (will generate if not provided)

        Returns:
            The correlation ID used for this sync
        """
        if corr_id is None:
            corr_id = generate_correlation_id()

        set_correlation_id(corr_id)

        self.logger.info(
            f"Starting SMTP sync from secret {namespace}/{secret_name} "
            f"to realm {realm_name}",
            extra={
                "resource_name": secret_name,
                "namespace": namespace,
                "realm_name": realm_name,
                "operation": "sync_start",
            },
        )
        return corr_id

    def log_sync_success(
        self, secret_name: str, namespace: str, realm_name: str, duration: float
    ) -> None:
        self.logger.info(
            f"SMTP settings of realm {realm_name} updated from secret "
            f"{namespace}/{secret_name}",
            extra={
                "resource_name": secret_name,
                "namespace": namespace,
                "realm_name": realm_name,
                "operation": "sync_success",
                "duration": duration,
            },
        )

    def log_sync_error(
        self,
        step: str,
        secret_name: str,
        namespace: str,
        realm_name: str,
        error: Exception,
    ) -> None:
        """
        Log a failed sync step. The sync is abandoned after this.

        Args:
            step: Pipeline step that failed (fetch_secret, login, get_realm, update_realm)
            secret_name: Name of the changed Secret
            namespace: Namespace of the Secret
            realm_name: Realm being updated
            error: The error that occurred
        """
        extra = {
            "resource_name": secret_name,
            "namespace": namespace,
            "realm_name": realm_name,
            "operation": f"sync_{step}",
            "error_type": type(error).__name__,
        }

        status_code = getattr(error, "status_code", None)
        if status_code is not None:
            extra["http_status"] = status_code

        body_preview = getattr(error, "body_preview", None)
        if callable(body_preview) and body_preview() is not None:
            extra["response_body"] = body_preview()

        self.logger.error(
            f"SMTP sync failed at step '{step}' for realm {realm_name}: {error}",
            extra=extra,
        )
