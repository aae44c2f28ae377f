"""
Structured logging configuration for the application.
"""
import structlog
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict


def configure_logging(environment: str = "development"):
    """Configure structured logging based on environment."""

    # Configure standard logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=logging.INFO if environment == "production" else logging.DEBUG,
    )

    # Configure structlog
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if environment == "production" else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.INFO if environment == "production" else logging.DEBUG
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    return structlog.get_logger()


def get_logger(name: str = None):
    """Get a configured logger instance."""
    if name:
        return structlog.get_logger(name)
    return structlog.get_logger()


class ActivityLogger:
    """Logger for participant activity on the shared board."""

    def __init__(self):
        self.logger = get_logger("activity")

    def log_session_event(
        self,
        event_type: str,
        connection_id: str,
        details: Dict[str, Any] = None
    ):
        """Log a connection lifecycle event (connect, join, leave)."""
        self.logger.info(
            "session_event",
            event_type=event_type,
            connection_id=connection_id,
            details=details or {},
            timestamp=datetime.now(timezone.utc).isoformat()
        )

    def log_board_action(
        self,
        user_id: str,
        role: str,
        action: str,
        details: Dict[str, Any] = None
    ):
        """Log a change a participant made to the board."""
        self.logger.info(
            "board_action",
            user_id=user_id,
            role=role,
            action=action,
            details=details or {},
            timestamp=datetime.now(timezone.utc).isoformat()
        )

    def log_upload(
        self,
        kind: str,
        filename: str,
        size: int,
        ip_address: str = None
    ):
        """Log a stored image upload."""
        self.logger.info(
            "upload_stored",
            kind=kind,
            filename=filename,
            size=size,
            ip_address=ip_address,
            timestamp=datetime.now(timezone.utc).isoformat()
        )


# Global activity logger instance
activity_logger = ActivityLogger()
