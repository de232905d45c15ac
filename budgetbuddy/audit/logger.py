"""
Audit Logger

DESIGN DECISION: Every state change is logged.
This gives traceability of totals and alerts, plus enough
context to debug a failed save after the fact.

The audit logger:
- Never takes the session down with it (storage failures are logged, not raised)
- Ties the events of one store operation together with a correlation ID
- Renders JSON lines normally, and readable console output in debug mode
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from budgetbuddy.config import AppSettings, get_settings
from budgetbuddy.models.audit import AuditEvent, AuditEventBuilder
from budgetbuddy.services.storage import AuditStorageInterface


def configure_logging(app_settings: Optional[AppSettings] = None) -> None:
    """
    Route structlog through stdlib logging at the configured level.

    Runs once on import; call again after changing the environment.
    """
    app_settings = app_settings or get_settings().app

    logging.basicConfig(format="%(message)s", level=app_settings.log_level)
    logging.getLogger().setLevel(app_settings.log_level)

    renderer = (
        structlog.dev.ConsoleRenderer()
        if app_settings.debug_mode
        else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()


class AuditLogger:
    """
    Writes audit events to the structured log and, optionally, to an
    audit store the app can read history back from.
    """

    def __init__(self, storage: Optional[AuditStorageInterface] = None):
        self._storage = storage
        self._logger = structlog.get_logger("budgetbuddy.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Record an event.

        Returns False only when the audit store rejected it.
        """
        emit = getattr(self._logger, event.severity.value)
        emit("audit_event", **event.to_log_dict())

        if self._storage is None:
            return True

        try:
            return self._storage.append_event(event)
        except Exception as e:
            self._logger.error(
                "audit_storage_failed",
                error=str(e),
                event_id=str(event.event_id),
            )
            return False

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))

    def history(self, limit: int = 100) -> list[AuditEvent]:
        """Most recent events first; empty without an audit store."""
        if self._storage is None:
            return []
        return self._storage.get_recent_events(limit=limit)


def create_correlation_id() -> UUID:
    """
    New ID for one store operation.

    Every event the operation emits carries it.
    """
    return uuid4()
