"""
Audit Logger

Every structural change to the ledger is logged as a structured event.
The logger never raises: a failure to log must not interrupt the action
being logged.
"""

from typing import Optional
from uuid import UUID

import structlog
from pydantic import ValidationError

from finledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


# Configure structlog for local logging
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
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Events are written to the structured local log. The most recent events
    are also kept in memory (bounded) so callers can inspect what happened
    during a session.
    """

    def __init__(self, history_size: int = 200):
        self._logger = structlog.get_logger("finledger.audit")
        self._history_size = history_size
        self._history: list[AuditEvent] = []

    @property
    def recent_events(self) -> list[AuditEvent]:
        """Most recent events, oldest first."""
        return list(self._history)

    def log(self, event: AuditEvent) -> None:
        """Log an audit event."""
        self._history.append(event)
        if len(self._history) > self._history_size:
            del self._history[0]

        log_dict = event.to_log_dict()
        try:
            if event.severity == AuditSeverity.ERROR:
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            # Log failure but don't raise
            self._logger.error(
                "audit_log_failed",
                error=str(e),
                event_id=str(event.event_id),
            )

    def events_of_type(self, event_type: AuditEventType) -> list[AuditEvent]:
        return [e for e in self._history if e.event_type == event_type]

    def log_entry_added(
        self,
        entry_id: UUID,
        kind: str,
        period: str,
        name: str,
        amount: str,
    ) -> None:
        self.log(AuditEventBuilder.entry_added(
            entry_id=entry_id,
            kind=kind,
            period=period,
            name=name,
            amount=amount,
        ))

    def log_recurrence(self, base_id: UUID, kind: str, periods: list[str]) -> None:
        self.log(AuditEventBuilder.recurrence_materialized(
            base_id=base_id,
            kind=kind,
            periods=periods,
        ))

    def log_entry_removed(self, entry_id: UUID, kind: str, period: str) -> None:
        self.log(AuditEventBuilder.entry_removed(
            entry_id=entry_id,
            kind=kind,
            period=period,
        ))

    def log_entry_rejected(self, kind: str, issues: list[dict]) -> None:
        self.log(AuditEventBuilder.entry_rejected(kind=kind, issues=issues))

    def log_goal_updated(
        self,
        goal_id: UUID,
        operation: str,
        amount: str,
        accumulated: str,
    ) -> None:
        self.log(AuditEventBuilder.goal_updated(
            goal_id=goal_id,
            operation=operation,
            amount=amount,
            accumulated=accumulated,
        ))

    def log_save_failed(self, error_message: str) -> None:
        self.log(AuditEventBuilder.save_failed(error_message))

    def log_load_failed(self, error_message: str) -> None:
        self.log(AuditEventBuilder.load_failed(error_message))

    def log_import_applied(self, sections: list[str]) -> None:
        self.log(AuditEventBuilder.import_applied(sections))

    def log_import_rejected(
        self,
        reason: str,
        error_message: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> None:
        self.log(AuditEventBuilder.import_rejected(reason, error_message, details))

    def log_cancelled(self, action: str) -> None:
        self.log(AuditEventBuilder.action_cancelled(action))

    def log_simple(
        self,
        event_type: AuditEventType,
        description: str,
        entity_type: Optional[str] = None,
        entity_id: Optional[UUID] = None,
        details: Optional[dict] = None,
    ) -> None:
        """Log an event that has no dedicated builder."""
        try:
            event = AuditEvent(
                event_type=event_type,
                entity_type=entity_type,
                entity_id=entity_id,
                description=description,
                details=details or {},
            )
        except ValidationError as e:
            self._logger.error(
                "audit_event_invalid",
                event_type=str(event_type),
                error=str(e),
            )
            return
        self.log(event)
