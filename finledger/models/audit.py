"""
Audit Models for the Ledger

Every structural change to the document and every persistence problem
produces an audit event. Events go to the structured log only; they are
not part of the persisted document.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator

from finledger.periods import utcnow


DESCRIPTION_MAX_LENGTH = 500


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Entries
    ENTRY_ADDED = "entry_added"
    ENTRY_REMOVED = "entry_removed"
    ENTRY_REJECTED = "entry_rejected"
    RECURRENCE_MATERIALIZED = "recurrence_materialized"
    TYPE_ADDED = "type_added"

    # Goals
    GOAL_CREATED = "goal_created"
    GOAL_UPDATED = "goal_updated"
    GOAL_DELETED = "goal_deleted"

    # Notes
    NOTE_FLUSHED = "note_flushed"
    NOTE_DELETED = "note_deleted"

    # Persistence
    DOCUMENT_LOADED = "document_loaded"
    DOCUMENT_LOAD_FAILED = "document_load_failed"
    SAVE_FAILED = "save_failed"

    # Import / export / reset
    IMPORT_APPLIED = "import_applied"
    IMPORT_REJECTED = "import_rejected"
    EXPORT_CREATED = "export_created"
    RESET_PERFORMED = "reset_performed"
    ACTION_CANCELLED = "action_cancelled"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """A single audit event."""

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utcnow,
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # What entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'entry', 'goal', 'note', 'document')"
    )
    entity_id: Optional[UUID] = None
    period: Optional[str] = None

    description: str = Field(
        ...,
        max_length=DESCRIPTION_MAX_LENGTH,
    )
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None
    is_user_action: bool = False

    @field_validator('description', mode='before')
    @classmethod
    def truncate_description(cls, v: Any) -> Any:
        """Descriptions may embed user text; cut them to fit."""
        if isinstance(v, str) and len(v) > DESCRIPTION_MAX_LENGTH:
            return v[: DESCRIPTION_MAX_LENGTH - 3] + "..."
        return v

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "period": self.period,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.entry_added(entry_id, "expense", "2024-03", "Rent", "1200.00")
        event = AuditEventBuilder.save_failed("quota exceeded")
    """

    @staticmethod
    def entry_added(
        entry_id: UUID,
        kind: str,
        period: str,
        name: str,
        amount: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_ADDED,
            entity_type="entry",
            entity_id=entry_id,
            period=period,
            description=f"{kind} added: {name} - {amount}",
            details={
                "kind": kind,
                "name": name,
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def recurrence_materialized(
        base_id: UUID,
        kind: str,
        periods: list[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECURRENCE_MATERIALIZED,
            entity_type="entry",
            entity_id=base_id,
            period=periods[0] if periods else None,
            description=f"{kind} materialized into {len(periods)} periods",
            details={
                "kind": kind,
                "periods": periods,
            },
        )

    @staticmethod
    def entry_removed(
        entry_id: UUID,
        kind: str,
        period: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_REMOVED,
            entity_type="entry",
            entity_id=entry_id,
            period=period,
            description=f"{kind} removed from {period}",
            details={"kind": kind},
            is_user_action=True,
        )

    @staticmethod
    def entry_rejected(
        kind: str,
        issues: list[dict],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="entry",
            description=f"{kind} rejected with {len(issues)} issues",
            details={
                "kind": kind,
                "issues": issues,
            },
            is_user_action=True,
        )

    @staticmethod
    def goal_updated(
        goal_id: UUID,
        operation: str,
        amount: str,
        accumulated: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_UPDATED,
            entity_type="goal",
            entity_id=goal_id,
            description=f"Goal {operation}: {amount}",
            details={
                "operation": operation,
                "amount": amount,
                "accumulated": accumulated,
            },
            is_user_action=True,
        )

    @staticmethod
    def save_failed(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="document",
            description="Saving the ledger document failed",
            error_message=error_message,
        )

    @staticmethod
    def load_failed(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DOCUMENT_LOAD_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="document",
            description="Stored ledger document is unreadable; starting with defaults",
            error_message=error_message,
        )

    @staticmethod
    def import_applied(sections: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_APPLIED,
            severity=AuditSeverity.WARNING,
            entity_type="document",
            description=f"Import replaced sections: {', '.join(sections) or 'none'}",
            details={"sections": sections},
            is_user_action=True,
        )

    @staticmethod
    def import_rejected(
        reason: str,
        error_message: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="document",
            description=f"Import rejected: {reason}",
            details=details or {},
            error_message=error_message,
        )

    @staticmethod
    def action_cancelled(action: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACTION_CANCELLED,
            description=f"User cancelled: {action}",
            details={"action": action},
            is_user_action=True,
        )
