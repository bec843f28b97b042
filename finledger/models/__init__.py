"""
Data Models Package

This package contains all Pydantic models used by the ledger.
Everything that is persisted or reported must conform to these schemas.
"""

from finledger.models.ledger import (
    DEFAULT_TYPES,
    PERIOD_KEY_PATTERN,
    DocumentMeta,
    Entry,
    EntryKind,
    EntryTag,
    Goal,
    LedgerDocument,
    Note,
    PeriodBucket,
    ValidationIssue,
    ValidationResult,
)
from finledger.models.reports import (
    CategoryShare,
    DashboardSummary,
    DueEvent,
    ExportBundle,
    GoalBand,
    GoalProgress,
    MonthlyBalance,
    PeriodTotals,
    Trend,
)
from finledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "DEFAULT_TYPES",
    "PERIOD_KEY_PATTERN",
    "DocumentMeta",
    "Entry",
    "EntryKind",
    "EntryTag",
    "Goal",
    "LedgerDocument",
    "Note",
    "PeriodBucket",
    "ValidationIssue",
    "ValidationResult",
    # Report models
    "CategoryShare",
    "DashboardSummary",
    "DueEvent",
    "ExportBundle",
    "GoalBand",
    "GoalProgress",
    "MonthlyBalance",
    "PeriodTotals",
    "Trend",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
