"""
Core Data Models for the Ledger

These models define the schema of the single persisted document:

    LedgerDocument
      ├── periods: {"YYYY-MM": PeriodBucket(incomes, expenses, card_dues)}
      ├── types:   ordered category names
      ├── goals:   savings goals
      ├── notes:   free-form notes
      └── meta:    bookkeeping stamps

The document is loaded once, held in memory and mutated in place.
Validation happens at the edges (entry creation, load, import).
"""

import re
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from finledger.periods import period_of, utcnow


PERIOD_KEY_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")

TYPE_NAME_MAX_LENGTH = 100

DEFAULT_TYPES = [
    "Housing",
    "Food",
    "Transport",
    "Health",
    "Education",
    "Leisure",
    "Other",
]


# =============================================================================
# ENUMS
# =============================================================================

class EntryKind(str, Enum):
    """The three lists a period bucket holds."""
    INCOME = "income"
    EXPENSE = "expense"
    CARD_DUE = "card_due"

    @property
    def bucket_field(self) -> str:
        """Name of the PeriodBucket list holding this kind."""
        return _BUCKET_FIELDS[self]


_BUCKET_FIELDS = {
    EntryKind.INCOME: "incomes",
    EntryKind.EXPENSE: "expenses",
    EntryKind.CARD_DUE: "card_dues",
}


class EntryTag(str, Enum):
    """Status tags stamped on new entries."""
    CONFIRMED = "confirmed"
    PENDING = "pending"


# =============================================================================
# LEDGER ENTRIES
# =============================================================================

class Entry(BaseModel):
    """
    A single income, expense or card-due record.

    CRITICAL: `id` is unique across the whole document and never reused.
    Every materialized recurrence copy carries its own id.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique entry ID"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="What the entry is (salary, rent, card name...)"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        decimal_places=2,
        description="Amount, always positive"
    )
    entry_date: date = Field(
        ...,
        description="Date received / due; decides the period bucket"
    )
    recurring: bool = Field(
        default=False,
        description="Was this entry created with a recurrence count?"
    )
    category: Optional[str] = Field(
        default=None,
        max_length=TYPE_NAME_MAX_LENGTH,
    )
    tags: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None

    @property
    def period(self) -> str:
        """Period key this entry belongs to."""
        return period_of(self.entry_date)


class PeriodBucket(BaseModel):
    """All entries of one calendar month."""

    incomes: list[Entry] = Field(default_factory=list)
    expenses: list[Entry] = Field(default_factory=list)
    card_dues: list[Entry] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)

    def entries(self, kind: EntryKind) -> list[Entry]:
        return getattr(self, kind.bucket_field)

    def replace_entries(self, kind: EntryKind, entries: list[Entry]) -> None:
        setattr(self, kind.bucket_field, entries)

    @property
    def is_empty(self) -> bool:
        return not (self.incomes or self.expenses or self.card_dues)


# =============================================================================
# GOALS AND NOTES
# =============================================================================

class Goal(BaseModel):
    """
    A savings goal.

    CRITICAL: 0 <= accumulated <= target after every mutation.
    Assignment is validated, so an out-of-range write raises instead of
    silently corrupting the goal.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
    )

    id: UUID = Field(default_factory=uuid4)
    description: str = Field(
        ...,
        min_length=1,
        max_length=200,
    )
    target: Decimal = Field(
        ...,
        gt=0,
        description="Amount to reach"
    )
    accumulated: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Amount saved so far"
    )
    tags: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None

    @model_validator(mode='after')
    def validate_bounds(self) -> 'Goal':
        if self.accumulated > self.target:
            raise ValueError("Accumulated amount cannot exceed target")
        return self


class Note(BaseModel):
    """A free-form note. Text is kept exactly as typed."""

    id: UUID = Field(default_factory=uuid4)
    text: str = ""
    done: bool = False
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None


# =============================================================================
# DOCUMENT ROOT
# =============================================================================

class DocumentMeta(BaseModel):
    first_use: datetime = Field(default_factory=utcnow)
    last_backup: Optional[str] = Field(
        default=None,
        description="Period key of the last successful save"
    )


class LedgerDocument(BaseModel):
    """
    The single persisted aggregate.

    Unknown top-level keys are rejected so that imports cannot smuggle
    arbitrary data into the document.
    """
    model_config = ConfigDict(extra="forbid")

    periods: dict[str, PeriodBucket] = Field(default_factory=dict)
    types: list[str] = Field(default_factory=lambda: list(DEFAULT_TYPES))
    goals: list[Goal] = Field(default_factory=list)
    notes: list[Note] = Field(default_factory=list)
    meta: DocumentMeta = Field(default_factory=DocumentMeta)

    @field_validator('periods')
    @classmethod
    def validate_period_keys(cls, v: dict[str, PeriodBucket]) -> dict[str, PeriodBucket]:
        for key in v:
            if not PERIOD_KEY_PATTERN.match(key):
                raise ValueError(f"Invalid period key: {key!r} (expected YYYY-MM)")
        return v

    @field_validator('types')
    @classmethod
    def dedupe_types(cls, v: list[str]) -> list[str]:
        """Keep the first occurrence of each name, drop blanks."""
        seen: list[str] = []
        for name in v:
            name = name.strip()
            if name and name not in seen:
                seen.append(name)
        return seen

    @model_validator(mode='after')
    def validate_unique_entry_ids(self) -> 'LedgerDocument':
        ids: set[UUID] = set()
        for bucket in self.periods.values():
            for kind in EntryKind:
                for entry in bucket.entries(kind):
                    if entry.id in ids:
                        raise ValueError(f"Duplicate entry id: {entry.id}")
                    ids.add(entry.id)
        return self

    @classmethod
    def with_defaults(cls, types: Optional[list[str]] = None) -> 'LedgerDocument':
        """Fresh document for a first run."""
        return cls(types=list(types) if types is not None else list(DEFAULT_TYPES))

    def iter_entries(self, kind: EntryKind):
        """Yield (period_key, entry) over all buckets in period order."""
        for key in sorted(self.periods):
            for entry in self.periods[key].entries(kind):
                yield key, entry


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem found in form input."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning)$",
    )


class ValidationResult(BaseModel):
    """
    Outcome of checking a form submission.

    When `is_valid` is False nothing is created; the issues are there for
    the form to show.
    """

    issues: list[ValidationIssue] = Field(default_factory=list)

    # Parsed values (set only when the corresponding field parsed cleanly)
    name: Optional[str] = None
    amount: Optional[Decimal] = None
    entry_date: Optional[date] = None
    category: Optional[str] = None
    recurrence: int = 0

    @property
    def is_valid(self) -> bool:
        return not any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == "error")
