"""
Report Models

Read-only values computed by the aggregator from the ledger document.
Nothing here is persisted.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from finledger.models.ledger import EntryKind


class Trend(str, Enum):
    """How healthy a period's leftover money looks."""
    EXCELLENT = "excellent"
    GOOD = "good"
    WARNING = "warning"


class GoalBand(str, Enum):
    """Progress colour band for a goal."""
    RED = "red"
    ORANGE = "orange"
    GREEN = "green"
    GOLD = "gold"


class PeriodTotals(BaseModel):
    """Dashboard figures for one period."""

    period: str
    total_income: Decimal = Decimal("0")
    total_expenses: Decimal = Decimal("0")
    total_card_dues: Decimal = Decimal("0")
    balance: Decimal = Field(
        default=Decimal("0"),
        description="Money in for the period (equals total income)"
    )
    remaining: Decimal = Field(
        default=Decimal("0"),
        description="Income minus expenses minus card dues"
    )
    trend: Trend = Trend.WARNING

    @property
    def committed(self) -> Decimal:
        """Everything going out: expenses plus card dues."""
        return self.total_expenses + self.total_card_dues


class DueEvent(BaseModel):
    """An upcoming payment (expense or card due)."""

    entry_date: date
    name: str
    kind: EntryKind
    period: str
    entry_id: UUID


class CategoryShare(BaseModel):
    """One row of the expense-by-category report."""

    category: str
    amount: Decimal
    percentage: Decimal = Field(
        ...,
        ge=0,
        le=100,
        description="Share of the period's total expenses"
    )


class MonthlyBalance(BaseModel):
    """One row of the monthly history report."""

    period: str
    income: Decimal
    outgoing: Decimal
    balance: Decimal

    @property
    def positive(self) -> bool:
        return self.balance >= 0


class GoalProgress(BaseModel):
    goal_id: UUID
    percentage: int = Field(..., ge=0, le=100)
    band: GoalBand
    missing: Decimal = Field(
        ...,
        ge=0,
        description="Amount still needed to reach the target"
    )


class ExportBundle(BaseModel):
    """A downloadable export of the document."""

    filename: str
    content: str
    media_type: str = "application/json"
    period: Optional[str] = None


class DashboardSummary(BaseModel):
    """Everything the dashboard shows for the selected period."""

    totals: PeriodTotals
    next_due: Optional[DueEvent] = None
