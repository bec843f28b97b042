"""
Report Aggregation

Derived views over the ledger document: dashboard totals, the next due
payment, the expense breakdown by category and the monthly history.

Everything here is read-only and deterministic. In particular, asking for
a period that has no bucket yields zeros; it never creates the bucket.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from finledger.config.settings import LedgerSettings
from finledger.models.ledger import Entry, EntryKind, PeriodBucket
from finledger.models.reports import (
    CategoryShare,
    DueEvent,
    MonthlyBalance,
    PeriodTotals,
    Trend,
)
from finledger.store import LedgerStore


ZERO = Decimal("0")
CENTS = Decimal("0.01")
HUNDRED = Decimal("100")

# Entry kinds that represent money going out on a due date
DUE_KINDS = (EntryKind.EXPENSE, EntryKind.CARD_DUE)


def sum_amounts(entries: list[Entry]) -> Decimal:
    return sum((e.amount for e in entries), ZERO)


class LedgerAggregator:
    """Computes report values from the store's current document."""

    def __init__(
        self,
        store: LedgerStore,
        settings: Optional[LedgerSettings] = None,
    ):
        self._store = store
        self._settings = settings or store.ledger_settings

    def _bucket(self, period: str) -> PeriodBucket:
        return self._store.get_period(period) or PeriodBucket()

    # -------------------------------------------------------------------------
    # Dashboard
    # -------------------------------------------------------------------------

    def classify(self, remaining: Decimal) -> Trend:
        if remaining > self._settings.excellent_threshold:
            return Trend.EXCELLENT
        if remaining > 0:
            return Trend.GOOD
        return Trend.WARNING

    def period_totals(self, period: str) -> PeriodTotals:
        """Income, outgoings and what is left for one period."""
        bucket = self._bucket(period)
        income = sum_amounts(bucket.incomes)
        expenses = sum_amounts(bucket.expenses)
        card_dues = sum_amounts(bucket.card_dues)
        remaining = income - expenses - card_dues

        return PeriodTotals(
            period=period,
            total_income=income,
            total_expenses=expenses,
            total_card_dues=card_dues,
            balance=income,
            remaining=remaining,
            trend=self.classify(remaining),
        )

    def upcoming_dues(
        self,
        current_period: str,
        today: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> list[DueEvent]:
        """
        Pending expenses and card dues from `current_period` onwards.

        Scans every bucket whose key is >= current_period (not just the
        current one), keeps events dated today or later, and orders them by
        date. Ties keep their scan order (period, then expenses before
        card dues, then insertion order).
        """
        today = today or self._store.today()
        periods = self._store.document.periods

        events = []
        for key in sorted(k for k in periods if k >= current_period):
            bucket = periods[key]
            for kind in DUE_KINDS:
                for entry in bucket.entries(kind):
                    events.append(DueEvent(
                        entry_date=entry.entry_date,
                        name=entry.name,
                        kind=kind,
                        period=key,
                        entry_id=entry.id,
                    ))

        pending = [e for e in events if e.entry_date >= today]
        pending.sort(key=lambda e: e.entry_date)
        if limit is not None:
            pending = pending[:limit]
        return pending

    def next_due(
        self,
        current_period: str,
        today: Optional[date] = None,
    ) -> Optional[DueEvent]:
        """The soonest pending due date, or None if nothing is pending."""
        upcoming = self.upcoming_dues(current_period, today, limit=1)
        return upcoming[0] if upcoming else None

    # -------------------------------------------------------------------------
    # Reports
    # -------------------------------------------------------------------------

    def category_breakdown(self, period: str) -> list[CategoryShare]:
        """
        Expenses of one period grouped by category, largest first.

        Percentages are shares of the period's total expenses; with no
        expenses at all every share is 0.
        """
        expenses = self._bucket(period).expenses
        total = sum_amounts(expenses)

        groups: dict[str, Decimal] = {}
        for entry in expenses:
            key = entry.category or self._settings.uncategorized_label
            groups[key] = groups.get(key, ZERO) + entry.amount

        shares = []
        for category, amount in groups.items():
            if total > 0:
                percentage = (amount / total * HUNDRED).quantize(CENTS)
            else:
                percentage = ZERO
            shares.append(CategoryShare(
                category=category,
                amount=amount,
                percentage=percentage,
            ))

        shares.sort(key=lambda s: s.amount, reverse=True)
        return shares

    def monthly_history(self, limit: Optional[int] = None) -> list[MonthlyBalance]:
        """Balance of the most recent `limit` periods, oldest first."""
        if limit is None:
            limit = self._settings.history_months
        elif limit < 1:
            raise ValueError(f"History limit must be at least 1: {limit}")
        periods = self._store.document.periods
        keys = sorted(periods)[-limit:]

        history = []
        for key in keys:
            bucket = periods[key]
            income = sum_amounts(bucket.incomes)
            outgoing = sum_amounts(bucket.expenses) + sum_amounts(bucket.card_dues)
            history.append(MonthlyBalance(
                period=key,
                income=income,
                outgoing=outgoing,
                balance=income - outgoing,
            ))
        return history

    # -------------------------------------------------------------------------
    # Listing helpers
    # -------------------------------------------------------------------------

    def list_entries(self, kind: EntryKind, period: str) -> list[Entry]:
        """Entries of one list, ordered by date."""
        return sorted(self._bucket(period).entries(kind), key=lambda e: e.entry_date)

    def is_overdue(self, entry: Entry, today: Optional[date] = None) -> bool:
        return entry.entry_date < (today or self._store.today())

    def visible_periods(self, current_period: str) -> list[str]:
        """
        Periods worth offering in a period picker: those holding at least
        one entry, plus the current period.
        """
        periods = self._store.document.periods
        keys = {k for k, bucket in periods.items() if not bucket.is_empty}
        keys.add(current_period)
        return sorted(keys)
