"""
Ledger Application Orchestrator

Ties the components together behind one object a front end can drive:

    user action → validate → mutate store (recurrence / goals / notes)
                → persist (immediate or debounced)
                → aggregator recomputes views on demand

The orchestrator also owns the "current period": the month whose lists
and dashboard are being shown. Adding an entry switches the current
period to the entry's own month.

Destructive actions take a `confirm(message) -> bool` callback. Nothing
is deleted unless it returns True.
"""

from datetime import date
from pathlib import Path
from typing import Any, Optional, Union
from uuid import UUID

from finledger.audit import AuditLogger
from finledger.goals import GoalTracker
from finledger.models.ledger import Entry, EntryKind, EntryTag, Goal
from finledger.models.reports import (
    CategoryShare,
    DashboardSummary,
    ExportBundle,
    MonthlyBalance,
)
from finledger.notes import NoteEditCoordinator
from finledger.onboarding import OnboardingAction, OnboardingTracker
from finledger.periods import period_of
from finledger.reports import LedgerAggregator
from finledger.services.scheduling import TimerLoop
from finledger.services.storage import (
    JsonFileStorage,
    KeyValueStorageInterface,
    StorageError,
)
from finledger.store import PERIOD_KEY_PATTERN, Confirm, LedgerStore
from finledger.validation import EntryValidator


_DELETE_MESSAGES = {
    EntryKind.INCOME: "Delete this income?",
    EntryKind.EXPENSE: "Delete this expense?",
    EntryKind.CARD_DUE: "Delete this card due?",
}

_ONBOARDING_ACTIONS = {
    EntryKind.INCOME: OnboardingAction.INCOME_ADDED,
    EntryKind.EXPENSE: OnboardingAction.EXPENSE_ADDED,
}


class LedgerApp:
    """
    Application facade over the ledger.

    Every front-end action maps to one method here.
    """

    def __init__(
        self,
        store: LedgerStore,
        validator: Optional[EntryValidator] = None,
        onboarding: Optional[OnboardingTracker] = None,
    ):
        self._store = store
        self._validator = validator or EntryValidator(store.ledger_settings)
        self._aggregator = LedgerAggregator(store)
        self._goals = GoalTracker(store)
        self._notes = NoteEditCoordinator(store)
        self._onboarding = onboarding or OnboardingTracker(
            store.storage,
            store.storage_settings,
        )
        self.current_period = period_of(store.today())
        store.ensure_period(self.current_period)

    @property
    def store(self) -> LedgerStore:
        return self._store

    @property
    def aggregator(self) -> LedgerAggregator:
        return self._aggregator

    @property
    def goals(self) -> GoalTracker:
        return self._goals

    @property
    def notes(self) -> NoteEditCoordinator:
        return self._notes

    @property
    def onboarding(self) -> OnboardingTracker:
        return self._onboarding

    @property
    def validator(self) -> EntryValidator:
        return self._validator

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """Start the periodic autosave backstop."""
        self._store.start_autosave()

    def shutdown(self) -> None:
        """Stop timers and write anything still pending."""
        self._store.close()

    def select_period(self, key: str) -> None:
        if not PERIOD_KEY_PATTERN.match(key):
            raise ValueError(f"Invalid period key: {key!r} (expected YYYY-MM)")
        self.current_period = key

    # -------------------------------------------------------------------------
    # Entries
    # -------------------------------------------------------------------------

    def add_income(
        self,
        name: Any,
        amount: Any,
        entry_date: Any,
        recurrence: Any = 0,
    ) -> list[Entry]:
        """Record an income (and its monthly repeats). [] if rejected."""
        return self._add(EntryKind.INCOME, name, amount, entry_date, None, recurrence)

    def add_expense(
        self,
        name: Any,
        amount: Any,
        entry_date: Any,
        category: Any,
        recurrence: Any = 0,
    ) -> list[Entry]:
        """Record an expense (and its monthly repeats). [] if rejected."""
        return self._add(EntryKind.EXPENSE, name, amount, entry_date, category, recurrence)

    def add_card_due(
        self,
        name: Any,
        amount: Any,
        due_date: Any,
        recurrence: Any = 0,
    ) -> list[Entry]:
        """Record a credit-card due. [] if rejected."""
        return self._add(EntryKind.CARD_DUE, name, amount, due_date, None, recurrence)

    def _add(
        self,
        kind: EntryKind,
        name: Any,
        amount: Any,
        entry_date: Any,
        category: Any,
        recurrence: Any,
    ) -> list[Entry]:
        result = self._validator.validate(
            kind,
            name=name,
            amount=amount,
            entry_date=entry_date,
            category=category,
            recurrence=recurrence,
            known_types=self._store.document.types,
        )
        if not result.is_valid:
            self._store.audit.log_entry_rejected(
                kind.value,
                [
                    {"field": i.field, "type": i.issue_type, "message": i.message}
                    for i in result.issues
                ],
            )
            return []

        if kind == EntryKind.INCOME:
            category = self._store.ledger_settings.income_category
            tags = [EntryTag.CONFIRMED.value]
        else:
            category = result.category
            tags = [EntryTag.PENDING.value]

        entry = Entry(
            name=result.name,
            amount=result.amount,
            entry_date=result.entry_date,
            recurring=result.recurrence > 0,
            category=category,
            tags=tags,
        )
        entries = self._store.add_entry(kind, entry, recurrence=result.recurrence)
        self.current_period = entry.period

        if kind in _ONBOARDING_ACTIONS:
            self._record_onboarding(_ONBOARDING_ACTIONS[kind])
        return entries

    def delete_entry(
        self,
        kind: EntryKind,
        entry_id: UUID,
        confirm: Confirm,
        period: Optional[str] = None,
    ) -> bool:
        """
        Delete one entry from `period` (default: the current period)
        after confirmation. Deleting an unknown id is a no-op.
        """
        period = period or self.current_period
        if self._store.find_entry(kind, period, entry_id) is None:
            return False
        if not confirm(_DELETE_MESSAGES[kind]):
            self._store.audit.log_cancelled(f"delete {kind.value}")
            return False
        return self._store.remove_entry(kind, period, entry_id)

    def add_type(self, name: str) -> bool:
        return self._store.add_type(name)

    # -------------------------------------------------------------------------
    # Goals
    # -------------------------------------------------------------------------

    def add_goal(self, description: Any, target: Any) -> Optional[Goal]:
        goal = self._goals.add_goal(description, target)
        if goal is not None:
            self._record_onboarding(OnboardingAction.GOAL_ADDED)
        return goal

    def _record_onboarding(self, action: OnboardingAction) -> None:
        try:
            self._onboarding.record(action)
        except StorageError as e:
            self._store.audit.log_save_failed(f"onboarding: {e}")

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    def dashboard(self, today: Optional[date] = None) -> DashboardSummary:
        return DashboardSummary(
            totals=self._aggregator.period_totals(self.current_period),
            next_due=self._aggregator.next_due(self.current_period, today),
        )

    def category_report(self) -> list[CategoryShare]:
        return self._aggregator.category_breakdown(self.current_period)

    def history_report(self, limit: Optional[int] = None) -> list[MonthlyBalance]:
        return self._aggregator.monthly_history(limit)

    def entries(self, kind: EntryKind) -> list[Entry]:
        """Entries of the current period, ordered by date."""
        return self._aggregator.list_entries(kind, self.current_period)

    def periods(self) -> list[str]:
        return self._aggregator.visible_periods(self.current_period)

    # -------------------------------------------------------------------------
    # Import / export / reset
    # -------------------------------------------------------------------------

    def export_data(self, today: Optional[date] = None) -> ExportBundle:
        return self._store.export_document(today)

    def import_data(self, raw: Union[str, bytes], confirm: Confirm) -> bool:
        imported = self._store.import_document(raw, confirm)
        if imported:
            self._notes.discard_editors()
        return imported

    def reset(self, confirm: Confirm) -> bool:
        erased = self._store.reset(confirm)
        if erased:
            self._notes.discard_editors()
            self.current_period = period_of(self._store.today())
        return erased


def create_app(
    data_dir: Optional[Path] = None,
    loop: Optional[TimerLoop] = None,
    storage: Optional[KeyValueStorageInterface] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> LedgerApp:
    """
    Factory function to create a ready-to-use application.

    Args:
        data_dir: Directory for the JSON file storage (settings default if None)
        loop: Event loop driving debounced and periodic writes.
              Without one, debounced writes happen immediately.
        storage: Storage backend; overrides `data_dir`
        audit_logger: Shared audit logger

    Returns:
        LedgerApp with the persisted document loaded
    """
    storage = storage or JsonFileStorage(data_dir=data_dir)
    store = LedgerStore.load(
        storage,
        loop=loop,
        audit_logger=audit_logger,
    )
    return LedgerApp(store)
