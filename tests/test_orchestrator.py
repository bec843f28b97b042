"""Tests for the application facade and factory."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from finledger.models.audit import AuditEventType
from finledger.models.ledger import EntryKind, EntryTag
from finledger.models.reports import Trend
from finledger.orchestrator import create_app
from finledger.services.storage import InMemoryStorage, JsonFileStorage

from conftest import ConfirmRecorder


class TestAddingEntries:
    """Tests for the add-entry actions."""

    def test_starts_on_todays_period(self, app):
        assert app.current_period == "2024-02"
        assert app.store.get_period("2024-02") is not None

    def test_add_income_stamps_category_and_tag(self, app):
        [income] = app.add_income("Salary", "3000", "2024-02-05")
        assert income.category == "Income"
        assert income.tags == [EntryTag.CONFIRMED.value]
        assert income.amount == Decimal("3000.00")

    def test_expense_and_card_due_are_pending(self, app):
        [expense] = app.add_expense("Rent", "1200", "2024-02-10", "Housing")
        [due] = app.add_card_due("Visa", "450", "2024-02-15")
        assert expense.tags == [EntryTag.PENDING.value]
        assert due.tags == [EntryTag.PENDING.value]
        assert expense.category == "Housing"

    def test_adding_switches_to_the_entry_period(self, app):
        app.add_expense("Trip", "800", "2024-07-03", "Leisure")
        assert app.current_period == "2024-07"
        assert [e.name for e in app.entries(EntryKind.EXPENSE)] == ["Trip"]

    def test_recurring_expense(self, app):
        entries = app.add_expense("Gym", "49.90", "2024-02-05", "Health", recurrence="2")
        assert [e.period for e in entries] == ["2024-02", "2024-03", "2024-04"]
        assert all(e.recurring for e in entries)

    def test_rejected_submission_creates_nothing(self, app):
        assert app.add_expense("Rent", "abc", "2024-02-10", "Housing") == []
        assert app.add_expense("Rent", "100", "2024-02-10", "") == []
        assert app.store.get_period("2024-02").is_empty
        assert len(app.store.audit.events_of_type(AuditEventType.ENTRY_REJECTED)) == 2

    def test_add_type(self, app):
        assert app.add_type("Pets") is True
        assert app.add_expense("Vet", "90", "2024-02-10", "Pets")


class TestDeletingEntries:
    """Tests for confirmed entry deletion."""

    def test_declined_delete_keeps_entry(self, app):
        [entry] = app.add_card_due("Visa", "450", "2024-02-15")
        confirm = ConfirmRecorder(False)

        assert app.delete_entry(EntryKind.CARD_DUE, entry.id, confirm) is False
        assert confirm.messages == ["Delete this card due?"]
        assert app.entries(EntryKind.CARD_DUE) == [entry]

    def test_confirmed_delete(self, app):
        [entry] = app.add_income("Salary", "3000", "2024-02-05")
        assert app.delete_entry(EntryKind.INCOME, entry.id, ConfirmRecorder(True)) is True
        assert app.entries(EntryKind.INCOME) == []

    def test_unknown_entry_is_not_confirmed(self, app):
        confirm = ConfirmRecorder(True)
        assert app.delete_entry(EntryKind.EXPENSE, uuid4(), confirm) is False
        assert confirm.messages == []

    def test_delete_from_another_period(self, app):
        entries = app.add_expense("Gym", "50", "2024-02-05", "Health", recurrence=1)
        app.select_period("2024-02")
        assert app.delete_entry(
            EntryKind.EXPENSE, entries[1].id, ConfirmRecorder(True), period="2024-03",
        )
        assert app.store.get_period("2024-03").expenses == []
        assert len(app.entries(EntryKind.EXPENSE)) == 1


class TestViews:
    """Tests for dashboard and reports."""

    def test_dashboard(self, app):
        app.add_income("Salary", "3000", "2024-02-05")
        app.add_expense("Rent", "1200", "2024-02-10", "Housing")
        app.add_card_due("Visa", "450", "2024-02-03")
        app.select_period("2024-02")

        summary = app.dashboard(today=date(2024, 2, 1))

        assert summary.totals.remaining == Decimal("1350.00")
        assert summary.totals.trend == Trend.EXCELLENT
        assert summary.next_due.name == "Visa"

    def test_reports(self, app):
        app.add_income("Salary", "1000", "2024-02-05")
        app.add_expense("Rent", "600", "2024-02-10", "Housing")
        app.add_expense("Food", "200", "2024-02-11", "Food")

        assert [s.category for s in app.category_report()] == ["Housing", "Food"]
        assert app.history_report()[-1].balance == Decimal("200.00")
        assert app.periods() == ["2024-02"]

    def test_select_period_validates_key(self, app):
        with pytest.raises(ValueError):
            app.select_period("2024/02")

    def test_viewing_an_empty_period_creates_no_bucket(self, app):
        app.select_period("2030-01")
        app.dashboard()
        assert app.store.get_period("2030-01") is None


class TestCreateApp:
    """Tests for the factory."""

    def test_create_app_with_storage_and_loop(self, loop):
        storage = InMemoryStorage()
        app = create_app(storage=storage, loop=loop)

        note = app.notes.create_note()
        app.notes.input(note.id, "hi")
        assert storage.write_count == 0
        loop.advance(1.0)
        assert storage.write_count == 1

    def test_create_app_reloads_previous_session(self, tmp_path):
        app = create_app(data_dir=tmp_path)
        [entry] = app.add_income("Salary", "3000", "2024-02-05")

        assert isinstance(app.store.storage, JsonFileStorage)
        reopened = create_app(data_dir=tmp_path)
        assert reopened.store.find_entry(EntryKind.INCOME, "2024-02", entry.id) is not None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
