"""Tests for export, import and reset."""

import json
from datetime import date

import pytest

from finledger.models.audit import AuditEventType
from finledger.models.ledger import EntryKind
from finledger.services.storage import InMemoryStorage
from finledger.store import IMPORT_CONFIRM_MESSAGE, RESET_CONFIRM_MESSAGES

from conftest import ConfirmRecorder


class TestExport:
    """Tests for exporting the document."""

    def test_export_bundle(self, store, make_entry):
        store.add_entry(EntryKind.INCOME, make_entry())
        bundle = store.export_document()

        assert bundle.filename == "ledger-2024-02.json"
        assert bundle.media_type == "application/json"
        assert "\n  " in bundle.content
        data = json.loads(bundle.content)
        assert set(data) == {"periods", "types", "goals", "notes", "meta"}

    def test_export_named_after_given_day(self, store):
        assert store.export_document(date(2025, 11, 3)).filename == "ledger-2025-11.json"


class TestImport:
    """Tests for the confirmed, validated import."""

    def test_export_then_import_into_fresh_store(self, store, make_store, make_entry):
        entry = make_entry()
        store.add_entry(EntryKind.EXPENSE, entry)
        store.add_type("Pets")
        content = store.export_document().content

        target = make_store(InMemoryStorage())
        confirm = ConfirmRecorder(True)
        assert target.import_document(content, confirm) is True

        assert confirm.messages == [IMPORT_CONFIRM_MESSAGE]
        assert target.find_entry(EntryKind.EXPENSE, "2024-02", entry.id) is not None
        assert "Pets" in target.document.types
        assert target.storage.read(target.storage_settings.document_key) is not None
        assert target.audit.events_of_type(AuditEventType.IMPORT_APPLIED)

    @pytest.mark.parametrize("raw", [
        "{bad json",
        "[1, 2]",
        '"text"',
        '{"unknown": 1}',
        '{"periods": {"2024-13": {}}}',
        '{"goals": [{"description": "x", "target": "10", "accumulated": "20"}]}',
        json.dumps({"x" * 600: 1}),
    ])
    def test_invalid_input_is_rejected_before_confirmation(self, store, raw):
        before = store.serialize()
        confirm = ConfirmRecorder(True)

        assert store.import_document(raw, confirm) is False

        assert confirm.messages == []
        assert store.serialize() == before
        assert store.audit.events_of_type(AuditEventType.IMPORT_REJECTED)

    def test_unknown_section_names_go_to_details(self, store):
        long_key = "x" * 600
        assert store.import_document(json.dumps({long_key: 1}), ConfirmRecorder(True)) is False

        [event] = store.audit.events_of_type(AuditEventType.IMPORT_REJECTED)
        assert event.details["sections"] == [long_key]
        assert long_key not in event.description

    def test_declined_import_changes_nothing(self, store, make_entry):
        store.add_entry(EntryKind.INCOME, make_entry())
        before = store.serialize()

        assert store.import_document('{"types": ["A"]}', ConfirmRecorder(False)) is False
        assert store.serialize() == before

    def test_import_is_a_shallow_section_overwrite(self, store, make_entry):
        """Sections absent from the import are kept; present ones replaced whole."""
        entry = make_entry()
        store.add_entry(EntryKind.INCOME, entry)

        assert store.import_document('{"types": ["A", "B"]}', ConfirmRecorder(True)) is True

        assert store.document.types == ["A", "B"]
        assert store.find_entry(EntryKind.INCOME, "2024-02", entry.id) is not None

    def test_import_replaces_periods_whole(self, store, make_entry):
        store.add_entry(EntryKind.INCOME, make_entry(entry_date=date(2024, 1, 5)))
        store.import_document('{"periods": {"2024-06": {}}}', ConfirmRecorder(True))
        assert list(store.document.periods) == ["2024-06"]

    def test_import_clears_note_editors(self, app):
        note = app.notes.create_note()
        app.notes.input(note.id, "typing")

        assert app.import_data('{"notes": []}', ConfirmRecorder(True)) is True
        assert app.notes.active_note_id is None
        assert app.notes.notes == []


class TestReset:
    """Tests for the doubly confirmed reset."""

    def _seed(self, store, make_entry):
        store.add_entry(EntryKind.INCOME, make_entry())
        store.storage.write(store.storage_settings.onboarding_step_key, "2")
        store.storage.write(store.storage_settings.onboarding_completed_key, "true")

    @pytest.mark.parametrize("answers", [(False,), (True, False)])
    def test_declining_either_confirmation_aborts(self, store, make_entry, answers):
        self._seed(store, make_entry)
        keys = store.storage.keys()

        assert store.reset(ConfirmRecorder(*answers)) is False
        assert store.storage.keys() == keys
        assert store.get_period("2024-02") is not None

    def test_reset_erases_everything(self, store, make_entry, ledger_settings):
        self._seed(store, make_entry)
        confirm = ConfirmRecorder(True, True)

        assert store.reset(confirm) is True

        assert confirm.messages == list(RESET_CONFIRM_MESSAGES)
        assert store.storage.keys() == []
        assert store.document.periods == {}
        assert store.document.types == ledger_settings.default_types
        assert store.audit.events_of_type(AuditEventType.RESET_PERFORMED)

    def test_reset_then_reload_starts_fresh(self, store, make_store, make_entry):
        self._seed(store, make_entry)
        store.reset(ConfirmRecorder(True, True))

        reloaded = make_store(store.storage, load=True)
        assert reloaded.document.periods == {}
        assert reloaded.document.meta.last_backup is None

    def test_app_reset_returns_to_todays_period(self, app):
        app.add_income("Salary", "100", "2024-09-01")
        assert app.current_period == "2024-09"

        assert app.reset(ConfirmRecorder(True, True)) is True
        assert app.current_period == "2024-02"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
