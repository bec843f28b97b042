"""
Ledger Store

Owns the single in-memory LedgerDocument and its persistence lifecycle.
Every other component mutates the document through this object and asks
it to persist afterwards.

Two persistence modes:

- persist(): immediate, synchronous write. Used after structural edits
  (entries, goals, types, deletions).
- persist_debounced(): coalesced write after a quiet interval. Used after
  high-frequency edits (note keystrokes, note toggles).

CRITICAL: A failed write never touches the in-memory document and never
raises into the caller. The document stays authoritative; the next
successful write carries every accumulated change.
"""

import json
from datetime import date
from typing import Any, Callable, Optional, Union
from uuid import UUID

from pydantic import ValidationError

from finledger.audit import AuditLogger
from finledger.config import get_settings
from finledger.config.settings import (
    LedgerSettings,
    PersistenceSettings,
    StorageSettings,
)
from finledger.models.audit import AuditEventType
from finledger.models.ledger import (
    PERIOD_KEY_PATTERN,
    TYPE_NAME_MAX_LENGTH,
    Entry,
    EntryKind,
    LedgerDocument,
    PeriodBucket,
)
from finledger.models.reports import ExportBundle
from finledger.periods import period_of, today_local, utcnow
from finledger.recurrence import materialize
from finledger.services.scheduling import AutosaveTimer, Debouncer, TimerLoop
from finledger.services.storage import KeyValueStorageInterface, StorageError


Confirm = Callable[[str], bool]

IMPORT_CONFIRM_MESSAGE = "Import this data? It will replace the current data."
RESET_CONFIRM_MESSAGES = (
    "WARNING: this will erase ALL your data. Continue?",
    "Are you sure? This cannot be undone.",
)


class LedgerStore:
    """
    The in-memory document plus its persistence lifecycle.

    Not thread-safe: all calls are expected from a single event-processing
    thread.
    """

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        document: Optional[LedgerDocument] = None,
        loop: Optional[TimerLoop] = None,
        audit_logger: Optional[AuditLogger] = None,
        storage_settings: Optional[StorageSettings] = None,
        persistence_settings: Optional[PersistenceSettings] = None,
        ledger_settings: Optional[LedgerSettings] = None,
        clock: Callable[[], date] = today_local,
    ):
        settings = get_settings()
        self._storage = storage
        self._storage_settings = storage_settings or settings.storage
        self._persistence_settings = persistence_settings or settings.persistence
        self._ledger_settings = ledger_settings or settings.ledger
        self._audit = audit_logger or AuditLogger()
        self._clock = clock
        self._document = document or LedgerDocument.with_defaults(
            types=self._ledger_settings.default_types,
        )
        self._debouncer: Optional[Debouncer] = None
        self._autosave: Optional[AutosaveTimer] = None
        if loop is not None:
            self.attach_loop(loop)

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def load(
        cls,
        storage: KeyValueStorageInterface,
        **kwargs: Any,
    ) -> "LedgerStore":
        """
        Load the persisted document, or start with defaults on first run.

        An unreadable blob is copied aside under "<document_key>-corrupt",
        logged, and replaced by a default document in memory.

        Raises:
            StorageError: If the backend itself cannot be read
        """
        store = cls(storage, **kwargs)
        key = store._storage_settings.document_key
        raw = storage.read(key)
        if raw is None:
            return store

        try:
            store._document = LedgerDocument.model_validate_json(raw)
        except ValidationError as e:
            store._audit.log_load_failed(str(e))
            try:
                storage.write(f"{key}-corrupt", raw)
            except StorageError as backup_error:
                store._audit.log_save_failed(str(backup_error))
        else:
            store._audit.log_simple(
                AuditEventType.DOCUMENT_LOADED,
                description=f"Loaded document with {len(store._document.periods)} periods",
                entity_type="document",
            )
        return store

    def attach_loop(self, loop: TimerLoop) -> None:
        """Enable debounced and periodic writes driven by `loop`."""
        if self._debouncer is not None:
            self._debouncer.cancel()
        if self._autosave is not None:
            self._autosave.stop()
        self._debouncer = Debouncer(
            loop,
            self._persistence_settings.debounce_seconds,
            self.persist,
        )
        self._autosave = AutosaveTimer(
            loop,
            self._persistence_settings.autosave_interval_seconds,
            self.autosave,
        )

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def document(self) -> LedgerDocument:
        return self._document

    @property
    def audit(self) -> AuditLogger:
        return self._audit

    @property
    def storage(self) -> KeyValueStorageInterface:
        return self._storage

    @property
    def storage_settings(self) -> StorageSettings:
        return self._storage_settings

    @property
    def ledger_settings(self) -> LedgerSettings:
        return self._ledger_settings

    def today(self) -> date:
        return self._clock()

    @property
    def has_pending_write(self) -> bool:
        return self._debouncer is not None and self._debouncer.pending

    # -------------------------------------------------------------------------
    # Periods and entries
    # -------------------------------------------------------------------------

    def ensure_period(self, key: str) -> PeriodBucket:
        """Return the bucket for `key`, creating an empty one if absent."""
        bucket = self._document.periods.get(key)
        if bucket is None:
            if not PERIOD_KEY_PATTERN.match(key):
                raise ValueError(f"Invalid period key: {key!r} (expected YYYY-MM)")
            bucket = PeriodBucket()
            self._document.periods[key] = bucket
        return bucket

    def get_period(self, key: str) -> Optional[PeriodBucket]:
        """Bucket for `key` or None; never creates one."""
        return self._document.periods.get(key)

    def add_entry(
        self,
        kind: EntryKind,
        entry: Entry,
        recurrence: int = 0,
    ) -> list[Entry]:
        """
        Store an entry (and its recurrence copies) and persist.

        Each entry lands in the bucket of its own date's period, whatever
        period the caller happens to be displaying.

        Returns:
            All stored entries, base entry first

        Raises:
            ValueError: If the entry id already exists or recurrence < 0
        """
        if self.contains_entry_id(entry.id):
            raise ValueError(f"Duplicate entry id: {entry.id}")
        if recurrence and not entry.recurring:
            entry.recurring = True

        entries = materialize(entry, recurrence)
        for item in entries:
            self.ensure_period(item.period).entries(kind).append(item)

        self.persist()

        self._audit.log_entry_added(
            entry_id=entry.id,
            kind=kind.value,
            period=entry.period,
            name=entry.name,
            amount=str(entry.amount),
        )
        if len(entries) > 1:
            self._audit.log_recurrence(
                base_id=entry.id,
                kind=kind.value,
                periods=[item.period for item in entries],
            )
        return entries

    def find_entry(
        self,
        kind: EntryKind,
        period_key: str,
        entry_id: UUID,
    ) -> Optional[Entry]:
        bucket = self.get_period(period_key)
        if bucket is None:
            return None
        for entry in bucket.entries(kind):
            if entry.id == entry_id:
                return entry
        return None

    def contains_entry_id(self, entry_id: UUID) -> bool:
        for bucket in self._document.periods.values():
            for kind in EntryKind:
                if any(e.id == entry_id for e in bucket.entries(kind)):
                    return True
        return False

    def remove_entry(
        self,
        kind: EntryKind,
        period_key: str,
        entry_id: UUID,
    ) -> bool:
        """
        Remove an entry by id. Removing an absent id is a no-op.

        Returns:
            True if an entry was removed
        """
        bucket = self.get_period(period_key)
        if bucket is None:
            return False

        entries = bucket.entries(kind)
        kept = [e for e in entries if e.id != entry_id]
        if len(kept) == len(entries):
            return False

        bucket.replace_entries(kind, kept)
        self.persist()
        self._audit.log_entry_removed(entry_id, kind.value, period_key)
        return True

    def update_entry(
        self,
        kind: EntryKind,
        period_key: str,
        entry_id: UUID,
        **changes: Any,
    ) -> Optional[Entry]:
        """
        Edit one entry in place.

        Only this entry changes; materialized siblings are independent.
        If the date moves to another month the entry moves to that bucket.
        Invalid changes are rejected (None is returned, nothing changes).
        """
        current = self.find_entry(kind, period_key, entry_id)
        if current is None:
            return None

        allowed = {"name", "amount", "entry_date", "category", "tags"}
        unknown = set(changes) - allowed
        if unknown:
            raise ValueError(f"Cannot update fields: {sorted(unknown)}")

        data = current.model_dump()
        data.update(changes)
        data["updated_at"] = utcnow()
        try:
            updated = Entry.model_validate(data)
        except ValidationError as e:
            self._audit.log_entry_rejected(
                kind.value,
                [{"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
                 for err in e.errors()],
            )
            return None

        entries = self.ensure_period(period_key).entries(kind)
        if updated.period == period_key:
            entries[entries.index(current)] = updated
        else:
            entries.remove(current)
            self.ensure_period(updated.period).entries(kind).append(updated)

        self.persist()
        return updated

    # -------------------------------------------------------------------------
    # Category list
    # -------------------------------------------------------------------------

    def add_type(self, name: str) -> bool:
        """
        Append a category name. Blank, overlong or already present names
        are ignored.

        Returns:
            True if the name was added
        """
        name = (name or "").strip()
        if not name or len(name) > TYPE_NAME_MAX_LENGTH:
            return False
        if name in self._document.types:
            return False
        self._document.types.append(name)
        self.persist()
        self._audit.log_simple(
            AuditEventType.TYPE_ADDED,
            description=f"Category added: {name}",
            details={"name": name},
        )
        return True

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def serialize(self, indent: Optional[int] = None) -> str:
        return self._document.model_dump_json(indent=indent)

    def persist(self) -> bool:
        """
        Write the whole document now.

        Any pending debounced write is cancelled, since this write already
        includes everything.

        Returns:
            True if the write succeeded
        """
        if self._debouncer is not None:
            self._debouncer.cancel()

        meta = self._document.meta
        previous_backup = meta.last_backup
        try:
            meta.last_backup = period_of(self._clock())
            payload = self.serialize()
            self._storage.write(self._storage_settings.document_key, payload)
        except Exception as e:
            meta.last_backup = previous_backup
            self._audit.log_save_failed(f"{type(e).__name__}: {e}")
            return False
        return True

    def persist_debounced(self) -> None:
        """
        Request a write after the quiet interval.

        Every request restarts the interval. Without an attached loop the
        write happens immediately.
        """
        if self._debouncer is None:
            self.persist()
        else:
            self._debouncer.trigger()

    def flush(self) -> bool:
        """Write pending debounced changes now. Returns True if there were any."""
        if self._debouncer is None:
            return False
        return self._debouncer.flush()

    def autosave(self) -> None:
        """Periodic backstop: flush whatever is still pending."""
        self.flush()

    def start_autosave(self) -> None:
        if self._autosave is not None:
            self._autosave.start()

    def stop_autosave(self) -> None:
        if self._autosave is not None:
            self._autosave.stop()

    def close(self) -> None:
        """Stop timers and write anything pending."""
        self.stop_autosave()
        self.flush()

    # -------------------------------------------------------------------------
    # Import / export / reset
    # -------------------------------------------------------------------------

    def import_document(
        self,
        raw: Union[str, bytes],
        confirm: Confirm,
    ) -> bool:
        """
        Merge an exported document into the current one.

        Shallow overwrite: each top-level section present in the import
        (periods, types, goals, notes, meta) replaces the current section
        whole. The merged result is validated before the user is asked to
        confirm. Malformed input, unknown sections and a declined
        confirmation all leave the current document untouched.

        Returns:
            True if the import was applied
        """
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError, TypeError) as e:
            self._audit.log_import_rejected("malformed JSON", str(e))
            return False

        if not isinstance(data, dict):
            self._audit.log_import_rejected("top level is not an object")
            return False

        unknown = sorted(set(data) - set(LedgerDocument.model_fields))
        if unknown:
            self._audit.log_import_rejected(
                f"{len(unknown)} unknown sections",
                details={"sections": unknown},
            )
            return False

        merged = self._document.model_dump(mode="json")
        merged.update(data)
        try:
            candidate = LedgerDocument.model_validate(merged)
        except ValidationError as e:
            self._audit.log_import_rejected("document does not match schema", str(e))
            return False

        if not confirm(IMPORT_CONFIRM_MESSAGE):
            self._audit.log_cancelled("import")
            return False

        self._document = candidate
        self.persist()
        self._audit.log_import_applied(sorted(data))
        return True

    def export_document(self, today: Optional[date] = None) -> ExportBundle:
        """Pretty-printed JSON of the whole document, named after the current period."""
        period = period_of(today or self._clock())
        prefix = self._ledger_settings.export_filename_prefix
        bundle = ExportBundle(
            filename=f"{prefix}-{period}.json",
            content=self.serialize(indent=2),
            period=period,
        )
        self._audit.log_simple(
            AuditEventType.EXPORT_CREATED,
            description=f"Export created: {bundle.filename}",
            entity_type="document",
        )
        return bundle

    def reset(self, confirm: Confirm) -> bool:
        """
        Erase the persisted document and onboarding flags.

        Asks for two confirmations in a row; declining either one aborts.
        On success the in-memory document starts over with defaults.

        Returns:
            True if the data was erased
        """
        for message in RESET_CONFIRM_MESSAGES:
            if not confirm(message):
                self._audit.log_cancelled("reset")
                return False

        if self._debouncer is not None:
            self._debouncer.cancel()

        keys = (
            self._storage_settings.document_key,
            self._storage_settings.onboarding_completed_key,
            self._storage_settings.onboarding_step_key,
        )
        try:
            for key in keys:
                self._storage.remove(key)
        except StorageError as e:
            self._audit.log_save_failed(f"reset: {e}")
            return False

        self._document = LedgerDocument.with_defaults(
            types=self._ledger_settings.default_types,
        )
        self._audit.log_simple(
            AuditEventType.RESET_PERFORMED,
            description="All ledger data erased",
            entity_type="document",
        )
        return True
