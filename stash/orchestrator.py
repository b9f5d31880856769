"""
Main Orchestrator for Stash

This module ties together all the components and defines the
end-to-end flows for:
1. Recording a snapshot (form -> validate rows -> add)
2. Editing a snapshot (load into form -> edit -> full replace by id)
3. Deleting snapshots (by id, never by list position)
4. Importing a CSV export (parse -> batch add)

DESIGN DECISION: The UI never talks to storage directly. Every change
goes through the SnapshotStore so the in-memory collection, the file
on disk and the charts stay consistent.
"""

import datetime as dt
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Iterable, NamedTuple, Optional, Union
from uuid import UUID

import structlog
from pydantic import BaseModel, Field

from stash.aggregation import ChartDataService
from stash.config import get_settings
from stash.importer import ImportResult, decode_csv_bytes, parse_csv, read_csv_file
from stash.log import configure_logging
from stash.models.snapshot import AccountBalance, AccountCategory, Snapshot
from stash.services.preferences import PreferencesService
from stash.services.reminders import LocalReminderScheduler, ReminderScheduler
from stash.services.storage import (
    InMemoryPreferencesStorage,
    InMemorySnapshotStorage,
    JsonFilePreferencesStorage,
    JsonFileSnapshotStorage,
    NotFoundError,
    PreferencesStorageInterface,
    SnapshotStorageInterface,
)
from stash.store import SnapshotStore


logger = structlog.get_logger(__name__)


def parse_amount(text: Union[str, float, int, Decimal, None]) -> Optional[Decimal]:
    """Parse a user-entered amount. None if it isn't a finite number."""
    if text is None:
        return None
    try:
        amount = Decimal(str(text).strip())
    except (InvalidOperation, ValueError):
        return None
    return amount if amount.is_finite() else None


class SnapshotForm(BaseModel):
    """
    Editable state behind the add/edit snapshot forms.

    A form created from an existing snapshot keeps its id, so saving it
    replaces that snapshot instead of adding a new one.
    """

    snapshot_id: Optional[UUID] = None
    date: dt.date = Field(default_factory=dt.date.today)
    accounts: list[AccountBalance] = Field(default_factory=list)

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> "SnapshotForm":
        return cls(
            snapshot_id=snapshot.id,
            date=snapshot.date,
            accounts=[account.model_copy() for account in snapshot.accounts],
        )

    @property
    def is_editing(self) -> bool:
        return self.snapshot_id is not None

    @property
    def total(self) -> Decimal:
        return sum((account.amount for account in self.accounts), Decimal("0"))

    def add_account(
        self,
        institution: str,
        amount: Union[str, float, Decimal],
        category: AccountCategory = AccountCategory.SAVINGS,
    ) -> bool:
        """
        Add an account row.

        The row is only added if the institution is non-empty and the
        amount parses as a number.

        Returns:
            True if the row was added
        """
        parsed = parse_amount(amount)
        if not institution or not institution.strip() or parsed is None:
            return False
        self.accounts.append(AccountBalance(
            institution=institution,
            amount=parsed,
            category=AccountCategory(category),
        ))
        return True

    def add_blank_account(self) -> AccountBalance:
        """Append an empty row for in-place editing."""
        account = AccountBalance(institution="", amount=Decimal("0"))
        self.accounts.append(account)
        return account

    def update_account(
        self,
        index: int,
        institution: Optional[str] = None,
        amount: Union[str, float, Decimal, None] = None,
        category: Optional[AccountCategory] = None,
    ) -> bool:
        """
        Edit one row in place, keeping its id.

        An amount that doesn't parse leaves the stored amount unchanged.
        """
        if not 0 <= index < len(self.accounts):
            return False
        current = self.accounts[index]
        changes: dict = {}
        if institution is not None:
            changes["institution"] = institution.strip()
        if amount is not None:
            parsed = parse_amount(amount)
            if parsed is not None:
                changes["amount"] = parsed
        if category is not None:
            changes["category"] = AccountCategory(category)
        # Rebuilt rather than model_copy(update=...) so the row is validated
        self.accounts[index] = AccountBalance.model_validate({**current.model_dump(), **changes})
        return True

    def remove_accounts(self, indexes: Iterable[int]) -> None:
        drop = set(indexes)
        self.accounts = [a for i, a in enumerate(self.accounts) if i not in drop]

    def build(self) -> Snapshot:
        """Turn the form into a Snapshot (new id unless editing)."""
        fields = {
            "date": self.date,
            "accounts": [account.model_copy() for account in self.accounts],
        }
        if self.snapshot_id is not None:
            fields["id"] = self.snapshot_id
        return Snapshot(**fields)


class SnapshotEditFlow:
    """
    Orchestrates manual snapshot entry, edits and deletions.

    Deletion is always by id. The list the user sees is sorted by
    date, the store is not, so list positions are never passed through.
    """

    def __init__(self, store: SnapshotStore):
        self._store = store

    def new_form(self, date: Optional[dt.date] = None) -> SnapshotForm:
        return SnapshotForm(date=date or dt.date.today())

    def edit_form(self, snapshot_id: UUID) -> Optional[SnapshotForm]:
        snapshot = self._store.get(snapshot_id)
        if snapshot is None:
            return None
        return SnapshotForm.from_snapshot(snapshot)

    def save(self, form: SnapshotForm) -> Snapshot:
        """
        Save a form: add for new snapshots, full replace for edits.

        Raises:
            DuplicateError: If a new snapshot's id already exists
            NotFoundError: If the edited snapshot was deleted meanwhile
        """
        snapshot = form.build()
        if form.is_editing:
            if not self._store.update(snapshot):
                logger.warning("edited_snapshot_missing", snapshot_id=str(snapshot.id))
                raise NotFoundError(f"Snapshot {snapshot.id} no longer exists")
        else:
            self._store.add(snapshot)
        return snapshot

    def delete(self, snapshot_ids: Iterable[UUID]) -> int:
        return self._store.delete(snapshot_ids)


class ImportFlow:
    """Orchestrates CSV import into the store."""

    def __init__(self, store: SnapshotStore):
        self._store = store

    def import_text(self, text: str) -> ImportResult:
        """Parse CSV text and add the resulting snapshots in one batch."""
        result = parse_csv(text)
        self._store.add_many(result.snapshots)
        logger.info(
            "csv_imported",
            snapshots=result.snapshot_count,
            imported_rows=result.imported_rows,
            skipped_rows=result.skipped_rows,
        )
        return result

    def import_bytes(self, data: bytes) -> ImportResult:
        """
        Import an uploaded file's content.

        Raises:
            CSVImportError: If the content isn't UTF-8 text
        """
        return self.import_text(decode_csv_bytes(data))

    def import_file(self, path: Union[str, Path]) -> ImportResult:
        """
        Import a CSV file from disk.

        Raises:
            CSVImportError: If the file can't be read
        """
        return self.import_text(read_csv_file(path))


class AppComponents(NamedTuple):
    store: SnapshotStore
    charts: ChartDataService
    preferences: PreferencesService
    edit_flow: SnapshotEditFlow
    import_flow: ImportFlow


def create_app_components(
    use_storage: bool = True,
    snapshot_storage: Optional[SnapshotStorageInterface] = None,
    preferences_storage: Optional[PreferencesStorageInterface] = None,
    scheduler: Optional[ReminderScheduler] = None,
    load: bool = True,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to use the JSON files in the data directory.
                     Set to False to keep everything in memory.
        snapshot_storage: Override the snapshot backend
        preferences_storage: Override the preferences backend
        scheduler: Override the reminder scheduler
        load: Start loading stored snapshots immediately

    Returns:
        AppComponents
    """
    configure_logging()
    settings = get_settings()

    if snapshot_storage is None or preferences_storage is None:
        if use_storage:
            try:
                storage_settings = settings.storage
                snapshot_storage = snapshot_storage or JsonFileSnapshotStorage(
                    storage_settings.snapshots_path
                )
                preferences_storage = preferences_storage or JsonFilePreferencesStorage(
                    storage_settings.preferences_path
                )
            except Exception as e:
                # Storage not configured - continue in memory
                logger.warning("storage_not_configured", error=str(e))

        snapshot_storage = snapshot_storage or InMemorySnapshotStorage()
        preferences_storage = preferences_storage or InMemoryPreferencesStorage()

    scheduler = scheduler or LocalReminderScheduler()
    if not scheduler.request_permission():
        logger.warning("reminder_permission_denied")

    store = SnapshotStore(snapshot_storage)
    preferences = PreferencesService(
        preferences_storage,
        scheduler=scheduler,
        default_currency=settings.app.default_currency_symbol,
    )
    preferences.apply_reminders()

    if load:
        store.load()

    logger.info("app_components_created", location=snapshot_storage.location)

    return AppComponents(
        store=store,
        charts=ChartDataService(store),
        preferences=preferences,
        edit_flow=SnapshotEditFlow(store),
        import_flow=ImportFlow(store),
    )
