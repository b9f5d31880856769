"""
In-Memory Storage

Keeps the serialized document in memory instead of on disk.
Used by tests and when the app runs without a writable data directory.
"""

from typing import Optional, Sequence

from pydantic import ValidationError

from stash.models.preferences import UserPreferences
from stash.models.snapshot import Snapshot
from stash.services.storage.interface import (
    LoadError,
    PreferencesStorageInterface,
    SnapshotStorageInterface,
)
from stash.services.storage.json_file import snapshots_from_json, snapshots_to_json


class InMemorySnapshotStorage(SnapshotStorageInterface):
    """
    Snapshot storage backed by a bytes buffer.

    The collection is round-tripped through the real on-disk format,
    so what you read back is exactly what the JSON file would hold.
    """

    def __init__(self, initial: Optional[Sequence[Snapshot]] = None):
        self._document: Optional[bytes] = (
            snapshots_to_json(initial) if initial is not None else None
        )
        self.write_count = 0

    @property
    def location(self) -> str:
        return "memory"

    @property
    def document(self) -> Optional[bytes]:
        """Raw serialized document, None if nothing was written."""
        return self._document

    def read_all(self) -> list[Snapshot]:
        if self._document is None:
            return []
        try:
            return snapshots_from_json(self._document)
        except ValidationError as e:
            raise LoadError(f"Stored document is invalid: {e}") from e

    def write_all(self, snapshots: Sequence[Snapshot]) -> None:
        self._document = snapshots_to_json(snapshots)
        self.write_count += 1


class InMemoryPreferencesStorage(PreferencesStorageInterface):
    """Preference storage that lives for the process only."""

    def __init__(self, initial: Optional[UserPreferences] = None):
        self._preferences = initial or UserPreferences()

    def read(self) -> UserPreferences:
        return self._preferences.model_copy()

    def write(self, preferences: UserPreferences) -> None:
        self._preferences = preferences.model_copy()
