"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the JSON file as the only real backend today
2. Use in-memory storage for testing
3. Keep the snapshot store decoupled from the filesystem

The interface is intentionally tiny. The unit of persistence is the
whole collection: every write replaces the entire document, every
read returns the entire document. There are no partial updates.
"""

from abc import ABC, abstractmethod
from typing import Sequence

from stash.models.preferences import UserPreferences
from stash.models.snapshot import Snapshot


class SnapshotStorageInterface(ABC):
    """
    Abstract interface for snapshot persistence.

    Implementations are called from the store's background writer,
    never from the UI thread.
    """

    @abstractmethod
    def read_all(self) -> list[Snapshot]:
        """
        Read the full snapshot collection.

        Returns:
            All stored snapshots, in stored order.
            An empty list if nothing has been stored yet.

        Raises:
            LoadError: If the document exists but can't be read or parsed
        """
        pass

    @abstractmethod
    def write_all(self, snapshots: Sequence[Snapshot]) -> None:
        """
        Replace the stored collection with `snapshots`.

        Raises:
            PersistenceError: If the write fails
        """
        pass

    @property
    def location(self) -> str:
        """Human-readable description of where data lives."""
        return self.__class__.__name__


class PreferencesStorageInterface(ABC):
    """Abstract interface for the key/value preference document."""

    @abstractmethod
    def read(self) -> UserPreferences:
        """Read preferences, falling back to defaults if none are stored."""
        pass

    @abstractmethod
    def write(self, preferences: UserPreferences) -> None:
        """
        Persist preferences.

        Raises:
            PersistenceError: If the write fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""

    def __init__(self, duplicate_ids, message: str = ""):
        self.duplicate_ids = tuple(duplicate_ids)
        super().__init__(
            message
            or f"Snapshot id already exists: {', '.join(str(i) for i in self.duplicate_ids)}"
        )


class LoadError(StorageError):
    """Stored data exists but could not be read or parsed."""
    pass


class PersistenceError(StorageError):
    """Data could not be written."""
    pass
