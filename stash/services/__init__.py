"""Services package."""

from stash.services.storage import (
    DuplicateError,
    InMemoryPreferencesStorage,
    InMemorySnapshotStorage,
    JsonFilePreferencesStorage,
    JsonFileSnapshotStorage,
    LoadError,
    NotFoundError,
    PersistenceError,
    PreferencesStorageInterface,
    SnapshotStorageInterface,
    StorageError,
)
from stash.services.formatting import format_currency
from stash.services.reminders import (
    LocalReminderScheduler,
    ReminderPlan,
    ReminderScheduler,
)
from stash.services.preferences import PreferencesService

__all__ = [
    # Storage services
    "DuplicateError",
    "InMemoryPreferencesStorage",
    "InMemorySnapshotStorage",
    "JsonFilePreferencesStorage",
    "JsonFileSnapshotStorage",
    "LoadError",
    "NotFoundError",
    "PersistenceError",
    "PreferencesStorageInterface",
    "SnapshotStorageInterface",
    "StorageError",
    # Formatting
    "format_currency",
    # Reminders
    "LocalReminderScheduler",
    "ReminderPlan",
    "ReminderScheduler",
    # Preferences
    "PreferencesService",
]
