"""Shared fixtures for the Stash test suite."""

import threading
from datetime import date
from decimal import Decimal
from typing import Sequence

import pytest

from stash.config import get_settings
from stash.models.snapshot import AccountBalance, AccountCategory, Snapshot
from stash.services.storage import (
    InMemorySnapshotStorage,
    PersistenceError,
    SnapshotStorageInterface,
)
from stash.store import SnapshotStore


class FailingSnapshotStorage(SnapshotStorageInterface):
    """Storage whose writes fail until told otherwise."""

    def __init__(self):
        self.fail_writes = True
        self.written: list[tuple[Snapshot, ...]] = []

    def read_all(self) -> list[Snapshot]:
        return []

    def write_all(self, snapshots: Sequence[Snapshot]) -> None:
        if self.fail_writes:
            raise PersistenceError("disk full")
        self.written.append(tuple(snapshots))


class GatedSnapshotStorage(InMemorySnapshotStorage):
    """In-memory storage whose writes block until the gate opens."""

    def __init__(self):
        super().__init__()
        self.gate = threading.Event()
        self.history: list[tuple[Snapshot, ...]] = []

    def write_all(self, snapshots: Sequence[Snapshot]) -> None:
        self.gate.wait(timeout=5)
        self.history.append(tuple(snapshots))
        super().write_all(snapshots)


def make_snapshot(day: date, *accounts: tuple) -> Snapshot:
    """Build a snapshot from (institution, amount, category) tuples."""
    return Snapshot(
        date=day,
        accounts=[
            AccountBalance(
                institution=institution,
                amount=Decimal(str(amount)),
                category=category,
            )
            for institution, amount, category in accounts
        ],
    )


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point the data directory at a temp dir and drop cached settings."""
    monkeypatch.setenv("STASH_STORAGE_DATA_DIR", str(tmp_path / "data"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def memory_storage():
    return InMemorySnapshotStorage()


@pytest.fixture
def store(memory_storage):
    store = SnapshotStore(memory_storage)
    yield store
    store.close()


@pytest.fixture
def jan_snapshot():
    return make_snapshot(
        date(2024, 1, 1),
        ("Bank", 100, AccountCategory.SAVINGS),
    )


@pytest.fixture
def feb_snapshot():
    return make_snapshot(
        date(2024, 2, 1),
        ("Bank", 150, AccountCategory.SAVINGS),
        ("Coinbase", 50, AccountCategory.CRYPTO),
    )


@pytest.fixture
def snapshot_factory():
    return make_snapshot


@pytest.fixture
def failing_storage():
    return FailingSnapshotStorage()


@pytest.fixture
def gated_storage():
    storage = GatedSnapshotStorage()
    yield storage
    storage.gate.set()
