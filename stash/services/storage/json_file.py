"""
JSON File Storage Implementation

DESIGN DECISION: A single JSON document in the app's private data
directory is the only persistent store because:
1. A personal log of snapshots is tiny (hundreds of records at most)
2. No database setup required
3. The file is trivially backed up or inspected

TRADEOFFS:
- Every write rewrites the whole document (fine at this scale)
- No versioning of the file format

Writes go to a temporary file in the same directory which is then
moved over the target with os.replace, so readers never see a
half-written document.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Sequence

import structlog
from pydantic import TypeAdapter, ValidationError

from stash.models.preferences import UserPreferences
from stash.models.snapshot import Snapshot
from stash.services.storage.interface import (
    LoadError,
    PersistenceError,
    PreferencesStorageInterface,
    SnapshotStorageInterface,
)


logger = structlog.get_logger(__name__)

_SNAPSHOT_LIST = TypeAdapter(list[Snapshot])


def snapshots_to_json(snapshots: Sequence[Snapshot]) -> bytes:
    """
    Serialize a collection to the on-disk format.

    A JSON array of {id, date, accounts: [{id, institution, amount, category}]}.
    Amounts are decimal strings, categories are display labels.
    """
    return _SNAPSHOT_LIST.dump_json(list(snapshots), indent=2)


def snapshots_from_json(data: bytes | str) -> list[Snapshot]:
    """Parse the on-disk format. Raises pydantic.ValidationError on bad input."""
    return _SNAPSHOT_LIST.validate_json(data)


def _atomic_write(path: Path, payload: bytes) -> None:
    """Write payload to path via a temp file in the same directory."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
    )
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(payload)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class JsonFileSnapshotStorage(SnapshotStorageInterface):
    """
    JSON file implementation of snapshot storage.

    A missing file is an empty collection, not an error.
    """

    def __init__(self, path: Optional[Path] = None):
        if path is None:
            from stash.config import get_settings
            path = get_settings().storage.snapshots_path
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def location(self) -> str:
        return str(self._path)

    def read_all(self) -> list[Snapshot]:
        """Read all snapshots from disk."""
        try:
            data = self._path.read_bytes()
        except FileNotFoundError:
            logger.info("snapshot_file_missing", path=str(self._path))
            return []
        except OSError as e:
            raise LoadError(f"Could not read {self._path}: {e}") from e

        try:
            snapshots = snapshots_from_json(data)
        except ValidationError as e:
            raise LoadError(
                f"{self._path} is not a valid snapshot document "
                f"({e.error_count()} problems)"
            ) from e

        logger.debug("snapshot_file_read", path=str(self._path), count=len(snapshots))
        return snapshots

    def write_all(self, snapshots: Sequence[Snapshot]) -> None:
        """Replace the document on disk with `snapshots`."""
        try:
            _atomic_write(self._path, snapshots_to_json(snapshots))
        except OSError as e:
            raise PersistenceError(f"Could not write {self._path}: {e}") from e

        logger.debug("snapshot_file_written", path=str(self._path), count=len(snapshots))


class JsonFilePreferencesStorage(PreferencesStorageInterface):
    """
    Key/value preference document.

    Values that fail validation fall back to their defaults one key at a
    time, so a single bad entry doesn't wipe the rest.
    """

    def __init__(self, path: Optional[Path] = None):
        if path is None:
            from stash.config import get_settings
            path = get_settings().storage.preferences_path
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def read(self) -> UserPreferences:
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return UserPreferences()
        except (OSError, ValueError) as e:
            logger.warning("preferences_unreadable", path=str(self._path), error=str(e))
            return UserPreferences()

        if not isinstance(raw, dict):
            logger.warning("preferences_unreadable", path=str(self._path), error="not an object")
            return UserPreferences()

        values = {}
        for key in UserPreferences.model_fields:
            if key not in raw:
                continue
            try:
                UserPreferences(**{key: raw[key]})
            except ValidationError:
                logger.warning("preference_value_ignored", key=key, value=raw[key])
                continue
            values[key] = raw[key]

        return UserPreferences(**values)

    def write(self, preferences: UserPreferences) -> None:
        payload = json.dumps(preferences.model_dump(mode="json"), indent=2, ensure_ascii=False)
        try:
            _atomic_write(self._path, payload.encode("utf-8"))
        except OSError as e:
            raise PersistenceError(f"Could not write {self._path}: {e}") from e
