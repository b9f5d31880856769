"""
Store Event Models

Every change to the snapshot store is published to subscribers as a
StoreEvent. The event carries the complete post-change state, so a
listener never has to read back from the store and can never observe
a half-applied mutation.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from stash.models.snapshot import Snapshot


class StoreEventType(str, Enum):
    """Types of change the store publishes."""
    # Lifecycle
    LOADED = "loaded"

    # Mutations
    SNAPSHOT_ADDED = "snapshot_added"
    SNAPSHOTS_IMPORTED = "snapshots_imported"
    SNAPSHOT_UPDATED = "snapshot_updated"
    SNAPSHOTS_DELETED = "snapshots_deleted"

    # Persistence outcome
    PERSISTED = "persisted"
    ERROR = "error"
    ERROR_DISMISSED = "error_dismissed"


class StoreEvent(BaseModel):
    """A single notification sent to store subscribers."""
    model_config = ConfigDict(frozen=True)

    event_type: StoreEventType
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    version: int = Field(
        ...,
        ge=0,
        description="Store version after the change"
    )
    snapshots: tuple[Snapshot, ...] = Field(
        default_factory=tuple,
        description="Full collection after the change, in storage order"
    )
    error_message: Optional[str] = None
    affected_ids: tuple[UUID, ...] = Field(default_factory=tuple)

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_type": self.event_type.value,
            "version": self.version,
            "snapshot_count": len(self.snapshots),
            "affected_ids": [str(i) for i in self.affected_ids],
            "error_message": self.error_message,
        }
