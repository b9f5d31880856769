"""
Data Models Package

This package contains all Pydantic models used in Stash.
All data flowing through the system must conform to these schemas.
"""

from stash.models.snapshot import (
    AccountBalance,
    AccountCategory,
    Snapshot,
    sort_by_date,
)
from stash.models.chart import (
    NO_DATA,
    OVERALL_TOTAL,
    CategoryPoint,
    MonthlyCategoryTotal,
)
from stash.models.events import (
    StoreEvent,
    StoreEventType,
)
from stash.models.preferences import (
    DEFAULT_CURRENCY,
    SUPPORTED_CURRENCIES,
    ReminderFrequency,
    UserPreferences,
)

__all__ = [
    # Snapshot models
    "AccountBalance",
    "AccountCategory",
    "Snapshot",
    "sort_by_date",
    # Chart models
    "NO_DATA",
    "OVERALL_TOTAL",
    "CategoryPoint",
    "MonthlyCategoryTotal",
    # Store events
    "StoreEvent",
    "StoreEventType",
    # Preferences
    "DEFAULT_CURRENCY",
    "SUPPORTED_CURRENCIES",
    "ReminderFrequency",
    "UserPreferences",
]
