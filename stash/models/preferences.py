"""
User Preference Models

Simple key/value settings the user picks in the app:
the currency symbol used for display and how often to be reminded.
"""

from enum import Enum

from pydantic import BaseModel, Field, field_validator


SUPPORTED_CURRENCIES = ("£", "€", "$", "¥", "₹", "CHF")
DEFAULT_CURRENCY = "£"


class ReminderFrequency(str, Enum):
    """How often the user wants to be nudged to record a snapshot."""
    NONE = "none"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class UserPreferences(BaseModel):
    """
    Persisted user preferences.

    Unknown keys in the stored document are ignored so older or newer
    files still load.
    """

    currency_symbol: str = Field(
        default=DEFAULT_CURRENCY,
        description="Currency symbol used for display"
    )
    reminder_frequency: ReminderFrequency = Field(
        default=ReminderFrequency.NONE,
        description="Reminder frequency"
    )

    @field_validator("currency_symbol")
    @classmethod
    def validate_currency_symbol(cls, v: str) -> str:
        """Only the symbols the formatter knows how to localise."""
        v = v.strip()
        if v not in SUPPORTED_CURRENCIES:
            raise ValueError(
                f"Unsupported currency symbol: {v}. Allowed: {', '.join(SUPPORTED_CURRENCIES)}"
            )
        return v
