"""
Preferences Service

Owns the user's key/value preferences and keeps the reminder
scheduler in step with the chosen frequency.

Changing the currency only affects display. Changing the reminder
frequency persists it AND reschedules reminders.
"""

from typing import Optional

import structlog

from stash.models.preferences import ReminderFrequency, UserPreferences
from stash.services.formatting import format_currency
from stash.services.reminders import ReminderPlan, ReminderScheduler
from stash.services.storage import PreferencesStorageInterface


logger = structlog.get_logger(__name__)


class PreferencesService:
    """Read/write access to user preferences."""

    def __init__(
        self,
        storage: PreferencesStorageInterface,
        scheduler: Optional[ReminderScheduler] = None,
        default_currency: Optional[str] = None,
    ):
        self._storage = storage
        self._scheduler = scheduler
        self._preferences = storage.read()
        if default_currency and "currency_symbol" not in self._preferences.model_fields_set:
            self._preferences = self._preferences.model_copy(
                update={"currency_symbol": default_currency}
            )

    @property
    def preferences(self) -> UserPreferences:
        return self._preferences

    @property
    def currency_symbol(self) -> str:
        return self._preferences.currency_symbol

    @property
    def reminder_frequency(self) -> ReminderFrequency:
        return self._preferences.reminder_frequency

    @property
    def scheduler(self) -> Optional[ReminderScheduler]:
        return self._scheduler

    def format(self, amount) -> str:
        """Format an amount in the user's currency."""
        return format_currency(amount, self.currency_symbol)

    def set_currency_symbol(self, symbol: str) -> None:
        """
        Change the display currency.

        Raises:
            ValueError: If the symbol isn't supported
            PersistenceError: If preferences can't be saved
        """
        updated = UserPreferences(
            currency_symbol=symbol,
            reminder_frequency=self._preferences.reminder_frequency,
        )
        self._storage.write(updated)
        self._preferences = updated
        logger.info("currency_changed", currency_symbol=symbol)

    def set_reminder_frequency(self, frequency: ReminderFrequency) -> Optional[ReminderPlan]:
        """
        Change the reminder frequency and reschedule.

        Returns:
            The newly scheduled plan, None if reminders are off
            or no scheduler is configured
        """
        frequency = ReminderFrequency(frequency)
        updated = self._preferences.model_copy(update={"reminder_frequency": frequency})
        self._storage.write(updated)
        self._preferences = updated
        logger.info("reminder_frequency_changed", frequency=frequency.value)
        return self.apply_reminders()

    def apply_reminders(self) -> Optional[ReminderPlan]:
        """Push the stored frequency to the scheduler (e.g. at startup)."""
        if self._scheduler is None:
            return None
        return self._scheduler.schedule(self._preferences.reminder_frequency)
