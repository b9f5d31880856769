"""
Reminder Scheduling

Nudges the user to record a snapshot on a regular cadence.

DESIGN DECISION: Scheduling is an injected collaborator, not a
process-wide singleton. Whoever owns the preferences hands a
ReminderScheduler the chosen frequency; tests pass their own.

Cadences:
- weekly:   every Monday at 09:00
- biweekly: every 14 days, counted from when it was scheduled
- monthly:  the 1st of every month at 09:00
- none:     nothing scheduled

Scheduling always replaces whatever was pending before.
"""

import threading
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

import structlog
from pydantic import BaseModel, Field

from stash.models.preferences import ReminderFrequency


logger = structlog.get_logger(__name__)

REMINDER_ID = "snapshotReminder"
REMINDER_TITLE = "Log Your Savings 💰"
REMINDER_BODY = "Don't forget to take your savings snapshot!"

REMINDER_HOUR = 9
REMINDER_MINUTE = 0
WEEKLY_WEEKDAY = 0  # Monday
MONTHLY_DAY = 1
BIWEEKLY_INTERVAL = timedelta(days=14)


class TriggerKind(str, Enum):
    """How a reminder's fire times are derived."""
    CALENDAR = "calendar"   # matches calendar fields (weekday/day + time)
    INTERVAL = "interval"   # fixed interval from the scheduling moment


class ReminderPlan(BaseModel):
    """A scheduled, repeating reminder."""

    identifier: str = REMINDER_ID
    title: str = REMINDER_TITLE
    body: str = REMINDER_BODY
    frequency: ReminderFrequency
    trigger: TriggerKind

    # Calendar trigger fields
    weekday: Optional[int] = Field(default=None, ge=0, le=6)
    day: Optional[int] = Field(default=None, ge=1, le=28)
    hour: int = Field(default=REMINDER_HOUR, ge=0, le=23)
    minute: int = Field(default=REMINDER_MINUTE, ge=0, le=59)

    # Interval trigger fields
    interval: Optional[timedelta] = None

    scheduled_at: datetime = Field(default_factory=datetime.now)
    repeats: bool = True


def build_reminder_plan(
    frequency: ReminderFrequency,
    now: Optional[datetime] = None,
) -> Optional[ReminderPlan]:
    """Translate a frequency into a reminder plan. None means no reminder."""
    now = now or datetime.now()

    if frequency == ReminderFrequency.WEEKLY:
        return ReminderPlan(
            frequency=frequency,
            trigger=TriggerKind.CALENDAR,
            weekday=WEEKLY_WEEKDAY,
            scheduled_at=now,
        )
    if frequency == ReminderFrequency.BIWEEKLY:
        return ReminderPlan(
            frequency=frequency,
            trigger=TriggerKind.INTERVAL,
            interval=BIWEEKLY_INTERVAL,
            scheduled_at=now,
        )
    if frequency == ReminderFrequency.MONTHLY:
        return ReminderPlan(
            frequency=frequency,
            trigger=TriggerKind.CALENDAR,
            day=MONTHLY_DAY,
            scheduled_at=now,
        )
    return None


def _next_month_start(moment: datetime) -> datetime:
    if moment.month == 12:
        return moment.replace(year=moment.year + 1, month=1, day=1)
    return moment.replace(month=moment.month + 1, day=1)


def next_fire_time(plan: ReminderPlan, after: datetime) -> datetime:
    """
    The first time strictly after `after` at which the plan fires.
    """
    if plan.trigger == TriggerKind.INTERVAL:
        interval = plan.interval or BIWEEKLY_INTERVAL
        elapsed = after - plan.scheduled_at
        if elapsed < timedelta(0):
            return plan.scheduled_at + interval
        periods = elapsed // interval + 1
        return plan.scheduled_at + interval * periods

    candidate = after.replace(
        hour=plan.hour, minute=plan.minute, second=0, microsecond=0
    )

    if plan.weekday is not None:
        candidate += timedelta(days=(plan.weekday - candidate.weekday()) % 7)
        if candidate <= after:
            candidate += timedelta(days=7)
        return candidate

    if plan.day is not None:
        candidate = candidate.replace(day=plan.day)
        if candidate <= after:
            candidate = _next_month_start(candidate).replace(day=plan.day)
        return candidate

    # Daily at the given time
    if candidate <= after:
        candidate += timedelta(days=1)
    return candidate


class ReminderScheduler(ABC):
    """Abstract reminder backend."""

    @abstractmethod
    def schedule(self, frequency: ReminderFrequency) -> Optional[ReminderPlan]:
        """
        Replace all pending reminders with one for `frequency`.

        Returns:
            The plan that was scheduled, or None for ReminderFrequency.NONE
        """
        pass

    @abstractmethod
    def cancel_all(self) -> None:
        """Remove every pending reminder."""
        pass

    @abstractmethod
    def pending(self) -> list[ReminderPlan]:
        """Reminders currently scheduled."""
        pass

    def request_permission(self) -> bool:
        """Ask the platform for permission to notify. Granted by default."""
        return True


class LocalReminderScheduler(ReminderScheduler):
    """
    In-process reminder scheduler.

    Keeps pending plans in memory and reports which ones are due.
    The UI polls due_reminders() on each render.
    """

    def __init__(self, clock=datetime.now):
        self._clock = clock
        self._lock = threading.Lock()
        self._plans: dict[str, ReminderPlan] = {}
        self._last_checked: dict[str, datetime] = {}

    def schedule(self, frequency: ReminderFrequency) -> Optional[ReminderPlan]:
        now = self._clock()
        plan = build_reminder_plan(frequency, now=now)
        with self._lock:
            self._plans.clear()
            self._last_checked.clear()
            if plan is not None:
                self._plans[plan.identifier] = plan
                self._last_checked[plan.identifier] = now

        if plan is None:
            logger.info("reminders_cleared")
        else:
            logger.info(
                "reminder_scheduled",
                frequency=frequency.value,
                next_fire=next_fire_time(plan, now).isoformat(),
            )
        return plan

    def cancel_all(self) -> None:
        with self._lock:
            self._plans.clear()
            self._last_checked.clear()

    def pending(self) -> list[ReminderPlan]:
        with self._lock:
            return list(self._plans.values())

    def next_fire(self, after: Optional[datetime] = None) -> Optional[datetime]:
        """Earliest upcoming fire time across pending plans."""
        after = after or self._clock()
        times = [next_fire_time(plan, after) for plan in self.pending()]
        return min(times) if times else None

    def due_reminders(self, now: Optional[datetime] = None) -> list[ReminderPlan]:
        """
        Plans that fired since the last check.

        Each firing is reported once.
        """
        now = now or self._clock()
        due = []
        with self._lock:
            for identifier, plan in self._plans.items():
                last = self._last_checked[identifier]
                if next_fire_time(plan, last) <= now:
                    due.append(plan)
                self._last_checked[identifier] = now
        return due
