"""Reminder scheduling package."""

from stash.services.reminders.scheduler import (
    REMINDER_ID,
    LocalReminderScheduler,
    ReminderPlan,
    ReminderScheduler,
    TriggerKind,
    build_reminder_plan,
    next_fire_time,
)

__all__ = [
    "REMINDER_ID",
    "LocalReminderScheduler",
    "ReminderPlan",
    "ReminderScheduler",
    "TriggerKind",
    "build_reminder_plan",
    "next_fire_time",
]
