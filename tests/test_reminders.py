"""Tests for reminder scheduling."""

from datetime import datetime, timedelta

from stash.models.preferences import ReminderFrequency
from stash.services.reminders import (
    REMINDER_ID,
    LocalReminderScheduler,
    TriggerKind,
    build_reminder_plan,
    next_fire_time,
)


class FakeClock:
    """Settable clock for the scheduler."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


# Wednesday
WEDNESDAY = datetime(2024, 1, 3, 10, 0)


class TestReminderPlans:
    """Tests for translating a frequency into a plan."""

    def test_none_means_no_plan(self):
        """Test that reminders can be switched off."""
        assert build_reminder_plan(ReminderFrequency.NONE, now=WEDNESDAY) is None

    def test_weekly_plan(self):
        """Weekly reminders fire on Mondays at 09:00."""
        plan = build_reminder_plan(ReminderFrequency.WEEKLY, now=WEDNESDAY)
        assert plan.trigger == TriggerKind.CALENDAR
        assert plan.weekday == 0
        assert (plan.hour, plan.minute) == (9, 0)
        assert plan.repeats

    def test_biweekly_plan(self):
        """Biweekly reminders repeat every 14 days from scheduling."""
        plan = build_reminder_plan(ReminderFrequency.BIWEEKLY, now=WEDNESDAY)
        assert plan.trigger == TriggerKind.INTERVAL
        assert plan.interval == timedelta(days=14)
        assert plan.scheduled_at == WEDNESDAY

    def test_monthly_plan(self):
        """Monthly reminders fire on the 1st at 09:00."""
        plan = build_reminder_plan(ReminderFrequency.MONTHLY, now=WEDNESDAY)
        assert plan.trigger == TriggerKind.CALENDAR
        assert plan.day == 1

    def test_notification_content(self):
        """Test the single well-known reminder identifier and text."""
        plan = build_reminder_plan(ReminderFrequency.WEEKLY, now=WEDNESDAY)
        assert plan.identifier == REMINDER_ID == "snapshotReminder"
        assert plan.title == "Log Your Savings 💰"
        assert plan.body == "Don't forget to take your savings snapshot!"


class TestNextFireTime:
    """Tests for computing upcoming fire times."""

    def test_weekly_next_monday(self):
        """Test the next Monday morning after a Wednesday."""
        plan = build_reminder_plan(ReminderFrequency.WEEKLY, now=WEDNESDAY)
        assert next_fire_time(plan, WEDNESDAY) == datetime(2024, 1, 8, 9, 0)

    def test_weekly_same_day_before_time(self):
        """Test a Monday before 09:00 fires that morning."""
        plan = build_reminder_plan(ReminderFrequency.WEEKLY, now=WEDNESDAY)
        assert next_fire_time(plan, datetime(2024, 1, 8, 8, 0)) == datetime(2024, 1, 8, 9, 0)

    def test_weekly_is_strictly_after(self):
        """Test that exactly 09:00 on a Monday rolls to the next week."""
        plan = build_reminder_plan(ReminderFrequency.WEEKLY, now=WEDNESDAY)
        assert next_fire_time(plan, datetime(2024, 1, 8, 9, 0)) == datetime(2024, 1, 15, 9, 0)

    def test_monthly_next_first(self):
        """Test rolling to the 1st of next month."""
        plan = build_reminder_plan(ReminderFrequency.MONTHLY, now=WEDNESDAY)
        assert next_fire_time(plan, datetime(2024, 1, 15, 12, 0)) == datetime(2024, 2, 1, 9, 0)

    def test_monthly_year_boundary(self):
        """Test December rolls over to January."""
        plan = build_reminder_plan(ReminderFrequency.MONTHLY, now=WEDNESDAY)
        assert next_fire_time(plan, datetime(2024, 12, 5, 9, 0)) == datetime(2025, 1, 1, 9, 0)

    def test_monthly_on_the_first_before_time(self):
        """Test the 1st before 09:00 fires that morning."""
        plan = build_reminder_plan(ReminderFrequency.MONTHLY, now=WEDNESDAY)
        assert next_fire_time(plan, datetime(2024, 3, 1, 8, 59)) == datetime(2024, 3, 1, 9, 0)

    def test_biweekly_intervals(self):
        """Test the fixed 14-day cadence from the scheduling moment."""
        plan = build_reminder_plan(ReminderFrequency.BIWEEKLY, now=WEDNESDAY)
        assert next_fire_time(plan, WEDNESDAY) == WEDNESDAY + timedelta(days=14)
        assert next_fire_time(plan, WEDNESDAY + timedelta(days=19)) == WEDNESDAY + timedelta(days=28)
        assert next_fire_time(plan, WEDNESDAY + timedelta(days=14)) == WEDNESDAY + timedelta(days=28)


class TestLocalReminderScheduler:
    """Tests for the in-process scheduler."""

    def test_schedule_replaces_pending(self):
        """Only one reminder is ever pending."""
        scheduler = LocalReminderScheduler(clock=FakeClock(WEDNESDAY))
        scheduler.schedule(ReminderFrequency.WEEKLY)
        scheduler.schedule(ReminderFrequency.MONTHLY)

        pending = scheduler.pending()
        assert len(pending) == 1
        assert pending[0].frequency == ReminderFrequency.MONTHLY

    def test_schedule_none_clears(self):
        """Test that choosing 'none' removes the reminder."""
        scheduler = LocalReminderScheduler(clock=FakeClock(WEDNESDAY))
        scheduler.schedule(ReminderFrequency.WEEKLY)

        assert scheduler.schedule(ReminderFrequency.NONE) is None
        assert scheduler.pending() == []
        assert scheduler.next_fire() is None

    def test_cancel_all(self):
        """Test removing every pending reminder."""
        scheduler = LocalReminderScheduler(clock=FakeClock(WEDNESDAY))
        scheduler.schedule(ReminderFrequency.BIWEEKLY)
        scheduler.cancel_all()
        assert scheduler.pending() == []

    def test_next_fire_uses_clock(self):
        """Test the upcoming fire time shown in settings."""
        scheduler = LocalReminderScheduler(clock=FakeClock(WEDNESDAY))
        scheduler.schedule(ReminderFrequency.WEEKLY)
        assert scheduler.next_fire() == datetime(2024, 1, 8, 9, 0)

    def test_due_reminders_reported_once(self):
        """Each firing shows up exactly once."""
        clock = FakeClock(WEDNESDAY)
        scheduler = LocalReminderScheduler(clock=clock)
        scheduler.schedule(ReminderFrequency.WEEKLY)

        clock.now = datetime(2024, 1, 8, 8, 0)
        assert scheduler.due_reminders() == []

        clock.now = datetime(2024, 1, 8, 9, 30)
        due = scheduler.due_reminders()
        assert [plan.identifier for plan in due] == [REMINDER_ID]

        assert scheduler.due_reminders() == []

    def test_permission_granted_by_default(self):
        """The in-process scheduler needs no platform permission."""
        assert LocalReminderScheduler().request_permission() is True
