"""
Local calendar helpers.

"Today" is the calendar day in the configured TIMEZONE; stored dates carry
no time component, so comparisons are plain date comparisons.
"""
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from subtracker.config import get_settings


def local_tz() -> ZoneInfo:
    return ZoneInfo(get_settings().TIMEZONE)


def now_local() -> datetime:
    return datetime.now(local_tz())


def today_local() -> date:
    return now_local().date()


def reminder_instant(billing_date: date, days_before: int, tz: ZoneInfo | None = None) -> datetime:
    """Wall-clock instant of a reminder `days_before` days ahead of `billing_date`."""
    tz = tz or local_tz()
    trigger_day = billing_date - timedelta(days=days_before)
    return datetime.combine(trigger_day, time(get_settings().REMINDER_HOUR, 0), tzinfo=tz)
