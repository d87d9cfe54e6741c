"""
Reminder scheduling adapter: turns a subscription's reminder offsets into
one-shot notifications on the external notifier.

For each offset in reminder_days:
  - trigger = (next_billing_date - offset days) at REMINDER_HOUR local time
  - trigger in the past (or exactly now) -> skipped, no handle
  - notifier failure -> logged, skipped; remaining offsets still scheduled
Handles come back in the order of their (non-skipped) offsets.
"""
import logging
from datetime import datetime
from zoneinfo import ZoneInfo

from subtracker.application.notifier import Notifier
from subtracker.infrastructure.db.models import SubscriptionModel
from subtracker.utils.clock import local_tz, now_local, reminder_instant
from subtracker.utils.locks import KeyedLock
from subtracker.utils.money import format_money

logger = logging.getLogger(__name__)


def reminder_title(sub: SubscriptionModel) -> str:
    return f"{sub.name} renewal coming up"


def reminder_body(sub: SubscriptionModel, days_before: int, show_amount: bool = True) -> str:
    if days_before == 0:
        when = "renews today"
    else:
        when = f"renews in {days_before} day{'s' if days_before > 1 else ''}"
    if show_amount:
        return f"Your {sub.name} subscription ({format_money(sub.amount, sub.currency)}) {when}."
    return f"Your {sub.name} subscription {when}."


class ReminderScheduler:
    def __init__(self, notifier: Notifier, tz: ZoneInfo | None = None):
        self.notifier = notifier
        self.tz = tz
        self._locks = KeyedLock()

    def locked(self, sub_id: str):
        """
        Hold the subscription's lock for a whole cancel, persist, schedule,
        persist sequence. One mutation per subscription id at a time.
        """
        return self._locks.hold(sub_id)

    def schedule(
        self,
        sub: SubscriptionModel,
        now: datetime | None = None,
        show_amount: bool = True,
    ) -> list[str]:
        """Schedule one reminder per future offset; returns the handles produced."""
        tz = self.tz or local_tz()
        if now is None:
            now = now_local()

        handles: list[str] = []
        for days_before in sub.reminder_days or []:
            trigger = reminder_instant(sub.next_billing_date, days_before, tz)
            if trigger <= now:
                continue
            try:
                handle = self.notifier.schedule_at(
                    trigger,
                    reminder_title(sub),
                    reminder_body(sub, days_before, show_amount),
                    sub.id,
                )
            except Exception:
                logger.exception(
                    "Failed to schedule %d-day reminder for subscription %s", days_before, sub.id
                )
                continue
            handles.append(handle)

        logger.info("Scheduled %d/%d reminder(s) for subscription %s",
                    len(handles), len(sub.reminder_days or []), sub.id)
        return handles

    def cancel(self, handles: list[str]) -> None:
        """Best-effort cancellation; unknown or failing handles are logged and skipped."""
        for handle in handles or []:
            try:
                self.notifier.cancel(handle)
            except Exception:
                logger.warning("Failed to cancel reminder %s", handle, exc_info=True)
