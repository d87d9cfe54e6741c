"""
Notification collaborator: one-shot reminders on an APScheduler scheduler.

schedule_at() registers a DateTrigger job and returns its id as the handle;
cancel() removes the job. When a job fires, the delivery callback receives
the payload ({"title", "body", "subscription_id"}), by default Web Push.

Jobs live in the scheduler's memory job store; handles stored on
subscriptions are re-created at startup by ResyncRemindersUseCase.
"""
import logging
import uuid
from datetime import datetime
from typing import Callable, Protocol

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.date import DateTrigger

logger = logging.getLogger(__name__)


class ExternalSchedulingFailure(RuntimeError):
    """The external scheduler could not register a reminder."""


class Notifier(Protocol):
    def schedule_at(self, instant: datetime, title: str, body: str, correlation_id: str) -> str: ...

    def cancel(self, handle: str) -> None: ...


DeliveryCallback = Callable[[dict], None]


class APSchedulerNotifier:
    """Notifier backed by an APScheduler BackgroundScheduler."""

    def __init__(self, deliver: DeliveryCallback, scheduler: BackgroundScheduler | None = None):
        self._deliver = deliver
        self.scheduler = scheduler or BackgroundScheduler(daemon=True)

    def start(self) -> None:
        if not self.scheduler.running:
            self.scheduler.start()
            logger.info("Reminder scheduler started")

    def shutdown(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Reminder scheduler stopped")

    def schedule_at(self, instant: datetime, title: str, body: str, correlation_id: str) -> str:
        handle = uuid.uuid4().hex
        payload = {"title": title, "body": body, "subscription_id": correlation_id}
        try:
            self.scheduler.add_job(
                self._fire,
                DateTrigger(run_date=instant),
                args=[payload],
                id=handle,
                name=f"reminder:{correlation_id}",
                misfire_grace_time=3600,
            )
        except Exception as e:
            raise ExternalSchedulingFailure(f"Could not schedule reminder at {instant}: {e}") from e
        return handle

    def cancel(self, handle: str) -> None:
        try:
            self.scheduler.remove_job(handle)
        except JobLookupError:
            # Already fired or never existed
            pass

    def _fire(self, payload: dict) -> None:
        try:
            self._deliver(payload)
        except Exception:
            logger.exception("Reminder delivery failed for subscription %s", payload.get("subscription_id"))
