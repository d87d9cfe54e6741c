"""
Subscription use cases: CRUD, mark-paid, pause/resume, reminder resync.

Every mutation keeps reminders in step with the stored record:
  1. cancel the existing handles
  2. persist the field changes (handles cleared)
  3. if still active, schedule new reminders
  4. persist the new handles
Validation happens before step 1, so a rejected call changes nothing.
The whole sequence runs under the subscription's lock (ReminderScheduler.locked)
with the row re-read FOR UPDATE, so two mutations of one id never interleave.
"""
import logging
import uuid
from datetime import date, datetime, timedelta, timezone

from sqlalchemy.orm import Session

from subtracker.application.app_settings import get_app_settings
from subtracker.application.categories import get_category
from subtracker.application.reminders import ReminderScheduler
from subtracker.domain.billing_cycle import advance_to_future, next_occurrence
from subtracker.domain.category import DEFAULT_CATEGORY_ID
from subtracker.domain.errors import NotFoundError, ValidationError
from subtracker.domain.subscription import (
    SubscriptionInput, SubscriptionUpdate,
    validate_name, validate_amount, validate_billing_cycle, validate_currency,
    validate_reminder_days, normalize_notes,
)
from subtracker.infrastructure.db.models import SubscriptionModel
from subtracker.utils.clock import today_local

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_date(value, field_name: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError:
            pass
    raise ValidationError(f"{field_name} must be a date, got: {value!r}")


def _require_category(db: Session, category_id: str) -> str:
    if get_category(db, category_id) is None:
        raise NotFoundError(f"Category not found: {category_id}")
    return category_id


def _load_for_update(db: Session, sub_id: str) -> SubscriptionModel | None:
    # Fresh row state: another session may have committed while we waited for the lock
    return db.get(SubscriptionModel, sub_id, with_for_update=True, populate_existing=True)


def _get_or_raise(db: Session, sub_id: str) -> SubscriptionModel:
    sub = _load_for_update(db, sub_id)
    if sub is None:
        raise NotFoundError(f"Subscription not found: {sub_id}")
    return sub


def _schedule(db: Session, reminders: ReminderScheduler, sub: SubscriptionModel, now: datetime | None) -> list[str]:
    prefs = get_app_settings(db)
    if not prefs.notifications_enabled:
        return []
    return reminders.schedule(sub, now=now, show_amount=prefs.show_amount_in_notifications)


def _clear_reminders(reminders: ReminderScheduler, sub: SubscriptionModel) -> None:
    reminders.cancel(list(sub.notification_ids or []))
    sub.notification_ids = []


# ============================================================================
# Queries
# ============================================================================


def _ordered(query):
    return query.order_by(
        SubscriptionModel.next_billing_date.asc(),
        SubscriptionModel.created_at.asc(),
        SubscriptionModel.id.asc(),
    )


def get_subscription(db: Session, sub_id: str) -> SubscriptionModel | None:
    return db.get(SubscriptionModel, sub_id)


def list_subscriptions(db: Session) -> list[SubscriptionModel]:
    return _ordered(db.query(SubscriptionModel)).all()


def list_active_subscriptions(db: Session) -> list[SubscriptionModel]:
    return _ordered(
        db.query(SubscriptionModel).filter(SubscriptionModel.is_active == True)  # noqa: E712
    ).all()


def list_due_by(db: Session, days: int, today: date | None = None) -> list[SubscriptionModel]:
    """Active subscriptions billing on or before today + days (overdue ones included)."""
    if today is None:
        today = today_local()
    horizon = today + timedelta(days=days)
    return _ordered(
        db.query(SubscriptionModel).filter(
            SubscriptionModel.is_active == True,  # noqa: E712
            SubscriptionModel.next_billing_date <= horizon,
        )
    ).all()


def list_by_category(db: Session, category_id: str) -> list[SubscriptionModel]:
    return _ordered(
        db.query(SubscriptionModel).filter(SubscriptionModel.category_id == category_id)
    ).all()


# ============================================================================
# Mutations
# ============================================================================


class CreateSubscriptionUseCase:
    def __init__(self, db: Session, reminders: ReminderScheduler):
        self.db = db
        self.reminders = reminders

    def execute(
        self,
        data: SubscriptionInput,
        today: date | None = None,
        now: datetime | None = None,
    ) -> SubscriptionModel:
        prefs = get_app_settings(self.db)

        name = validate_name(data.name)
        amount = validate_amount(data.amount)
        cycle = validate_billing_cycle(data.billing_cycle)
        currency = validate_currency(data.currency or prefs.default_currency)
        reminder_days = validate_reminder_days(
            data.reminder_days if data.reminder_days is not None else prefs.default_reminder_days
        )
        billing_date = _as_date(data.next_billing_date, "next_billing_date")
        start_date = _as_date(data.start_date, "start_date") if data.start_date is not None else billing_date
        category_id = _require_category(self.db, data.category_id or DEFAULT_CATEGORY_ID)

        if today is None:
            today = today_local()

        ts = _utcnow()
        sub = SubscriptionModel(
            id=str(uuid.uuid4()),
            name=name,
            amount=amount,
            currency=currency,
            billing_cycle=cycle,
            next_billing_date=advance_to_future(billing_date, cycle, today),
            start_date=start_date,
            category_id=category_id,
            notes=normalize_notes(data.notes),
            is_active=bool(data.is_active),
            reminder_days=reminder_days,
            notification_ids=[],
            created_at=ts,
            updated_at=ts,
        )
        self.db.add(sub)
        self.db.commit()
        logger.info("Created subscription %s (%s), next billing %s", sub.id, sub.name, sub.next_billing_date)

        if sub.is_active:
            sub.notification_ids = _schedule(self.db, self.reminders, sub, now)
            self.db.commit()
        return sub


class UpdateSubscriptionUseCase:
    def __init__(self, db: Session, reminders: ReminderScheduler):
        self.db = db
        self.reminders = reminders

    def execute(
        self,
        sub_id: str,
        changes: SubscriptionUpdate,
        today: date | None = None,
        now: datetime | None = None,
    ) -> SubscriptionModel:
        with self.reminders.locked(sub_id):
            return self._apply(sub_id, changes, today, now)

    def _apply(self, sub_id, changes, today, now) -> SubscriptionModel:
        sub = _get_or_raise(self.db, sub_id)
        provided = changes.provided()

        values: dict = {}
        if "name" in provided:
            values["name"] = validate_name(provided["name"])
        if "amount" in provided:
            values["amount"] = validate_amount(provided["amount"])
        if "currency" in provided:
            values["currency"] = validate_currency(provided["currency"])
        if "billing_cycle" in provided:
            values["billing_cycle"] = validate_billing_cycle(provided["billing_cycle"])
        if "start_date" in provided:
            values["start_date"] = _as_date(provided["start_date"], "start_date")
        if "category_id" in provided:
            values["category_id"] = _require_category(self.db, provided["category_id"])
        if "notes" in provided:
            values["notes"] = normalize_notes(provided["notes"])
        if "is_active" in provided:
            if not isinstance(provided["is_active"], bool):
                raise ValidationError("is_active must be a boolean")
            values["is_active"] = provided["is_active"]
        if "reminder_days" in provided:
            if provided["reminder_days"] is None:
                raise ValidationError("reminder_days must be a list of integers")
            values["reminder_days"] = validate_reminder_days(provided["reminder_days"])
        if "next_billing_date" in provided:
            if today is None:
                today = today_local()
            cycle = values.get("billing_cycle", sub.billing_cycle)
            values["next_billing_date"] = advance_to_future(
                _as_date(provided["next_billing_date"], "next_billing_date"), cycle, today
            )

        _clear_reminders(self.reminders, sub)
        for key, value in values.items():
            setattr(sub, key, value)
        sub.updated_at = _utcnow()
        self.db.commit()
        logger.info("Updated subscription %s: %s", sub.id, ", ".join(sorted(values)) or "no fields")

        if sub.is_active:
            sub.notification_ids = _schedule(self.db, self.reminders, sub, now)
            self.db.commit()
        return sub


class DeleteSubscriptionUseCase:
    def __init__(self, db: Session, reminders: ReminderScheduler):
        self.db = db
        self.reminders = reminders

    def execute(self, sub_id: str) -> bool:
        """Delete a subscription; a missing id is a no-op. Returns True if a row was removed."""
        with self.reminders.locked(sub_id):
            sub = _load_for_update(self.db, sub_id)
            if sub is None:
                return False
            self.reminders.cancel(list(sub.notification_ids or []))
            self.db.delete(sub)
            self.db.commit()
        logger.info("Deleted subscription %s", sub_id)
        return True


class MarkPaidUseCase:
    """
    Advance the billing date by exactly one cycle.

    No catch-up to today: a subscription overdue by several cycles stays
    overdue after a single mark-paid.
    """

    def __init__(self, db: Session, reminders: ReminderScheduler):
        self.db = db
        self.reminders = reminders

    def execute(self, sub_id: str, now: datetime | None = None) -> SubscriptionModel:
        with self.reminders.locked(sub_id):
            return self._apply(sub_id, now)

    def _apply(self, sub_id: str, now: datetime | None) -> SubscriptionModel:
        sub = _get_or_raise(self.db, sub_id)

        _clear_reminders(self.reminders, sub)
        previous = sub.next_billing_date
        sub.next_billing_date = next_occurrence(previous, sub.billing_cycle)
        sub.updated_at = _utcnow()
        self.db.commit()
        logger.info("Marked subscription %s paid: %s -> %s", sub.id, previous, sub.next_billing_date)

        if sub.is_active:
            sub.notification_ids = _schedule(self.db, self.reminders, sub, now)
            self.db.commit()
        return sub


class ToggleActiveUseCase:
    def __init__(self, db: Session, reminders: ReminderScheduler):
        self.db = db
        self.reminders = reminders

    def execute(self, sub_id: str, now: datetime | None = None) -> SubscriptionModel:
        with self.reminders.locked(sub_id):
            return self._apply(sub_id, now)

    def _apply(self, sub_id: str, now: datetime | None) -> SubscriptionModel:
        sub = _get_or_raise(self.db, sub_id)

        _clear_reminders(self.reminders, sub)
        sub.is_active = not sub.is_active
        sub.updated_at = _utcnow()
        self.db.commit()
        logger.info("Subscription %s %s", sub.id, "resumed" if sub.is_active else "paused")

        if sub.is_active:
            sub.notification_ids = _schedule(self.db, self.reminders, sub, now)
            self.db.commit()
        return sub


# ============================================================================
# Bulk reminder maintenance
# ============================================================================


class ResyncRemindersUseCase:
    """Cancel every stored handle and reschedule all active subscriptions."""

    def __init__(self, db: Session, reminders: ReminderScheduler):
        self.db = db
        self.reminders = reminders

    def execute(self, now: datetime | None = None) -> int:
        total = 0
        for sub_id in [s.id for s in list_subscriptions(self.db)]:
            with self.reminders.locked(sub_id):
                sub = _load_for_update(self.db, sub_id)
                if sub is None:
                    continue
                _clear_reminders(self.reminders, sub)
                self.db.commit()
                if sub.is_active:
                    sub.notification_ids = _schedule(self.db, self.reminders, sub, now)
                    self.db.commit()
                    total += len(sub.notification_ids)
        logger.info("Reminder resync: %d reminder(s) scheduled", total)
        return total


class CancelAllRemindersUseCase:
    def __init__(self, db: Session, reminders: ReminderScheduler):
        self.db = db
        self.reminders = reminders

    def execute(self) -> int:
        cancelled = 0
        for sub_id in [s.id for s in list_subscriptions(self.db)]:
            with self.reminders.locked(sub_id):
                sub = _load_for_update(self.db, sub_id)
                if sub is None or not sub.notification_ids:
                    continue
                cancelled += len(sub.notification_ids)
                _clear_reminders(self.reminders, sub)
                self.db.commit()
        self.db.commit()
        logger.info("Cancelled %d reminder(s)", cancelled)
        return cancelled
