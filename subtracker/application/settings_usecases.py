"""
Settings use cases: validated updates that keep pending reminders consistent
with the notification switches.
"""
import logging

from sqlalchemy.orm import Session

from subtracker.application.app_settings import (
    AppSettings, KEY_DEFAULT_CURRENCY, KEY_DEFAULT_REMINDER_DAYS,
    KEY_NOTIFICATIONS_ENABLED, KEY_SHOW_AMOUNT,
    get_app_settings, put_setting,
)
from subtracker.application.reminders import ReminderScheduler
from subtracker.application.subscriptions import CancelAllRemindersUseCase, ResyncRemindersUseCase
from subtracker.domain.errors import ValidationError
from subtracker.domain.subscription import validate_currency, validate_reminder_days

logger = logging.getLogger(__name__)


class UpdateAppSettingsUseCase:
    """
    Apply the provided settings (None = leave unchanged).

    Turning notifications off cancels every pending reminder; turning them
    on, or changing amount visibility while on, reschedules all of them.
    """

    def __init__(self, db: Session, reminders: ReminderScheduler):
        self.db = db
        self.reminders = reminders

    def execute(
        self,
        default_currency: str | None = None,
        default_reminder_days: list[int] | None = None,
        notifications_enabled: bool | None = None,
        show_amount_in_notifications: bool | None = None,
    ) -> AppSettings:
        current = get_app_settings(self.db)

        changes: dict = {}
        if default_currency is not None:
            changes[KEY_DEFAULT_CURRENCY] = validate_currency(default_currency)
        if default_reminder_days is not None:
            changes[KEY_DEFAULT_REMINDER_DAYS] = validate_reminder_days(default_reminder_days)
        for key, flag in ((KEY_NOTIFICATIONS_ENABLED, notifications_enabled),
                          (KEY_SHOW_AMOUNT, show_amount_in_notifications)):
            if flag is None:
                continue
            if not isinstance(flag, bool):
                raise ValidationError(f"{key} must be a boolean")
            changes[key] = flag

        for key, value in changes.items():
            put_setting(self.db, key, value)
        self.db.commit()

        updated = get_app_settings(self.db)
        if updated.notifications_enabled != current.notifications_enabled:
            if updated.notifications_enabled:
                ResyncRemindersUseCase(self.db, self.reminders).execute()
            else:
                CancelAllRemindersUseCase(self.db, self.reminders).execute()
            logger.info("Notifications %s", "enabled" if updated.notifications_enabled else "disabled")
        elif (updated.notifications_enabled
              and updated.show_amount_in_notifications != current.show_amount_in_notifications):
            # Reminder text changed
            ResyncRemindersUseCase(self.db, self.reminders).execute()

        return updated
