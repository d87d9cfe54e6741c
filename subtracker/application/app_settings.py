"""
Settings store: flat key-value preferences (JSON-encoded values).

Keys:
  default_currency               currency for new subscriptions without one
  default_reminder_days          offsets for new subscriptions without any
  notifications_enabled          master switch for reminder scheduling
  show_amount_in_notifications   include the amount in reminder text

Updates go through settings_usecases.UpdateAppSettingsUseCase.
"""
import json
import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from subtracker.config import get_settings
from subtracker.infrastructure.db.models import AppSettingModel

logger = logging.getLogger(__name__)

KEY_DEFAULT_CURRENCY = "default_currency"
KEY_DEFAULT_REMINDER_DAYS = "default_reminder_days"
KEY_NOTIFICATIONS_ENABLED = "notifications_enabled"
KEY_SHOW_AMOUNT = "show_amount_in_notifications"


@dataclass
class AppSettings:
    default_currency: str
    default_reminder_days: list[int]
    notifications_enabled: bool
    show_amount_in_notifications: bool


def _defaults() -> dict:
    settings = get_settings()
    return {
        KEY_DEFAULT_CURRENCY: settings.DEFAULT_CURRENCY,
        KEY_DEFAULT_REMINDER_DAYS: list(settings.DEFAULT_REMINDER_DAYS),
        KEY_NOTIFICATIONS_ENABLED: True,
        KEY_SHOW_AMOUNT: True,
    }


def seed_app_settings(db: Session) -> None:
    """Insert missing keys with their defaults (insert-or-ignore)."""
    existing = {row[0] for row in db.query(AppSettingModel.key).all()}
    defaults = _defaults()
    missing = [key for key in defaults if key not in existing]
    for key in missing:
        db.add(AppSettingModel(key=key, value=json.dumps(defaults[key])))
    if missing:
        db.commit()
        logger.info("Seeded settings: %s", ", ".join(missing))


def get_app_settings(db: Session) -> AppSettings:
    values = _defaults()
    for row in db.query(AppSettingModel).all():
        if row.key in values:
            values[row.key] = json.loads(row.value)
    return AppSettings(
        default_currency=values[KEY_DEFAULT_CURRENCY],
        default_reminder_days=list(values[KEY_DEFAULT_REMINDER_DAYS]),
        notifications_enabled=bool(values[KEY_NOTIFICATIONS_ENABLED]),
        show_amount_in_notifications=bool(values[KEY_SHOW_AMOUNT]),
    )


def put_setting(db: Session, key: str, value) -> None:
    """Stage one key (JSON-encoded); the caller commits."""
    row = db.get(AppSettingModel, key)
    if row is None:
        db.add(AppSettingModel(key=key, value=json.dumps(value)))
    else:
        row.value = json.dumps(value)


