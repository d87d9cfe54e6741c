"""
Web Push delivery of fired renewal reminders.

A fired reminder goes to every registered browser endpoint in one pass;
endpoints the push service reports as gone (404/410) are pruned afterwards.
"""
import json
import logging

from pywebpush import webpush, WebPushException
from sqlalchemy.orm import Session, sessionmaker

from subtracker.config import get_settings
from subtracker.infrastructure.db.models import PushSubscription

logger = logging.getLogger(__name__)

EXPIRED_STATUSES = (404, 410)


def _vapid_private_key(raw_key: str) -> str:
    # .env may store PEM with literal \n or real newlines depending on quoting
    if "\\n" in raw_key:
        raw_key = raw_key.replace("\\n", "\n")
    # pywebpush accepts a raw base64url key; strip PEM armour if present
    if "BEGIN" in raw_key:
        lines = [l.strip() for l in raw_key.strip().splitlines()
                 if l.strip() and not l.strip().startswith("-----")]
        raw_key = "".join(lines)
    return raw_key


def _vapid_credentials() -> dict | None:
    """webpush() keyword arguments, or None when VAPID is not configured."""
    settings = get_settings()
    if not settings.VAPID_PRIVATE_KEY or not settings.VAPID_PUBLIC_KEY:
        return None
    return {
        "vapid_private_key": _vapid_private_key(settings.VAPID_PRIVATE_KEY),
        "vapid_claims": {"sub": settings.VAPID_MAILTO},
    }


def send_push_to_all(db: Session, payload: dict) -> int:
    """
    Push a reminder payload to every registered endpoint.

    payload format:
        {"title": "...", "body": "...", "subscription_id": "..."}

    Returns the number of endpoints that accepted the message.
    """
    credentials = _vapid_credentials()
    if credentials is None:
        logger.warning("VAPID keys not configured, skipping push")
        return 0

    data = json.dumps(payload, ensure_ascii=False)
    sent = 0
    expired: list[int] = []
    for endpoint in db.query(PushSubscription).all():
        try:
            webpush(
                subscription_info={
                    "endpoint": endpoint.endpoint,
                    "keys": {"p256dh": endpoint.p256dh, "auth": endpoint.auth},
                },
                data=data,
                **credentials,
            )
        except WebPushException as e:
            status_code = e.response.status_code if e.response is not None else 0
            if status_code in EXPIRED_STATUSES:
                expired.append(endpoint.id)
            else:
                logger.error("WebPush error (HTTP %d) for %s: %s", status_code, endpoint.endpoint[:60], e)
            continue
        sent += 1

    if expired:
        db.query(PushSubscription).filter(PushSubscription.id.in_(expired)).delete()
        db.commit()
        logger.info("Removed %d expired push endpoint(s)", len(expired))
    return sent


def make_push_delivery(session_factory: sessionmaker):
    """Delivery callback for the notifier: one session per fired reminder."""

    def deliver(payload: dict) -> None:
        with session_factory() as db:
            sent = send_push_to_all(db, payload)
        logger.info("Reminder for subscription %s pushed to %d endpoint(s)",
                    payload.get("subscription_id"), sent)

    return deliver
