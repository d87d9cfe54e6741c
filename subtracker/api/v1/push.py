"""
Web Push subscription API endpoints.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from pydantic import BaseModel

from subtracker.api.deps import get_db
from subtracker.application.push_service import send_push_to_all
from subtracker.infrastructure.db.models import PushSubscription

router = APIRouter(prefix="/api/push", tags=["push"])


class PushKeys(BaseModel):
    p256dh: str
    auth: str


class SubscribeRequest(BaseModel):
    endpoint: str
    keys: PushKeys


@router.post("/subscribe")
def subscribe(body: SubscribeRequest, db: Session = Depends(get_db)):
    existing = db.query(PushSubscription).filter(
        PushSubscription.endpoint == body.endpoint
    ).first()

    if existing:
        existing.p256dh = body.keys.p256dh
        existing.auth = body.keys.auth
    else:
        db.add(PushSubscription(
            endpoint=body.endpoint,
            p256dh=body.keys.p256dh,
            auth=body.keys.auth,
        ))

    db.commit()
    return {"success": True}


@router.delete("/unsubscribe")
def unsubscribe(body: SubscribeRequest, db: Session = Depends(get_db)):
    deleted = db.query(PushSubscription).filter(
        PushSubscription.endpoint == body.endpoint,
    ).delete()
    db.commit()

    return {"success": True, "deleted": deleted}


@router.post("/test")
def test_push(db: Session = Depends(get_db)):
    """Send a test push to verify the setup."""
    sent = send_push_to_all(db, {
        "title": "SubTracker",
        "body": "Push notifications are working!",
        "subscription_id": None,
    })
    return {"success": True, "sent": sent}
