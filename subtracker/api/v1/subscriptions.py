"""
Subscription API endpoints
"""
from datetime import date, datetime
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from subtracker.api.deps import get_db, get_reminders
from subtracker.application.reminders import ReminderScheduler
from subtracker.application.subscriptions import (
    CreateSubscriptionUseCase, UpdateSubscriptionUseCase, DeleteSubscriptionUseCase,
    MarkPaidUseCase, ToggleActiveUseCase,
    get_subscription, list_subscriptions, list_active_subscriptions, list_due_by,
)
from subtracker.domain.errors import NotFoundError, ValidationError
from subtracker.domain.subscription import SubscriptionInput, SubscriptionUpdate


router = APIRouter(prefix="/api/v1/subscriptions", tags=["subscriptions"])


# === Request/Response models ===

class CreateSubscriptionRequest(BaseModel):
    name: str
    amount: Decimal
    billing_cycle: str
    next_billing_date: date
    start_date: date | None = None
    currency: str | None = None
    category_id: str | None = None
    notes: str | None = None
    is_active: bool = True
    reminder_days: list[int] | None = None


class UpdateSubscriptionRequest(BaseModel):
    """Only fields present in the JSON body are applied; "notes": null clears notes."""
    name: str | None = None
    amount: Decimal | None = None
    currency: str | None = None
    billing_cycle: str | None = None
    next_billing_date: date | None = None
    start_date: date | None = None
    category_id: str | None = None
    notes: str | None = None
    is_active: bool | None = None
    reminder_days: list[int] | None = None

    def to_update(self) -> SubscriptionUpdate:
        return SubscriptionUpdate(**{name: getattr(self, name) for name in self.model_fields_set})


class SubscriptionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    amount: Decimal
    currency: str
    billing_cycle: str
    next_billing_date: date
    start_date: date
    category_id: str
    notes: str | None
    is_active: bool
    reminder_days: list[int]
    notification_ids: list[str]
    created_at: datetime
    updated_at: datetime


def _raise_http(exc: Exception):
    if isinstance(exc, NotFoundError):
        raise HTTPException(status_code=404, detail=str(exc))
    raise HTTPException(status_code=422, detail=str(exc))


# === Endpoints ===

@router.post("/", response_model=SubscriptionResponse, status_code=201)
def create_subscription(
    req: CreateSubscriptionRequest,
    db: Session = Depends(get_db),
    reminders: ReminderScheduler = Depends(get_reminders),
):
    """Create a subscription; a past billing date is rolled forward to the next cycle"""
    try:
        return CreateSubscriptionUseCase(db, reminders).execute(SubscriptionInput(**req.model_dump()))
    except (ValidationError, NotFoundError) as e:
        _raise_http(e)


@router.get("/", response_model=list[SubscriptionResponse])
def list_all(active: bool = False, db: Session = Depends(get_db)):
    """All subscriptions ordered by next billing date (only active ones with ?active=true)"""
    if active:
        return list_active_subscriptions(db)
    return list_subscriptions(db)


@router.get("/due", response_model=list[SubscriptionResponse])
def list_due(days: int = Query(7, ge=0), db: Session = Depends(get_db)):
    """Active subscriptions billing within the next N days (overdue included)"""
    return list_due_by(db, days)


@router.get("/{sub_id}", response_model=SubscriptionResponse)
def get_one(sub_id: str, db: Session = Depends(get_db)):
    sub = get_subscription(db, sub_id)
    if sub is None:
        raise HTTPException(status_code=404, detail=f"Subscription not found: {sub_id}")
    return sub


@router.patch("/{sub_id}", response_model=SubscriptionResponse)
def update_subscription(
    sub_id: str,
    req: UpdateSubscriptionRequest,
    db: Session = Depends(get_db),
    reminders: ReminderScheduler = Depends(get_reminders),
):
    try:
        return UpdateSubscriptionUseCase(db, reminders).execute(sub_id, req.to_update())
    except (ValidationError, NotFoundError) as e:
        _raise_http(e)


@router.delete("/{sub_id}", status_code=204)
def delete_subscription(
    sub_id: str,
    db: Session = Depends(get_db),
    reminders: ReminderScheduler = Depends(get_reminders),
):
    """Idempotent: deleting an unknown id succeeds"""
    DeleteSubscriptionUseCase(db, reminders).execute(sub_id)
    return Response(status_code=204)


@router.post("/{sub_id}/mark-paid", response_model=SubscriptionResponse)
def mark_paid(
    sub_id: str,
    db: Session = Depends(get_db),
    reminders: ReminderScheduler = Depends(get_reminders),
):
    try:
        return MarkPaidUseCase(db, reminders).execute(sub_id)
    except NotFoundError as e:
        _raise_http(e)


@router.post("/{sub_id}/toggle-active", response_model=SubscriptionResponse)
def toggle_active(
    sub_id: str,
    db: Session = Depends(get_db),
    reminders: ReminderScheduler = Depends(get_reminders),
):
    try:
        return ToggleActiveUseCase(db, reminders).execute(sub_id)
    except NotFoundError as e:
        _raise_http(e)
