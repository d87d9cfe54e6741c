"""
Settings API endpoints
"""
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from subtracker.api.deps import get_db, get_reminders
from subtracker.application.app_settings import get_app_settings
from subtracker.application.settings_usecases import UpdateAppSettingsUseCase
from subtracker.application.reminders import ReminderScheduler
from subtracker.domain.errors import ValidationError


router = APIRouter(prefix="/api/v1/settings", tags=["settings"])


class SettingsResponse(BaseModel):
    default_currency: str
    default_reminder_days: list[int]
    notifications_enabled: bool
    show_amount_in_notifications: bool


class UpdateSettingsRequest(BaseModel):
    default_currency: str | None = None
    default_reminder_days: list[int] | None = None
    notifications_enabled: bool | None = None
    show_amount_in_notifications: bool | None = None


@router.get("/", response_model=SettingsResponse)
def read_settings(db: Session = Depends(get_db)):
    return SettingsResponse(**asdict(get_app_settings(db)))


@router.patch("/", response_model=SettingsResponse)
def update_settings(
    req: UpdateSettingsRequest,
    db: Session = Depends(get_db),
    reminders: ReminderScheduler = Depends(get_reminders),
):
    """Turning notifications off cancels every pending reminder; turning them on reschedules"""
    try:
        updated = UpdateAppSettingsUseCase(db, reminders).execute(**req.model_dump())
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return SettingsResponse(**asdict(updated))
