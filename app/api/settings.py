"""API endpoints for hydration goal and reminder settings."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from app.database import get_db
from app.services.auth.dependencies import get_request_context
from app.services.context import RequestContext
from app.services.settings_service import default_settings, settings_service

router = APIRouter(prefix="/settings", tags=["settings"])

HH_MM = r"^([01]\d|2[0-3]):[0-5]\d$"


class SettingsPayload(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    daily_goal: int = Field(ge=500, le=10000)
    goal_unit: str = Field("ml", min_length=1, max_length=10)
    notifications_enabled: bool
    reminder_interval_minutes: int = Field(ge=15, le=240)
    quiet_hours_enabled: bool
    quiet_hours_start: str = Field(pattern=HH_MM)
    quiet_hours_end: str = Field(pattern=HH_MM)


@router.get("")
async def get_settings(
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """
    Get the caller's settings.

    Returns the stored settings, or null settings plus the defaults that apply.
    """
    row = settings_service.get_settings(db, ctx.user_id)
    if row is None:
        return {"settings": None, "defaults": default_settings()}
    return {"settings": SettingsPayload.model_validate(row), "defaults": None}


@router.put("")
async def save_settings(
    body: SettingsPayload,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """Create or update the caller's settings."""
    row = settings_service.save_settings(db, ctx, **body.model_dump())
    return {"settings": SettingsPayload.model_validate(row)}


@router.post("/notifications/register")
async def register_for_notifications(
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """Enable reminders, creating default settings when none exist."""
    settings_service.register_for_notifications(db, ctx)
    return {
        "success": True,
        "user_id": str(ctx.user_id),
        "message": "Successfully registered for notifications",
    }
