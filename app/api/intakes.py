"""API endpoints for water intake logging."""

from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.models.water_intake import WaterIntake
from app.services.auth.dependencies import get_request_context
from app.services.context import RequestContext
from app.services.file_service import file_service
from app.services.intake_service import intake_service
from app.services.periods import as_utc

router = APIRouter(prefix="/intakes", tags=["intakes"])


# =============================================================================
# Request/Response Models
# =============================================================================


class IntakeResponse(BaseModel):
    id: int
    amount: int
    unit: str
    logged_at: datetime
    photo_url: Optional[str]


class UpdateIntakeRequest(BaseModel):
    amount: Optional[int] = Field(None, ge=1, le=settings.max_intake_amount)
    unit: Optional[str] = Field(None, min_length=1, max_length=10)


class DailySummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_intake: int
    daily_goal: int
    percentage: int
    entries_count: int
    unit: str


def _intake_response(intake: WaterIntake) -> IntakeResponse:
    return IntakeResponse(
        id=intake.id,
        amount=intake.amount,
        unit=intake.unit,
        logged_at=as_utc(intake.logged_at),
        photo_url=file_service.get_file_url(intake.photo_path),
    )


def _intake_list(intakes: List[WaterIntake]) -> List[IntakeResponse]:
    return [_intake_response(i) for i in intakes]


# =============================================================================
# Endpoints
# =============================================================================


@router.post("", status_code=201)
async def create_intake(
    amount: int = Form(..., ge=1, le=settings.max_intake_amount),
    unit: str = Form("ml"),
    photo: UploadFile = File(...),
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """Log a drink with its mandatory verification photo."""
    contents = await photo.read()
    intake = intake_service.create_intake(
        db, ctx, amount=amount, photo=contents,
        photo_content_type=photo.content_type, unit=unit,
    )
    return {"intake": _intake_response(intake)}


@router.get("/today")
async def get_today_intakes(
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """Today's intakes, newest first."""
    intakes = intake_service.get_today_intakes(db, ctx)
    return {"intakes": _intake_list(intakes), "total": len(intakes)}


@router.get("/summary", response_model=DailySummaryResponse)
async def get_daily_summary(
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """Today's total against the daily goal."""
    return DailySummaryResponse.model_validate(
        intake_service.get_daily_summary(db, ctx)
    )


@router.get("/date/{day}")
async def get_intakes_by_date(
    day: date,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """Intakes logged on a given local date (YYYY-MM-DD)."""
    intakes = intake_service.get_intakes_for_date(db, ctx, day)
    return {
        "intakes": _intake_list(intakes),
        "total": len(intakes),
        "total_amount": sum(i.amount for i in intakes),
        "date": day.isoformat(),
    }


@router.get("/history")
async def get_intake_history(
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """Intake history in an optional [start_date, end_date) range, grouped by date."""
    if start_date and end_date and as_utc(start_date) >= as_utc(end_date):
        raise HTTPException(status_code=400, detail="start_date must be before end_date")

    intakes = intake_service.get_history(db, ctx, start=start_date, end=end_date)
    grouped = intake_service.group_by_date(intakes)
    return {
        "intakes": _intake_list(intakes),
        "total": len(intakes),
        "by_date": {
            day.isoformat(): {
                "total": bucket["total"],
                "count": bucket["count"],
                "entries": _intake_list(bucket["entries"]),
            }
            for day, bucket in grouped.items()
        },
    }


@router.patch("/{intake_id}")
async def update_intake(
    intake_id: int,
    body: UpdateIntakeRequest,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """Correct the amount or unit of an intake."""
    intake = intake_service.update_intake(
        db, ctx, intake_id, amount=body.amount, unit=body.unit
    )
    return {"intake": _intake_response(intake)}


@router.delete("/{intake_id}")
async def delete_intake(
    intake_id: int,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """Delete an intake and its photo."""
    intake_service.delete_intake(db, ctx, intake_id)
    return {"success": True}
