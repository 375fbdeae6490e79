"""Business logic for water intake records."""

import logging
from collections import OrderedDict
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.models.water_intake import WaterIntake
from app.services.context import RequestContext
from app.services.errors import InvalidOperationError, NotFoundError, UnauthorizedError
from app.services.file_service import INTAKE_PHOTO_DIR, file_service
from app.services.leaderboard_service import daily_percentage
from app.services.periods import PeriodWindows, app_timezone, as_utc, day_bounds, local_date
from app.services.settings_service import settings_service

logger = logging.getLogger(__name__)


@dataclass
class DailySummary:
    total_intake: int
    daily_goal: int
    percentage: int
    entries_count: int
    unit: str


def _validate_amount(amount: int) -> None:
    if not 1 <= amount <= settings.max_intake_amount:
        raise InvalidOperationError(
            f"Amount must be between 1 and {settings.max_intake_amount}"
        )


class IntakeService:
    """Service for intake-related operations."""

    @staticmethod
    def create_intake(
        db: Session,
        ctx: RequestContext,
        amount: int,
        photo: bytes,
        photo_content_type: Optional[str],
        unit: str = "ml",
    ) -> WaterIntake:
        """
        Log a drink. The verification photo is mandatory.

        Args:
            db: Database session
            ctx: Request context (timestamp is ctx.now)
            amount: Positive amount, at most settings.max_intake_amount
            photo: Raw image bytes
            photo_content_type: MIME type of the photo
            unit: Amount unit

        Returns:
            Created WaterIntake object
        """
        _validate_amount(amount)

        try:
            photo_path = file_service.save_image(INTAKE_PHOTO_DIR, photo, photo_content_type)
        except ValueError as e:
            raise InvalidOperationError(str(e)) from e

        intake = WaterIntake(
            user_id=ctx.user_id,
            amount=amount,
            unit=unit,
            logged_at=ctx.now,
            photo_path=photo_path,
        )
        db.add(intake)
        try:
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            if not file_service.delete_file(photo_path):
                logger.warning("Orphaned intake photo %s was not removed", photo_path)
            raise
        db.refresh(intake)
        return intake

    @staticmethod
    def _owned_intake(db: Session, ctx: RequestContext, intake_id: int) -> WaterIntake:
        intake = db.get(WaterIntake, intake_id)
        if intake is None:
            raise NotFoundError("Intake not found")
        if intake.user_id != ctx.user_id:
            raise UnauthorizedError("Intake belongs to another user")
        return intake

    @staticmethod
    def get_intakes_for_date(db: Session, ctx: RequestContext, day: date) -> List[WaterIntake]:
        """The caller's intakes on a local date, newest first."""
        start, end = day_bounds(day)
        return (
            db.query(WaterIntake)
            .filter(
                WaterIntake.user_id == ctx.user_id,
                WaterIntake.logged_at >= start,
                WaterIntake.logged_at < end,
            )
            .order_by(WaterIntake.logged_at.desc())
            .all()
        )

    @staticmethod
    def get_today_intakes(db: Session, ctx: RequestContext) -> List[WaterIntake]:
        """The caller's intakes for today, newest first."""
        return IntakeService.get_intakes_for_date(db, ctx, PeriodWindows.at(ctx.now).today)

    @staticmethod
    def get_history(
        db: Session,
        ctx: RequestContext,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[WaterIntake]:
        """The caller's intakes in [start, end), newest first, capped."""
        query = db.query(WaterIntake).filter(WaterIntake.user_id == ctx.user_id)
        if start is not None:
            query = query.filter(WaterIntake.logged_at >= as_utc(start))
        if end is not None:
            query = query.filter(WaterIntake.logged_at < as_utc(end))
        return (
            query.order_by(WaterIntake.logged_at.desc())
            .limit(settings.intake_history_limit)
            .all()
        )

    @staticmethod
    def group_by_date(intakes: List[WaterIntake]) -> Dict[date, dict]:
        """
        Bucket intakes by local date for calendar display.

        Returns {date: {"total": int, "count": int, "entries": [...]}} keeping
        the input order of both dates and entries.
        """
        tz = app_timezone()
        by_date: Dict[date, dict] = OrderedDict()
        for intake in intakes:
            day = local_date(intake.logged_at, tz)
            bucket = by_date.setdefault(day, {"total": 0, "count": 0, "entries": []})
            bucket["total"] += intake.amount
            bucket["count"] += 1
            bucket["entries"].append(intake)
        return by_date

    @staticmethod
    def update_intake(
        db: Session,
        ctx: RequestContext,
        intake_id: int,
        amount: Optional[int] = None,
        unit: Optional[str] = None,
    ) -> WaterIntake:
        """Correct the amount and/or unit of one of the caller's intakes."""
        intake = IntakeService._owned_intake(db, ctx, intake_id)

        if amount is not None:
            _validate_amount(amount)
            intake.amount = amount
        if unit is not None:
            intake.unit = unit

        db.commit()
        db.refresh(intake)
        return intake

    @staticmethod
    def delete_intake(db: Session, ctx: RequestContext, intake_id: int) -> None:
        """
        Delete one of the caller's intakes and its photo.

        The photo is removed best-effort; a failed delete is logged only.
        """
        intake = IntakeService._owned_intake(db, ctx, intake_id)
        photo_path = intake.photo_path

        if photo_path and not file_service.delete_file(photo_path):
            logger.warning("Photo %s for intake %s was not removed", photo_path, intake_id)

        db.delete(intake)
        db.commit()

    @staticmethod
    def get_daily_summary(db: Session, ctx: RequestContext) -> DailySummary:
        """Today's total against the caller's goal."""
        intakes = IntakeService.get_today_intakes(db, ctx)
        total = sum(i.amount for i in intakes)
        goal = settings_service.get_daily_goal(db, ctx.user_id)
        return DailySummary(
            total_intake=total,
            daily_goal=goal,
            percentage=daily_percentage(total, goal),
            entries_count=len(intakes),
            unit=settings_service.get_goal_unit(db, ctx.user_id),
        )


# Singleton instance
intake_service = IntakeService()
