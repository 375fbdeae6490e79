"""Consecutive-day logging streaks computed from raw intake timestamps."""

from datetime import date, timedelta
from typing import Optional
from uuid import UUID
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from app.config import settings
from app.models.water_intake import WaterIntake
from app.services.periods import app_timezone, day_bounds


class StreakService:
    """Service for streak calculation."""

    @staticmethod
    def has_intake_on(
        db: Session, user_id: UUID, day: date, tz: Optional[ZoneInfo] = None
    ) -> bool:
        """True if the user logged at least one drink on the given local date."""
        start, end = day_bounds(day, tz)
        return (
            db.query(WaterIntake.id)
            .filter(
                WaterIntake.user_id == user_id,
                WaterIntake.logged_at >= start,
                WaterIntake.logged_at < end,
            )
            .first()
            is not None
        )

    @staticmethod
    def compute_streak(
        db: Session, user_id: UUID, today: date, lookback_days: Optional[int] = None
    ) -> int:
        """
        Count consecutive days with at least one intake, walking back from today.

        Today having no records yet does not break the streak; the walk moves on
        to yesterday without counting today. The first earlier day with no
        records ends it. At most `lookback_days` days are inspected.

        Args:
            db: Database session
            user_id: User whose streak to compute
            today: Local date the walk starts from
            lookback_days: Bound on the walk (defaults to settings)

        Returns:
            Streak length in days
        """
        if lookback_days is None:
            lookback_days = settings.streak_lookback_days
        tz = app_timezone()

        streak = 0
        for offset in range(lookback_days):
            day = today - timedelta(days=offset)
            if StreakService.has_intake_on(db, user_id, day, tz):
                streak += 1
            elif offset == 0:
                continue
            else:
                break
        return streak


# Singleton instance
streak_service = StreakService()
