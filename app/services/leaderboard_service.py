"""
Daily, weekly and all-time hydration rankings across a user's friend set.

Per-user statistics are computed independently (no shared state between
users) and then gathered and sorted, so the per-user step can be fanned out.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.config import settings
from app.models.user_profile import UserProfile
from app.models.water_intake import WaterIntake
from app.services.context import RequestContext
from app.services.friend_service import friend_service, summarize_profile
from app.services.periods import PeriodWindows, app_timezone, local_date
from app.services.settings_service import settings_service
from app.services.streak_service import streak_service


def daily_percentage(total: int, goal: int) -> int:
    """Share of the goal reached, rounded half up and clamped to [0, 100]."""
    if goal <= 0:
        return 0
    percent = (total * 200 + goal) // (2 * goal)
    return max(0, min(100, percent))


def average_per_day(total: int, days: int) -> int:
    """Integer average rounded half up; 0 when no days have elapsed."""
    if days <= 0:
        return 0
    return (total * 2 + days) // (2 * days)


@dataclass
class LeaderboardEntry:
    user_id: UUID
    is_me: bool
    display_name: str
    avatar_url: Optional[str]
    daily_total: int
    weekly_total: int
    all_time_total: int
    daily_goal: int
    daily_percentage: int
    streak: int
    total_days: int
    avg_daily: int


@dataclass
class Leaderboard:
    daily: List[LeaderboardEntry] = field(default_factory=list)
    weekly: List[LeaderboardEntry] = field(default_factory=list)
    all_time: List[LeaderboardEntry] = field(default_factory=list)


class LeaderboardService:
    """Service for leaderboard aggregation."""

    @staticmethod
    def sum_between(db: Session, user_id: UUID, start, end) -> int:
        """Total amount logged in [start, end)."""
        total = (
            db.query(func.coalesce(func.sum(WaterIntake.amount), 0))
            .filter(
                WaterIntake.user_id == user_id,
                WaterIntake.logged_at >= start,
                WaterIntake.logged_at < end,
            )
            .scalar()
        )
        return int(total or 0)

    @staticmethod
    def all_time_sample(db: Session, user_id: UUID, cap: Optional[int] = None) -> List[WaterIntake]:
        """
        The user's most recent records, capped for cost.

        Totals derived from this sample undercount users with more records
        than the cap.
        """
        if cap is None:
            cap = settings.leaderboard_all_time_cap
        return (
            db.query(WaterIntake)
            .filter(WaterIntake.user_id == user_id)
            .order_by(WaterIntake.logged_at.desc())
            .limit(cap)
            .all()
        )

    @staticmethod
    def compute_user_stats(
        db: Session,
        user_id: UUID,
        windows: PeriodWindows,
        is_me: bool,
        profile: Optional[UserProfile],
    ) -> LeaderboardEntry:
        """Aggregate one user's totals for every period."""
        daily_total = LeaderboardService.sum_between(
            db, user_id, windows.day_start, windows.day_end
        )
        weekly_total = LeaderboardService.sum_between(
            db, user_id, windows.week_start, windows.day_end
        )

        sample = LeaderboardService.all_time_sample(db, user_id)
        tz = app_timezone()
        all_time_total = sum(intake.amount for intake in sample)
        total_days = len({local_date(intake.logged_at, tz) for intake in sample})

        daily_goal = settings_service.get_daily_goal(db, user_id)
        summary = summarize_profile(profile, user_id)

        return LeaderboardEntry(
            user_id=user_id,
            is_me=is_me,
            display_name=summary.display_name,
            avatar_url=summary.avatar_url,
            daily_total=daily_total,
            weekly_total=weekly_total,
            all_time_total=all_time_total,
            daily_goal=daily_goal,
            daily_percentage=daily_percentage(daily_total, daily_goal),
            streak=streak_service.compute_streak(db, user_id, windows.today),
            total_days=total_days,
            avg_daily=average_per_day(weekly_total, windows.days_in_week),
        )

    @staticmethod
    def compute_leaderboard(db: Session, ctx: RequestContext) -> Leaderboard:
        """
        Rank the caller and their accepted friends by daily, weekly and
        all-time totals.

        The caller always appears, even with no friends. Ties keep the order
        of the user set (caller first, then friends by friendship age).
        """
        windows = PeriodWindows.at(ctx.now)

        user_ids = [ctx.user_id]
        for friend_id in friend_service.accepted_friend_ids(db, ctx.user_id):
            if friend_id not in user_ids:
                user_ids.append(friend_id)

        profiles: Dict[UUID, UserProfile] = friend_service.get_profiles(db, user_ids)

        entries = [
            LeaderboardService.compute_user_stats(
                db, user_id, windows, user_id == ctx.user_id, profiles.get(user_id)
            )
            for user_id in user_ids
        ]

        return Leaderboard(
            daily=sorted(entries, key=lambda e: e.daily_total, reverse=True),
            weekly=sorted(entries, key=lambda e: e.weekly_total, reverse=True),
            all_time=sorted(entries, key=lambda e: e.all_time_total, reverse=True),
        )


# Singleton instance
leaderboard_service = LeaderboardService()
