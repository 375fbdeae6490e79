"""Friend activity feed derived from raw intake history."""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Optional, Set, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from app.config import settings
from app.models.water_intake import WaterIntake
from app.services.context import RequestContext
from app.services.friend_service import ProfileSummary, friend_service, summarize_profile
from app.services.periods import PeriodWindows, as_utc
from app.services.settings_service import settings_service
from app.services.streak_service import streak_service

INTAKE = "intake"
GOAL_REACHED = "goal_reached"
STREAK = "streak"


@dataclass
class ActivityEvent:
    id: str
    user_id: UUID
    display_name: str
    avatar_url: Optional[str]
    type: str
    message: str
    timestamp: datetime
    amount: Optional[int] = None
    streak: Optional[int] = None


def is_streak_milestone(streak: int, interval: Optional[int] = None) -> bool:
    """Weekly milestones only: 7, 14, 21, ..."""
    interval = interval or settings.streak_milestone_interval
    return streak >= interval and streak % interval == 0


def goal_crossing(intakes: List[WaterIntake], goal: int) -> Optional[WaterIntake]:
    """The record whose running total (chronological) first reaches the goal."""
    running = 0
    for intake in sorted(intakes, key=lambda i: as_utc(i.logged_at)):
        running += intake.amount
        if running >= goal:
            return intake
    return None


class ActivityService:
    """Service for synthesizing the friend activity feed."""

    @staticmethod
    def _recent_intakes(db: Session, user_id: UUID, since: datetime, limit: int) -> List[WaterIntake]:
        return (
            db.query(WaterIntake)
            .filter(WaterIntake.user_id == user_id, WaterIntake.logged_at >= since)
            .order_by(WaterIntake.logged_at.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def _intakes_between(db: Session, user_id: UUID, start: datetime, end: datetime) -> List[WaterIntake]:
        return (
            db.query(WaterIntake)
            .filter(
                WaterIntake.user_id == user_id,
                WaterIntake.logged_at >= start,
                WaterIntake.logged_at < end,
            )
            .all()
        )

    @staticmethod
    def friend_events(
        db: Session,
        friend: ProfileSummary,
        windows: PeriodWindows,
        now: datetime,
        goals_seen: Set[Tuple[UUID, date]],
    ) -> List[ActivityEvent]:
        """
        Events for one friend: recent drinks, today's goal crossing and a
        streak milestone.

        `goals_seen` holds (friend, day) keys already emitted in this build;
        it is updated in place.
        """
        events: List[ActivityEvent] = []
        since = now - timedelta(hours=settings.activity_window_hours)

        for intake in ActivityService._recent_intakes(
            db, friend.user_id, since, settings.activity_intakes_per_friend
        ):
            events.append(
                ActivityEvent(
                    id=str(intake.id),
                    user_id=friend.user_id,
                    display_name=friend.display_name,
                    avatar_url=friend.avatar_url,
                    type=INTAKE,
                    message=f"drank {intake.amount}{intake.unit} of water",
                    timestamp=as_utc(intake.logged_at),
                    amount=intake.amount,
                )
            )

        today_intakes = ActivityService._intakes_between(
            db, friend.user_id, windows.day_start, windows.day_end
        )
        goal = settings_service.get_daily_goal(db, friend.user_id)
        goal_key = (friend.user_id, windows.today)
        if today_intakes and goal_key not in goals_seen:
            if sum(i.amount for i in today_intakes) >= goal:
                crossing = goal_crossing(today_intakes, goal)
                unit = settings_service.get_goal_unit(db, friend.user_id)
                goals_seen.add(goal_key)
                events.append(
                    ActivityEvent(
                        id=f"goal-{friend.user_id}-{windows.today.isoformat()}",
                        user_id=friend.user_id,
                        display_name=friend.display_name,
                        avatar_url=friend.avatar_url,
                        type=GOAL_REACHED,
                        message=f"reached their daily goal of {goal}{unit}! 🎉",
                        timestamp=as_utc(crossing.logged_at),
                    )
                )

        streak = streak_service.compute_streak(db, friend.user_id, windows.today)
        if is_streak_milestone(streak):
            events.append(
                ActivityEvent(
                    id=f"streak-{friend.user_id}-{streak}",
                    user_id=friend.user_id,
                    display_name=friend.display_name,
                    avatar_url=friend.avatar_url,
                    type=STREAK,
                    message=f"is on a {streak}-day hydration streak! 🔥",
                    timestamp=now,
                    streak=streak,
                )
            )

        return events

    @staticmethod
    def compute_activity_feed(db: Session, ctx: RequestContext) -> List[ActivityEvent]:
        """
        Newest-first feed of the caller's friends' activity, capped in size.

        Returns an empty list when the caller has no accepted friends.
        """
        friend_ids = friend_service.accepted_friend_ids(db, ctx.user_id)
        if not friend_ids:
            return []

        windows = PeriodWindows.at(ctx.now)
        profiles = friend_service.get_profiles(db, friend_ids)
        goals_seen: Set[Tuple[UUID, date]] = set()

        activities: List[ActivityEvent] = []
        for friend_id in friend_ids:
            friend = summarize_profile(profiles.get(friend_id), friend_id)
            activities.extend(
                ActivityService.friend_events(db, friend, windows, ctx.now, goals_seen)
            )

        activities.sort(key=lambda a: a.timestamp, reverse=True)
        return activities[: settings.activity_feed_limit]


# Singleton instance
activity_service = ActivityService()
