"""Business logic for user hydration settings."""

import logging
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.config import settings as app_settings
from app.models.user_settings import UserSettings
from app.services.context import RequestContext

logger = logging.getLogger(__name__)


def default_settings() -> Dict[str, Any]:
    """Values that apply to a user who has never saved settings."""
    return {
        "daily_goal": app_settings.default_daily_goal,
        "goal_unit": app_settings.default_goal_unit,
        "notifications_enabled": True,
        "reminder_interval_minutes": 60,
        "quiet_hours_enabled": True,
        "quiet_hours_start": "22:00",
        "quiet_hours_end": "07:00",
    }


class SettingsService:
    """Service for settings lookup and upsert."""

    @staticmethod
    def get_settings(db: Session, user_id: UUID) -> Optional[UserSettings]:
        """Get the stored settings row, or None if the user never saved any."""
        return db.query(UserSettings).filter(UserSettings.user_id == user_id).first()

    @staticmethod
    def get_daily_goal(db: Session, user_id: UUID) -> int:
        """The user's daily goal, or the default when unset."""
        row = SettingsService.get_settings(db, user_id)
        if row and row.daily_goal:
            return row.daily_goal
        return app_settings.default_daily_goal

    @staticmethod
    def get_goal_unit(db: Session, user_id: UUID) -> str:
        row = SettingsService.get_settings(db, user_id)
        return row.goal_unit if row else app_settings.default_goal_unit

    @staticmethod
    def save_settings(db: Session, ctx: RequestContext, **fields: Any) -> UserSettings:
        """
        Create the caller's settings row, or update it if it exists.

        Args:
            db: Database session
            ctx: Request context
            **fields: Column values (daily_goal, goal_unit, notifications_enabled,
                reminder_interval_minutes, quiet_hours_enabled,
                quiet_hours_start, quiet_hours_end)

        Returns:
            The stored UserSettings
        """
        row = SettingsService.get_settings(db, ctx.user_id)
        if row is None:
            values = default_settings()
            values.update(fields)
            row = UserSettings(user_id=ctx.user_id, **values)
            db.add(row)
        else:
            for key, value in fields.items():
                setattr(row, key, value)

        db.commit()
        db.refresh(row)
        return row

    @staticmethod
    def register_for_notifications(db: Session, ctx: RequestContext) -> UserSettings:
        """Turn notifications on, creating default settings if none exist."""
        row = SettingsService.get_settings(db, ctx.user_id)
        if row is None:
            row = UserSettings(user_id=ctx.user_id, **default_settings())
            db.add(row)
        elif not row.notifications_enabled:
            row.notifications_enabled = True
        else:
            return row

        db.commit()
        db.refresh(row)
        logger.info("User %s registered for notifications", ctx.user_id)
        return row


# Singleton instance
settings_service = SettingsService()
