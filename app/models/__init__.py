"""
Database models for HydroBuddy.

Import all models here so Alembic can detect them for migrations.
"""

from app.database import Base
from app.models.user import User
from app.models.session import Session
from app.models.user_profile import UserProfile
from app.models.friendship import Friendship, FriendshipStatus
from app.models.water_intake import WaterIntake
from app.models.user_settings import UserSettings

__all__ = [
    "Base",
    "User",
    "Session",
    "UserProfile",
    "Friendship",
    "FriendshipStatus",
    "WaterIntake",
    "UserSettings",
]
