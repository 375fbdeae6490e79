from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from app.database import Base


class UserSettings(Base):
    """Hydration goal and reminder preferences. Defaults apply when absent."""
    __tablename__ = "user_settings"

    id = Column(Integer, primary_key=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)

    # Goal
    daily_goal = Column(Integer, nullable=False, default=2000)
    goal_unit = Column(String(10), nullable=False, default="ml")

    # Reminders
    notifications_enabled = Column(Boolean, nullable=False, default=True)
    reminder_interval_minutes = Column(Integer, nullable=False, default=60)
    quiet_hours_enabled = Column(Boolean, nullable=False, default=True)
    quiet_hours_start = Column(String(5), nullable=False, default="22:00")  # HH:MM
    quiet_hours_end = Column(String(5), nullable=False, default="07:00")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="settings")

    __table_args__ = (
        UniqueConstraint('user_id', name='uq_user_settings_user_id'),
    )
