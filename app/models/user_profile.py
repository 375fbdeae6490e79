"""Public profile used for friend discovery and leaderboard display."""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from app.database import Base


class UserProfile(Base):
    """One profile per user, carrying the shareable friend code."""

    __tablename__ = "user_profiles"

    id = Column(Integer, primary_key=True)
    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    display_name = Column(String(50), nullable=False)
    email = Column(String(255), nullable=False)
    avatar_path = Column(String(512), nullable=True)
    friend_code = Column(String(10), unique=True, index=True, nullable=False)  # immutable
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="profile")
