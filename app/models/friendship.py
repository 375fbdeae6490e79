from sqlalchemy import (
    Column,
    Integer,
    DateTime,
    ForeignKey,
    Enum,
    Index,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.sql import func
import enum

from app.database import Base


class FriendshipStatus(str, enum.Enum):
    """Lifecycle state of a directed friendship edge."""
    PENDING = "pending"
    ACCEPTED = "accepted"


class Friendship(Base):
    """
    Directed friendship edge: user_id -> friend_user_id.

    An accepted friendship is stored as two rows, one per direction.
    A pending request is a single row owned by the requester.
    """
    __tablename__ = "friendships"

    id = Column(Integer, primary_key=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    friend_user_id = Column(Uuid(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    status = Column(Enum(FriendshipStatus), nullable=False, default=FriendshipStatus.PENDING)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint('user_id', 'friend_user_id', name='uq_friendships_direction'),
        Index('idx_friendships_friend_user_id', 'friend_user_id'),
        Index('idx_friendships_user_status', 'user_id', 'status'),
    )
