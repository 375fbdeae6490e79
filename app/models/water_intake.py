from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from app.database import Base


class WaterIntake(Base):
    """A single logged drink with its verification photo."""

    __tablename__ = "water_intakes"

    id = Column(Integer, primary_key=True)
    user_id = Column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    amount = Column(Integer, nullable=False)  # 1..5000
    unit = Column(String(10), nullable=False, default="ml")
    logged_at = Column(DateTime(timezone=True), nullable=False)  # stored as UTC
    photo_path = Column(String(512), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="intakes")

    __table_args__ = (
        Index("idx_water_intakes_user_logged_at", "user_id", "logged_at"),
    )
