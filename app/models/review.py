"""
Turf Review Model
One review per (user, turf)
"""

from sqlalchemy import (
    Column, String, Integer, Text, DateTime, ForeignKey, UniqueConstraint, CheckConstraint, func
)
from sqlalchemy.orm import relationship
from app.database import Base


class TurfReview(Base):
    __tablename__ = "turf_reviews"
    __table_args__ = (
        UniqueConstraint("turf_id", "user_id", name="uq_turf_reviews_turf_user"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_turf_reviews_rating"),
    )

    id = Column(String(36), primary_key=True)
    turf_id = Column(String(36), ForeignKey("turfs.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    review = Column(Text, nullable=True)
    images = Column(Text, nullable=False, default="[]")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    turf = relationship("Turf", backref="reviews")
    user = relationship("User", backref="reviews")
