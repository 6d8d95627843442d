"""
Turf Models
Bookable sports facilities and their schedule
"""

from sqlalchemy import Column, String, Float, Integer, Text, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from app.database import Base


class Turf(Base):
    __tablename__ = "turfs"

    id = Column(String(36), primary_key=True)
    organization_id = Column(
        String(36), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(200), nullable=False)
    base_price = Column(Float, nullable=False, default=0, index=True)
    team_size = Column(Integer, nullable=False)
    images = Column(Text, nullable=False, default="[]")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    organization = relationship("Organization", backref="turfs")


class TurfSport(Base):
    __tablename__ = "turf_sports"

    turf_id = Column(String(36), ForeignKey("turfs.id", ondelete="CASCADE"), primary_key=True)
    sport = Column(String(50), primary_key=True)


class TurfOperatingHours(Base):
    __tablename__ = "turf_operating_hours"

    turf_id = Column(String(36), ForeignKey("turfs.id", ondelete="CASCADE"), primary_key=True)
    day = Column(String(10), primary_key=True)  # monday..sunday
    open_time = Column(String(5), nullable=False)  # HH:MM
    close_time = Column(String(5), nullable=False)
