"""
Organization Model
Tenants that own one or more turfs
"""

from sqlalchemy import Column, String, Float, Text, DateTime, ForeignKey, Index, func
from sqlalchemy.orm import relationship
from app.database import Base


class Organization(Base):
    __tablename__ = "organizations"
    __table_args__ = (
        Index("ix_organizations_lat_lng", "latitude", "longitude"),
    )

    id = Column(String(36), primary_key=True)
    name = Column(String(200), nullable=False, index=True)

    # Location (GeoJSON point is stored as two columns)
    place_id = Column(String(255), nullable=False)
    address = Column(String(500), nullable=False)
    area = Column(String(200), nullable=True)
    sub_area = Column(String(200), nullable=True)
    city = Column(String(100), nullable=False, index=True)
    post_code = Column(String(20), nullable=True)
    longitude = Column(Float, nullable=False)
    latitude = Column(Float, nullable=False)

    # JSON encoded list of hosted image URLs
    images = Column(Text, nullable=False, default="[]")
    # JSON encoded {action: [role names]}
    permissions = Column(Text, nullable=False, default="{}")

    owner_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    owner = relationship("User", foreign_keys=[owner_id])


class OrganizationFacility(Base):
    __tablename__ = "organization_facilities"

    organization_id = Column(
        String(36), ForeignKey("organizations.id", ondelete="CASCADE"), primary_key=True
    )
    facility = Column(String(100), primary_key=True)
