"""
Turf Request/Response Models
"""

from pydantic import BaseModel, Field, RootModel, field_validator, model_validator
from typing import Optional, List, Dict
from datetime import datetime
from uuid import UUID
from app.constants import WEEKDAYS
from app.schemas.common import PageMeta

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class OpeningWindow(BaseModel):
    """Opening window for one day, HH:MM 24h clock"""
    open: str = Field(..., pattern=TIME_PATTERN)
    close: str = Field(..., pattern=TIME_PATTERN)

    @model_validator(mode="after")
    def check_order(self):
        if self.open >= self.close:
            raise ValueError("open must be earlier than close")
        return self


class OperatingHours(RootModel[Dict[str, OpeningWindow]]):
    """weekday -> opening window; days that are absent are closed"""

    @field_validator("root", mode="before")
    @classmethod
    def normalize_days(cls, value):
        if not isinstance(value, dict):
            raise ValueError("operatingHours must be an object keyed by weekday")
        normalized = {}
        for day, window in value.items():
            key = str(day).strip().lower()
            if key not in WEEKDAYS:
                raise ValueError(f"unknown weekday '{day}'")
            normalized[key] = window
        return normalized


class TurfData(BaseModel):
    """Validated turf fields, produced once from the multipart form"""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    organization_id: Optional[UUID] = None
    sports: Optional[List[str]] = None
    base_price: Optional[float] = Field(None, ge=0)
    team_size: Optional[int] = Field(None, gt=0)
    operating_hours: Optional[OperatingHours] = None


class ReviewSummary(BaseModel):
    average_rating: float = Field(0, serialization_alias="averageRating")
    review_count: int = Field(0, serialization_alias="reviewCount")


class TurfResponse(BaseModel):
    """Turf details"""
    id: UUID
    organization_id: UUID
    name: str
    sports: List[str]
    base_price: float
    team_size: int
    operating_hours: Dict[str, OpeningWindow]
    images: List[str]
    reviews: List[UUID] = Field(default_factory=list)
    review_summary: Optional[ReviewSummary] = None
    distance_km: Optional[float] = None
    created_at: datetime
    updated_at: datetime


class TurfListResponse(BaseModel):
    success: bool = True
    data: List[TurfResponse]
    meta: PageMeta


class TurfFilter(BaseModel):
    """Typed filter options for turf search"""
    min_price: Optional[float] = Field(None, ge=0)
    max_price: Optional[float] = Field(None, ge=0)
    team_size: Optional[int] = Field(None, gt=0)
    sports: List[str] = Field(default_factory=list)
    facilities: List[str] = Field(default_factory=list)
    preferred_day: Optional[str] = None
    preferred_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    radius_km: float = Field(10, gt=0)
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)

    @field_validator("preferred_day")
    @classmethod
    def check_day(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        day = value.strip().lower()
        if day not in WEEKDAYS:
            raise ValueError(f"must be one of {', '.join(WEEKDAYS)}")
        return day

    @model_validator(mode="after")
    def check_combinations(self):
        if self.min_price is not None and self.max_price is not None and self.min_price > self.max_price:
            raise ValueError("minPrice cannot be greater than maxPrice")
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be provided together")
        if self.preferred_time and not self.preferred_day:
            raise ValueError("preferredTime requires preferredDay")
        return self

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None
