"""
Turf Review Request/Response Models
"""

from pydantic import BaseModel, Field, AliasChoices
from typing import Optional, List, Dict, Literal
from datetime import datetime
from uuid import UUID

SORTABLE_FIELDS = {
    "createdAt": "created_at",
    "created_at": "created_at",
    "updatedAt": "updated_at",
    "updated_at": "updated_at",
    "rating": "rating",
}


class CreateReviewRequest(BaseModel):
    """Request to review a turf"""
    turf_id: UUID = Field(..., validation_alias=AliasChoices("turfId", "turf_id"))
    rating: int = Field(..., ge=1, le=5)
    review: Optional[str] = Field(None, max_length=1000)
    images: List[str] = Field(default_factory=list, max_length=5)

    class Config:
        example = {
            "turfId": "0b9f6f8e-1d1a-4a4e-9a55-1b2a2c3d4e5f",
            "rating": 5,
            "review": "Great surface, lights were on time.",
            "images": []
        }


class UpdateReviewRequest(BaseModel):
    """Every field is optional, only supplied ones are applied"""
    rating: Optional[int] = Field(None, ge=1, le=5)
    review: Optional[str] = Field(None, max_length=1000)
    images: Optional[List[str]] = Field(None, max_length=5)


class ReviewFilterOptions(BaseModel):
    min_rating: Optional[int] = Field(None, ge=1, le=5)
    max_rating: Optional[int] = Field(None, ge=1, le=5)
    limit: int = Field(10, ge=1, le=100)
    skip: int = Field(0, ge=0)
    sort_by: str = "created_at"
    sort_order: Literal["asc", "desc"] = "desc"


class ReviewUserSummary(BaseModel):
    id: UUID
    first_name: str
    last_name: str
    email: str
    is_verified: bool


class ReviewTurfSummary(BaseModel):
    id: UUID
    name: str
    organization_id: UUID
    sports: List[str]
    team_size: int


class ReviewResponse(BaseModel):
    """Review details with optional counterpart summaries"""
    id: UUID
    turf_id: UUID
    user_id: UUID
    rating: int
    review: Optional[str]
    images: List[str]
    user: Optional[ReviewUserSummary] = None
    turf: Optional[ReviewTurfSummary] = None
    created_at: datetime
    updated_at: datetime


class ReviewListData(BaseModel):
    reviews: List[ReviewResponse]
    average_rating: float = Field(..., serialization_alias="averageRating")
    rating_distribution: Dict[int, int] = Field(..., serialization_alias="ratingDistribution")


class ReviewListResponse(BaseModel):
    success: bool = True
    data: ReviewListData
    meta: Dict[str, int]
