"""
Organization Request/Response Models
"""

from pydantic import BaseModel, Field, AliasChoices, RootModel, field_validator
from typing import Optional, Literal, List, Dict
from datetime import datetime
from uuid import UUID


class Coordinates(BaseModel):
    """GeoJSON point, coordinates are [longitude, latitude]"""
    type: Literal["Point"] = "Point"
    coordinates: List[float] = Field(..., min_length=2, max_length=2)

    @field_validator("coordinates")
    @classmethod
    def check_range(cls, value: List[float]) -> List[float]:
        lng, lat = value
        if not -180 <= lng <= 180:
            raise ValueError("longitude must be between -180 and 180")
        if not -90 <= lat <= 90:
            raise ValueError("latitude must be between -90 and 90")
        return value


class Location(BaseModel):
    """Geocoded organization address"""
    place_id: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    coordinates: Coordinates
    area: Optional[str] = None
    sub_area: Optional[str] = None
    city: str = Field(..., min_length=1)
    post_code: Optional[str] = None

    class Config:
        example = {
            "place_id": "ChIJ2fzCmcW7j4AR2JzfXBBoh6E",
            "address": "12 Park Street",
            "coordinates": {"type": "Point", "coordinates": [88.3639, 22.5726]},
            "city": "Kolkata",
            "post_code": "700016"
        }

    @property
    def longitude(self) -> float:
        return self.coordinates.coordinates[0]

    @property
    def latitude(self) -> float:
        return self.coordinates.coordinates[1]


class OrganizationResponse(BaseModel):
    """Organization details"""
    id: UUID
    name: str
    facilities: List[str]
    location: Location
    images: List[str]
    owner_id: Optional[UUID]
    permissions: Dict[str, List[str]]
    created_at: datetime
    updated_at: datetime


class OrganizationListResponse(BaseModel):
    success: bool = True
    total: int
    data: List[OrganizationResponse]


class AssignOwnerRequest(BaseModel):
    """Request to make a user the organization owner"""
    user_id: UUID = Field(..., validation_alias=AliasChoices("userId", "user_id"))


class UpdatePermissionsRequest(BaseModel):
    """action name -> roles allowed to perform it"""
    permissions: Dict[str, List[str]]

    class Config:
        example = {"permissions": {"edit_turf": ["owner", "manager"], "view_bookings": ["staff"]}}


class CreateOrganizationRoleRequest(BaseModel):
    role_name: str = Field(
        ..., min_length=1, max_length=100,
        validation_alias=AliasChoices("roleName", "role_name")
    )
    permissions: List[str] = Field(..., min_length=1, description="Permission names")


class ImageUrlList(RootModel[List[str]]):
    """JSON array of image URLs (imagesToKeep)"""
