"""
Pydantic schemas for request/response validation
"""

from app.schemas.common import Envelope, MessageResponse, PageMeta
from app.schemas.organization import Location, OrganizationResponse
from app.schemas.turf import OperatingHours, TurfData, TurfFilter, TurfResponse
from app.schemas.review import CreateReviewRequest, UpdateReviewRequest, ReviewFilterOptions, ReviewResponse
from app.schemas.role import RoleResponse
from app.schemas.user import RegisterRequest, UserResponse

__all__ = [
    "Envelope",
    "MessageResponse",
    "PageMeta",
    "Location",
    "OrganizationResponse",
    "OperatingHours",
    "TurfData",
    "TurfFilter",
    "TurfResponse",
    "CreateReviewRequest",
    "UpdateReviewRequest",
    "ReviewFilterOptions",
    "ReviewResponse",
    "RoleResponse",
    "RegisterRequest",
    "UserResponse",
]
