"""
Database Models
Import all models here for Alembic migrations
"""

from app.models.user import User, UserOrganizationRole, Token
from app.models.role import Role, Permission, RolePermission
from app.models.organization import Organization, OrganizationFacility
from app.models.turf import Turf, TurfSport, TurfOperatingHours
from app.models.review import TurfReview

__all__ = [
    "User",
    "UserOrganizationRole",
    "Token",
    "Role",
    "Permission",
    "RolePermission",
    "Organization",
    "OrganizationFacility",
    "Turf",
    "TurfSport",
    "TurfOperatingHours",
    "TurfReview",
]
