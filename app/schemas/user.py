"""
User Request/Response Models
"""

from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List
from datetime import datetime
from uuid import UUID


class RegisterRequest(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)


class OrganizationRoleAssignment(BaseModel):
    organization_id: UUID
    role_id: UUID
    role_name: str


class UserResponse(BaseModel):
    """User details (never includes the password hash)"""
    id: UUID
    first_name: str
    last_name: str
    email: str
    is_verified: bool
    global_role_id: Optional[UUID] = None
    organization_roles: List[OrganizationRoleAssignment] = Field(default_factory=list)
    reviews: List[UUID] = Field(default_factory=list)
    created_at: datetime
