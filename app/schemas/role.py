"""
Role and Permission Request/Response Models
"""

from pydantic import BaseModel, Field, AliasChoices
from typing import Optional, List
from datetime import datetime
from uuid import UUID


class PermissionResponse(BaseModel):
    id: UUID
    name: str
    description: Optional[str]
    scope: str


class RoleResponse(BaseModel):
    """Role with its permissions"""
    id: UUID
    name: str
    scope: str
    scope_id: Optional[UUID]
    is_default: bool
    permissions: List[PermissionResponse]
    created_at: datetime


class CreateGlobalRoleRequest(BaseModel):
    role_name: str = Field(
        ..., min_length=1, max_length=100,
        validation_alias=AliasChoices("roleName", "role_name")
    )
    permissions: List[str] = Field(..., min_length=1, description="Permission names")


class UpdateRoleRequest(BaseModel):
    """Rename a role and/or replace its permission ids"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    permissions: Optional[List[UUID]] = None
