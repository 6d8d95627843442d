"""
Role Routes
Organization role management and global roles
"""

from typing import List
from uuid import UUID
from fastapi import APIRouter, Depends, status
from app.auth import require_permission
from app.schemas.common import Envelope
from app.schemas.role import RoleResponse, CreateGlobalRoleRequest, UpdateRoleRequest
from app.services.role_service import role_service

router = APIRouter()


@router.get("/organizations/{organization_id}/roles", response_model=Envelope[List[RoleResponse]])
async def get_organization_roles(
    organization_id: UUID,
    current_user: dict = Depends(require_permission("view_roles"))
):
    roles = await role_service.get_roles_by_organization(str(organization_id))
    return {"success": True, "data": roles}


@router.put("/organizations/{organization_id}/roles/{role_id}", response_model=Envelope[RoleResponse])
async def update_organization_role(
    organization_id: UUID,
    role_id: UUID,
    request: UpdateRoleRequest,
    current_user: dict = Depends(require_permission("manage_organization_roles"))
):
    """
    Rename a role and/or replace its permissions

    - **permissions**: permission ids, all organization scoped. Omit it to keep the
      current permissions; an empty list removes every permission from the role.
    """
    role = await role_service.update_organization_role(
        str(organization_id),
        str(role_id),
        name=request.name,
        permission_ids=[str(p) for p in request.permissions] if request.permissions is not None else None
    )
    return {"success": True, "data": role, "message": "Role updated successfully"}


@router.post("/global", response_model=Envelope[RoleResponse], status_code=status.HTTP_201_CREATED)
async def create_global_role(
    request: CreateGlobalRoleRequest,
    current_user: dict = Depends(require_permission("manage_global_roles"))
):
    role = await role_service.create_global_role(request.role_name, request.permissions)
    return {"success": True, "data": role, "message": "Global role created successfully"}
