"""
Organization Routes
Platform-level organization management plus owner, permission map and role endpoints
"""

from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from app.auth import get_current_user, require_permission
from app.schemas.common import Envelope, MessageResponse
from app.schemas.organization import (
    Location,
    ImageUrlList,
    OrganizationResponse,
    OrganizationListResponse,
    AssignOwnerRequest,
    UpdatePermissionsRequest,
    CreateOrganizationRoleRequest,
)
from app.schemas.role import RoleResponse
from app.services.form_parser import form_parser
from app.services.organization_service import organization_service

router = APIRouter()


@router.post("/", response_model=Envelope[OrganizationResponse], status_code=status.HTTP_201_CREATED)
async def create_organization(
    name: str = Form(...),
    facilities: str = Form(...),
    location: str = Form(...),
    images: Optional[List[UploadFile]] = File(None),
    current_user: dict = Depends(require_permission("create_organization"))
):
    """
    Create an organization (multipart)

    - **name**: organization name
    - **facilities**: JSON array or comma separated list
    - **location**: JSON object `{place_id, address, coordinates: {type, coordinates: [lng, lat]}, city, ...}`
    - **images**: up to 5 image files
    """
    facility_list = form_parser.parse_string_list(facilities, "facilities")
    if not facility_list:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="At least one facility is required"
        )

    parsed_location = form_parser.parse_json_model(location, Location, "location")
    if parsed_location is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="location is required"
        )

    organization = await organization_service.create_organization(
        name.strip(), facility_list, parsed_location, images
    )
    return {"success": True, "data": organization, "message": "Organization created successfully"}


@router.get("/", response_model=OrganizationListResponse)
async def list_organizations(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    city: Optional[str] = Query(None)
):
    result = await organization_service.list_organizations(skip, limit, city)
    return {"success": True, "total": result["total"], "data": result["organizations"]}


@router.get("/{organization_id}", response_model=Envelope[OrganizationResponse])
async def get_organization(organization_id: UUID):
    organization = await organization_service.get_organization(str(organization_id))
    return {"success": True, "data": organization}


@router.put("/{organization_id}", response_model=Envelope[OrganizationResponse])
async def update_organization(
    organization_id: UUID,
    name: Optional[str] = Form(None),
    facilities: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    images_to_keep: Optional[str] = Form(None, alias="imagesToKeep"),
    images: Optional[List[UploadFile]] = File(None),
    current_user: dict = Depends(require_permission("update_organization"))
):
    """
    Update an organization (multipart, every field optional)

    - **imagesToKeep**: JSON array of current image URLs to keep; the rest are released
    """
    keep: Optional[List[str]] = None
    if images_to_keep is not None:
        # URLs are case sensitive, so they bypass parse_string_list
        keep = form_parser.parse_json_model(images_to_keep, ImageUrlList, "imagesToKeep").root

    organization = await organization_service.update_organization(
        str(organization_id),
        name=name.strip() if name else None,
        facilities=form_parser.parse_string_list(facilities, "facilities") if facilities is not None else None,
        location=form_parser.parse_json_model(location, Location, "location"),
        new_images=images,
        images_to_keep=keep
    )
    return {"success": True, "data": organization, "message": "Organization updated successfully"}


@router.delete("/{organization_id}", response_model=MessageResponse)
async def delete_organization(
    organization_id: UUID,
    current_user: dict = Depends(require_permission("delete_organization"))
):
    """
    Delete an organization with its turfs, reviews and roles
    """
    await organization_service.delete_organization(str(organization_id))
    return {"success": True, "message": "Organization deleted successfully"}


@router.post("/{organization_id}/assign-owner", response_model=Envelope[OrganizationResponse])
async def assign_owner(
    organization_id: UUID,
    request: AssignOwnerRequest,
    current_user: dict = Depends(require_permission("assign_organization_owner"))
):
    """
    Make a user the owner of an organization (409 when an owner is already set)
    """
    organization = await organization_service.assign_owner_to_organization(
        str(organization_id), str(request.user_id)
    )
    return {"success": True, "data": organization, "message": "Owner assigned successfully"}


@router.put("/{organization_id}/permissions", response_model=Envelope[OrganizationResponse])
async def update_permissions(
    organization_id: UUID,
    request: UpdatePermissionsRequest,
    current_user: dict = Depends(get_current_user)
):
    """
    Replace the organization's action -> roles map (owner only)
    """
    organization = await organization_service.update_organization_permissions(
        str(organization_id), current_user["user_id"], request.permissions
    )
    return {"success": True, "data": organization, "message": "Permissions updated successfully"}


@router.post(
    "/{organization_id}/roles",
    response_model=Envelope[RoleResponse],
    status_code=status.HTTP_201_CREATED
)
async def create_organization_role(
    organization_id: UUID,
    request: CreateOrganizationRoleRequest,
    current_user: dict = Depends(require_permission("manage_organization_roles"))
):
    role = await organization_service.create_organization_role(
        str(organization_id), request.role_name, request.permissions
    )
    return {"success": True, "data": role, "message": "Role created successfully"}
