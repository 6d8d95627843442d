"""
Turf Routes
Turf management (organization scoped) and public turf search
"""

from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from app.auth import get_current_user, check_permission
from app.schemas.common import Envelope, MessageResponse
from app.schemas.turf import OperatingHours, TurfData, TurfFilter, TurfResponse, TurfListResponse
from app.services.form_parser import form_parser
from app.services.turf_service import turf_service

router = APIRouter()


def _turf_data(
    name: Optional[str],
    organization: Optional[str],
    sports: Optional[str],
    base_price: Optional[str],
    team_size: Optional[str],
    operating_hours: Optional[str]
) -> TurfData:
    """Validate the multipart turf fields once, at the boundary"""
    return form_parser.build(
        TurfData,
        name=name.strip() if name else None,
        organization_id=organization or None,
        sports=form_parser.parse_string_list(sports, "sports") if sports is not None else None,
        base_price=form_parser.parse_number(base_price, "basePrice"),
        team_size=form_parser.parse_int(team_size, "team_size"),
        operating_hours=form_parser.parse_json_model(operating_hours, OperatingHours, "operatingHours"),
    )


@router.post("/", response_model=Envelope[TurfResponse], status_code=status.HTTP_201_CREATED)
async def create_turf(
    name: Optional[str] = Form(None),
    organization: Optional[str] = Form(None),
    sports: Optional[str] = Form(None),
    base_price: Optional[str] = Form(None, alias="basePrice"),
    team_size: Optional[str] = Form(None),
    operating_hours: Optional[str] = Form(None, alias="operatingHours"),
    images: Optional[List[UploadFile]] = File(None),
    current_user: dict = Depends(get_current_user)
):
    """
    Create a turf (multipart)

    - **name**, **organization** (organization id): required
    - **sports**: JSON array or comma separated list
    - **basePrice**, **team_size**: numbers
    - **operatingHours**: JSON object `{"monday": {"open": "06:00", "close": "23:00"}, ...}`
    - **images**: up to 5 image files

    Requires `manage_turfs` in the target organization.
    """
    data = _turf_data(name, organization, sports, base_price, team_size, operating_hours)
    if data.organization_id:
        await turf_service.ensure_organization(str(data.organization_id))
        await check_permission(current_user, "manage_turfs", str(data.organization_id))

    turf = await turf_service.create_turf(data, images)
    return {"success": True, "data": turf, "message": "Turf created successfully"}


@router.get("/", response_model=TurfListResponse)
async def get_turfs(
    organization_id: Optional[UUID] = Query(None, alias="organizationId"),
    sport: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100)
):
    result = await turf_service.get_turfs(
        str(organization_id) if organization_id else None, sport, page, limit
    )
    return {
        "success": True,
        "data": result["turfs"],
        "meta": {k: result[k] for k in ("total", "page", "limit", "pages")},
    }


@router.get("/filter", response_model=TurfListResponse)
async def filter_turfs(
    min_price: Optional[str] = Query(None, alias="minPrice"),
    max_price: Optional[str] = Query(None, alias="maxPrice"),
    team_size: Optional[str] = Query(None, alias="teamSize"),
    sports: Optional[List[str]] = Query(None),
    facilities: Optional[List[str]] = Query(None),
    preferred_day: Optional[str] = Query(None, alias="preferredDay"),
    preferred_time: Optional[str] = Query(None, alias="preferredTime"),
    latitude: Optional[str] = Query(None),
    longitude: Optional[str] = Query(None),
    radius: Optional[str] = Query(None),
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None)
):
    """
    Search turfs

    - **sports**: any of the listed sports (repeat the param, comma list or JSON array)
    - **facilities**: all of the listed facilities, offered by the turf's organization
    - **preferredDay** / **preferredTime** (HH:MM): turf open at that time
    - **latitude**, **longitude**, **radius** (km, default 10): nearest first
    """
    options = {
        "min_price": form_parser.parse_number(min_price, "minPrice"),
        "max_price": form_parser.parse_number(max_price, "maxPrice"),
        "team_size": form_parser.parse_int(team_size, "teamSize"),
        "sports": form_parser.parse_string_list(sports, "sports"),
        "facilities": form_parser.parse_string_list(facilities, "facilities"),
        "preferred_day": preferred_day or None,
        "preferred_time": preferred_time or None,
        "latitude": form_parser.parse_number(latitude, "latitude"),
        "longitude": form_parser.parse_number(longitude, "longitude"),
        "radius_km": form_parser.parse_number(radius, "radius"),
        "page": form_parser.parse_int(page, "page"),
        "limit": form_parser.parse_int(limit, "limit"),
    }
    # Unset values fall back to the TurfFilter defaults
    filters = form_parser.build(TurfFilter, **{k: v for k, v in options.items() if v is not None})

    result = await turf_service.filter_turfs(filters)
    return {
        "success": True,
        "data": result["turfs"],
        "meta": {k: result[k] for k in ("total", "page", "limit", "pages")},
    }


@router.get("/{turf_id}", response_model=Envelope[TurfResponse])
async def get_turf(turf_id: UUID):
    turf = await turf_service.get_turf_by_id(str(turf_id))
    return {"success": True, "data": turf}


@router.put("/{turf_id}", response_model=Envelope[TurfResponse])
async def update_turf(
    turf_id: UUID,
    name: Optional[str] = Form(None),
    organization: Optional[str] = Form(None),
    sports: Optional[str] = Form(None),
    base_price: Optional[str] = Form(None, alias="basePrice"),
    team_size: Optional[str] = Form(None),
    operating_hours: Optional[str] = Form(None, alias="operatingHours"),
    images: Optional[List[UploadFile]] = File(None),
    current_user: dict = Depends(get_current_user)
):
    """
    Update a turf (multipart, every field optional). New images replace the old ones.
    """
    organization_id = await turf_service.get_organization_id(str(turf_id))
    await check_permission(current_user, "manage_turfs", organization_id)

    data = _turf_data(name, organization, sports, base_price, team_size, operating_hours)
    if data.organization_id and str(data.organization_id) != organization_id:
        await turf_service.ensure_organization(str(data.organization_id))
        await check_permission(current_user, "manage_turfs", str(data.organization_id))

    turf = await turf_service.update_turf(str(turf_id), data, images)
    return {"success": True, "data": turf, "message": "Turf updated successfully"}


@router.delete("/{turf_id}", response_model=MessageResponse)
async def delete_turf(
    turf_id: UUID,
    current_user: dict = Depends(get_current_user)
):
    organization_id = await turf_service.get_organization_id(str(turf_id))
    await check_permission(current_user, "manage_turfs", organization_id)

    await turf_service.delete_turf(str(turf_id))
    return {"success": True, "message": "Turf deleted successfully"}
