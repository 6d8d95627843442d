"""
Organization Service
Business logic for organizations, their owner and permission map
"""

import json
import logging
import uuid
from datetime import datetime
from typing import Dict, List, Optional
from fastapi import HTTPException, UploadFile, status
from app.database import database, in_clause
from app.constants import ORGANIZATION_MEMBER_ROLES
from app.schemas.organization import Location
from app.services.role_service import role_service
from app.services.storage_service import StorageService

logger = logging.getLogger(__name__)


class OrganizationService:
    """Service for organization management operations"""

    @staticmethod
    async def _facilities_for(organization_ids: List[str]) -> Dict[str, List[str]]:
        if not organization_ids:
            return {}
        clause, params = in_clause("org", organization_ids)
        rows = await database.fetch_all(
            f"""
            SELECT organization_id, facility FROM organization_facilities
            WHERE organization_id IN {clause}
            ORDER BY facility
            """,
            params
        )
        facilities: Dict[str, List[str]] = {org_id: [] for org_id in organization_ids}
        for row in rows:
            facilities[row["organization_id"]].append(row["facility"])
        return facilities

    @staticmethod
    def _serialize(row, facilities: List[str]) -> dict:
        return {
            "id": row["id"],
            "name": row["name"],
            "facilities": facilities,
            "location": {
                "place_id": row["place_id"],
                "address": row["address"],
                "coordinates": {"type": "Point", "coordinates": [row["longitude"], row["latitude"]]},
                "area": row["area"],
                "sub_area": row["sub_area"],
                "city": row["city"],
                "post_code": row["post_code"],
            },
            "images": json.loads(row["images"] or "[]"),
            "owner_id": row["owner_id"],
            "permissions": json.loads(row["permissions"] or "{}"),
            "created_at": row["created_at"],
            "updated_at": row["updated_at"],
        }

    @staticmethod
    async def _insert_facilities(organization_id: str, facilities: List[str]) -> None:
        if facilities:
            await database.execute_many(
                "INSERT INTO organization_facilities (organization_id, facility) VALUES (:organization_id, :facility)",
                [{"organization_id": organization_id, "facility": f} for f in facilities]
            )

    @staticmethod
    async def _get_row(organization_id: str):
        row = await database.fetch_one(
            "SELECT * FROM organizations WHERE id = :id",
            {"id": organization_id}
        )
        if not row:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Organization not found"
            )
        return row

    @staticmethod
    async def create_organization(
        name: str,
        facilities: List[str],
        location: Location,
        images: Optional[List[UploadFile]] = None
    ) -> dict:
        """
        Create a new organization.

        The owner is assigned in a separate step. Images are uploaded
        concurrently before anything is written.
        """
        organization_id = str(uuid.uuid4())
        image_urls = await StorageService.upload_images(images, f"organizations/{organization_id}")

        now = datetime.utcnow()
        try:
            async with database.transaction():
                await database.execute(
                    """
                    INSERT INTO organizations
                    (id, name, place_id, address, area, sub_area, city, post_code,
                     longitude, latitude, images, permissions, created_at, updated_at)
                    VALUES
                    (:id, :name, :place_id, :address, :area, :sub_area, :city, :post_code,
                     :longitude, :latitude, :images, :permissions, :now, :now)
                    """,
                    {
                        "id": organization_id,
                        "name": name,
                        "place_id": location.place_id,
                        "address": location.address,
                        "area": location.area,
                        "sub_area": location.sub_area,
                        "city": location.city,
                        "post_code": location.post_code,
                        "longitude": location.longitude,
                        "latitude": location.latitude,
                        "images": json.dumps(image_urls),
                        "permissions": "{}",
                        "now": now,
                    }
                )
                await OrganizationService._insert_facilities(organization_id, facilities)
        except Exception:
            logger.exception("Failed to create organization %s", name)
            await StorageService.delete_images(image_urls)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to create organization"
            )

        logger.info("Created organization %s (%s)", name, organization_id)
        return await OrganizationService.get_organization(organization_id)

    @staticmethod
    async def get_organization(organization_id: str) -> dict:
        """Get organization by ID"""
        row = await OrganizationService._get_row(organization_id)
        facilities = await OrganizationService._facilities_for([organization_id])
        return OrganizationService._serialize(row, facilities[organization_id])

    @staticmethod
    async def list_organizations(skip: int = 0, limit: int = 50, city: Optional[str] = None) -> dict:
        """List organizations with pagination"""
        where = ""
        params: dict = {}
        if city:
            where = "WHERE LOWER(city) = :city"
            params["city"] = city.strip().lower()

        total = await database.fetch_val(f"SELECT COUNT(*) FROM organizations {where}", params)

        rows = await database.fetch_all(
            f"""
            SELECT * FROM organizations {where}
            ORDER BY created_at DESC, id
            LIMIT :limit OFFSET :skip
            """,
            {**params, "limit": limit, "skip": skip}
        )
        facilities = await OrganizationService._facilities_for([r["id"] for r in rows])

        return {
            "total": total or 0,
            "organizations": [OrganizationService._serialize(r, facilities[r["id"]]) for r in rows],
        }

    @staticmethod
    async def update_organization(
        organization_id: str,
        name: Optional[str] = None,
        facilities: Optional[List[str]] = None,
        location: Optional[Location] = None,
        new_images: Optional[List[UploadFile]] = None,
        images_to_keep: Optional[List[str]] = None
    ) -> dict:
        """
        Partially update an organization.

        Uploaded images are added; previous images missing from images_to_keep
        are released. Without a keep-list, new uploads replace every old image.
        """
        row = await OrganizationService._get_row(organization_id)
        current_images: List[str] = json.loads(row["images"] or "[]")

        uploaded = await StorageService.upload_images(new_images, f"organizations/{organization_id}")

        if images_to_keep is not None:
            kept = [url for url in current_images if url in images_to_keep]
        elif uploaded:
            kept = []
        else:
            kept = current_images
        released = [url for url in current_images if url not in kept]

        updates = {"images": json.dumps(kept + uploaded), "updated_at": datetime.utcnow()}
        if name:
            updates["name"] = name
        if location:
            updates.update({
                "place_id": location.place_id,
                "address": location.address,
                "area": location.area,
                "sub_area": location.sub_area,
                "city": location.city,
                "post_code": location.post_code,
                "longitude": location.longitude,
                "latitude": location.latitude,
            })

        assignments = ", ".join(f"{column} = :{column}" for column in updates)
        try:
            async with database.transaction():
                await database.execute(
                    f"UPDATE organizations SET {assignments} WHERE id = :id",
                    {**updates, "id": organization_id}
                )
                if facilities is not None:
                    await database.execute(
                        "DELETE FROM organization_facilities WHERE organization_id = :id",
                        {"id": organization_id}
                    )
                    await OrganizationService._insert_facilities(organization_id, facilities)
        except Exception:
            logger.exception("Failed to update organization %s", organization_id)
            await StorageService.delete_images(uploaded)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to update organization"
            )

        await StorageService.delete_images(released)
        return await OrganizationService.get_organization(organization_id)

    @staticmethod
    async def delete_organization(organization_id: str) -> None:
        """
        Delete an organization with its turfs, reviews and roles.
        Organization and turf images are released first.
        """
        row = await OrganizationService._get_row(organization_id)

        turf_rows = await database.fetch_all(
            "SELECT id, images FROM turfs WHERE organization_id = :id",
            {"id": organization_id}
        )
        images = json.loads(row["images"] or "[]")
        for r in turf_rows:
            images.extend(json.loads(r["images"] or "[]"))
        await StorageService.delete_images(images)

        params = {"id": organization_id}
        async with database.transaction():
            turf_scope = "SELECT id FROM turfs WHERE organization_id = :id"
            await database.execute(f"DELETE FROM turf_reviews WHERE turf_id IN ({turf_scope})", params)
            await database.execute(f"DELETE FROM turf_sports WHERE turf_id IN ({turf_scope})", params)
            await database.execute(f"DELETE FROM turf_operating_hours WHERE turf_id IN ({turf_scope})", params)
            await database.execute("DELETE FROM turfs WHERE organization_id = :id", params)
            await database.execute("DELETE FROM user_organization_roles WHERE organization_id = :id", params)
            await database.execute(
                "DELETE FROM role_permissions WHERE role_id IN (SELECT id FROM roles WHERE scope_id = :id)",
                params
            )
            await database.execute("DELETE FROM roles WHERE scope_id = :id", params)
            await database.execute("DELETE FROM organization_facilities WHERE organization_id = :id", params)
            await database.execute("DELETE FROM organizations WHERE id = :id", params)

        logger.info("Deleted organization %s with %d turfs", organization_id, len(turf_rows))

    @staticmethod
    async def assign_owner_to_organization(organization_id: str, user_id: str) -> dict:
        """
        Assign a user as the owner of an organization.

        Finds or creates the organization's default owner role, replaces any
        role the user already had in the organization, and sets the owner.
        Fails with 409 once an owner is set.
        """
        async with database.transaction():
            organization = await OrganizationService._get_row(organization_id)
            if organization["owner_id"]:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="Organization already has an owner assigned"
                )

            user = await database.fetch_one(
                "SELECT id, email FROM users WHERE id = :id",
                {"id": user_id}
            )
            if not user:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="User to assign as owner not found"
                )

            # Only one of several concurrent assignments can claim an unowned organization
            await database.execute(
                """
                UPDATE organizations SET owner_id = :owner_id, updated_at = :now
                WHERE id = :id AND owner_id IS NULL
                """,
                {"owner_id": user_id, "now": datetime.utcnow(), "id": organization_id}
            )
            owner_id = await database.fetch_val(
                "SELECT owner_id FROM organizations WHERE id = :id",
                {"id": organization_id}
            )
            if owner_id != user_id:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="Organization already has an owner assigned"
                )

            owner_role_id = await role_service.find_or_create_owner_role(organization_id)

            previous = await database.fetch_one(
                """
                SELECT role_id FROM user_organization_roles
                WHERE user_id = :user_id AND organization_id = :organization_id
                """,
                {"user_id": user_id, "organization_id": organization_id}
            )
            if previous:
                logger.warning(
                    "User %s already had a role in organization %s, replacing it with the owner role",
                    user_id, organization_id
                )
                await database.execute(
                    """
                    DELETE FROM user_organization_roles
                    WHERE user_id = :user_id AND organization_id = :organization_id
                    """,
                    {"user_id": user_id, "organization_id": organization_id}
                )

            await database.execute(
                """
                INSERT INTO user_organization_roles (user_id, organization_id, role_id)
                VALUES (:user_id, :organization_id, :role_id)
                """,
                {"user_id": user_id, "organization_id": organization_id, "role_id": owner_role_id}
            )

        logger.info("User %s assigned as owner of organization %s", user["email"], organization["name"])
        return await OrganizationService.get_organization(organization_id)

    @staticmethod
    async def update_organization_permissions(
        organization_id: str,
        user_id: str,
        permissions: Dict[str, List[str]]
    ) -> dict:
        """Replace the action -> roles map (owner only)"""
        organization = await OrganizationService._get_row(organization_id)

        if organization["owner_id"] != user_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not authorized to update permissions"
            )

        cleaned: Dict[str, List[str]] = {}
        for action, roles in permissions.items():
            invalid = [r for r in roles if r not in ORGANIZATION_MEMBER_ROLES]
            if invalid:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=(
                        "Invalid role specified. Roles must be "
                        + ", ".join(ORGANIZATION_MEMBER_ROLES)
                    )
                )
            cleaned[action] = list(dict.fromkeys(roles))

        await database.execute(
            "UPDATE organizations SET permissions = :permissions, updated_at = :now WHERE id = :id",
            {"permissions": json.dumps(cleaned), "now": datetime.utcnow(), "id": organization_id}
        )
        return await OrganizationService.get_organization(organization_id)

    @staticmethod
    async def create_organization_role(
        organization_id: str,
        role_name: str,
        permission_names: List[str]
    ) -> dict:
        return await role_service.create_organization_role(organization_id, role_name, permission_names)


# Create singleton instance
organization_service = OrganizationService()
