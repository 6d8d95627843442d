"""
Role Service
Permissions catalogue, global / organization scoped roles and permission checks
"""

import logging
import uuid
from datetime import datetime
from typing import Dict, List, Optional
from fastapi import HTTPException, status
from app.database import database, in_clause
from app.constants import (
    DEFAULT_PERMISSIONS,
    ORGANIZATION_OWNER_ROLE,
    SCOPE_GLOBAL,
    SCOPE_ORGANIZATION,
)

logger = logging.getLogger(__name__)


class RoleService:
    """Service for role and permission operations"""

    @staticmethod
    async def seed_default_permissions() -> int:
        """Insert missing catalogue permissions, returns how many were added"""
        added = 0
        for name, scope, description in DEFAULT_PERMISSIONS:
            existing = await database.fetch_one(
                "SELECT id FROM permissions WHERE name = :name",
                {"name": name}
            )
            if existing:
                continue
            await database.execute(
                """
                INSERT INTO permissions (id, name, description, scope)
                VALUES (:id, :name, :description, :scope)
                """,
                {"id": str(uuid.uuid4()), "name": name, "description": description, "scope": scope}
            )
            added += 1

        if added:
            logger.info("Seeded %d permissions", added)
        return added

    @staticmethod
    async def get_permissions_by_names(names: List[str], scope: str) -> List[dict]:
        """Resolve permission names, all of which must exist with the given scope"""
        unique_names = list(dict.fromkeys(names))
        clause, params = in_clause("name", unique_names)
        rows = await database.fetch_all(
            f"SELECT * FROM permissions WHERE name IN {clause}",
            params
        )
        found = {row["name"]: dict(row) for row in rows}

        missing = [n for n in unique_names if n not in found]
        if missing:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Unknown permissions: {', '.join(missing)}"
            )

        wrong_scope = [n for n in unique_names if found[n]["scope"] != scope]
        if wrong_scope:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Permissions not valid for {scope} scope: {', '.join(wrong_scope)}"
            )

        return [found[n] for n in unique_names]

    @staticmethod
    async def _permissions_for_roles(role_ids: List[str]) -> Dict[str, List[dict]]:
        if not role_ids:
            return {}
        clause, params = in_clause("role", role_ids)
        rows = await database.fetch_all(
            f"""
            SELECT rp.role_id, p.id, p.name, p.description, p.scope
            FROM role_permissions rp
            JOIN permissions p ON p.id = rp.permission_id
            WHERE rp.role_id IN {clause}
            ORDER BY p.name
            """,
            params
        )
        grouped: Dict[str, List[dict]] = {role_id: [] for role_id in role_ids}
        for row in rows:
            grouped[row["role_id"]].append({
                "id": row["id"],
                "name": row["name"],
                "description": row["description"],
                "scope": row["scope"],
            })
        return grouped

    @staticmethod
    async def _with_permissions(rows) -> List[dict]:
        roles = [dict(row) for row in rows]
        permissions = await RoleService._permissions_for_roles([r["id"] for r in roles])
        for role in roles:
            role["permissions"] = permissions.get(role["id"], [])
        return roles

    @staticmethod
    async def get_role(role_id: str) -> dict:
        row = await database.fetch_one("SELECT * FROM roles WHERE id = :id", {"id": role_id})
        if not row:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Role not found"
            )
        return (await RoleService._with_permissions([row]))[0]

    @staticmethod
    async def create_role(
        name: str,
        scope: str,
        scope_id: Optional[str],
        permission_ids: List[str],
        is_default: bool = False
    ) -> str:
        """Insert a role and its permission links, returns the new role id"""
        role_id = str(uuid.uuid4())
        await database.execute(
            """
            INSERT INTO roles (id, name, scope, scope_id, is_default, created_at)
            VALUES (:id, :name, :scope, :scope_id, :is_default, :created_at)
            """,
            {
                "id": role_id,
                "name": name,
                "scope": scope,
                "scope_id": scope_id,
                "is_default": is_default,
                "created_at": datetime.utcnow(),
            }
        )
        await RoleService.set_role_permissions(role_id, permission_ids)
        return role_id

    @staticmethod
    async def set_role_permissions(role_id: str, permission_ids: List[str]) -> None:
        await database.execute(
            "DELETE FROM role_permissions WHERE role_id = :role_id",
            {"role_id": role_id}
        )
        if permission_ids:
            await database.execute_many(
                "INSERT INTO role_permissions (role_id, permission_id) VALUES (:role_id, :permission_id)",
                [{"role_id": role_id, "permission_id": pid} for pid in permission_ids]
            )

    @staticmethod
    async def _ensure_organization(organization_id: str) -> None:
        exists = await database.fetch_one(
            "SELECT id FROM organizations WHERE id = :id",
            {"id": organization_id}
        )
        if not exists:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Organization not found"
            )

    @staticmethod
    async def create_global_role(name: str, permission_names: List[str]) -> dict:
        """Create a global role from global-scoped permission names"""
        existing = await database.fetch_one(
            "SELECT id FROM roles WHERE name = :name AND scope = :scope",
            {"name": name, "scope": SCOPE_GLOBAL}
        )
        if existing:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Global role '{name}' already exists"
            )

        permissions = await RoleService.get_permissions_by_names(permission_names, SCOPE_GLOBAL)
        async with database.transaction():
            role_id = await RoleService.create_role(
                name, SCOPE_GLOBAL, None, [p["id"] for p in permissions]
            )
        logger.info("Created global role %s", name)
        return await RoleService.get_role(role_id)

    @staticmethod
    async def create_organization_role(
        organization_id: str,
        name: str,
        permission_names: List[str]
    ) -> dict:
        """Create a role scoped to one organization"""
        await RoleService._ensure_organization(organization_id)

        existing = await database.fetch_one(
            """
            SELECT id FROM roles
            WHERE name = :name AND scope = :scope AND scope_id = :scope_id
            """,
            {"name": name, "scope": SCOPE_ORGANIZATION, "scope_id": organization_id}
        )
        if existing:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Role '{name}' already exists in this organization"
            )

        permissions = await RoleService.get_permissions_by_names(permission_names, SCOPE_ORGANIZATION)
        async with database.transaction():
            role_id = await RoleService.create_role(
                name, SCOPE_ORGANIZATION, organization_id, [p["id"] for p in permissions]
            )
        logger.info("Created role %s for organization %s", name, organization_id)
        return await RoleService.get_role(role_id)

    @staticmethod
    async def get_roles_by_organization(organization_id: str) -> List[dict]:
        """All roles scoped to an organization, with their permissions"""
        await RoleService._ensure_organization(organization_id)

        rows = await database.fetch_all(
            """
            SELECT * FROM roles
            WHERE scope = :scope AND scope_id = :scope_id
            ORDER BY created_at
            """,
            {"scope": SCOPE_ORGANIZATION, "scope_id": organization_id}
        )
        return await RoleService._with_permissions(rows)

    @staticmethod
    async def update_organization_role(
        organization_id: str,
        role_id: str,
        name: Optional[str] = None,
        permission_ids: Optional[List[str]] = None
    ) -> dict:
        """
        Rename a role and/or replace its permissions (organization scope only).
        permission_ids=None leaves the permissions alone, an empty list clears them.
        """
        await RoleService._ensure_organization(organization_id)

        role = await database.fetch_one(
            "SELECT id FROM roles WHERE id = :id AND scope = :scope AND scope_id = :scope_id",
            {"id": role_id, "scope": SCOPE_ORGANIZATION, "scope_id": organization_id}
        )
        if not role:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Role not found in this organization"
            )

        if permission_ids:
            unique_ids = list(dict.fromkeys(permission_ids))
            clause, params = in_clause("perm", unique_ids)
            params["scope"] = SCOPE_ORGANIZATION
            valid = await database.fetch_all(
                f"SELECT id FROM permissions WHERE id IN {clause} AND scope = :scope",
                params
            )
            if len(valid) != len(unique_ids):
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="One or more invalid permission IDs provided"
                )
            permission_ids = unique_ids

        async with database.transaction():
            if name:
                await database.execute(
                    "UPDATE roles SET name = :name WHERE id = :id",
                    {"name": name, "id": role_id}
                )
            if permission_ids is not None:
                await RoleService.set_role_permissions(role_id, permission_ids)

        return await RoleService.get_role(role_id)

    @staticmethod
    async def find_or_create_owner_role(organization_id: str) -> str:
        """
        The default owner role of an organization, created on first use with
        every organization-scoped permission. Call inside a transaction.
        """
        role = await database.fetch_one(
            """
            SELECT id FROM roles
            WHERE name = :name AND scope = :scope AND scope_id = :scope_id
            """,
            {"name": ORGANIZATION_OWNER_ROLE, "scope": SCOPE_ORGANIZATION, "scope_id": organization_id}
        )
        if role:
            return role["id"]

        permissions = await database.fetch_all(
            "SELECT id FROM permissions WHERE scope = :scope",
            {"scope": SCOPE_ORGANIZATION}
        )
        return await RoleService.create_role(
            ORGANIZATION_OWNER_ROLE,
            SCOPE_ORGANIZATION,
            organization_id,
            [p["id"] for p in permissions],
            is_default=True
        )

    @staticmethod
    async def user_has_permission(
        user_id: str,
        permission: str,
        organization_id: Optional[str] = None
    ) -> bool:
        """Global role first, then the user's role inside organization_id"""
        granted = await database.fetch_one(
            """
            SELECT 1 AS granted FROM users u
            JOIN role_permissions rp ON rp.role_id = u.global_role_id
            JOIN permissions p ON p.id = rp.permission_id
            WHERE u.id = :user_id AND p.name = :permission
            """,
            {"user_id": user_id, "permission": permission}
        )
        if granted:
            return True

        if not organization_id:
            return False

        granted = await database.fetch_one(
            """
            SELECT 1 AS granted FROM user_organization_roles uor
            JOIN role_permissions rp ON rp.role_id = uor.role_id
            JOIN permissions p ON p.id = rp.permission_id
            WHERE uor.user_id = :user_id
              AND uor.organization_id = :organization_id
              AND p.name = :permission
            """,
            {"user_id": user_id, "organization_id": organization_id, "permission": permission}
        )
        return granted is not None


# Create singleton instance
role_service = RoleService()
