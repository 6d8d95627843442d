"""
Script to create a Platform Admin
Creates a user holding the "Super Admin" global role (every global permission)
"""

import sys
import asyncio
import uuid
from datetime import datetime
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from app.database import database, connect_db, disconnect_db
from app.auth import hash_password
from app.auth.password import generate_random_password
from app.constants import SCOPE_GLOBAL, SUPER_ADMIN_ROLE
from app.services.role_service import role_service


async def get_or_create_super_admin_role() -> str:
    """Super Admin global role, re-synced with the full global permission set"""
    await role_service.seed_default_permissions()

    permissions = await database.fetch_all(
        "SELECT id FROM permissions WHERE scope = :scope",
        {"scope": SCOPE_GLOBAL}
    )
    permission_ids = [p["id"] for p in permissions]

    role = await database.fetch_one(
        "SELECT id FROM roles WHERE name = :name AND scope = :scope",
        {"name": SUPER_ADMIN_ROLE, "scope": SCOPE_GLOBAL}
    )

    async with database.transaction():
        if role:
            await role_service.set_role_permissions(role["id"], permission_ids)
            return role["id"]
        return await role_service.create_role(
            SUPER_ADMIN_ROLE, SCOPE_GLOBAL, None, permission_ids, is_default=True
        )


async def create_platform_admin(email: str, first_name: str, last_name: str, password: str = None):
    """
    Create a platform admin user

    Args:
        email: Admin email
        first_name: Admin first name
        last_name: Admin last name
        password: Password (if None, will generate random)
    """

    await connect_db()

    try:
        email = email.lower()
        existing = await database.fetch_one(
            "SELECT id FROM users WHERE email = :email",
            {"email": email}
        )

        role_id = await get_or_create_super_admin_role()

        if existing:
            await database.execute(
                "UPDATE users SET global_role_id = :role_id WHERE id = :id",
                {"role_id": role_id, "id": existing["id"]}
            )
            print(f"✅ Existing user {email} promoted to {SUPER_ADMIN_ROLE}")
            return

        # Generate password if not provided
        if password is None:
            password = generate_random_password(12)
            generated = True
        else:
            generated = False

        now = datetime.utcnow()
        await database.execute(
            """
            INSERT INTO users
            (id, first_name, last_name, email, password_hash, is_verified, global_role_id, created_at, updated_at)
            VALUES (:id, :first_name, :last_name, :email, :password_hash, :is_verified, :role_id, :now, :now)
            """,
            {
                "id": str(uuid.uuid4()),
                "first_name": first_name,
                "last_name": last_name,
                "email": email,
                "password_hash": hash_password(password),
                "is_verified": True,
                "role_id": role_id,
                "now": now,
            }
        )

        print("✅ Platform Admin created successfully!")
        print(f"   Email: {email}")
        print(f"   Name: {first_name} {last_name}")

        if generated:
            print(f"   Password: {password}")
            print("   ⚠️  IMPORTANT: Save this password!")
        else:
            print("   Password: (custom password set)")

    finally:
        await disconnect_db()


async def main():
    """Main function"""
    print("\n" + "="*60)
    print("CREATE PLATFORM ADMIN")
    print("="*60 + "\n")

    email = input("Enter email: ").strip()
    first_name = input("Enter first name: ").strip()
    last_name = input("Enter last name: ").strip()

    use_custom = input("Set custom password? (y/n): ").strip().lower()

    if use_custom == 'y':
        password = input("Enter password: ").strip()
        confirm = input("Confirm password: ").strip()

        if password != confirm:
            print("❌ Passwords do not match!")
            return

        if len(password) < 8:
            print("❌ Password must be at least 8 characters!")
            return
    else:
        password = None

    print("\n")
    await create_platform_admin(email, first_name, last_name, password)
    print("\n")


if __name__ == "__main__":
    asyncio.run(main())
