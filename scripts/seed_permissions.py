"""
Seed the default permission catalogue
Safe to run repeatedly, existing permissions are left alone
"""

import sys
import asyncio
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from app.database import connect_db, disconnect_db
from app.services.role_service import role_service


async def seed_permissions():
    await connect_db()

    try:
        added = await role_service.seed_default_permissions()
        if added:
            print(f"✅ Added {added} permissions")
        else:
            print("✅ Permission catalogue already up to date")
    finally:
        await disconnect_db()


if __name__ == "__main__":
    asyncio.run(seed_permissions())
