import json
import os
import tempfile
import uuid
from io import BytesIO
from pathlib import Path

# Settings are read at import time, so the environment is prepared first
_TEST_DIR = Path(tempfile.mkdtemp(prefix="turfspot-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DIR / 'test.db'}"
os.environ["APP_ENV"] = "test"
os.environ["SUPABASE_URL"] = "https://storage.example.test"
os.environ["SUPABASE_KEY"] = "test-key"
for _k in ("SMTP_USER", "SMTP_PASSWORD"):
    os.environ.pop(_k, None)

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy.orm import Session

from app.auth import hash_password
from app.constants import DEFAULT_PERMISSIONS, SCOPE_GLOBAL, SUPER_ADMIN_ROLE
from app.database import engine, create_tables, drop_tables
from app.main import app
from app.models import Permission, Role, User
from app.services.storage_service import StorageService

ADMIN_EMAIL = "admin@turfspot.io"
ADMIN_PASSWORD = "admin-pass-123"
API = "/api/v1"


def _seed_admin():
    """Permission catalogue plus a Super Admin holding every global permission"""
    with Session(engine) as s:
        perms = [
            Permission(id=str(uuid.uuid4()), name=name, scope=scope, description=description)
            for name, scope, description in DEFAULT_PERMISSIONS
        ]
        role = Role(id=str(uuid.uuid4()), name=SUPER_ADMIN_ROLE, scope=SCOPE_GLOBAL, is_default=True)
        role.permissions = [p for p in perms if p.scope == SCOPE_GLOBAL]
        admin = User(
            id=str(uuid.uuid4()),
            first_name="Platform",
            last_name="Admin",
            email=ADMIN_EMAIL,
            password_hash=hash_password(ADMIN_PASSWORD),
            is_verified=True,
        )
        admin.global_role = role
        s.add_all(perms + [role, admin])
        s.commit()


@pytest.fixture()
def storage(monkeypatch):
    """Records hosted image uploads and deletions instead of calling the image host"""
    calls = {"uploaded": [], "deleted": []}

    async def fake_upload(path, content, content_type):
        calls["uploaded"].append(path)
        return f"{StorageService._public_prefix()}{path}"

    async def fake_delete(path):
        calls["deleted"].append(path)

    monkeypatch.setattr(StorageService, "upload_bytes", staticmethod(fake_upload))
    monkeypatch.setattr(StorageService, "delete_path", staticmethod(fake_delete))
    return calls


@pytest.fixture()
def client(storage):
    drop_tables()
    create_tables()
    _seed_admin()

    with TestClient(app) as c:
        yield c


def png_bytes(color=(0, 128, 0)):
    buf = BytesIO()
    Image.new("RGB", (64, 48), color).save(buf, format="PNG")
    return buf.getvalue()


def location_payload(lat=22.5726, lng=88.3639, city="Kolkata"):
    return {
        "place_id": f"place-{uuid.uuid4().hex[:8]}",
        "address": "12 Park Street",
        "coordinates": {"type": "Point", "coordinates": [lng, lat]},
        "city": city,
    }


class ApiHelper:
    """Shortcuts for the setup steps most tests share"""

    def __init__(self, client):
        self.client = client

    @staticmethod
    def image(filename="photo.png", color=(0, 128, 0)):
        return ("images", (filename, png_bytes(color), "image/png"))

    def login(self, email, password):
        r = self.client.post(f"{API}/auth/login", json={"email": email, "password": password})
        assert r.status_code == 200, r.text
        # Authenticate explicitly through headers in tests
        self.client.cookies.clear()
        return {"Authorization": f"Bearer {r.json()['token']}"}

    def admin(self):
        return self.login(ADMIN_EMAIL, ADMIN_PASSWORD)

    def register(self, email=None, password="user-pass-123", first_name="Test", last_name="User"):
        email = email or f"user-{uuid.uuid4().hex[:8]}@turfspot.io"
        r = self.client.post(f"{API}/auth/register", json={
            "first_name": first_name,
            "last_name": last_name,
            "email": email,
            "password": password,
        })
        assert r.status_code == 201, r.text
        return r.json()["data"]["id"], self.login(email, password)

    def create_organization(self, headers, name="Green Field Sports", facilities=("parking",), files=None, **location):
        r = self.client.post(
            f"{API}/organizations/",
            data={
                "name": name,
                "facilities": json.dumps(list(facilities)),
                "location": json.dumps(location_payload(**location)),
            },
            files=files,
            headers=headers,
        )
        assert r.status_code == 201, r.text
        return r.json()["data"]

    def create_turf(self, headers, organization_id, name="Turf A", sports=("football",), base_price=300,
                    team_size=5, operating_hours=None, files=None):
        data = {
            "name": name,
            "organization": organization_id,
            "sports": json.dumps(list(sports)),
            "basePrice": str(base_price),
            "team_size": str(team_size),
        }
        if operating_hours is not None:
            data["operatingHours"] = json.dumps(operating_hours)
        r = self.client.post(f"{API}/turfs/", data=data, files=files, headers=headers)
        assert r.status_code == 201, r.text
        return r.json()["data"]

    def review(self, headers, turf_id, rating, text=None):
        return self.client.post(
            f"{API}/turf-review/",
            json={"turfId": turf_id, "rating": rating, "review": text},
            headers=headers,
        )


@pytest.fixture()
def api(client):
    return ApiHelper(client)
