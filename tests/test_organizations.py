"""Tests for organizations, owner assignment and organization roles."""
import json
import uuid

from app.services.organization_service import OrganizationService

API = "/api/v1"
HOSTED = "https://storage.example.test/storage/v1/object/public/turfspot/"


def _owned_organization(api, files=None):
    admin = api.admin()
    org = api.create_organization(admin, files=files)
    owner_id, owner = api.register()
    r = api.client.post(
        f"{API}/organizations/{org['id']}/assign-owner", json={"userId": owner_id}, headers=admin
    )
    assert r.status_code == 200, r.text
    return org, admin, owner_id, owner


def test_create_requires_authentication(client):
    r = client.post(f"{API}/organizations/", data={"name": "x", "facilities": "parking", "location": "{}"})
    assert r.status_code == 401


def test_create_requires_permission(api, client):
    _, user = api.register()
    r = client.post(
        f"{API}/organizations/",
        data={"name": "Nope", "facilities": "parking", "location": "{}"},
        headers=user,
    )
    assert r.status_code == 403
    assert "create_organization" in r.json()["message"]


def test_create_organization(api, storage):
    org = api.create_organization(
        api.admin(), facilities=["Parking", "CAFE", "parking"], files=[api.image()]
    )
    assert org["facilities"] == ["cafe", "parking"]
    assert org["owner_id"] is None
    assert org["location"]["coordinates"] == {"type": "Point", "coordinates": [88.3639, 22.5726]}
    assert len(org["images"]) == 1
    assert org["images"][0].startswith(HOSTED + f"organizations/{org['id']}/")
    assert storage["uploaded"][0].endswith(".jpg")


def test_create_without_facilities_is_400(api, client):
    r = client.post(
        f"{API}/organizations/",
        data={"name": "Empty", "facilities": "[]", "location": json.dumps({})},
        headers=api.admin(),
    )
    assert r.status_code == 400
    assert "facility" in r.json()["message"]


def test_create_with_bad_location_is_400(api, client):
    location = {
        "place_id": "p", "address": "a", "city": "c",
        "coordinates": {"type": "Point", "coordinates": [200, 10]},
    }
    r = client.post(
        f"{API}/organizations/",
        data={"name": "Far away", "facilities": "parking", "location": json.dumps(location)},
        headers=api.admin(),
    )
    assert r.status_code == 400
    assert r.json()["message"].startswith("Invalid location")


def test_get_and_list(api, client):
    admin = api.admin()
    org = api.create_organization(admin, name="First")
    api.create_organization(admin, name="Second", city="Delhi", lat=28.61, lng=77.21)

    r = client.get(f"{API}/organizations/{org['id']}")
    assert r.status_code == 200
    assert r.json()["data"]["name"] == "First"

    r = client.get(f"{API}/organizations/")
    assert r.json()["total"] == 2

    r = client.get(f"{API}/organizations/", params={"city": "delhi"})
    assert [o["name"] for o in r.json()["data"]] == ["Second"]

    assert client.get(f"{API}/organizations/{uuid.uuid4()}").status_code == 404


def test_update_keeps_listed_images(api, client, storage):
    admin = api.admin()
    org = api.create_organization(admin, files=[api.image("a.png"), api.image("b.png")])
    keep, drop = org["images"]

    r = client.put(
        f"{API}/organizations/{org['id']}",
        data={"name": "Renamed", "imagesToKeep": json.dumps([keep])},
        files=[api.image("c.png")],
        headers=admin,
    )
    assert r.status_code == 200, r.text
    updated = r.json()["data"]
    assert updated["name"] == "Renamed"
    assert updated["images"][0] == keep
    assert len(updated["images"]) == 2
    assert drop not in updated["images"]
    assert storage["deleted"] == [drop[len(HOSTED):]]


def test_assign_owner(api, client):
    org, admin, owner_id, owner = _owned_organization(api)

    r = client.get(f"{API}/organizations/{org['id']}")
    assert r.json()["data"]["owner_id"] == owner_id

    me = client.get(f"{API}/auth/me", headers=owner).json()["data"]
    assert me["organization_roles"] == [{
        "organization_id": org["id"],
        "role_id": me["organization_roles"][0]["role_id"],
        "role_name": "Organization Owner",
    }]


def test_assign_owner_twice_conflicts(api, client):
    org, admin, owner_id, _ = _owned_organization(api)
    other_id, _ = api.register()

    r = client.post(
        f"{API}/organizations/{org['id']}/assign-owner", json={"userId": other_id}, headers=admin
    )
    assert r.status_code == 409
    assert r.json()["message"] == "Organization already has an owner assigned"

    r = client.get(f"{API}/organizations/{org['id']}")
    assert r.json()["data"]["owner_id"] == owner_id


def test_assign_unknown_user_is_404(api, client):
    admin = api.admin()
    org = api.create_organization(admin)
    r = client.post(
        f"{API}/organizations/{org['id']}/assign-owner", json={"userId": str(uuid.uuid4())}, headers=admin
    )
    assert r.status_code == 404

    r = client.get(f"{API}/organizations/{org['id']}")
    assert r.json()["data"]["owner_id"] is None


def test_owner_role_grants_turf_management(api, client):
    org, _, _, owner = _owned_organization(api)
    _, stranger = api.register()

    api.create_turf(owner, org["id"])

    r = client.post(
        f"{API}/turfs/",
        data={"name": "Sneaky", "organization": org["id"], "basePrice": "100", "team_size": "5"},
        headers=stranger,
    )
    assert r.status_code == 403


def test_update_permissions_owner_only(api, client):
    org, admin, _, owner = _owned_organization(api)
    payload = {"permissions": {"edit_turf": ["owner", "manager"], "view_bookings": ["staff"]}}

    r = client.put(f"{API}/organizations/{org['id']}/permissions", json=payload, headers=owner)
    assert r.status_code == 200
    assert r.json()["data"]["permissions"] == payload["permissions"]

    r = client.put(f"{API}/organizations/{org['id']}/permissions", json=payload, headers=admin)
    assert r.status_code == 403

    r = client.put(
        f"{API}/organizations/{org['id']}/permissions",
        json={"permissions": {"edit_turf": ["janitor"]}},
        headers=owner,
    )
    assert r.status_code == 400


def test_organization_roles(api, client):
    org, _, _, owner = _owned_organization(api)
    url = f"{API}/organizations/{org['id']}/roles"

    r = client.post(url, json={"roleName": "Manager", "permissions": ["manage_turfs", "view_roles"]}, headers=owner)
    assert r.status_code == 201, r.text
    role = r.json()["data"]
    assert sorted(p["name"] for p in role["permissions"]) == ["manage_turfs", "view_roles"]

    r = client.post(url, json={"roleName": "Manager", "permissions": ["view_roles"]}, headers=owner)
    assert r.status_code == 409

    r = client.post(url, json={"roleName": "Boss", "permissions": ["create_organization"]}, headers=owner)
    assert r.status_code == 400

    r = client.get(f"{API}/roles/organizations/{org['id']}/roles", headers=owner)
    assert r.status_code == 200
    assert {x["name"] for x in r.json()["data"]} == {"Organization Owner", "Manager"}

    view_roles = next(p for p in role["permissions"] if p["name"] == "view_roles")
    r = client.put(
        f"{API}/roles/organizations/{org['id']}/roles/{role['id']}",
        json={"name": "Viewer", "permissions": [view_roles["id"]]},
        headers=owner,
    )
    assert r.status_code == 200
    assert r.json()["data"]["name"] == "Viewer"
    assert [p["name"] for p in r.json()["data"]["permissions"]] == ["view_roles"]

    r = client.put(
        f"{API}/roles/organizations/{org['id']}/roles/{role['id']}", json={"name": "Renamed"}, headers=owner
    )
    assert [p["name"] for p in r.json()["data"]["permissions"]] == ["view_roles"]

    r = client.put(
        f"{API}/roles/organizations/{org['id']}/roles/{role['id']}", json={"permissions": []}, headers=owner
    )
    assert r.status_code == 200
    assert r.json()["data"]["permissions"] == []

    r = client.put(
        f"{API}/roles/organizations/{org['id']}/roles/{role['id']}",
        json={"permissions": [str(uuid.uuid4())]},
        headers=owner,
    )
    assert r.status_code == 400


def test_roles_listing_requires_membership(api, client):
    org, _, _, _ = _owned_organization(api)
    _, stranger = api.register()
    r = client.get(f"{API}/roles/organizations/{org['id']}/roles", headers=stranger)
    assert r.status_code == 403


def test_global_role(api, client):
    admin = api.admin()
    r = client.post(
        f"{API}/roles/global",
        json={"roleName": "Support", "permissions": ["update_organization"]},
        headers=admin,
    )
    assert r.status_code == 201
    assert r.json()["data"]["scope"] == "global"

    r = client.post(
        f"{API}/roles/global",
        json={"roleName": "Turf Boss", "permissions": ["manage_turfs"]},
        headers=admin,
    )
    assert r.status_code == 400

    _, user = api.register()
    r = client.post(f"{API}/roles/global", json={"roleName": "X", "permissions": ["update_organization"]}, headers=user)
    assert r.status_code == 403


def test_delete_organization_cascades(api, client, storage):
    org, admin, _, owner = _owned_organization(api, files=[api.image()])
    turf = api.create_turf(owner, org["id"], files=[api.image()])
    reviewer_id, reviewer = api.register()

    review_image = HOSTED + "reviews/pitch.jpg"
    r = client.post(
        f"{API}/turf-review/",
        json={"turfId": turf["id"], "rating": 4, "images": [review_image, "https://elsewhere.example.com/x.jpg"]},
        headers=reviewer,
    )
    assert r.status_code == 201

    r = client.delete(f"{API}/organizations/{org['id']}", headers=admin)
    assert r.status_code == 200

    assert client.get(f"{API}/organizations/{org['id']}").status_code == 404
    assert client.get(f"{API}/turfs/{turf['id']}").status_code == 404
    assert client.get(f"{API}/auth/me", headers=reviewer).json()["data"]["reviews"] == []

    released = set(storage["deleted"])
    assert org["images"][0][len(HOSTED):] in released
    assert turf["images"][0][len(HOSTED):] in released
    assert "reviews/pitch.jpg" not in released
    assert len(released) == 2


def test_assign_owner_after_stale_read_conflicts(api, client, monkeypatch):
    org, admin, owner_id, _ = _owned_organization(api)
    other_id, other = api.register()

    # another request assigned the owner after this one read the row
    real_get_row = OrganizationService._get_row

    async def unowned_row(organization_id):
        row = dict(await real_get_row(organization_id))
        row["owner_id"] = None
        return row

    monkeypatch.setattr(OrganizationService, "_get_row", staticmethod(unowned_row))
    r = client.post(
        f"{API}/organizations/{org['id']}/assign-owner", json={"userId": other_id}, headers=admin
    )
    assert r.status_code == 409
    assert r.json()["message"] == "Organization already has an owner assigned"

    monkeypatch.setattr(OrganizationService, "_get_row", staticmethod(real_get_row))
    assert client.get(f"{API}/organizations/{org['id']}").json()["data"]["owner_id"] == owner_id
    assert client.get(f"{API}/auth/me", headers=other).json()["data"]["organization_roles"] == []


def test_failed_update_releases_new_uploads(api, client, storage, monkeypatch):
    admin = api.admin()
    org = api.create_organization(admin, name="Original", files=[api.image("a.png")])
    uploaded_before = len(storage["uploaded"])

    async def broken(organization_id, facilities):
        raise RuntimeError("database went away")

    monkeypatch.setattr(OrganizationService, "_insert_facilities", staticmethod(broken))
    r = client.put(
        f"{API}/organizations/{org['id']}",
        data={"name": "Renamed", "facilities": "cafe"},
        files=[api.image("b.png")],
        headers=admin,
    )
    assert r.status_code == 500
    assert r.json()["message"] == "Failed to update organization"
    assert storage["deleted"] == storage["uploaded"][uploaded_before:]

    current = client.get(f"{API}/organizations/{org['id']}").json()["data"]
    assert current["name"] == "Original"
    assert current["images"] == org["images"]
    assert current["facilities"] == ["parking"]
