"""Tests for turf reviews and rating aggregation."""
import uuid

import pytest

API = "/api/v1"


@pytest.fixture()
def turf(api):
    admin = api.admin()
    org = api.create_organization(admin)
    owner_id, owner = api.register()
    api.client.post(f"{API}/organizations/{org['id']}/assign-owner", json={"userId": owner_id}, headers=admin)
    return api.create_turf(owner, org["id"], name="Riverside")


def test_create_review(api, turf):
    user_id, user = api.register()
    r = api.review(user, turf["id"], 5, "Lovely grass")
    assert r.status_code == 201, r.text
    review = r.json()["data"]
    assert review["user_id"] == user_id
    assert review["turf_id"] == turf["id"]
    assert review["rating"] == 5
    assert review["review"] == "Lovely grass"
    assert review["images"] == []


def test_duplicate_review_conflicts(api, turf):
    _, user = api.register()
    first = api.review(user, turf["id"], 4, "first").json()["data"]

    r = api.review(user, turf["id"], 1, "second")
    assert r.status_code == 409
    assert r.json()["message"] == "You have already reviewed this turf"

    kept = api.client.get(f"{API}/turf-review/{first['id']}").json()["data"]
    assert kept["rating"] == 4
    assert kept["review"] == "first"

    summary = api.client.get(f"{API}/turf-review/summary/{turf['id']}").json()["data"]
    assert summary["reviewCount"] == 1


@pytest.mark.parametrize("rating", [0, 6])
def test_rating_out_of_range(api, turf, rating):
    _, user = api.register()
    assert api.review(user, turf["id"], rating).status_code == 400


def test_review_unknown_turf(api):
    _, user = api.register()
    r = api.review(user, str(uuid.uuid4()), 3)
    assert r.status_code == 404
    assert r.json()["message"] == "Turf not found"


def test_review_requires_authentication(client, turf):
    r = client.post(f"{API}/turf-review/", json={"turfId": turf["id"], "rating": 3})
    assert r.status_code == 401


def test_turf_reviews_aggregate(api, turf):
    for rating in (5, 5, 3):
        _, user = api.register()
        assert api.review(user, turf["id"], rating).status_code == 201

    r = api.client.get(f"{API}/turf-review/turf/{turf['id']}")
    assert r.status_code == 200
    body = r.json()
    assert body["data"]["averageRating"] == pytest.approx(13 / 3)
    assert body["data"]["ratingDistribution"] == {"5": 2, "3": 1}
    assert body["meta"] == {"total": 3}
    assert all(review["user"]["email"].endswith("@turfspot.io") for review in body["data"]["reviews"])

    r = api.client.get(f"{API}/turf-review/summary/{turf['id']}")
    assert r.json()["data"] == {"averageRating": pytest.approx(13 / 3), "reviewCount": 3}


def test_summary_without_reviews(client, turf):
    r = client.get(f"{API}/turf-review/summary/{turf['id']}")
    assert r.status_code == 200
    assert r.json()["data"] == {"averageRating": 0, "reviewCount": 0}


def test_turf_reviews_filter_and_page(api, turf):
    for rating in (1, 2, 3, 4, 5):
        _, user = api.register()
        api.review(user, turf["id"], rating)

    url = f"{API}/turf-review/turf/{turf['id']}"
    body = api.client.get(url, params={"minRating": 2, "maxRating": 4, "sortBy": "rating", "sortOrder": "asc"}).json()
    assert [review["rating"] for review in body["data"]["reviews"]] == [2, 3, 4]

    body = api.client.get(url, params={"page": 2, "limit": 2, "sortBy": "rating", "sortOrder": "desc"}).json()
    assert [review["rating"] for review in body["data"]["reviews"]] == [3, 2]
    assert body["meta"] == {"total": 5, "page": 2, "limit": 2, "pages": 3}


@pytest.mark.parametrize("params", [{"sortBy": "name"}, {"sortOrder": "sideways"}, {"minRating": 9}])
def test_turf_reviews_bad_query(client, turf, params):
    r = client.get(f"{API}/turf-review/turf/{turf['id']}", params=params)
    assert r.status_code == 400


def test_update_review(api, turf):
    _, user = api.register()
    review = api.review(user, turf["id"], 2, "meh").json()["data"]

    r = api.client.put(f"{API}/turf-review/{review['id']}", json={"rating": 4}, headers=user)
    assert r.status_code == 200
    updated = r.json()["data"]
    assert updated["rating"] == 4
    assert updated["review"] == "meh"


def test_update_review_owner_only(api, turf):
    _, author = api.register()
    _, other = api.register()
    review = api.review(author, turf["id"], 3).json()["data"]

    r = api.client.put(f"{API}/turf-review/{review['id']}", json={"rating": 1}, headers=other)
    assert r.status_code == 403
    assert r.json()["message"] == "You can only update your own reviews"

    r = api.client.put(f"{API}/turf-review/{uuid.uuid4()}", json={"rating": 1}, headers=other)
    assert r.status_code == 404


def test_delete_review(api, turf, storage):
    _, user = api.register()
    image = "https://photos.example.com/net.jpg"
    r = api.client.post(
        f"{API}/turf-review/",
        json={"turfId": turf["id"], "rating": 5, "images": [image]},
        headers=user,
    )
    review = r.json()["data"]

    _, other = api.register()
    assert api.client.delete(f"{API}/turf-review/{review['id']}", headers=other).status_code == 403

    r = api.client.delete(f"{API}/turf-review/{review['id']}", headers=user)
    assert r.status_code == 200
    assert storage["deleted"] == []

    assert api.client.get(f"{API}/turf-review/{review['id']}").status_code == 404
    assert api.client.get(f"{API}/turfs/{turf['id']}").json()["data"]["reviews"] == []
    assert api.client.get(f"{API}/auth/me", headers=user).json()["data"]["reviews"] == []


def test_my_reviews_and_user_reviews(api, turf):
    user_id, user = api.register()
    api.review(user, turf["id"], 4)

    r = api.client.get(f"{API}/turf-review/me", headers=user)
    assert r.status_code == 200
    reviews = r.json()["data"]["reviews"]
    assert len(reviews) == 1
    assert reviews[0]["turf"]["name"] == "Riverside"
    assert reviews[0]["turf"]["sports"] == ["football"]

    r = api.client.get(f"{API}/turf-review/user/{user_id}", params={"limit": 5})
    assert r.json()["meta"] == {"total": 1, "page": 1, "limit": 5, "pages": 1}


def test_get_review_includes_user_and_turf(api, turf):
    user_id, user = api.register(first_name="Mira")
    review = api.review(user, turf["id"], 3).json()["data"]

    body = api.client.get(f"{API}/turf-review/{review['id']}").json()["data"]
    assert body["user"]["id"] == user_id
    assert body["user"]["first_name"] == "Mira"
    assert body["turf"]["id"] == turf["id"]


def test_review_images_are_never_released(api, turf, storage):
    admin = api.admin()
    other_org = api.create_organization(admin, name="Someone Else", files=[api.image()])
    org_image = other_org["images"][0]

    _, user = api.register()
    r = api.client.post(
        f"{API}/turf-review/",
        json={"turfId": turf["id"], "rating": 1, "images": [org_image]},
        headers=user,
    )
    review = r.json()["data"]

    r = api.client.put(f"{API}/turf-review/{review['id']}", json={"images": []}, headers=user)
    assert r.status_code == 200
    r = api.client.put(f"{API}/turf-review/{review['id']}", json={"images": [org_image]}, headers=user)
    assert r.status_code == 200
    assert api.client.delete(f"{API}/turf-review/{review['id']}", headers=user).status_code == 200

    assert storage["deleted"] == []
    assert api.client.get(f"{API}/organizations/{other_org['id']}").json()["data"]["images"] == [org_image]
