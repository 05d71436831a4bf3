import pytest

from conftest import bearer

from storefront.config import settings
from storefront.models.customer import RecentlyViewed, WishlistEntry


@pytest.fixture
def admin_token(create_user, login):
    create_user("admin@example.com", role="admin")
    return login("admin@example.com")["accessToken"]


@pytest.fixture
def user_token(create_user, login):
    create_user("shopper@example.com")
    return login("shopper@example.com")["accessToken"]


@pytest.fixture
def make_item(client, admin_token):
    def _make(name="Teapot", description="Short and stout"):
        response = client.post(
            "/items",
            json={"name": name, "description": description},
            headers=bearer(admin_token),
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]["id"]

    return _make


def test_items_are_readable_by_users_but_writable_by_admins(client, user_token, make_item):
    item_id = make_item()

    listed = client.get("/items", headers=bearer(user_token))
    assert listed.status_code == 200
    assert [i["id"] for i in listed.json()["data"]] == [item_id]

    forbidden = client.post("/items", json={"name": "X", "description": "Y"}, headers=bearer(user_token))
    assert forbidden.status_code == 403

    assert client.delete(f"/items/{item_id}", headers=bearer(user_token)).status_code == 403


def test_item_update_and_missing_item(client, admin_token, make_item):
    item_id = make_item()

    updated = client.put(f"/items/{item_id}", json={"name": "Kettle"}, headers=bearer(admin_token))
    assert updated.status_code == 200
    assert updated.json()["data"]["name"] == "Kettle"
    assert updated.json()["data"]["description"] == "Short and stout"

    missing = client.get("/items/999", headers=bearer(admin_token))
    assert missing.status_code == 404
    assert missing.json()["message"] == "Item with id 999 not found"


def test_items_require_authentication(client):
    client.cookies.clear()
    assert client.get("/items").status_code == 401


def test_wishlist_add_is_idempotent(client, db, user_token, make_item):
    item_id = make_item()

    first = client.post(f"/wishlist/{item_id}", headers=bearer(user_token))
    second = client.post(f"/wishlist/{item_id}", headers=bearer(user_token))

    assert first.status_code == 201
    assert second.status_code == 200
    assert first.json()["data"]["id"] == second.json()["data"]["id"]
    assert db.query(WishlistEntry).count() == 1

    listed = client.get("/wishlist", headers=bearer(user_token)).json()["data"]
    assert listed[0]["productId"] == item_id
    assert listed[0]["product"]["name"] == "Teapot"


def test_wishlist_unknown_item_and_removal(client, user_token, make_item):
    assert client.post("/wishlist/424242", headers=bearer(user_token)).status_code == 404

    item_id = make_item()
    client.post(f"/wishlist/{item_id}", headers=bearer(user_token))

    removed = client.delete(f"/wishlist/{item_id}", headers=bearer(user_token))
    assert removed.status_code == 200
    assert client.delete(f"/wishlist/{item_id}", headers=bearer(user_token)).status_code == 404
    assert client.get("/wishlist", headers=bearer(user_token)).json()["data"] == []


def test_recently_viewed_keeps_newest_within_limit(client, db, monkeypatch, user_token, make_item):
    monkeypatch.setattr(settings, "RECENTLY_VIEWED_LIMIT", 3)
    item_ids = [make_item(name=f"Item {n}") for n in range(4)]

    for item_id in item_ids:
        assert client.post(f"/users/me/recently-viewed/{item_id}", headers=bearer(user_token)).status_code == 200

    history = client.get("/users/me/recently-viewed", headers=bearer(user_token)).json()["data"]
    assert [h["productId"] for h in history] == [item_ids[3], item_ids[2], item_ids[1]]
    assert db.query(RecentlyViewed).count() == 3

    # Re-viewing moves an entry to the front without duplicating it
    client.post(f"/users/me/recently-viewed/{item_ids[1]}", headers=bearer(user_token))
    history = client.get("/users/me/recently-viewed", headers=bearer(user_token)).json()["data"]
    assert [h["productId"] for h in history] == [item_ids[1], item_ids[3], item_ids[2]]


def test_recently_viewed_unknown_item(client, user_token):
    response = client.post("/users/me/recently-viewed/31337", headers=bearer(user_token))
    assert response.status_code == 404


ADDRESS = {
    "fullName": "Ada Lovelace",
    "phone": "+44 20 0000 0000",
    "addressLine1": "12 St James's Square",
    "city": "London",
    "country": "UK",
    "postalCode": "SW1Y 4JH",
}


def test_only_one_default_address(client, user_token):
    first = client.post("/users/me/addresses", json={**ADDRESS, "isDefault": True}, headers=bearer(user_token))
    second = client.post("/users/me/addresses", json={**ADDRESS, "city": "Bath", "isDefault": True}, headers=bearer(user_token))
    assert first.status_code == second.status_code == 201

    addresses = client.get("/users/me/addresses", headers=bearer(user_token)).json()["data"]
    defaults = [a["id"] for a in addresses if a["isDefault"]]
    assert defaults == [second.json()["data"]["id"]]

    promoted = client.put(
        f"/users/me/addresses/{first.json()['data']['id']}",
        json={"isDefault": True},
        headers=bearer(user_token),
    )
    assert promoted.status_code == 200
    addresses = client.get("/users/me/addresses", headers=bearer(user_token)).json()["data"]
    assert [a["id"] for a in addresses if a["isDefault"]] == [first.json()["data"]["id"]]


def test_addresses_are_private(client, create_user, login, user_token):
    created = client.post("/users/me/addresses", json=ADDRESS, headers=bearer(user_token)).json()["data"]

    create_user("intruder@example.com")
    intruder = login("intruder@example.com")["accessToken"]

    assert client.get("/users/me/addresses", headers=bearer(intruder)).json()["data"] == []
    assert client.put(
        f"/users/me/addresses/{created['id']}", json={"city": "Paris"}, headers=bearer(intruder)
    ).status_code == 404
    assert client.delete(f"/users/me/addresses/{created['id']}", headers=bearer(intruder)).status_code == 404
    assert client.delete(f"/users/me/addresses/{created['id']}", headers=bearer(user_token)).status_code == 200
