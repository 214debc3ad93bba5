"""Users routes — create, list, search, get, update and delete through the full pipeline.

Invariants:
    - Created email is returned exactly as submitted, with an empty posts list
    - Duplicate email → 409 and the row count does not change
    - Empty update → 400 before any lookup (even for ids that don't exist)
    - Delete is permanent and cascades to the user's posts
"""

from sqlalchemy import func, select

from postboard.models.post import Post
from tests.api.fakes import create_post, create_user


async def _user_total(client) -> int:
    res = await client.get("/users")
    return res.json()["pagination"]["total"]


# ─── Create ─────────────────────────────────────────────────────

async def test_create_user_returns_201_with_exact_email(client):
    res = await client.post(
        "/users", json={"name": "Mixed Case", "email": "Mixed.Case@Example.COM"},
    )
    assert res.status_code == 201
    body = res.json()
    assert body["email"] == "Mixed.Case@Example.COM"
    assert body["name"] == "Mixed Case"
    assert body["posts"] == []
    assert isinstance(body["id"], int) and body["id"] > 0
    assert "createdAt" in body


async def test_create_user_duplicate_email_returns_409(client):
    await create_user(client, email="dup@example.com")
    before = await _user_total(client)

    res = await client.post(
        "/users", json={"name": "Second", "email": "dup@example.com"},
    )

    assert res.status_code == 409
    error = res.json()["error"]
    assert error["message"] == "User with this email already exists"
    assert error["code"] == "CONFLICT"
    assert await _user_total(client) == before


async def test_email_match_is_case_sensitive(client):
    """Uniqueness is an exact match: a different casing is another address."""
    await create_user(client, email="case@example.com")
    res = await client.post(
        "/users", json={"name": "Upper", "email": "CASE@example.com"},
    )
    assert res.status_code == 201


async def test_unique_constraint_violation_maps_to_409(client, monkeypatch):
    """When the pre-check loses a race, the database constraint still yields 409."""
    await create_user(client, email="race@example.com")

    async def never_taken(*args, **kwargs):
        return False

    monkeypatch.setattr("postboard.services.users._email_taken", never_taken)
    res = await client.post(
        "/users", json={"name": "Racer", "email": "race@example.com"},
    )

    assert res.status_code == 409
    assert res.json()["error"]["field"] == "email"
    assert await _user_total(client) == 1


async def test_create_user_reports_every_invalid_field(client):
    res = await client.post("/users", json={"name": "A", "email": "not-an-email"})
    assert res.status_code == 400
    error = res.json()["error"]
    assert error["message"] == "Validation failed"
    details = {d["field"]: d["message"] for d in error["details"]}
    assert details == {
        "name": "Name must be at least 2 characters long",
        "email": "Please provide a valid email address",
    }


async def test_create_user_rejects_malformed_email(client):
    res = await client.post("/users", json={"name": "Bogus", "email": "a@b..c"})
    assert res.status_code == 400
    assert res.json()["error"]["details"] == [
        {"field": "email", "message": "Please provide a valid email address"},
    ]
    assert await _user_total(client) == 0


async def test_create_user_missing_fields(client):
    res = await client.post("/users", json={})
    assert res.status_code == 400
    fields = {d["field"]: d["message"] for d in res.json()["error"]["details"]}
    assert fields == {"name": "Name is required", "email": "Email is required"}


async def test_create_user_rejects_unknown_fields(client):
    res = await client.post(
        "/users",
        json={"name": "Alice", "email": "a@example.com", "role": "admin"},
    )
    assert res.status_code == 400
    assert res.json()["error"]["details"][0]["field"] == "role"


async def test_create_user_without_content_type_validates_empty_object(client):
    res = await client.post("/users", content=b"name=x", headers={"content-type": "text/plain"})
    assert res.status_code == 400
    fields = {d["field"] for d in res.json()["error"]["details"]}
    assert fields == {"name", "email"}


# ─── List / search ──────────────────────────────────────────────

async def test_list_users_second_page(client):
    for i in range(15):
        await create_user(client, name=f"User {i:02d}", email=f"user{i}@example.com")

    res = await client.get("/users", params={"page": 2, "limit": 10})

    assert res.status_code == 200
    body = res.json()
    assert len(body["users"]) == 5
    assert body["pagination"] == {"page": 2, "limit": 10, "total": 15, "pages": 2}
    assert [u["name"] for u in body["users"]] == [f"User {i:02d}" for i in range(10, 15)]


async def test_list_users_empty(client):
    res = await client.get("/users")
    assert res.json() == {
        "users": [],
        "pagination": {"page": 1, "limit": 10, "total": 0, "pages": 0},
    }


async def test_list_users_normalizes_out_of_range_pagination(client):
    await create_user(client)
    res = await client.get("/users", params={"page": 0, "limit": 500})
    assert res.json()["pagination"]["page"] == 1
    assert res.json()["pagination"]["limit"] == 100

    res = await client.get("/users", params={"limit": -3})
    assert res.json()["pagination"]["limit"] == 10


async def test_list_users_non_integer_page_returns_400(client):
    res = await client.get("/users", params={"page": "abc"})
    assert res.status_code == 400
    error = res.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["details"][0]["field"] == "page"


async def test_search_matches_name_case_insensitive(client, seeded):
    res = await client.get("/users", params={"search": "jane"})
    body = res.json()
    assert body["pagination"]["total"] == 1
    assert [u["name"] for u in body["users"]] == ["Jane Smith"]


async def test_search_matches_email_substring(client, seeded):
    res = await client.get("/users", params={"search": "JOHN@EXAMPLE"})
    assert [u["email"] for u in res.json()["users"]] == ["john@example.com"]


async def test_search_treats_wildcards_literally(client, seeded):
    res = await client.get("/users", params={"search": "%"})
    assert res.json()["users"] == []


async def test_listed_users_include_posts(client, seeded):
    res = await client.get("/users")
    users = res.json()["users"]
    assert all(len(u["posts"]) == 1 for u in users)
    assert users[0]["posts"][0]["authorId"] == users[0]["id"]


# ─── Get ────────────────────────────────────────────────────────

async def test_get_user_is_idempotent(client):
    user = await create_user(client)
    await create_post(client, user["id"])

    first = await client.get(f"/users/{user['id']}")
    second = await client.get(f"/users/{user['id']}")

    assert first.status_code == 200
    assert first.json() == second.json()
    assert len(first.json()["posts"]) == 1


async def test_get_missing_user_returns_404(client):
    res = await client.get("/users/999")
    assert res.status_code == 404
    error = res.json()["error"]
    assert error["message"] == "User not found"
    assert error["id"] == 999


async def test_get_user_with_invalid_id_returns_400(client):
    for bad in ("abc", "0", "-4", "1.5", "2147483648"):
        res = await client.get(f"/users/{bad}")
        assert res.status_code == 400, bad
        assert res.json()["error"]["details"][0]["field"] == "id"


# ─── Update ─────────────────────────────────────────────────────

async def test_update_user_partial(client):
    user = await create_user(client)
    res = await client.put(f"/users/{user['id']}", json={"name": "Renamed"})
    assert res.status_code == 200
    body = res.json()
    assert body["name"] == "Renamed"
    assert body["email"] == user["email"]


async def test_update_with_no_fields_returns_400_before_lookup(client):
    res = await client.put("/users/424242", json={})
    assert res.status_code == 400
    assert res.json()["error"]["details"][0]["message"] == (
        "At least one field must be provided"
    )


async def test_update_rejects_null_fields(client):
    user = await create_user(client)
    res = await client.put(f"/users/{user['id']}", json={"name": None})
    assert res.status_code == 400
    assert res.json()["error"]["details"][0]["field"] == "name"


async def test_update_missing_user_returns_404(client):
    res = await client.put("/users/999", json={"name": "Nobody"})
    assert res.status_code == 404


async def test_update_email_to_taken_address_returns_409(client):
    await create_user(client, email="taken@example.com")
    other = await create_user(client, name="Other", email="other@example.com")
    res = await client.put(
        f"/users/{other['id']}", json={"email": "taken@example.com"},
    )
    assert res.status_code == 409


async def test_update_email_to_own_address_is_allowed(client):
    user = await create_user(client)
    res = await client.put(f"/users/{user['id']}", json={"email": user["email"]})
    assert res.status_code == 200


# ─── Delete ─────────────────────────────────────────────────────

async def test_delete_then_delete_again(client):
    user = await create_user(client)

    first = await client.delete(f"/users/{user['id']}")
    second = await client.delete(f"/users/{user['id']}")

    assert first.status_code == 204
    assert first.content == b""
    assert second.status_code == 404


async def test_delete_missing_user_returns_404(client):
    res = await client.delete("/users/12345")
    assert res.status_code == 404


async def test_delete_user_cascades_to_posts(client, db):
    user = await create_user(client)
    await create_post(client, user["id"])
    await create_post(client, user["id"], title="Second post")

    res = await client.delete(f"/users/{user['id']}")

    assert res.status_code == 204
    remaining = await db.scalar(
        select(func.count()).select_from(Post).where(Post.author_id == user["id"]),
    )
    assert remaining == 0
