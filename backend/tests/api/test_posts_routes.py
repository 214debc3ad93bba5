"""Posts routes — create under a user, list with filters, read, update, delete.

Invariants:
    - authorId always comes from the route, never from the body
    - Missing parent user → 404 and nothing is inserted
    - Title "Hi" is rejected with a detail citing title
"""

from tests.api.fakes import create_post, create_user


async def test_create_post_returns_201_with_author(client):
    user = await create_user(client)
    res = await client.post(
        f"/users/{user['id']}/posts",
        json={"title": "First post", "content": "Long enough content"},
    )
    assert res.status_code == 201
    body = res.json()
    assert body["authorId"] == user["id"]
    assert body["published"] is False
    assert body["author"] == {
        "id": user["id"], "name": user["name"], "email": user["email"],
    }


async def test_create_post_short_title_returns_400(client, seeded):
    res = await client.post("/users/1/posts", json={"title": "Hi"})
    assert res.status_code == 400
    details = res.json()["error"]["details"]
    assert details == [
        {"field": "title", "message": "Title must be at least 3 characters long"},
    ]


async def test_create_post_content_optional_but_bounded(client):
    user = await create_user(client)
    ok = await client.post(f"/users/{user['id']}/posts", json={"title": "No body"})
    assert ok.status_code == 201
    assert ok.json()["content"] is None

    short = await client.post(
        f"/users/{user['id']}/posts", json={"title": "Short body", "content": "tiny"},
    )
    assert short.status_code == 400
    assert short.json()["error"]["details"][0]["field"] == "content"


async def test_create_post_rejects_author_id_in_body(client):
    user = await create_user(client)
    res = await client.post(
        f"/users/{user['id']}/posts",
        json={"title": "Spoofed", "authorId": 99},
    )
    assert res.status_code == 400
    assert res.json()["error"]["details"][0]["field"] == "authorId"


async def test_create_post_for_missing_user_returns_404(client):
    res = await client.post("/users/77/posts", json={"title": "Orphan post"})
    assert res.status_code == 404
    assert res.json()["error"]["message"] == "User not found"

    listing = await client.get("/posts")
    assert listing.json()["pagination"]["total"] == 0


async def test_create_post_invalid_id_checked_before_body(client):
    res = await client.post("/users/abc/posts", json={"title": "Hi"})
    assert res.status_code == 400
    assert [d["field"] for d in res.json()["error"]["details"]] == ["id"]


async def test_list_posts_published_filter(client):
    user = await create_user(client)
    await create_post(client, user["id"], title="Draft one")
    await create_post(client, user["id"], title="Live one", published=True)
    await create_post(client, user["id"], title="Live two", published=True)

    published = await client.get("/posts", params={"published": "true"})
    drafts = await client.get("/posts", params={"published": "false"})
    everything = await client.get("/posts")

    assert [p["title"] for p in published.json()["posts"]] == ["Live one", "Live two"]
    assert published.json()["pagination"]["total"] == 2
    assert [p["title"] for p in drafts.json()["posts"]] == ["Draft one"]
    assert everything.json()["pagination"]["total"] == 3


async def test_list_posts_includes_author(client, seeded):
    res = await client.get("/posts")
    posts = res.json()["posts"]
    assert {p["author"]["name"] for p in posts} == {"John Doe", "Jane Smith"}


async def test_list_posts_pagination(client):
    user = await create_user(client)
    for i in range(3):
        await create_post(client, user["id"], title=f"Post number {i}")
    res = await client.get("/posts", params={"page": 2, "limit": 2})
    body = res.json()
    assert [p["title"] for p in body["posts"]] == ["Post number 2"]
    assert body["pagination"] == {"page": 2, "limit": 2, "total": 3, "pages": 2}


async def test_list_posts_invalid_published_returns_400(client):
    res = await client.get("/posts", params={"published": "maybe"})
    assert res.status_code == 400
    assert res.json()["error"]["details"][0]["field"] == "published"


async def test_get_post(client):
    user = await create_user(client)
    post = await create_post(client, user["id"])
    res = await client.get(f"/posts/{post['id']}")
    assert res.status_code == 200
    body = res.json()
    # SQLite hands timestamps back without an offset
    body.pop("createdAt")
    post.pop("createdAt")
    assert body == post


async def test_get_missing_post_returns_404(client):
    res = await client.get("/posts/5")
    assert res.status_code == 404
    assert res.json()["error"]["message"] == "Post not found"


async def test_update_post(client):
    user = await create_user(client)
    post = await create_post(client, user["id"])
    res = await client.put(f"/posts/{post['id']}", json={"published": True})
    assert res.status_code == 200
    body = res.json()
    assert body["published"] is True
    assert body["title"] == post["title"]


async def test_update_post_requires_a_field(client):
    user = await create_user(client)
    post = await create_post(client, user["id"])
    res = await client.put(f"/posts/{post['id']}", json={})
    assert res.status_code == 400


async def test_update_missing_post_returns_404(client):
    res = await client.put("/posts/31", json={"title": "Never existed"})
    assert res.status_code == 404


async def test_delete_post(client):
    user = await create_user(client)
    post = await create_post(client, user["id"])

    res = await client.delete(f"/posts/{post['id']}")
    assert res.status_code == 204
    assert (await client.get(f"/posts/{post['id']}")).status_code == 404

    owner = await client.get(f"/users/{user['id']}")
    assert owner.json()["posts"] == []
