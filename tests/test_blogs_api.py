"""Blog API tests.

Learn: Tests cover:
1. Create with slug generation (and collision suffixes)
2. Visibility: drafts are invisible to everyone but author and admins
3. View counting on single-blog reads
4. Ownership rules for update/delete, admin-only featuring
5. Category/tag references and list filters
"""

import re
import uuid

import pytest

from inkwell.schemas.blog import BlogStatus


async def create_blog(client, account, **overrides):
    body = {
        "title": "Hello World",
        "content": "First post body.",
        "status": BlogStatus.PUBLISHED.value,
    }
    body.update(overrides)
    r = await client.post("/api/v1/blogs", json=body, headers=account["headers"])
    assert r.status_code == 201, r.text
    return r.json()


async def create_category(client, admin, name="Python"):
    r = await client.post("/api/v1/categories", json={"name": name}, headers=admin["headers"])
    assert r.status_code == 201, r.text
    return r.json()


async def create_tag(client, admin, name="FastAPI"):
    r = await client.post("/api/v1/tags", json={"name": name}, headers=admin["headers"])
    assert r.status_code == 201, r.text
    return r.json()


# ═══════════════════════════════════════════════════════════
# Create
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_create_blog(client, user):
    blog = await create_blog(client, user, summary="Short summary")
    assert blog["slug"] == "hello-world"
    assert blog["author"]["id"] == user["id"]
    assert "email" not in blog["author"]
    assert blog["summary"] == "Short summary"
    assert blog["view_count"] == 0
    assert blog["is_featured"] is False
    assert blog["published_at"] is not None
    assert blog["tags"] == []
    assert blog["category"] is None


@pytest.mark.asyncio
async def test_create_draft_has_no_published_at(client, user):
    blog = await create_blog(client, user, status="draft")
    assert blog["status"] == "draft"
    assert blog["published_at"] is None


@pytest.mark.asyncio
async def test_create_blog_requires_auth(client):
    r = await client.post("/api/v1/blogs", json={"title": "Hello World", "content": "x"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_create_blog_short_title(client, user):
    r = await client.post(
        "/api/v1/blogs", json={"title": "Hey", "content": "x"}, headers=user["headers"]
    )
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_duplicate_titles_get_distinct_slugs(client, user, other_user):
    first = await create_blog(client, user)
    second = await create_blog(client, other_user)
    assert first["slug"] == "hello-world"
    assert second["slug"] != first["slug"]
    assert re.fullmatch(r"hello-world-[a-z0-9]{4}", second["slug"])


@pytest.mark.asyncio
async def test_punctuation_only_title_falls_back(client, user):
    blog = await create_blog(client, user, title="!!!!!!")
    assert blog["slug"] == "post"


@pytest.mark.asyncio
async def test_create_blog_with_category_and_tags(client, user, admin):
    category = await create_category(client, admin)
    tag_a = await create_tag(client, admin, "FastAPI")
    tag_b = await create_tag(client, admin, "Async IO")

    blog = await create_blog(
        client, user, category_id=category["id"], tag_ids=[tag_a["id"], tag_b["id"]]
    )
    assert blog["category"]["slug"] == "python"
    assert {t["slug"] for t in blog["tags"]} == {"fastapi", "async-io"}


@pytest.mark.asyncio
async def test_create_blog_unknown_category(client, user):
    r = await client.post(
        "/api/v1/blogs",
        json={"title": "Hello World", "content": "x", "category_id": str(uuid.uuid4())},
        headers=user["headers"],
    )
    assert r.status_code == 400
    assert "Category" in r.json()["message"]


@pytest.mark.asyncio
async def test_create_blog_unknown_tag(client, user):
    r = await client.post(
        "/api/v1/blogs",
        json={"title": "Hello World", "content": "x", "tag_ids": [str(uuid.uuid4())]},
        headers=user["headers"],
    )
    assert r.status_code == 400


# ═══════════════════════════════════════════════════════════
# Read & visibility
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_get_blog_counts_views(client, user):
    blog = await create_blog(client, user)

    r1 = await client.get(f"/api/v1/blogs/{blog['id']}")
    r2 = await client.get(f"/api/v1/blogs/slug/{blog['slug']}")
    assert r1.status_code == 200
    assert r1.json()["view_count"] == 1
    assert r2.json()["view_count"] == 2
    assert r2.json()["updated_at"] == blog["updated_at"]


@pytest.mark.asyncio
async def test_get_blog_not_found(client):
    r = await client.get(f"/api/v1/blogs/{uuid.uuid4()}")
    assert r.status_code == 404
    assert r.json()["statusCode"] == 404


@pytest.mark.asyncio
async def test_draft_hidden_from_others(client, user, other_user, admin):
    draft = await create_blog(client, user, status="draft")

    assert (await client.get(f"/api/v1/blogs/{draft['id']}")).status_code == 404
    r = await client.get(f"/api/v1/blogs/{draft['id']}", headers=other_user["headers"])
    assert r.status_code == 404
    r = await client.get(f"/api/v1/blogs/slug/{draft['slug']}", headers=other_user["headers"])
    assert r.status_code == 404

    r = await client.get(f"/api/v1/blogs/{draft['id']}", headers=user["headers"])
    assert r.status_code == 200
    r = await client.get(f"/api/v1/blogs/{draft['id']}", headers=admin["headers"])
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_list_blogs_visibility(client, user, other_user, admin):
    published = await create_blog(client, user, title="Published post")
    draft = await create_blog(client, user, title="Draft post", status="draft")

    anon = {b["id"] for b in (await client.get("/api/v1/blogs")).json()}
    assert anon == {published["id"]}

    mine = await client.get("/api/v1/blogs", headers=user["headers"])
    assert {b["id"] for b in mine.json()} == {published["id"], draft["id"]}

    theirs = await client.get("/api/v1/blogs", headers=other_user["headers"])
    assert {b["id"] for b in theirs.json()} == {published["id"]}

    everything = await client.get("/api/v1/blogs", headers=admin["headers"])
    assert {b["id"] for b in everything.json()} == {published["id"], draft["id"]}


@pytest.mark.asyncio
async def test_list_blogs_newest_first_with_paging(client, user):
    for i in range(3):
        await create_blog(client, user, title=f"Post number {i}")

    r = await client.get("/api/v1/blogs", params={"limit": 2})
    titles = [b["title"] for b in r.json()]
    assert titles == ["Post number 2", "Post number 1"]

    r = await client.get("/api/v1/blogs", params={"limit": 2, "offset": 2})
    assert [b["title"] for b in r.json()] == ["Post number 0"]


@pytest.mark.asyncio
async def test_list_blogs_filters(client, user, other_user, admin):
    category = await create_category(client, admin)
    tag = await create_tag(client, admin)
    tagged = await create_blog(
        client, user, title="Tagged post", category_id=category["id"], tag_ids=[tag["id"]]
    )
    other = await create_blog(client, other_user, title="Other post")

    r = await client.get("/api/v1/blogs", params={"tag": "fastapi"})
    assert [b["id"] for b in r.json()] == [tagged["id"]]

    r = await client.get("/api/v1/blogs", params={"category_id": category["id"]})
    assert [b["id"] for b in r.json()] == [tagged["id"]]

    r = await client.get("/api/v1/blogs", params={"author_id": other_user["id"]})
    assert [b["id"] for b in r.json()] == [other["id"]]


@pytest.mark.asyncio
async def test_list_blogs_status_filter_cannot_reveal_drafts(client, user):
    await create_blog(client, user, status="draft")
    r = await client.get("/api/v1/blogs", params={"status": "draft"})
    assert r.json() == []


# ═══════════════════════════════════════════════════════════
# Update
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_update_blog_keeps_slug(client, user):
    blog = await create_blog(client, user)
    r = await client.patch(
        f"/api/v1/blogs/{blog['id']}",
        json={"title": "A brand new title", "content": "Edited."},
        headers=user["headers"],
    )
    assert r.status_code == 200
    data = r.json()
    assert data["title"] == "A brand new title"
    assert data["content"] == "Edited."
    assert data["slug"] == "hello-world"


@pytest.mark.asyncio
async def test_publishing_draft_stamps_published_at(client, user):
    blog = await create_blog(client, user, status="draft")
    r = await client.patch(
        f"/api/v1/blogs/{blog['id']}", json={"status": "published"}, headers=user["headers"]
    )
    assert r.json()["status"] == "published"
    first_published = r.json()["published_at"]
    assert first_published is not None

    await client.patch(
        f"/api/v1/blogs/{blog['id']}", json={"status": "archived"}, headers=user["headers"]
    )
    r = await client.patch(
        f"/api/v1/blogs/{blog['id']}", json={"status": "published"}, headers=user["headers"]
    )
    assert r.json()["published_at"] == first_published


@pytest.mark.asyncio
async def test_update_blog_not_author(client, user, other_user):
    blog = await create_blog(client, user)
    r = await client.patch(
        f"/api/v1/blogs/{blog['id']}", json={"title": "Hijacked title"}, headers=other_user["headers"]
    )
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_admin_can_update_any_blog(client, user, admin):
    blog = await create_blog(client, user)
    r = await client.patch(
        f"/api/v1/blogs/{blog['id']}", json={"title": "Moderated title"}, headers=admin["headers"]
    )
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_only_admin_can_feature(client, user, admin):
    blog = await create_blog(client, user)
    r = await client.patch(
        f"/api/v1/blogs/{blog['id']}", json={"is_featured": True}, headers=user["headers"]
    )
    assert r.status_code == 403

    r = await client.patch(
        f"/api/v1/blogs/{blog['id']}", json={"is_featured": True}, headers=admin["headers"]
    )
    assert r.status_code == 200
    assert r.json()["is_featured"] is True


@pytest.mark.asyncio
async def test_update_blog_replaces_tags(client, user, admin):
    tag_a = await create_tag(client, admin, "FastAPI")
    tag_b = await create_tag(client, admin, "SQLAlchemy")
    blog = await create_blog(client, user, tag_ids=[tag_a["id"]])

    r = await client.patch(
        f"/api/v1/blogs/{blog['id']}", json={"tag_ids": [tag_b["id"]]}, headers=user["headers"]
    )
    assert [t["slug"] for t in r.json()["tags"]] == ["sqlalchemy"]


# ═══════════════════════════════════════════════════════════
# Delete
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_delete_blog(client, user):
    blog = await create_blog(client, user)
    r = await client.delete(f"/api/v1/blogs/{blog['id']}", headers=user["headers"])
    assert r.status_code == 200
    assert (await client.get(f"/api/v1/blogs/{blog['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_delete_blog_not_author(client, user, other_user):
    blog = await create_blog(client, user)
    r = await client.delete(f"/api/v1/blogs/{blog['id']}", headers=other_user["headers"])
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_delete_blog_removes_comments_and_likes(client, user, other_user):
    blog = await create_blog(client, user)
    await client.post(
        "/api/v1/comments", json={"blog_id": blog["id"], "content": "Nice"}, headers=other_user["headers"]
    )
    await client.post("/api/v1/likes", json={"blog_id": blog["id"]}, headers=other_user["headers"])

    r = await client.delete(f"/api/v1/blogs/{blog['id']}", headers=user["headers"])
    assert r.status_code == 200

    r = await client.get("/api/v1/likes/my-likes", headers=other_user["headers"])
    assert r.json() == []
    r = await client.get(f"/api/v1/comments/blog/{blog['id']}")
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_delete_all_blogs_admin_only(client, user, admin):
    await create_blog(client, user, title="First post")
    await create_blog(client, user, title="Second post")

    r = await client.delete("/api/v1/blogs/all", headers=user["headers"])
    assert r.status_code == 403

    r = await client.delete("/api/v1/blogs/all", headers=admin["headers"])
    assert r.status_code == 200
    assert r.json() == {"deleted": 2}
    assert (await client.get("/api/v1/blogs")).json() == []
