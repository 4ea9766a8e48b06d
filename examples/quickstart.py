#!/usr/bin/env python3
"""
Inkwell Quickstart — a blog post's whole life in one script.

Register → write a draft → publish → read by slug → comment → like →
refresh the access token → delete.
Run with: python examples/quickstart.py

Requires: pip install httpx
Backend must be running: http://localhost:8000
(Categories and tags need an admin: `inkwell create-user you@example.com -f You --admin`.)
"""

import httpx

from _common import BASE, create_client


def main():
    author = create_client("Author")
    reader = create_client("Reader")
    anonymous = httpx.Client(base_url=BASE, timeout=10)

    # ── Write a draft ─────────────────────────────────────────────
    print("\n1. Writing a draft...")
    resp = author.post("/blogs", json={
        "title": "Hello from the quickstart",
        "content": "This post was written by examples/quickstart.py.",
        "summary": "A demo post",
    })
    assert resp.status_code == 201, f"Failed: {resp.text}"
    blog = resp.json()
    print(f"   Blog: {blog['title']} (slug={blog['slug']}, status={blog['status']})")

    resp = anonymous.get(f"/blogs/slug/{blog['slug']}")
    print(f"   Anonymous reader sees the draft? {resp.status_code != 404}")

    # ── Publish ───────────────────────────────────────────────────
    print("\n2. Publishing...")
    resp = author.patch(f"/blogs/{blog['id']}", json={"status": "published"})
    assert resp.status_code == 200, f"Failed: {resp.text}"
    print(f"   Published at {resp.json()['published_at']}")

    resp = anonymous.get(f"/blogs/slug/{blog['slug']}")
    assert resp.status_code == 200, f"Failed: {resp.text}"
    print(f"   Anonymous read OK, views={resp.json()['view_count']}")

    # ── Comment & like ────────────────────────────────────────────
    print("\n3. Reader comments and likes...")
    resp = reader.post("/comments", json={"blog_id": blog["id"], "content": "Nice post!"})
    assert resp.status_code == 201, f"Failed: {resp.text}"
    print(f"   Comment by {resp.json()['user']['first_name']}: {resp.json()['content']}")

    resp = reader.post("/comments", json={"blog_id": blog["id"], "content": "Again!"})
    print(f"   Second comment → {resp.status_code} ({resp.json()['message']})")

    resp = reader.post("/likes", json={"blog_id": blog["id"]})
    print(f"   {resp.json()['message']}")
    resp = anonymous.get(f"/likes/blog/{blog['id']}/count")
    print(f"   Like count: {resp.json()['like_count']}")

    # ── Refresh ───────────────────────────────────────────────────
    print("\n4. Refreshing the author's access token...")
    resp = author.post("/auth/refresh")
    assert resp.status_code == 200, f"Failed: {resp.text}"
    author.headers["Authorization"] = f"Bearer {resp.json()['access_token']}"
    print(f"   Still signed in as {author.get('/auth/me').json()['email']}")

    # ── Clean up ──────────────────────────────────────────────────
    print("\n5. Deleting the post...")
    resp = reader.delete(f"/blogs/{blog['id']}")
    print(f"   Reader tries → {resp.status_code} ({resp.json()['message']})")
    resp = author.delete(f"/blogs/{blog['id']}")
    assert resp.status_code == 200, f"Failed: {resp.text}"
    print("   Deleted.")

    author.post("/auth/logout")
    print("\nDone.")


if __name__ == "__main__":
    main()
