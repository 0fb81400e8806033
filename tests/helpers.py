"""Shared API helpers for the endpoint tests."""
import uuid

from httpx import AsyncClient

VALID_COMMENT = "This comment is long enough to pass."


def make_user(login: str = "user") -> dict:
    """Headers identifying a fresh user, as the auth layer would forward them."""
    return {"X-User-Id": str(uuid.uuid4()), "X-User-Login": login}


async def create_blog(client: AsyncClient, headers: dict, name: str = "Tech Blog") -> str:
    resp = await client.post("/api/v1/blogs", json={
        "name": name,
        "description": "A blog about things",
        "websiteUrl": "https://example.com",
    }, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["id"]


async def create_post(
    client: AsyncClient, headers: dict, blog_id: str, title: str = "A post", content: str = "Body"
) -> str:
    resp = await client.post(f"/api/v1/blogs/{blog_id}/posts", json={
        "title": title,
        "shortDescription": f"About {title}",
        "content": content,
    }, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["id"]


async def create_comment(
    client: AsyncClient, headers: dict, post_id: str, content: str = VALID_COMMENT
) -> str:
    resp = await client.post(
        f"/api/v1/posts/{post_id}/comments", json={"content": content}, headers=headers
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["id"]


async def like(client: AsyncClient, headers: dict, kind: str, entity_id: str, status: str) -> None:
    resp = await client.put(
        f"/api/v1/{kind}/{entity_id}/like-status", json={"likeStatus": status}, headers=headers
    )
    assert resp.status_code == 204, resp.text
