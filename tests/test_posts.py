"""
Post endpoint tests: blog-owner mutations, global and per-blog listings
(pagination, sorting, viewer status, newest likers) and post reactions
with their denormalized counters.
"""
import uuid

import pytest
from httpx import AsyncClient

from helpers import create_blog, create_post, like, make_user


async def _extended_info(client: AsyncClient, post_id: str, viewer: dict | None = None) -> dict:
    headers = {"X-User-Id": viewer["X-User-Id"]} if viewer else {}
    resp = await client.get(f"/api/v1/posts/{post_id}", headers=headers)
    assert resp.status_code == 200
    return resp.json()["extendedLikesInfo"]


# ---------------------------------------------------------------------------
# Create / read
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_and_get_post(async_client: AsyncClient, author: dict):
    blog_id = await create_blog(async_client, author, "Daily")
    resp = await async_client.post(f"/api/v1/blogs/{blog_id}/posts", json={
        "title": "Hello",
        "shortDescription": "First post",
        "content": "Hello world",
    }, headers=author)
    assert resp.status_code == 201
    created = resp.json()
    assert created["blogId"] == blog_id
    assert created["blogName"] == "Daily"
    assert created["extendedLikesInfo"] == {
        "likesCount": 0, "dislikesCount": 0, "myStatus": "None", "newestLikes": [],
    }

    detail = await async_client.get(f"/api/v1/posts/{created['id']}")
    assert detail.status_code == 200
    assert detail.json()["title"] == "Hello"


@pytest.mark.asyncio
async def test_create_post_in_someone_elses_blog(async_client: AsyncClient, author: dict, reader: dict):
    blog_id = await create_blog(async_client, author)
    resp = await async_client.post(f"/api/v1/blogs/{blog_id}/posts", json={
        "title": "Intruder", "shortDescription": "No", "content": "No",
    }, headers=reader)
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_create_post_in_missing_blog(async_client: AsyncClient, author: dict):
    resp = await async_client.post(f"/api/v1/blogs/{uuid.uuid4()}/posts", json={
        "title": "Orphan", "shortDescription": "No", "content": "No",
    }, headers=author)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_post_title_too_long(async_client: AsyncClient, author: dict):
    blog_id = await create_blog(async_client, author)
    resp = await async_client.post(f"/api/v1/blogs/{blog_id}/posts", json={
        "title": "t" * 31, "shortDescription": "s", "content": "c",
    }, headers=author)
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_get_missing_post(async_client: AsyncClient):
    resp = await async_client.get(f"/api/v1/posts/{uuid.uuid4()}")
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Update / delete
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_update_post(async_client: AsyncClient, author: dict):
    blog_id = await create_blog(async_client, author)
    post_id = await create_post(async_client, author, blog_id)

    resp = await async_client.put(f"/api/v1/blogs/{blog_id}/posts/{post_id}", json={
        "title": "Renamed", "shortDescription": "New short", "content": "New body",
    }, headers=author)
    assert resp.status_code == 204

    detail = (await async_client.get(f"/api/v1/posts/{post_id}")).json()
    assert detail["title"] == "Renamed"
    assert detail["shortDescription"] == "New short"
    assert detail["content"] == "New body"


@pytest.mark.asyncio
async def test_update_post_guard_order(async_client: AsyncClient, author: dict, reader: dict):
    """A missing post is 404 even for a non-owner; an existing one is 403."""
    blog_id = await create_blog(async_client, author)
    post_id = await create_post(async_client, author, blog_id)
    payload = {"title": "X", "shortDescription": "X", "content": "X"}

    missing = await async_client.put(
        f"/api/v1/blogs/{blog_id}/posts/{uuid.uuid4()}", json=payload, headers=reader
    )
    assert missing.status_code == 404

    forbidden = await async_client.put(
        f"/api/v1/blogs/{blog_id}/posts/{post_id}", json=payload, headers=reader
    )
    assert forbidden.status_code == 403


@pytest.mark.asyncio
async def test_post_is_addressed_within_its_blog(async_client: AsyncClient, author: dict):
    blog_a = await create_blog(async_client, author, "A")
    blog_b = await create_blog(async_client, author, "B")
    post_id = await create_post(async_client, author, blog_a)

    resp = await async_client.delete(f"/api/v1/blogs/{blog_b}/posts/{post_id}", headers=author)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_deleted_post_disappears(async_client: AsyncClient, author: dict, reader: dict):
    blog_id = await create_blog(async_client, author)
    kept = await create_post(async_client, author, blog_id, "Kept")
    gone = await create_post(async_client, author, blog_id, "Gone")
    await like(async_client, reader, "posts", gone, "Like")

    resp = await async_client.delete(f"/api/v1/blogs/{blog_id}/posts/{gone}", headers=author)
    assert resp.status_code == 204

    assert (await async_client.get(f"/api/v1/posts/{gone}")).status_code == 404
    for url in ("/api/v1/posts", f"/api/v1/blogs/{blog_id}/posts"):
        data = (await async_client.get(url)).json()
        assert data["totalCount"] == 1
        assert [item["id"] for item in data["items"]] == [kept]

    reaction = await async_client.put(
        f"/api/v1/posts/{gone}/like-status", json={"likeStatus": "Like"}, headers=reader
    )
    assert reaction.status_code == 404
    again = await async_client.delete(f"/api/v1/blogs/{blog_id}/posts/{gone}", headers=author)
    assert again.status_code == 404


# ---------------------------------------------------------------------------
# Reactions and counters
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_like_dislike_none_counters(async_client: AsyncClient, author: dict, reader: dict):
    blog_id = await create_blog(async_client, author)
    post_id = await create_post(async_client, author, blog_id)

    await like(async_client, reader, "posts", post_id, "Like")
    info = await _extended_info(async_client, post_id, reader)
    assert (info["likesCount"], info["dislikesCount"], info["myStatus"]) == (1, 0, "Like")

    await like(async_client, reader, "posts", post_id, "Dislike")
    info = await _extended_info(async_client, post_id, reader)
    assert (info["likesCount"], info["dislikesCount"], info["myStatus"]) == (0, 1, "Dislike")

    await like(async_client, reader, "posts", post_id, "None")
    info = await _extended_info(async_client, post_id, reader)
    assert (info["likesCount"], info["dislikesCount"], info["myStatus"]) == (0, 0, "None")


@pytest.mark.asyncio
async def test_repeated_like_counts_once(async_client: AsyncClient, author: dict, reader: dict):
    blog_id = await create_blog(async_client, author)
    post_id = await create_post(async_client, author, blog_id)
    for status in ("Like", "like", "LIKE"):
        await like(async_client, reader, "posts", post_id, status)

    info = await _extended_info(async_client, post_id)
    assert info["likesCount"] == 1
    assert len(info["newestLikes"]) == 1


@pytest.mark.asyncio
async def test_newest_likes_shows_three_latest(async_client: AsyncClient, author: dict):
    blog_id = await create_blog(async_client, author)
    post_id = await create_post(async_client, author, blog_id)
    users = [make_user(f"user{i}") for i in range(4)]
    for user in users:
        await like(async_client, user, "posts", post_id, "Like")
    await like(async_client, make_user("hater"), "posts", post_id, "Dislike")

    info = await _extended_info(async_client, post_id)
    assert info["likesCount"] == 4
    assert info["dislikesCount"] == 1
    assert [l["login"] for l in info["newestLikes"]] == ["user3", "user2", "user1"]
    assert info["newestLikes"][0]["userId"] == users[3]["X-User-Id"]


@pytest.mark.asyncio
async def test_reaction_requires_identity(async_client: AsyncClient, author: dict):
    blog_id = await create_blog(async_client, author)
    post_id = await create_post(async_client, author, blog_id)
    resp = await async_client.put(f"/api/v1/posts/{post_id}/like-status", json={"likeStatus": "Like"})
    assert resp.status_code == 401


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_list_posts_empty(async_client: AsyncClient):
    resp = await async_client.get("/api/v1/posts")
    assert resp.status_code == 200
    assert resp.json() == {
        "pagesCount": 0, "page": 1, "pageSize": 10, "totalCount": 0, "items": [],
    }


@pytest.mark.asyncio
async def test_list_posts_pages_cover_everything_once(async_client: AsyncClient, author: dict):
    blog_id = await create_blog(async_client, author)
    created = [await create_post(async_client, author, blog_id, f"Post {i}") for i in range(7)]

    seen: list[str] = []
    for page in (1, 2, 3):
        data = (await async_client.get(
            "/api/v1/posts", params={"pageNumber": page, "pageSize": 3}
        )).json()
        assert data["pagesCount"] == 3
        assert data["totalCount"] == 7
        assert len(data["items"]) <= 3
        seen.extend(item["id"] for item in data["items"])

    assert sorted(seen) == sorted(created)
    assert len(set(seen)) == 7


@pytest.mark.asyncio
async def test_list_blog_posts_only_that_blog(async_client: AsyncClient, author: dict):
    other_author = make_user("other")
    mine = await create_blog(async_client, author, "Mine")
    other = await create_blog(async_client, other_author, "Other")
    post_id = await create_post(async_client, author, mine)
    await create_post(async_client, other_author, other)

    data = (await async_client.get(f"/api/v1/blogs/{mine}/posts")).json()
    assert [item["id"] for item in data["items"]] == [post_id]
    everything = (await async_client.get("/api/v1/posts")).json()
    assert everything["totalCount"] == 2


@pytest.mark.asyncio
async def test_list_posts_of_missing_blog(async_client: AsyncClient):
    resp = await async_client.get(f"/api/v1/blogs/{uuid.uuid4()}/posts")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_list_posts_sort_by_title_asc(async_client: AsyncClient, author: dict):
    blog_id = await create_blog(async_client, author)
    for title in ("Charlie", "Alpha", "Bravo"):
        await create_post(async_client, author, blog_id, title)

    data = (await async_client.get(
        f"/api/v1/blogs/{blog_id}/posts", params={"sortBy": "title", "sortDirection": "asc"}
    )).json()
    assert [item["title"] for item in data["items"]] == ["Alpha", "Bravo", "Charlie"]


@pytest.mark.asyncio
async def test_list_all_posts_sort_by_blog_name(async_client: AsyncClient, author: dict):
    zulu = await create_blog(async_client, author, "Zulu")
    alpha = await create_blog(async_client, author, "Alpha")
    await create_post(async_client, author, zulu, "In Zulu")
    await create_post(async_client, author, alpha, "In Alpha")

    data = (await async_client.get(
        "/api/v1/posts", params={"sortBy": "blogName", "sortDirection": "asc"}
    )).json()
    assert [item["blogName"] for item in data["items"]] == ["Alpha", "Zulu"]


@pytest.mark.asyncio
async def test_blog_listing_ignores_blog_name_sort(async_client: AsyncClient, author: dict):
    """blogName is only sortable in the global listing; per blog it means createdAt."""
    blog_id = await create_blog(async_client, author)
    first = await create_post(async_client, author, blog_id, "First")
    second = await create_post(async_client, author, blog_id, "Second")

    data = (await async_client.get(
        f"/api/v1/blogs/{blog_id}/posts", params={"sortBy": "blogName"}
    )).json()
    assert [item["id"] for item in data["items"]] == [second, first]


@pytest.mark.asyncio
async def test_list_posts_viewer_status_and_newest_likes(async_client: AsyncClient, author: dict, reader: dict):
    blog_id = await create_blog(async_client, author)
    liked = await create_post(async_client, author, blog_id, "Liked")
    disliked = await create_post(async_client, author, blog_id, "Disliked")
    plain = await create_post(async_client, author, blog_id, "Plain")
    for i in range(4):
        await like(async_client, make_user(f"fan{i}"), "posts", liked, "Like")
    await like(async_client, reader, "posts", liked, "Like")
    await like(async_client, reader, "posts", disliked, "Dislike")

    data = (await async_client.get(
        "/api/v1/posts", headers={"X-User-Id": reader["X-User-Id"]}
    )).json()
    infos = {item["id"]: item["extendedLikesInfo"] for item in data["items"]}

    assert infos[liked]["myStatus"] == "Like"
    assert infos[liked]["likesCount"] == 5
    assert [l["login"] for l in infos[liked]["newestLikes"]] == ["reader", "fan3", "fan2"]
    assert infos[disliked]["myStatus"] == "Dislike"
    assert infos[disliked]["newestLikes"] == []
    assert infos[plain]["myStatus"] == "None"

    anonymous = (await async_client.get("/api/v1/posts")).json()
    assert {item["extendedLikesInfo"]["myStatus"] for item in anonymous["items"]} == {"None"}
