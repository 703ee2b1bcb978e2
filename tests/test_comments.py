"""
Comment endpoint tests — create, list, update, delete and count through
HTTP, including the status codes each service error maps to.
"""
import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from forum.models import ArticleComment

from factories import http_article, http_member


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def _member_and_article(client: AsyncClient, bearer, nickname: str) -> tuple[int, str, int]:
    """Create a member and an article they wrote; return (member_id, auth, article_id)."""
    member_id = await http_member(client, nickname)
    auth = bearer(member_id)
    article_id = await http_article(client, auth)
    return member_id, auth, article_id


async def _post_comment(client: AsyncClient, article_id: int, auth: str, content: str):
    return await client.post(
        f"/api/v1/articles/{article_id}/comments",
        json={"content": content},
        headers={"Authorization": auth},
    )


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_comment(async_client: AsyncClient, bearer):
    member_id, auth, article_id = await _member_and_article(async_client, bearer, "writer")

    resp = await _post_comment(async_client, article_id, auth, "hello")

    assert resp.status_code == 201
    body = resp.json()
    assert body["content"] == "hello"
    assert body["reply_count"] == 0
    assert body["article_id"] == article_id
    assert body["member_id"] == member_id
    assert body["nickname"] == "writer"
    assert "id" in body
    assert "created_at" in body


@pytest.mark.asyncio
async def test_create_comment_without_token(async_client: AsyncClient, bearer):
    _, _, article_id = await _member_and_article(async_client, bearer, "tokenless")

    resp = await async_client.post(
        f"/api/v1/articles/{article_id}/comments", json={"content": "anon"}
    )

    assert resp.status_code == 401
    assert resp.json()["detail"]["code"] == "UNAUTHENTICATED"
    assert resp.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_create_comment_on_missing_article(async_client: AsyncClient, bearer):
    member_id = await http_member(async_client, "lost")

    resp = await _post_comment(async_client, 99999, bearer(member_id), "ghost")

    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "NOT_FOUND_ARTICLE"


@pytest.mark.asyncio
async def test_create_comment_missing_content(async_client: AsyncClient, bearer):
    _, auth, article_id = await _member_and_article(async_client, bearer, "blank")

    resp = await async_client.post(
        f"/api/v1/articles/{article_id}/comments", json={}, headers={"Authorization": auth}
    )

    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_create_comment_empty_content(async_client: AsyncClient, bearer):
    _, auth, article_id = await _member_and_article(async_client, bearer, "empty")

    resp = await _post_comment(async_client, article_id, auth, "")

    assert resp.status_code == 422


# ---------------------------------------------------------------------------
# List + count
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_list_comments_in_posting_order(async_client: AsyncClient, bearer):
    _, auth, article_id = await _member_and_article(async_client, bearer, "lister")
    for i in range(3):
        await _post_comment(async_client, article_id, auth, f"Comment {i}")

    resp = await async_client.get(f"/api/v1/articles/{article_id}/comments")

    assert resp.status_code == 200
    page = resp.json()
    assert page["total"] == 3
    assert page["page"] == 1
    assert [c["content"] for c in page["items"]] == ["Comment 0", "Comment 1", "Comment 2"]
    assert all(c["reply_count"] == 0 for c in page["items"])


@pytest.mark.asyncio
async def test_list_comments_page_size(async_client: AsyncClient, bearer):
    _, auth, article_id = await _member_and_article(async_client, bearer, "pager")
    for i in range(5):
        await _post_comment(async_client, article_id, auth, f"c{i}")

    resp = await async_client.get(
        f"/api/v1/articles/{article_id}/comments", params={"page": 3, "page_size": 2}
    )

    page = resp.json()
    assert page["pages"] == 3
    assert [c["content"] for c in page["items"]] == ["c4"]


@pytest.mark.asyncio
async def test_list_comments_rejects_oversized_page(async_client: AsyncClient, bearer):
    _, _, article_id = await _member_and_article(async_client, bearer, "greedy")

    resp = await async_client.get(
        f"/api/v1/articles/{article_id}/comments", params={"page_size": 1000}
    )

    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_list_comments_on_missing_article(async_client: AsyncClient):
    resp = await async_client.get("/api/v1/articles/424242/comments")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_comment_count_endpoint(async_client: AsyncClient, bearer):
    _, auth, article_id = await _member_and_article(async_client, bearer, "counter")
    resp = await async_client.get(f"/api/v1/articles/{article_id}/comments/count")
    assert resp.json() == {"article_id": article_id, "comment_count": 0}

    await _post_comment(async_client, article_id, auth, "hello")

    resp = await async_client.get(f"/api/v1/articles/{article_id}/comments/count")
    assert resp.status_code == 200
    assert resp.json() == {"article_id": article_id, "comment_count": 1}


@pytest.mark.asyncio
async def test_comment_count_on_missing_article(async_client: AsyncClient):
    resp = await async_client.get("/api/v1/articles/5150/comments/count")
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Update
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_update_own_comment(async_client: AsyncClient, bearer):
    _, auth, article_id = await _member_and_article(async_client, bearer, "editor")
    comment_id = (await _post_comment(async_client, article_id, auth, "draft")).json()["id"]

    resp = await async_client.put(
        f"/api/v1/articles/{article_id}/comments/{comment_id}",
        json={"content": "final"},
        headers={"Authorization": auth},
    )

    assert resp.status_code == 200
    assert resp.json()["content"] == "final"
    listed = (await async_client.get(f"/api/v1/articles/{article_id}/comments")).json()
    assert listed["items"][0]["content"] == "final"


@pytest.mark.asyncio
async def test_update_someone_elses_comment(
    async_client: AsyncClient, db_session: AsyncSession, bearer
):
    _, m1_auth, article_id = await _member_and_article(async_client, bearer, "m1")
    m2_auth = bearer(await http_member(async_client, "m2"))
    comment_id = (await _post_comment(async_client, article_id, m1_auth, "original")).json()["id"]

    resp = await async_client.put(
        f"/api/v1/articles/{article_id}/comments/{comment_id}",
        json={"content": "edited"},
        headers={"Authorization": m2_auth},
    )

    assert resp.status_code == 403
    assert resp.json()["detail"]["code"] == "NO_AUTHORITY"
    stored = (
        await db_session.execute(select(ArticleComment.content).where(ArticleComment.id == comment_id))
    ).scalar_one()
    assert stored == "original"


@pytest.mark.asyncio
async def test_update_missing_comment(async_client: AsyncClient, bearer):
    _, auth, article_id = await _member_and_article(async_client, bearer, "nobody")

    resp = await async_client.put(
        f"/api/v1/articles/{article_id}/comments/8080",
        json={"content": "x"},
        headers={"Authorization": auth},
    )

    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "NOT_FOUND_COMMENT"


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_delete_own_comment(async_client: AsyncClient, bearer):
    _, auth, article_id = await _member_and_article(async_client, bearer, "deleter")
    comment_id = (await _post_comment(async_client, article_id, auth, "bye")).json()["id"]

    resp = await async_client.delete(
        f"/api/v1/articles/{article_id}/comments/{comment_id}",
        headers={"Authorization": auth},
    )

    assert resp.status_code == 204
    count = (await async_client.get(f"/api/v1/articles/{article_id}/comments/count")).json()
    assert count["comment_count"] == 0


@pytest.mark.asyncio
async def test_delete_someone_elses_comment(
    async_client: AsyncClient, db_session: AsyncSession, bearer
):
    _, owner_auth, article_id = await _member_and_article(async_client, bearer, "keeper")
    other_auth = bearer(await http_member(async_client, "vandal"))
    comment_id = (await _post_comment(async_client, article_id, owner_auth, "mine")).json()["id"]

    resp = await async_client.delete(
        f"/api/v1/articles/{article_id}/comments/{comment_id}",
        headers={"Authorization": other_auth},
    )

    assert resp.status_code == 403
    still_there = await db_session.get(ArticleComment, comment_id)
    assert still_there is not None


@pytest.mark.asyncio
async def test_delete_missing_comment(async_client: AsyncClient, bearer):
    _, auth, article_id = await _member_and_article(async_client, bearer, "void")

    resp = await async_client.delete(
        f"/api/v1/articles/{article_id}/comments/123456",
        headers={"Authorization": auth},
    )

    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_delete_with_token_for_removed_member(
    async_client: AsyncClient, bearer, token_provider
):
    _, auth, article_id = await _member_and_article(async_client, bearer, "survivor")
    comment_id = (await _post_comment(async_client, article_id, auth, "kept")).json()["id"]
    stale = f"Bearer {token_provider.create_access_token(987654)}"

    resp = await async_client.delete(
        f"/api/v1/articles/{article_id}/comments/{comment_id}",
        headers={"Authorization": stale},
    )

    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "NOT_FOUND_MEMBER"


@pytest.mark.asyncio
async def test_update_through_unknown_article_url(async_client: AsyncClient, bearer):
    _, auth, article_id = await _member_and_article(async_client, bearer, "pathcheck")
    comment_id = (await _post_comment(async_client, article_id, auth, "original")).json()["id"]

    resp = await async_client.put(
        f"/api/v1/articles/999999/comments/{comment_id}",
        json={"content": "edited elsewhere"},
        headers={"Authorization": auth},
    )

    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "NOT_FOUND_COMMENT"
    listed = (await async_client.get(f"/api/v1/articles/{article_id}/comments")).json()
    assert listed["items"][0]["content"] == "original"


@pytest.mark.asyncio
async def test_delete_through_another_article_url(async_client: AsyncClient, bearer):
    _, auth, article_id = await _member_and_article(async_client, bearer, "crosspost")
    other_article_id = await http_article(async_client, auth, "Second article")
    comment_id = (await _post_comment(async_client, article_id, auth, "stay")).json()["id"]

    resp = await async_client.delete(
        f"/api/v1/articles/{other_article_id}/comments/{comment_id}",
        headers={"Authorization": auth},
    )

    assert resp.status_code == 404
    count = (await async_client.get(f"/api/v1/articles/{article_id}/comments/count")).json()
    assert count["comment_count"] == 1
