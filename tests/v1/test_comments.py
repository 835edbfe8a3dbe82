# mypy: ignore-errors
# tests/v1/test_comments.py
"""Tests for comment endpoints."""

from fastapi import status

from firehose.db.time import SECONDS_PER_HOUR
from firehose.services.rate_limit import rate_limit_key


def _comment(client, headers, post_id, body="Great read", parent_id=None):
    return client.post(
        f"/api/v1/posts/{post_id}/comments",
        json={"body": body, "parent_id": parent_id},
        headers=headers,
    )


def test_submit_comment_updates_count(client, auth_token, test_post, db_session) -> None:
    response = _comment(client, auth_token, test_post.id)
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["comments_count"] == 1

    _comment(client, auth_token, test_post.id, body="Second thought")
    db_session.refresh(test_post)
    assert test_post.comments_count == 2


def test_reply_to_comment(client, auth_token, other_auth_token, test_post) -> None:
    parent_id = _comment(client, auth_token, test_post.id).json()["id"]
    response = _comment(client, other_auth_token, test_post.id, body="Agreed", parent_id=parent_id)
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["comments_count"] == 2

    # Replies are not listed at the top level.
    listed = client.get(f"/api/v1/posts/{test_post.id}/comments").json()["comments"]
    assert [c["id"] for c in listed] == [parent_id]


def test_reply_to_unknown_parent(client, auth_token, test_user, test_post, counter_store) -> None:
    response = _comment(client, auth_token, test_post.id, parent_id="missing")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["detail"] == "Parent comment not found"
    # The hourly allowance is untouched by a rejected reply.
    assert counter_store.get(rate_limit_key("comment", test_user.id)) == 0


def test_comment_on_missing_post(client, auth_token) -> None:
    response = _comment(client, auth_token, "missing")
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_empty_comment_rejected(client, auth_token, test_post) -> None:
    response = _comment(client, auth_token, test_post.id, body="   ")
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_oversized_comment_rejected(client, auth_token, test_post) -> None:
    response = _comment(client, auth_token, test_post.id, body="x" * 10_001)
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_comment_rate_limit(client, auth_token, test_post, clock) -> None:
    for i in range(10):
        assert _comment(client, auth_token, test_post.id, body=f"c{i}").status_code == status.HTTP_201_CREATED

    response = _comment(client, auth_token, test_post.id, body="one too many")
    assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS
    assert response.json()["detail"] == "Rate limit exceeded. 10 comments per hour max."

    clock.advance(SECONDS_PER_HOUR)
    assert _comment(client, auth_token, test_post.id, body="later").status_code == status.HTTP_201_CREATED


def test_list_comments_best_and_new(client, test_post, test_user, other_user, make_comment) -> None:
    older = make_comment(test_post, test_user, body="older, popular", age_hours=3, score=5)
    newer = make_comment(test_post, other_user, body="newer", age_hours=1)

    best = client.get(f"/api/v1/posts/{test_post.id}/comments").json()
    assert [c["id"] for c in best["comments"]] == [older.id, newer.id]
    assert best["comments"][0]["user_display_name"] == "Test User"

    new = client.get(f"/api/v1/posts/{test_post.id}/comments", params={"sort": "new"}).json()
    assert [c["id"] for c in new["comments"]] == [newer.id, older.id]


def test_list_comments_missing_post(client) -> None:
    response = client.get("/api/v1/posts/missing/comments")
    assert response.status_code == status.HTTP_404_NOT_FOUND
