# mypy: ignore-errors
# tests/v1/test_votes.py
"""Tests for vote-related endpoints."""

from fastapi import status

from firehose.db.time import SECONDS_PER_HOUR


def _vote(client, headers, entity_id, direction, entity_type="post"):
    return client.post(
        "/api/v1/votes/",
        json={"entity_type": entity_type, "entity_id": entity_id, "direction": direction},
        headers=headers,
    )


def test_cast_upvote(client, auth_token, test_post) -> None:
    response = _vote(client, auth_token, test_post.id, "up")
    assert response.status_code == status.HTTP_201_CREATED
    body = response.json()
    assert body["success"] is True
    assert body["direction"] == "up"
    assert body["new_score"] == 1


def test_up_then_down_gives_minus_one(client, auth_token, test_post) -> None:
    """A flipped vote replaces the earlier one instead of adding to it."""
    assert _vote(client, auth_token, test_post.id, "up").json()["new_score"] == 1
    response = _vote(client, auth_token, test_post.id, "down")
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["new_score"] == -1


def test_repeated_vote_counts_once(client, auth_token, test_post, db_session) -> None:
    for _ in range(3):
        response = _vote(client, auth_token, test_post.id, "up")
    assert response.json()["new_score"] == 1
    db_session.refresh(test_post)
    assert test_post.score == 1


def test_score_is_net_of_all_voters(client, auth_token, other_auth_token, test_post) -> None:
    _vote(client, auth_token, test_post.id, "up")
    response = _vote(client, other_auth_token, test_post.id, "down")
    assert response.json()["new_score"] == 0
    response = _vote(client, other_auth_token, test_post.id, "up")
    assert response.json()["new_score"] == 2


def test_vote_on_comment(client, auth_token, test_post, other_user, make_comment, db_session) -> None:
    comment = make_comment(test_post, other_user)
    response = _vote(client, auth_token, comment.id, "up", entity_type="comment")
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["new_score"] == 1
    db_session.refresh(test_post)
    assert test_post.score == 0


def test_vote_invalid_direction(client, auth_token, test_post) -> None:
    response = _vote(client, auth_token, test_post.id, "sideways")
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_vote_invalid_entity_type(client, auth_token, test_post) -> None:
    response = _vote(client, auth_token, test_post.id, "up", entity_type="user")
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_vote_nonexistent_post(client, auth_token) -> None:
    response = _vote(client, auth_token, "does-not-exist", "up")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["detail"] == "Post not found"


def test_vote_requires_authentication(client, test_post) -> None:
    response = client.post(
        "/api/v1/votes/",
        json={"entity_type": "post", "entity_id": test_post.id, "direction": "up"},
    )
    assert response.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)


def test_vote_rejects_invalid_token(client, test_post) -> None:
    response = _vote(client, {"Authorization": "Bearer not-a-jwt"}, test_post.id, "up")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_vote_rate_limit(client, auth_token, test_post, clock) -> None:
    """The 101st vote inside an hour is rejected; the next hour starts fresh."""
    for _ in range(100):
        assert _vote(client, auth_token, test_post.id, "up").status_code == status.HTTP_201_CREATED

    response = _vote(client, auth_token, test_post.id, "down")
    assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS
    assert "Rate limit exceeded" in response.json()["detail"]

    clock.advance(SECONDS_PER_HOUR)
    response = _vote(client, auth_token, test_post.id, "down")
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["new_score"] == -1


def test_rate_limited_vote_leaves_score_unchanged(client, auth_token, test_post, db_session) -> None:
    for _ in range(100):
        _vote(client, auth_token, test_post.id, "up")
    _vote(client, auth_token, test_post.id, "down")
    db_session.refresh(test_post)
    assert test_post.score == 1


def test_my_vote(client, auth_token, test_post) -> None:
    url = f"/api/v1/votes/post/{test_post.id}/my-vote"
    assert client.get(url, headers=auth_token).json() == {"direction": None}

    _vote(client, auth_token, test_post.id, "down")
    response = client.get(url, headers=auth_token)
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"direction": "down"}
