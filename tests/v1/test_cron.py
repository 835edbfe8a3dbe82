# mypy: ignore-errors
# tests/v1/test_cron.py
"""Tests for the scheduled batch endpoints."""

import pytest
from fastapi import status

CRON_SECRET = "test-cron-secret"

CRON_HEADERS = {"X-Cron-Secret": CRON_SECRET}


@pytest.mark.parametrize("path", ["/api/v1/cron/update-hotness", "/api/v1/cron/update-leaderboard"])
def test_cron_requires_secret(client, path) -> None:
    assert client.post(path).status_code == status.HTTP_401_UNAUTHORIZED
    assert client.post(path, headers={"X-Cron-Secret": "wrong"}).status_code == status.HTTP_401_UNAUTHORIZED


def test_update_hotness(client, db_session, test_user, make_post) -> None:
    fresh = make_post(test_user, title="Fresh", score=10, comments_count=5, age_hours=1)
    stale = make_post(test_user, title="Stale", score=10, age_hours=8 * 24, hotness=9.0)

    response = client.post("/api/v1/cron/update-hotness", headers=CRON_HEADERS)
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"success": True, "updated": 1}

    db_session.refresh(fresh)
    db_session.refresh(stale)
    assert fresh.hotness == pytest.approx(11 / 3 ** 1.5)
    # Posts outside the window keep their last value.
    assert stale.hotness == 9.0


def test_update_leaderboard(client, db_session, make_user, make_post) -> None:
    response = client.post("/api/v1/cron/update-leaderboard", headers=CRON_HEADERS)
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"success": True, "authors": {"total": 0, "weekly": 0}}
