# mypy: ignore-errors
# tests/v1/test_system.py
"""Tests for the health and config endpoints."""

from fastapi import status


def test_root_health(client) -> None:
    response = client.get("/health")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "ok"}


def test_system_health(client, clock) -> None:
    response = client.get("/api/v1/system/health")
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["status"] == "healthy"
    assert data["components"] == {"database": "healthy", "counter_store": "healthy"}
    assert data["timestamp"] == clock()


def test_public_config_hides_secrets(client) -> None:
    data = client.get("/api/v1/system/config").json()
    assert data["rate_limits"]["vote"] == {"limit": 100, "window_seconds": 3600}
    assert data["rate_limits"]["post"] == {"limit": 1, "window_seconds": 86400}
    assert data["hotness"]["decay_exponent"] == 1.5
    flattened = str(data)
    assert "secret" not in flattened.lower()
    assert "database" not in flattened.lower()
