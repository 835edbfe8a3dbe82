# mypy: ignore-errors
# tests/test_security.py
"""Tests for bearer token helpers."""

import pytest
from jose import JWTError, jwt

from firehose.core.security import create_access_token, decode_access_token
from firehose.core.settings import settings


def test_token_round_trip() -> None:
    token = create_access_token("abc123")
    assert decode_access_token(token) == "abc123"


def test_token_without_subject() -> None:
    token = jwt.encode({"role": "x"}, settings.secret_key, algorithm=settings.jwt_algorithm)
    assert decode_access_token(token) is None


def test_token_with_wrong_key() -> None:
    token = jwt.encode({"sub": "abc123"}, "another-key", algorithm=settings.jwt_algorithm)
    with pytest.raises(JWTError):
        decode_access_token(token)


def test_token_for_deleted_user_is_rejected(client) -> None:
    headers = {"Authorization": f"Bearer {create_access_token('gone')}"}
    response = client.put("/api/v1/users/me", json={"display_name": "Ghost"}, headers=headers)
    assert response.status_code == 401
    assert response.json()["detail"] == "User not found"
