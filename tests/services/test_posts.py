# mypy: ignore-errors
# tests/services/test_posts.py
"""Tests for URL helpers used by post submission."""

import pytest

from firehose.services.posts import create_slug, get_domain, hash_url, is_valid_url, normalize_url


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("https://Example.com/a?utm_source=x&b=2#frag", "https://example.com/a?b=2"),
        ("https://example.com", "https://example.com/"),
        ("http://example.com/p?ref=hn", "http://example.com/p"),
        ("not a url", "not a url"),
    ],
)
def test_normalize_url(raw, expected) -> None:
    assert normalize_url(raw) == expected


def test_hash_ignores_tracking() -> None:
    assert hash_url("https://example.com/a?utm_medium=x") == hash_url("https://EXAMPLE.com/a")
    assert hash_url("https://example.com/a") != hash_url("https://example.com/b")


def test_slug() -> None:
    assert create_slug("Hello, World!  Again", "0123456789abcdef") == "hello-world-again-01234567"
    assert len(create_slug("x" * 200, "0123456789abcdef")) == 60 + 9


def test_domain_and_validity() -> None:
    assert get_domain("https://News.Example.com/x") == "news.example.com"
    assert is_valid_url("https://example.com")
    assert not is_valid_url("javascript:alert(1)")
    assert not is_valid_url("example.com")
