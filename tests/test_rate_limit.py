"""
Tests for the sliding window rate limiter and its policies.
"""

from __future__ import annotations

import pytest

from league_live.api.rate_limit import RateLimiter, get_client_ip, policies_for


class TestRateLimiter:
    def test_allows_up_to_limit(self):
        limiter = RateLimiter(max_requests=3, window_seconds=60)

        results = [limiter.is_allowed("1.2.3.4", now=100.0 + i) for i in range(3)]

        assert all(allowed for allowed, _, _ in results)
        assert [remaining for _, remaining, _ in results] == [2, 1, 0]

    def test_blocks_over_limit(self):
        limiter = RateLimiter(max_requests=2, window_seconds=60)
        limiter.is_allowed("1.2.3.4", now=100.0)
        limiter.is_allowed("1.2.3.4", now=110.0)

        allowed, remaining, reset = limiter.is_allowed("1.2.3.4", now=120.0)

        assert not allowed
        assert remaining == 0
        assert reset == 40

    def test_window_slides(self):
        limiter = RateLimiter(max_requests=1, window_seconds=60)
        limiter.is_allowed("1.2.3.4", now=100.0)

        assert not limiter.is_allowed("1.2.3.4", now=159.0)[0]
        assert limiter.is_allowed("1.2.3.4", now=161.0)[0]

    def test_clients_are_independent(self):
        limiter = RateLimiter(max_requests=1, window_seconds=60)
        limiter.is_allowed("1.2.3.4", now=100.0)

        assert limiter.is_allowed("5.6.7.8", now=100.0)[0]

    def test_cleanup_drops_expired_clients(self):
        limiter = RateLimiter(max_requests=5, window_seconds=60)
        limiter.is_allowed("1.2.3.4", now=100.0)
        limiter.is_allowed("5.6.7.8")

        assert limiter.cleanup() == 1
        assert limiter.get_stats()["active_clients"] == 1

    def test_stats(self):
        limiter = RateLimiter(max_requests=5, window_seconds=60)
        limiter.is_allowed("1.2.3.4")
        limiter.is_allowed("1.2.3.4")

        stats = limiter.get_stats()

        assert stats["active_clients"] == 1
        assert stats["total_tracked_requests"] == 2
        assert stats["max_requests"] == 5


@pytest.mark.parametrize(
    "method, path, expected",
    [
        ("GET", "/health", []),
        ("GET", "/api", []),
        ("GET", "/api/teams", ["general"]),
        ("POST", "/api/teams", ["general", "create"]),
        ("POST", "/api/players/", ["general", "create"]),
        ("POST", "/api/games", ["general", "create"]),
        ("PUT", "/api/games/3/score", ["general"]),
        ("GET", "/api/events/recent", ["general", "events"]),
        ("POST", "/api/events", ["general", "events"]),
    ],
)
def test_policies_for(method, path, expected):
    assert policies_for(method, path) == expected


class _Client:
    host = "10.0.0.1"


class _Request:
    client = _Client()

    def __init__(self, headers):
        self.headers = headers


def test_forwarded_for_ignored_without_trusted_proxy(monkeypatch):
    monkeypatch.delenv("TRUSTED_PROXY_IPS", raising=False)
    request = _Request({"X-Forwarded-For": "203.0.113.9"})

    assert get_client_ip(request) == "10.0.0.1"


def test_forwarded_for_from_trusted_proxy(monkeypatch):
    monkeypatch.setenv("TRUSTED_PROXY_IPS", "10.0.0.1")
    request = _Request({"X-Forwarded-For": "203.0.113.9, 10.0.0.1"})

    assert get_client_ip(request) == "203.0.113.9"
