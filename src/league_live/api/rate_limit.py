"""
Rate limiting middleware for API protection.

Uses a sliding window algorithm with in-memory storage, one limiter per
policy:
- general: every /api/ request
- create: POST to /api/teams, /api/players, /api/games
- events: every /api/events request

A request must pass every policy that applies to it.
"""

from __future__ import annotations

import os
import time
from collections import defaultdict
from dataclasses import dataclass, field
from threading import Lock
from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from ..core.config import get_settings
from .errors import error_envelope

# Maximum number of client entries stored in memory to prevent unbounded growth.
_MAX_STORAGE_ENTRIES = 10_000

CREATE_PATHS = ("/api/teams", "/api/players", "/api/games")
EVENTS_PATH = "/api/events"


def _get_trusted_proxies() -> set[str]:
    """Trusted proxy list from TRUSTED_PROXY_IPS (comma-separated IPs)."""
    raw = os.environ.get("TRUSTED_PROXY_IPS", "")
    return {ip.strip() for ip in raw.split(",") if ip.strip()}


@dataclass
class RateLimitEntry:
    """Tracks request timestamps for a single client."""
    timestamps: list[float] = field(default_factory=list)


class RateLimiter:
    """
    Sliding window rate limiter.

    Tracks requests per IP within a configurable time window.
    Thread-safe for concurrent access.
    """

    def __init__(self, max_requests: int = 100, window_seconds: int = 900, message: str | None = None):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.message = message or "Too many requests from this IP, please try again later."
        self._storage: dict[str, RateLimitEntry] = defaultdict(RateLimitEntry)
        self._lock = Lock()

    def is_allowed(self, client_id: str, now: float | None = None) -> tuple[bool, int, int]:
        """
        Check if a request is allowed for the given client.

        Args:
            client_id: Unique identifier for the client (typically IP address)
            now: Current time, defaults to time.time()

        Returns:
            Tuple of (allowed, remaining_requests, reset_time_seconds)
        """
        now = time.time() if now is None else now
        window_start = now - self.window_seconds

        with self._lock:
            if len(self._storage) >= _MAX_STORAGE_ENTRIES:
                self._cleanup_expired_locked(now)

            entry = self._storage[client_id]
            entry.timestamps = [ts for ts in entry.timestamps if ts > window_start]

            current_count = len(entry.timestamps)
            remaining = max(0, self.max_requests - current_count)

            # Seconds until the oldest request leaves the window
            if entry.timestamps:
                reset_time = int(entry.timestamps[0] + self.window_seconds - now)
            else:
                reset_time = self.window_seconds

            if current_count >= self.max_requests:
                return False, 0, max(1, reset_time)

            entry.timestamps.append(now)
            return True, remaining - 1, reset_time

    def _cleanup_expired_locked(self, now: float) -> None:
        """Remove expired entries while already holding the lock."""
        window_start = now - self.window_seconds
        expired_keys = []
        for key, entry in self._storage.items():
            entry.timestamps = [ts for ts in entry.timestamps if ts > window_start]
            if not entry.timestamps:
                expired_keys.append(key)
        for key in expired_keys:
            del self._storage[key]

    def cleanup(self) -> int:
        """
        Remove expired entries from storage.

        Returns:
            Number of entries removed
        """
        with self._lock:
            before = len(self._storage)
            self._cleanup_expired_locked(time.time())
            return before - len(self._storage)

    def get_stats(self) -> dict:
        """Get rate limiter statistics."""
        with self._lock:
            active_clients = len(self._storage)
            total_tracked = sum(len(e.timestamps) for e in self._storage.values())

        return {
            "active_clients": active_clients,
            "total_tracked_requests": total_tracked,
            "max_requests": self.max_requests,
            "window_seconds": self.window_seconds,
        }


_rate_limiters: dict[str, RateLimiter] | None = None


def get_rate_limiters() -> dict[str, RateLimiter]:
    """Get or create the general, create and events limiters."""
    global _rate_limiters
    if _rate_limiters is None:
        settings = get_settings()
        _rate_limiters = {
            "general": RateLimiter(
                max_requests=settings.rate_limit_requests,
                window_seconds=settings.rate_limit_window,
            ),
            "create": RateLimiter(
                max_requests=settings.rate_limit_create_requests,
                window_seconds=settings.rate_limit_create_window,
                message="Too many create requests from this IP, please try again later.",
            ),
            "events": RateLimiter(
                max_requests=settings.rate_limit_events_requests,
                window_seconds=settings.rate_limit_events_window,
                message="Too many score events from this IP, please try again later.",
            ),
        }
    return _rate_limiters


def reset_rate_limiters() -> None:
    """Drop all limiter state (settings are re-read on next use)."""
    global _rate_limiters
    _rate_limiters = None


def policies_for(method: str, path: str) -> list[str]:
    """Names of the limiter policies that apply to a request."""
    if not path.startswith("/api/"):
        return []

    policies = ["general"]
    if method == "POST" and path.rstrip("/") in CREATE_PATHS:
        policies.append("create")
    if path == EVENTS_PATH or path.startswith(EVENTS_PATH + "/"):
        policies.append("events")
    return policies


def get_client_ip(request: Request) -> str:
    """
    Extract client IP from request, with proxy header trust verification.

    Only trusts X-Forwarded-For when the direct connection comes from a
    trusted proxy (configured via TRUSTED_PROXY_IPS env var).
    """
    direct_ip = request.client.host if request.client else "unknown"

    trusted = _get_trusted_proxies()
    if trusted and direct_ip in trusted:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()

    return direct_ip


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Enforces the rate limit policies.

    Adds standard rate limit headers (from the narrowest applicable policy):
    - X-RateLimit-Limit
    - X-RateLimit-Remaining
    - X-RateLimit-Reset

    Returns 429 Too Many Requests when any policy is exceeded.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        settings = get_settings()
        if not settings.rate_limit_enabled:
            return await call_next(request)

        policies = policies_for(request.method, request.url.path)
        if not policies:
            return await call_next(request)

        client_ip = get_client_ip(request)
        limiters = get_rate_limiters()

        headers: dict[str, str] = {}
        for name in policies:
            limiter = limiters[name]
            allowed, remaining, reset_time = limiter.is_allowed(client_ip)
            headers = {
                "X-RateLimit-Limit": str(limiter.max_requests),
                "X-RateLimit-Remaining": str(remaining),
                "X-RateLimit-Reset": str(reset_time),
            }
            if not allowed:
                headers["Retry-After"] = str(reset_time)
                return JSONResponse(
                    status_code=429,
                    content=error_envelope(limiter.message, f"Retry after {reset_time} seconds"),
                    headers=headers,
                )

        response = await call_next(request)
        response.headers.update(headers)
        return response
