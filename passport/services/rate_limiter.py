"""Per-client sliding window rate limiting for the analyze endpoint."""

import math

from fastapi import Request
from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage, Storage, storage_from_string
from limits.strategies import MovingWindowRateLimiter

from passport.config import Settings

# Counter store interface; "memory://" keeps counters in this process only,
# so each worker enforces its own window. Point RATE_LIMIT_STORAGE_URI at
# redis:// or memcached:// to share them.
RateLimitStore = Storage
InMemoryRateLimitStore = MemoryStorage

NAMESPACE = "analyze"


class SlidingWindowRateLimiter:
    def __init__(
        self,
        max_requests: int = 5,
        window_ms: int = 60_000,
        store: RateLimitStore | None = None,
    ):
        self.max_requests = max_requests
        self.window_ms = window_ms
        self.store = store if store is not None else InMemoryRateLimitStore()
        # limits counts windows in whole seconds
        self.item = RateLimitItemPerSecond(max_requests, max(1, math.ceil(window_ms / 1000)))
        self._strategy = MovingWindowRateLimiter(self.store)

    @classmethod
    def from_settings(cls, settings: Settings) -> "SlidingWindowRateLimiter":
        return cls(
            max_requests=settings.rate_limit_max,
            window_ms=settings.rate_limit_window_ms,
            store=storage_from_string(settings.rate_limit_storage_uri),
        )

    def allow(self, identifier: str) -> bool:
        """Record a request for identifier and report whether it fits the window."""
        return self._strategy.hit(self.item, NAMESPACE, identifier)


def client_identifier(request: Request) -> str:
    """Best-effort client IP from proxy headers."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip() or "unknown"
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return "unknown"
