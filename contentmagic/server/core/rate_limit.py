"""
In-memory sliding-window rate limiting.

Each limiter keeps the timestamps of recent hits per key (client IP or user
id) and refuses a key once it has ``max_hits`` inside the window. State lives
in the process, so limits apply per server instance.
"""

from __future__ import annotations

import math
import time
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict

from starlette.requests import Request

from contentmagic.core.logging_config import get_logger
from contentmagic.server.core.config import RateLimitConfig
from contentmagic.server.core.constant import API_PREFIX

logger = get_logger(__name__)

# Requests to these paths that fail count against the auth limiter
AUTH_ATTEMPT_PATHS = frozenset({f"{API_PREFIX}/auth/register", f"{API_PREFIX}/auth/login"})


def client_ip(request: Request) -> str:
    """Client address, honouring the first ``X-Forwarded-For`` hop behind a proxy."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class SlidingWindowLimiter:
    """Counts hits per key over a sliding time window."""

    def __init__(
        self,
        name: str,
        max_hits: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.name = name
        self.max_hits = max_hits
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)

    def _prune(self, key: str, now: float) -> Deque[float]:
        hits = self._hits[key]
        cutoff = now - self.window_seconds
        while hits and hits[0] <= cutoff:
            hits.popleft()
        if not hits:
            del self._hits[key]
            return deque()
        return hits

    def is_limited(self, key: str) -> bool:
        """True when ``key`` has used up its window, without recording a hit."""
        return len(self._prune(key, self._clock())) >= self.max_hits

    def retry_after(self, key: str) -> int:
        """Seconds until the oldest hit of ``key`` leaves the window."""
        now = self._clock()
        hits = self._prune(key, now)
        if not hits:
            return 0
        return max(1, math.ceil(hits[0] + self.window_seconds - now))

    def record(self, key: str) -> None:
        now = self._clock()
        self._prune(key, now)
        self._hits[key].append(now)

    def hit(self, key: str) -> bool:
        """Record a hit for ``key``; return False when the key is over the limit."""
        if self.is_limited(key):
            logger.warning(f"Rate limit '{self.name}' exceeded for {key}")
            return False
        self.record(key)
        return True

    def reset(self, key: str | None = None) -> None:
        if key is None:
            self._hits.clear()
        else:
            self._hits.pop(key, None)


@dataclass
class RateLimiters:
    """The limiters of one application instance."""

    enabled: bool
    general: SlidingWindowLimiter
    auth: SlidingWindowLimiter
    ai: SlidingWindowLimiter

    @classmethod
    def from_config(cls, config: RateLimitConfig) -> "RateLimiters":
        return cls(
            enabled=config.enabled,
            general=SlidingWindowLimiter("general", config.general_max, config.general_window),
            # Only failed attempts are recorded against this one
            auth=SlidingWindowLimiter("auth", config.auth_max, config.auth_window),
            ai=SlidingWindowLimiter("ai", config.ai_max, config.ai_window),
        )

    def reset(self) -> None:
        for limiter in (self.general, self.auth, self.ai):
            limiter.reset()
