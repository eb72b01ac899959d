# memelinks/middleware/rate_limiter.py
# Per-client rate limiting over a rolling window
# Uses in-memory sliding window counter (single process)

import time
import logging
from collections import defaultdict
from typing import Dict, Tuple
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from memelinks.constants import HEALTH_PATHS
from memelinks.middleware.error_handler import RateLimitError, create_error_response

logger = logging.getLogger(__name__)


class SlidingWindowCounter:
    """
    Sliding window rate limiter implementation.
    More accurate than fixed window, less memory than sliding log.
    """

    def __init__(self, window_size: int = 60, max_requests: int = 100):
        self.window_size = window_size  # seconds
        self.max_requests = max_requests
        # key -> (prev_count, curr_count, window_index)
        self._counters: Dict[str, Tuple[int, int, float]] = defaultdict(lambda: (0, 0, 0.0))

    def is_allowed(self, key: str, now: float = None) -> Tuple[bool, int]:
        """
        Check if request is allowed for given key.
        Returns (is_allowed, remaining_requests).
        """
        if now is None:
            now = time.time()
        prev_count, curr_count, window_start = self._counters[key]

        current_window = now // self.window_size

        if window_start < current_window - 1:
            # More than one window has passed, reset
            prev_count = 0
            curr_count = 1
            window_start = current_window
        elif window_start < current_window:
            # Previous window, slide
            prev_count = curr_count
            curr_count = 1
            window_start = current_window
        else:
            curr_count += 1

        # Weighted count (sliding window approximation)
        elapsed_in_window = now % self.window_size
        weight = elapsed_in_window / self.window_size
        weighted_count = prev_count * (1 - weight) + curr_count

        self._counters[key] = (prev_count, curr_count, window_start)

        remaining = max(0, int(self.max_requests - weighted_count))
        is_allowed = weighted_count <= self.max_requests

        return is_allowed, remaining

    def cleanup_old_entries(self, now: float = None):
        """Drop keys whose last request is more than one full window old."""
        if now is None:
            now = time.time()
        current_window = now // self.window_size
        keys_to_remove = [
            key for key, (_, _, window_start) in self._counters.items()
            if current_window - window_start > 1
        ]
        for key in keys_to_remove:
            del self._counters[key]


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    FastAPI middleware for rate limiting.
    One budget per client IP for every route except health probes.
    """

    def __init__(self, app, window_seconds: int = 900, max_requests: int = 100):
        super().__init__(app)
        self.limiter = SlidingWindowCounter(window_size=window_seconds, max_requests=max_requests)
        self._last_cleanup = time.time()

    def _get_client_key(self, request: Request) -> str:
        """Extract client identifier from request."""
        # Try to get real IP from proxy headers
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            # Take first IP (original client)
            return forwarded.split(",")[0].strip()

        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip

        if request.client:
            return request.client.host

        return "unknown"

    async def dispatch(self, request: Request, call_next):
        if request.url.path in HEALTH_PATHS:
            return await call_next(request)

        now = time.time()
        if now - self._last_cleanup > self.limiter.window_size:
            self.limiter.cleanup_old_entries(now)
            self._last_cleanup = now

        client_key = self._get_client_key(request)
        is_allowed, remaining = self.limiter.is_allowed(client_key, now)

        if not is_allowed:
            logger.warning(f"Rate limit exceeded for {client_key} on {request.url.path}")
            err = RateLimitError(retry_after=self.limiter.window_size)
            return create_error_response(
                error_code=err.error_code,
                message=err.message,
                status_code=err.status_code,
                details=err.details,
                headers={
                    "Retry-After": str(self.limiter.window_size),
                    "X-RateLimit-Remaining": "0",
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        response.headers["X-RateLimit-Limit"] = str(self.limiter.max_requests)

        return response
