# memelinks/services/session_registry.py
# In-memory browser session tokens

import logging
import secrets
import threading
import time
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 3600
DEFAULT_MAX_TOKENS = 1000


class SessionRegistry:
    """
    Tokens handed out on page load and required by the browser-facing API.

    Entries live only in process memory. ``sweep`` drops expired tokens and,
    if more than ``max_tokens`` remain, the oldest-issued ones.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_tokens = max_tokens
        self._clock = clock
        self._tokens: Dict[str, float] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._tokens)

    def issue(self) -> str:
        token = secrets.token_hex(32)
        with self._lock:
            self._tokens[token] = self._clock()
        return token

    def is_valid(self, token: Optional[str]) -> bool:
        if not token:
            return False
        with self._lock:
            issued_at = self._tokens.get(token)
        if issued_at is None:
            return False
        return self._clock() - issued_at <= self.ttl_seconds

    def revoke(self, token: str) -> None:
        with self._lock:
            self._tokens.pop(token, None)

    def sweep(self, now: Optional[float] = None) -> int:
        """Remove expired tokens, then trim to capacity. Returns count removed."""
        if now is None:
            now = self._clock()
        with self._lock:
            expired = [t for t, issued_at in self._tokens.items() if now - issued_at > self.ttl_seconds]
            for token in expired:
                del self._tokens[token]
            removed = len(expired)

            overflow = len(self._tokens) - self.max_tokens
            if overflow > 0:
                oldest = sorted(self._tokens.items(), key=lambda item: item[1])[:overflow]
                for token, _ in oldest:
                    del self._tokens[token]
                removed += overflow

        if removed:
            logger.info("session sweep", extra={"removed": removed, "remaining": len(self._tokens)})
        return removed

    def clear(self) -> None:
        with self._lock:
            self._tokens.clear()
