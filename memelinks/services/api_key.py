# memelinks/services/api_key.py
# Shared-secret check for the worker-facing endpoints

import secrets
from typing import Optional

from memelinks.middleware.error_handler import AuthError


class ApiKeyGate:
    """Compares a caller-supplied key with the configured one. Fails closed."""

    def __init__(self, secret: Optional[str]):
        self._secret = secret or None

    def check(self, provided: Optional[str]) -> bool:
        if not self._secret or not provided:
            return False
        return secrets.compare_digest(provided.encode("utf-8"), self._secret.encode("utf-8"))

    def require(self, provided: Optional[str]) -> None:
        if not self.check(provided):
            raise AuthError("Invalid API key")
