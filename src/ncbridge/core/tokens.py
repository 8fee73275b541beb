"""Signed, expiring download tokens.

A token authorizes retrieval of one remote path through the download proxy
until it expires. Tokens are stateless: the expiry travels inside the token
and the signature is an HMAC-SHA256 over "{expiry}|{path}" keyed with a
server-held secret.

Token format (before urlsafe base64): "{expiry}|{hex signature}"
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import time
from collections.abc import Callable

DEFAULT_TOKEN_TTL = 3600  # 1 hour


class DownloadTokenService:
    """Issues and verifies download tokens."""

    def __init__(
        self,
        secret: str | bytes,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the service.

        Args:
            secret: Server-held signing secret.
            clock: Returns the current unix time (injectable for tests).
        """
        self._secret = secret.encode("utf-8") if isinstance(secret, str) else secret
        self._clock = clock

    def _sign(self, expiry: int, path: str) -> str:
        payload = f"{expiry}|{path}".encode()
        return hmac.new(self._secret, payload, hashlib.sha256).hexdigest()

    def issue(self, path: str, ttl: int = DEFAULT_TOKEN_TTL) -> str:
        """Issue a token for path valid for ttl seconds.

        Args:
            path: Remote path the token grants access to.
            ttl: Lifetime in seconds.

        Returns:
            URL-safe token string.
        """
        expiry = int(self._clock()) + ttl
        raw = f"{expiry}|{self._sign(expiry, path)}"
        return base64.urlsafe_b64encode(raw.encode()).decode("ascii")

    def verify(self, token: str, path: str) -> bool:
        """Check that token is well formed, unexpired and issued for path.

        Never raises; any malformed input yields False. A valid token can be
        reused until it expires.
        """
        try:
            decoded = base64.urlsafe_b64decode(token.encode("ascii")).decode("ascii")
        except (binascii.Error, UnicodeError, ValueError):
            return False

        parts = decoded.split("|", 1)
        if len(parts) != 2:
            return False

        expiry_str, signature = parts
        if not expiry_str.isdigit():
            return False

        expiry = int(expiry_str)
        if expiry < self._clock():
            return False

        return hmac.compare_digest(self._sign(expiry, path), signature)
