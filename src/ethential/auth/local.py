"""Locally issued HMAC bearer tokens.

Token format: ``<base64url(client_id:expires_at)>.<hex hmac-sha256>``.
"""

import base64
import hashlib
import hmac
import logging
import secrets
import time
from typing import Callable, Optional

from ethential.auth.base import CredentialVerifier
from ethential.pipeline.errors import IssuanceError
from ethential.pipeline.types import IssuedCredential

logger = logging.getLogger(__name__)


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _b64decode(text: str) -> bytes:
    padding = "=" * (-len(text) % 4)
    return base64.urlsafe_b64decode(text + padding)


class LocalCredentialVerifier(CredentialVerifier):
    """Issues and checks HMAC-signed tokens with an in-process secret."""

    def __init__(
        self,
        secret: Optional[str] = None,
        ttl_seconds: int = 3600,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize the verifier.

        Args:
            secret: HMAC key; a random one is generated if omitted, which
                invalidates every token on restart
            ttl_seconds: Token lifetime
            clock: Time source (seconds since epoch)
        """
        if not secret:
            logger.warning("AUTH_SECRET not set - using an ephemeral signing secret")
            secret = secrets.token_hex(32)
        self._secret = secret.encode("utf-8")
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    @property
    def name(self) -> str:
        return "local"

    def _sign(self, payload: str) -> str:
        return hmac.new(self._secret, payload.encode("ascii"), hashlib.sha256).hexdigest()

    async def issue(self, client_id: str) -> IssuedCredential:
        """Issue a token bound to ``client_id``."""
        if not client_id or not client_id.strip():
            raise IssuanceError("client ID must not be empty")
        if ":" in client_id:
            raise IssuanceError(f"client ID must not contain ':': {client_id!r}")

        expires_at = int(self._clock()) + self.ttl_seconds
        payload = _b64encode(f"{client_id}:{expires_at}".encode("utf-8"))
        token = f"{payload}.{self._sign(payload)}"

        logger.info("Issued token for client %s (expires %d)", client_id, expires_at)
        return IssuedCredential(token=token, client_id=client_id, expires_at=expires_at)

    async def verify(self, credential: str) -> bool:
        """Check signature and expiry of a token."""
        payload, sep, signature = credential.partition(".")
        if not sep or not payload or not signature or not signature.isascii():
            return False

        try:
            expected = self._sign(payload)
        except UnicodeEncodeError:
            return False
        if not hmac.compare_digest(expected, signature):
            return False

        try:
            _, _, expiry = _b64decode(payload).decode("utf-8").rpartition(":")
            expires_at = int(expiry)
        except ValueError:
            return False

        return self._clock() < expires_at
