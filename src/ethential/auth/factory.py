"""Credential verifier factory."""

import logging
from typing import Optional

import httpx

from ethential.auth.base import CredentialVerifier
from ethential.auth.local import LocalCredentialVerifier
from ethential.auth.remote import RemoteCredentialVerifier
from ethential.config import Settings

logger = logging.getLogger(__name__)


def create_verifier(
    settings: Settings,
    client: Optional[httpx.AsyncClient] = None,
) -> CredentialVerifier:
    """Create the credential verifier selected by AUTH_BACKEND.

    - local (default): HMAC tokens signed with AUTH_SECRET
    - remote: external auth service at AUTH_SERVICE_URL

    Raises:
        ValueError: If the backend is unknown or misconfigured
    """
    backend = settings.auth_backend.lower()

    if backend == "remote":
        if not settings.auth_service_url:
            raise ValueError("AUTH_BACKEND=remote requires AUTH_SERVICE_URL")
        verifier = RemoteCredentialVerifier(
            base_url=settings.auth_service_url,
            client=client,
            timeout=settings.http_timeout,
        )
    elif backend == "local":
        verifier = LocalCredentialVerifier(
            secret=settings.auth_secret,
            ttl_seconds=settings.token_ttl_seconds,
        )
    else:
        raise ValueError(f"Unknown auth backend: {settings.auth_backend}")

    logger.info(f"Using {verifier.name} credential verifier")
    return verifier
