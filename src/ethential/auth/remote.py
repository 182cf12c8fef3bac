"""Credential verifier backed by an external auth service."""

import logging
from typing import Optional

import httpx

from ethential.auth.base import CredentialVerifier
from ethential.pipeline.errors import IssuanceError
from ethential.pipeline.types import IssuedCredential

logger = logging.getLogger(__name__)


class RemoteCredentialVerifier(CredentialVerifier):
    """Delegates issuance and verification to an auth service.

    Endpoints:
        GET  {base_url}/genToken/{client_id}
        POST {base_url}/verify   (Authorization: Bearer <token>)
    """

    def __init__(
        self,
        base_url: str,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        self.base_url = base_url.rstrip("/")
        self._http_client = client
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "remote"

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
        return self._http_client

    async def issue(self, client_id: str) -> IssuedCredential:
        """Request a token for ``client_id`` from the auth service."""
        if not client_id or not client_id.strip():
            raise IssuanceError("client ID must not be empty")

        client = await self._get_client()
        try:
            response = await client.get(f"{self.base_url}/genToken/{client_id}")
        except httpx.HTTPError as e:
            logger.warning(f"Auth service unreachable: {e}")
            raise IssuanceError(f"auth service unreachable: {e}") from e

        if response.status_code != 200:
            raise IssuanceError(
                f"auth service returned {response.status_code}: {response.text}"
            )

        try:
            data = response.json()
        except ValueError:
            data = response.text

        if isinstance(data, dict):
            token = data.get("token") or data.get("access_token")
            expires_at = data.get("expiresAt") or data.get("expires_at")
        else:
            token, expires_at = data, None

        if not token or not isinstance(token, str):
            raise IssuanceError("auth service response carried no token")

        try:
            expires_at = int(expires_at) if expires_at is not None else None
        except (TypeError, ValueError):
            expires_at = None

        return IssuedCredential(token=token, client_id=client_id, expires_at=expires_at)

    async def verify(self, credential: str) -> bool:
        """Ask the auth service whether ``credential`` is valid.

        Only a 200 carrying JSON ``true``, ``{"valid": true}`` or a non-JSON
        body counts as valid. Anything else is invalid.
        """
        client = await self._get_client()
        try:
            response = await client.post(
                f"{self.base_url}/verify",
                headers={"Authorization": f"Bearer {credential}"},
            )
        except httpx.HTTPError as e:
            logger.warning(f"Token verification failed, auth service unreachable: {e}")
            return False

        if response.status_code != 200:
            logger.debug(f"Auth service rejected token ({response.status_code})")
            return False

        try:
            data = response.json()
        except ValueError:
            return True

        if isinstance(data, dict):
            data = data.get("valid")
        return data is True
