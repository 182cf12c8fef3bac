"""Relay dispatcher: forwards unsigned transactions to the signing wallet.

The dispatcher is a dumb pipe. It never retries, never looks inside the
wallet's answer and never turns a non-2xx status into an error; the status
and body travel back to the caller exactly as received. Only transport
failures (the wallet could not be reached, or its answer could not be
read) are errors.
"""

import json
import logging
from typing import Optional, Union

import httpx

from ethential.pipeline.errors import RelayUnreachable
from ethential.pipeline.types import RelayResult

logger = logging.getLogger(__name__)


def encode_relay_body(blob: Union[str, bytes]) -> bytes:
    """Serialize the wallet request body ``{"tx":"<blob>"}``."""
    if isinstance(blob, bytes):
        blob = blob.decode("utf-8")
    return json.dumps({"tx": blob}, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


class RelayDispatcher:
    """Posts unsigned transactions to a downstream signer."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        """Initialize the dispatcher.

        Args:
            client: Shared HTTP client (one is created lazily if omitted)
            timeout: Timeout for a lazily created client
        """
        self._http_client = client
        self._owns_client = client is None
        self._timeout = timeout

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
        return self._http_client

    async def relay(self, blob: Union[str, bytes], endpoint: str) -> RelayResult:
        """Send one unsigned transaction to the signer.

        Args:
            blob: Unsigned transaction exactly as the construction backend built it
            endpoint: Signer URI

        Returns:
            RelayResult with the signer's status code and raw body

        Raises:
            RelayUnreachable: If the signer cannot be reached
        """
        if not endpoint:
            raise RelayUnreachable("Signing wallet unreachable", details="WALLET_URI is not configured")

        body = encode_relay_body(blob)
        client = await self._get_client()

        try:
            response = await client.post(
                endpoint,
                content=body,
                headers={"Content-Type": "application/json"},
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("Signer unreachable at %s: %s: %s", endpoint, type(e).__name__, e)
            raise RelayUnreachable(
                "Signing wallet unreachable",
                details=f"{type(e).__name__}: {e}",
            ) from e

        logger.info("Signer at %s answered %d", endpoint, response.status_code)
        return RelayResult(
            status_code=response.status_code,
            body=response.content,
            content_type=response.headers.get("content-type"),
        )

    async def close(self) -> None:
        """Close the HTTP client if this dispatcher created it."""
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
