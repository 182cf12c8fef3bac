"""Construction backend backed by an external transaction service."""

import logging
from typing import Any, Optional

import httpx

from ethential.construction.base import TxConstructionClient
from ethential.pipeline.errors import ConstructionError
from ethential.pipeline.types import TransactionIntent

logger = logging.getLogger(__name__)

# Service endpoints per operation
TRANSFER_PATH = "/createTransferTokenTx"
APPROVE_PATH = "/createApproveTx"
SWAP_PATH = "/createSwapTokenTx"
BALANCE_PATH = "/getTokenBalance"


class RemoteTxConstructionClient(TxConstructionClient):
    """Asks a transaction service to encode unsigned transactions.

    Each call POSTs ``{"txParams": <intent>, "chainId": <id>}`` with the
    caller's bearer credential.
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

    async def _call(
        self,
        path: str,
        credential: str,
        intent: TransactionIntent,
        chain_id: int,
    ) -> Any:
        client = await self._get_client()
        url = f"{self.base_url}{path}"

        try:
            response = await client.post(
                url,
                headers={"Authorization": f"Bearer {credential}"},
                json={"txParams": intent.to_dict(), "chainId": chain_id},
            )
        except httpx.HTTPError as e:
            logger.warning(f"Construction service unreachable at {url}: {e}")
            raise ConstructionError(f"construction service unreachable: {e}") from e

        if not response.is_success:
            logger.warning(f"Construction service {path} returned {response.status_code}")
            raise ConstructionError(response.text or f"construction service returned {response.status_code}")

        try:
            return response.json()
        except ValueError:
            return response.text

    async def _build(self, path: str, credential: str, intent: TransactionIntent, chain_id: int) -> str:
        data = await self._call(path, credential, intent, chain_id)
        if isinstance(data, dict):
            data = data.get("tx")
        if not isinstance(data, str) or not data:
            raise ConstructionError("construction service returned no transaction")
        return data

    async def build_transfer_tx(
        self, credential: str, intent: TransactionIntent, chain_id: int
    ) -> str:
        return await self._build(TRANSFER_PATH, credential, intent, chain_id)

    async def build_approve_tx(
        self, credential: str, intent: TransactionIntent, chain_id: int
    ) -> str:
        return await self._build(APPROVE_PATH, credential, intent, chain_id)

    async def build_swap_tx(
        self, credential: str, intent: TransactionIntent, chain_id: int
    ) -> str:
        return await self._build(SWAP_PATH, credential, intent, chain_id)

    async def get_balance(
        self, credential: str, intent: TransactionIntent, chain_id: int
    ) -> int:
        data = await self._call(BALANCE_PATH, credential, intent, chain_id)
        if isinstance(data, dict):
            data = data.get("balance")

        # Large balances may arrive as strings to survive JSON number limits
        if isinstance(data, bool) or (isinstance(data, float) and not data.is_integer()):
            raise ConstructionError(f"construction service returned invalid balance: {data!r}")
        try:
            return int(data)
        except (TypeError, ValueError):
            raise ConstructionError(f"construction service returned invalid balance: {data!r}")
