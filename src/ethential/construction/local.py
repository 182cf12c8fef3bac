"""In-process construction backend.

Encodes ERC-20 style calldata directly from the intent parameters:
selector = first 4 bytes of keccak256(method signature), followed by each
argument left-padded to 32 bytes. Balances are read with a JSON-RPC
``eth_call``.
"""

import logging
from typing import Optional

import httpx
from eth_utils import function_signature_to_4byte_selector, is_hex_address
from pydantic import BaseModel, ConfigDict, Field

from ethential.construction.base import TxConstructionClient
from ethential.pipeline.errors import ConstructionError
from ethential.pipeline.params import method_signature
from ethential.pipeline.types import OperationKind, Parameter, TransactionIntent

logger = logging.getLogger(__name__)

MAX_UINT256 = 2**256 - 1


class UnsignedTransaction(BaseModel):
    """An unsigned transaction handed to the signing wallet.

    The wallet is responsible for nonce, gas, signing and broadcast.
    """

    model_config = ConfigDict(populate_by_name=True)

    chain_id: int = Field(..., alias="chainId", description="EVM chain ID")
    from_address: str = Field(..., alias="from", description="Sender address")
    to: str = Field(..., description="Contract being called")
    value: str = Field(default="0x0", description="Native value in wei (hex)")
    data: str = Field(..., description="ABI-encoded calldata (hex)")


def encode_argument(param: Parameter) -> str:
    """Encode one static argument as a 32-byte hex word (no 0x prefix).

    Raises:
        ConstructionError: If the value does not fit the declared type
    """
    if param.type == "address":
        if not is_hex_address(param.value):
            raise ConstructionError(f"Invalid address for {param.name}: {param.value}")
        return param.value.lower()[2:].zfill(64)

    if param.type == "uint256":
        raw = param.value.strip()
        try:
            number = int(raw, 16) if raw.lower().startswith("0x") else int(raw, 10)
        except ValueError:
            raise ConstructionError(f"Invalid uint256 for {param.name}: {param.value}")
        if number < 0 or number > MAX_UINT256:
            raise ConstructionError(f"uint256 out of range for {param.name}: {param.value}")
        return hex(number)[2:].zfill(64)

    raise ConstructionError(f"Unsupported ABI type {param.type} for {param.name}")


def encode_call(kind: OperationKind, intent: TransactionIntent) -> str:
    """Build the calldata for ``kind`` from the intent's parameters."""
    signature = method_signature(kind, list(intent.parameters))
    selector = function_signature_to_4byte_selector(signature).hex()
    args = "".join(encode_argument(p) for p in intent.parameters)
    return f"0x{selector}{args}"


class LocalTxConstructionClient(TxConstructionClient):
    """Builds unsigned transactions without a construction service.

    Transfers and approvals call the token contract; swaps call the
    manager contract.
    """

    def __init__(
        self,
        token_address: str,
        manager_address: str,
        rpc_url: str,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        self.token_address = token_address
        self.manager_address = manager_address
        self.rpc_url = rpc_url
        self._http_client = client
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "local"

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
        return self._http_client

    def _build(self, kind: OperationKind, intent: TransactionIntent, to: str, chain_id: int) -> str:
        if not to:
            raise ConstructionError(f"No contract address configured for {kind.value}")

        tx = UnsignedTransaction(
            chain_id=chain_id,
            from_address=intent.sender,
            to=to,
            value=hex(intent.native_value),
            data=encode_call(kind, intent),
        )
        logger.debug(f"Built unsigned {kind.value} tx for {intent.sender} on chain {chain_id}")
        return tx.model_dump_json(by_alias=True)

    async def build_transfer_tx(
        self, credential: str, intent: TransactionIntent, chain_id: int
    ) -> str:
        return self._build(OperationKind.TRANSFER, intent, self.token_address, chain_id)

    async def build_approve_tx(
        self, credential: str, intent: TransactionIntent, chain_id: int
    ) -> str:
        return self._build(OperationKind.APPROVE, intent, self.token_address, chain_id)

    async def build_swap_tx(
        self, credential: str, intent: TransactionIntent, chain_id: int
    ) -> str:
        return self._build(OperationKind.SWAP, intent, self.manager_address, chain_id)

    async def get_balance(
        self, credential: str, intent: TransactionIntent, chain_id: int
    ) -> int:
        """Read ``balanceOf(account)`` from the token contract."""
        if not self.token_address:
            raise ConstructionError("No token contract address configured")
        if not self.rpc_url:
            raise ConstructionError("No RPC endpoint configured for balance reads")

        data = encode_call(OperationKind.BALANCE_QUERY, intent)
        client = await self._get_client()

        try:
            response = await client.post(
                self.rpc_url,
                json={
                    "jsonrpc": "2.0",
                    "method": "eth_call",
                    "params": [{"to": self.token_address, "data": data}, "latest"],
                    "id": 1,
                },
            )
        except httpx.HTTPError as e:
            logger.warning(f"RPC balance call failed: {e}")
            raise ConstructionError(f"RPC unreachable: {e}") from e

        if response.status_code != 200:
            raise ConstructionError(f"RPC returned {response.status_code}: {response.text}")

        try:
            result = response.json()
        except ValueError:
            raise ConstructionError(f"RPC returned invalid JSON: {response.text}")

        if not isinstance(result, dict):
            raise ConstructionError(f"Unexpected RPC response: {result!r}")
        if "error" in result:
            error = result["error"]
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise ConstructionError(f"RPC error: {message}")

        raw = result.get("result")
        if not isinstance(raw, str) or not raw.startswith("0x"):
            raise ConstructionError(f"Unexpected RPC result: {raw!r}")
        if raw == "0x":
            return 0

        try:
            return int(raw, 16)
        except ValueError:
            raise ConstructionError(f"Unexpected RPC result: {raw!r}")
