"""Construction backend factory."""

import logging
from typing import Optional

import httpx

from ethential.config import Settings
from ethential.construction.base import TxConstructionClient
from ethential.construction.local import LocalTxConstructionClient
from ethential.construction.remote import RemoteTxConstructionClient

logger = logging.getLogger(__name__)


def create_construction_client(
    settings: Settings,
    client: Optional[httpx.AsyncClient] = None,
) -> TxConstructionClient:
    """Create the construction backend selected by TX_BACKEND.

    - local (default): calldata encoded in-process, balances via RPC_URL
    - remote: external transaction service at TX_SERVICE_URL

    Raises:
        ValueError: If the backend is unknown or misconfigured
    """
    backend = settings.tx_backend.lower()

    if backend == "remote":
        if not settings.tx_service_url:
            raise ValueError("TX_BACKEND=remote requires TX_SERVICE_URL")
        construction = RemoteTxConstructionClient(
            base_url=settings.tx_service_url,
            client=client,
            timeout=settings.http_timeout,
        )
    elif backend == "local":
        if not settings.token_contract_addr:
            logger.warning("TOKEN_CONTRACT_ADDR not set - transfers and approvals will fail")
        if not settings.rpc_url:
            logger.warning("RPC_URL not set - balance queries will fail")
        construction = LocalTxConstructionClient(
            token_address=settings.token_contract_addr,
            manager_address=settings.mngr_contract_addr,
            rpc_url=settings.rpc_url,
            client=client,
            timeout=settings.http_timeout,
        )
    else:
        raise ValueError(f"Unknown construction backend: {settings.tx_backend}")

    logger.info(f"Using {construction.name} construction backend")
    return construction
