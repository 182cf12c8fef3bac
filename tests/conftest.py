"""Pytest configuration and fixtures."""

import os
from typing import AsyncGenerator, Optional

import httpx
import pytest
import pytest_asyncio

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["WALLET_URI"] = "http://wallet.test/sign"
os.environ["MNGR_CONTRACT_ADDR"] = "0x" + "ab" * 20
os.environ["AUTH_BACKEND"] = "local"
os.environ["AUTH_SECRET"] = "test-secret"
os.environ["TX_BACKEND"] = "local"
os.environ["STATIC_DIR"] = ""
os.environ["DEBUG"] = "false"

from ethential.auth.base import CredentialVerifier
from ethential.config import PipelineConfig
from ethential.construction.base import TxConstructionClient
from ethential.pipeline.errors import IssuanceError
from ethential.pipeline.orchestrator import PipelineOrchestrator
from ethential.pipeline.relay import RelayDispatcher
from ethential.pipeline.types import IssuedCredential, TransactionIntent

WALLET_URI = "http://wallet.test/sign"
MANAGER_ADDRESS = "0x" + "ab" * 20
VALID_TOKEN = "valid-token"


class FakeVerifier(CredentialVerifier):
    """Accepts a fixed set of tokens and records every call."""

    def __init__(self, valid_tokens=(VALID_TOKEN,)):
        self.valid_tokens = set(valid_tokens)
        self.verify_calls: list[str] = []
        self.issue_calls: list[str] = []

    @property
    def name(self) -> str:
        return "fake"

    async def issue(self, client_id: str) -> IssuedCredential:
        self.issue_calls.append(client_id)
        if client_id == "broken":
            raise IssuanceError("auth service down")
        return IssuedCredential(token=f"token-{client_id}", client_id=client_id, expires_at=1700000000)

    async def verify(self, credential: str) -> bool:
        self.verify_calls.append(credential)
        return credential in self.valid_tokens


class FakeConstructionClient(TxConstructionClient):
    """Returns canned blobs/balances and records every call."""

    def __init__(self, blob: str = "0xunsigned", balance: int = 1000):
        self.blob = blob
        self.balance = balance
        self.error: Optional[Exception] = None
        self.calls: list[tuple[str, str, TransactionIntent, int]] = []

    @property
    def name(self) -> str:
        return "fake"

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def _record(self, method: str, credential: str, intent: TransactionIntent, chain_id: int):
        self.calls.append((method, credential, intent, chain_id))
        if self.error is not None:
            raise self.error

    async def build_transfer_tx(self, credential, intent, chain_id):
        self._record("transfer", credential, intent, chain_id)
        return self.blob

    async def build_approve_tx(self, credential, intent, chain_id):
        self._record("approve", credential, intent, chain_id)
        return self.blob

    async def build_swap_tx(self, credential, intent, chain_id):
        self._record("swap", credential, intent, chain_id)
        return self.blob

    async def get_balance(self, credential, intent, chain_id):
        self._record("balance", credential, intent, chain_id)
        return self.balance


class FakeWallet:
    """Signing wallet stand-in served through httpx.MockTransport."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.body = b"0xtxhash"
        self.content_type = "text/plain"
        self.content_encoding: Optional[str] = None
        self.unreachable = False

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.unreachable:
            raise httpx.ConnectError("connection refused", request=request)
        headers = {"content-type": self.content_type}
        if self.content_encoding:
            headers["content-encoding"] = self.content_encoding
        return httpx.Response(self.status_code, content=self.body, headers=headers)


@pytest.fixture
def pipeline_config() -> PipelineConfig:
    return PipelineConfig(wallet_uri=WALLET_URI, manager_address=MANAGER_ADDRESS, chain_id=5)


@pytest.fixture
def verifier() -> FakeVerifier:
    return FakeVerifier()


@pytest.fixture
def construction() -> FakeConstructionClient:
    return FakeConstructionClient()


@pytest.fixture
def wallet() -> FakeWallet:
    return FakeWallet()


@pytest_asyncio.fixture
async def http_client(wallet) -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTP client whose every request lands on the fake wallet."""
    async with httpx.AsyncClient(transport=httpx.MockTransport(wallet.handler)) as client:
        yield client


@pytest.fixture
def dispatcher(http_client) -> RelayDispatcher:
    return RelayDispatcher(http_client)


@pytest.fixture
def orchestrator(pipeline_config, verifier, construction, dispatcher) -> PipelineOrchestrator:
    return PipelineOrchestrator(
        config=pipeline_config,
        verifier=verifier,
        construction=construction,
        dispatcher=dispatcher,
    )
