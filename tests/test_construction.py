"""Tests for construction backends."""

import json

import httpx
import pytest

from ethential.config import Settings
from ethential.construction import (
    LocalTxConstructionClient,
    RemoteTxConstructionClient,
    create_construction_client,
)
from ethential.construction.local import MAX_UINT256, encode_argument, encode_call
from ethential.pipeline.errors import ConstructionError
from ethential.pipeline.intent import assemble_intent
from ethential.pipeline.types import OperationKind, Parameter

TOKEN = "0x" + "11" * 20
MANAGER = "0x" + "22" * 20
ALICE = "0x" + "aa" * 20
BOB = "0x" + "bb" * 20
RPC_URL = "http://rpc.test"
TX_URL = "http://tx.test"


def address_param(name: str, value: str) -> Parameter:
    return Parameter("address", name, "address", value)


def amount_param(value: str) -> Parameter:
    return Parameter("uint256", "amount", "uint256", value)


class TestEncoding:
    """ABI encoding of static arguments."""

    def test_address_is_left_padded(self):
        assert encode_argument(address_param("recipient", BOB)) == "0" * 24 + "bb" * 20

    def test_mixed_case_address_lowercased(self):
        encoded = encode_argument(address_param("recipient", "0x" + "AB" * 20))

        assert encoded == "0" * 24 + "ab" * 20

    @pytest.mark.parametrize("value,expected", [("100", 100), ("0x64", 100), ("0", 0)])
    def test_uint256(self, value, expected):
        assert encode_argument(amount_param(value)) == format(expected, "064x")

    def test_uint256_max(self):
        assert encode_argument(amount_param(str(MAX_UINT256))) == "f" * 64

    @pytest.mark.parametrize("value", ["-1", "1.5", "abc", str(MAX_UINT256 + 1)])
    def test_invalid_uint256(self, value):
        with pytest.raises(ConstructionError):
            encode_argument(amount_param(value))

    @pytest.mark.parametrize("value", ["0xBB", "bob", "0x" + "zz" * 20])
    def test_invalid_address(self, value):
        with pytest.raises(ConstructionError):
            encode_argument(address_param("recipient", value))

    def test_unsupported_type(self):
        with pytest.raises(ConstructionError):
            encode_argument(Parameter("bytes", "data", "bytes", "0x00"))

    @pytest.mark.parametrize(
        "kind,params,selector",
        [
            (OperationKind.TRANSFER, [address_param("recipient", BOB), amount_param("1")], "a9059cbb"),
            (OperationKind.APPROVE, [address_param("spender", MANAGER), amount_param("1")], "095ea7b3"),
            (OperationKind.BALANCE_QUERY, [address_param("account", ALICE)], "70a08231"),
        ],
    )
    def test_known_selectors(self, kind, params, selector):
        data = encode_call(kind, assemble_intent(ALICE, params))

        assert data.startswith("0x" + selector)
        assert len(data) == 2 + 8 + 64 * len(params)

    def test_transfer_calldata(self):
        intent = assemble_intent(ALICE, [address_param("recipient", BOB), amount_param("100")])

        assert encode_call(OperationKind.TRANSFER, intent) == (
            "0xa9059cbb" + "0" * 24 + "bb" * 20 + format(100, "064x")
        )


class TestLocalTxConstructionClient:

    @pytest.fixture
    def local(self):
        return LocalTxConstructionClient(token_address=TOKEN, manager_address=MANAGER, rpc_url=RPC_URL)

    @pytest.mark.asyncio
    async def test_transfer_targets_token(self, local):
        intent = assemble_intent(ALICE, [address_param("recipient", BOB), amount_param("100")])

        blob = await local.build_transfer_tx("cred", intent, 5)
        tx = json.loads(blob)

        assert tx["chainId"] == 5
        assert tx["from"] == ALICE
        assert tx["to"] == TOKEN
        assert tx["value"] == "0x0"
        assert tx["data"].startswith("0xa9059cbb")

    @pytest.mark.asyncio
    async def test_swap_targets_manager(self, local):
        intent = assemble_intent(ALICE, [amount_param("42")])

        tx = json.loads(await local.build_swap_tx("cred", intent, 5))

        assert tx["to"] == MANAGER
        assert tx["data"].endswith(format(42, "064x"))

    @pytest.mark.asyncio
    async def test_build_tx_dispatches_by_kind(self, local):
        intent = assemble_intent(ALICE, [address_param("spender", MANAGER), amount_param("7")])

        tx = json.loads(await local.build_tx(OperationKind.APPROVE, "cred", intent, 5))

        assert tx["data"].startswith("0x095ea7b3")

    @pytest.mark.asyncio
    async def test_build_tx_rejects_balance(self, local):
        intent = assemble_intent(ALICE, [address_param("account", ALICE)])

        with pytest.raises(ValueError):
            await local.build_tx(OperationKind.BALANCE_QUERY, "cred", intent, 5)

    @pytest.mark.asyncio
    async def test_missing_token_address(self):
        local = LocalTxConstructionClient(token_address="", manager_address=MANAGER, rpc_url=RPC_URL)
        intent = assemble_intent(ALICE, [address_param("recipient", BOB), amount_param("1")])

        with pytest.raises(ConstructionError):
            await local.build_transfer_tx("cred", intent, 5)


class FakeRpc:
    """JSON-RPC node stand-in."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.response = httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": "0x" + "0" * 62 + "ff"})

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response


class TestLocalBalance:

    @pytest.fixture
    def rpc(self):
        return FakeRpc()

    @pytest.fixture
    def local(self, rpc):
        client = httpx.AsyncClient(transport=httpx.MockTransport(rpc.handler))
        return LocalTxConstructionClient(TOKEN, MANAGER, RPC_URL, client=client)

    @pytest.fixture
    def intent(self):
        return assemble_intent(ALICE, [address_param("account", ALICE)])

    @pytest.mark.asyncio
    async def test_balance_eth_call(self, local, rpc, intent):
        balance = await local.get_balance("cred", intent, 5)

        assert balance == 255
        payload = json.loads(rpc.requests[0].content)
        assert payload["method"] == "eth_call"
        assert payload["params"][0]["to"] == TOKEN
        assert payload["params"][0]["data"] == "0x70a08231" + "0" * 24 + "aa" * 20
        assert payload["params"][1] == "latest"

    @pytest.mark.asyncio
    async def test_missing_rpc_url(self, rpc, intent):
        local = LocalTxConstructionClient(TOKEN, MANAGER, rpc_url="")

        with pytest.raises(ConstructionError):
            await local.get_balance("cred", intent, 5)

        assert rpc.requests == []

    @pytest.mark.asyncio
    async def test_empty_result_is_zero(self, local, rpc, intent):
        rpc.response = httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": "0x"})

        assert await local.get_balance("cred", intent, 5) == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": {"message": "execution reverted"}}),
            httpx.Response(500, text="boom"),
            httpx.Response(200, text="not json"),
            httpx.Response(200, json=[1]),
            httpx.Response(200, json={"result": 5}),
        ],
    )
    async def test_rpc_failures(self, local, rpc, intent, response):
        rpc.response = response

        with pytest.raises(ConstructionError):
            await local.get_balance("cred", intent, 5)


class FakeTxService:
    """Transaction service stand-in."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.response = httpx.Response(200, json="0xserviceblob")

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response


class TestRemoteTxConstructionClient:

    @pytest.fixture
    def service(self):
        return FakeTxService()

    @pytest.fixture
    def remote(self, service):
        client = httpx.AsyncClient(transport=httpx.MockTransport(service.handler))
        return RemoteTxConstructionClient(TX_URL, client=client)

    @pytest.fixture
    def intent(self):
        return assemble_intent(ALICE, [address_param("recipient", BOB), amount_param("100")])

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "kind,path",
        [
            (OperationKind.TRANSFER, "/createTransferTokenTx"),
            (OperationKind.APPROVE, "/createApproveTx"),
            (OperationKind.SWAP, "/createSwapTokenTx"),
        ],
    )
    async def test_paths_and_payload(self, remote, service, intent, kind, path):
        blob = await remote.build_tx(kind, "cred", intent, 5)

        assert blob == "0xserviceblob"
        request = service.requests[0]
        assert request.url.path == path
        assert request.headers["authorization"] == "Bearer cred"
        assert json.loads(request.content) == {"txParams": intent.to_dict(), "chainId": 5}

    @pytest.mark.asyncio
    async def test_tx_object_response(self, remote, service, intent):
        service.response = httpx.Response(200, json={"tx": "0xwrapped"})

        assert await remote.build_transfer_tx("cred", intent, 5) == "0xwrapped"

    @pytest.mark.asyncio
    async def test_error_body_becomes_message(self, remote, service, intent):
        service.response = httpx.Response(400, text="execution reverted")

        with pytest.raises(ConstructionError) as exc_info:
            await remote.build_transfer_tx("cred", intent, 5)

        assert exc_info.value.message == "execution reverted"

    @pytest.mark.asyncio
    async def test_empty_transaction(self, remote, service, intent):
        service.response = httpx.Response(200, json={"tx": ""})

        with pytest.raises(ConstructionError):
            await remote.build_swap_tx("cred", intent, 5)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response,expected",
        [
            (httpx.Response(200, json=1234), 1234),
            (httpx.Response(200, json={"balance": "1000000000000000000000"}), 10**21),
            (httpx.Response(200, json=7.0), 7),
        ],
    )
    async def test_balance(self, remote, service, intent, response, expected):
        service.response = response

        assert await remote.get_balance("cred", intent, 5) == expected
        assert service.requests[0].url.path == "/getTokenBalance"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [True, "lots", 1.9, {"balance": None}, {"balance": 2.5}])
    async def test_invalid_balance(self, remote, service, intent, payload):
        service.response = httpx.Response(200, json=payload)

        with pytest.raises(ConstructionError):
            await remote.get_balance("cred", intent, 5)

    @pytest.mark.asyncio
    async def test_unreachable(self, intent):
        def refuse(request):
            raise httpx.ConnectError("refused", request=request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(refuse))
        remote = RemoteTxConstructionClient(TX_URL, client=client)

        with pytest.raises(ConstructionError):
            await remote.build_transfer_tx("cred", intent, 5)


class TestCreateConstructionClient:

    def test_local(self):
        construction = create_construction_client(
            Settings(tx_backend="local", token_contract_addr=TOKEN, mngr_contract_addr=MANAGER)
        )

        assert isinstance(construction, LocalTxConstructionClient)
        assert construction.token_address == TOKEN
        assert construction.manager_address == MANAGER

    def test_remote(self):
        construction = create_construction_client(Settings(tx_backend="remote", tx_service_url=TX_URL))

        assert isinstance(construction, RemoteTxConstructionClient)

    def test_remote_requires_url(self):
        with pytest.raises(ValueError):
            create_construction_client(Settings(tx_backend="remote", tx_service_url=""))

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            create_construction_client(Settings(tx_backend="web3"))
