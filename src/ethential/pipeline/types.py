"""Request-scoped data types shared by the pipeline stages."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ethential.pipeline.errors import PipelineError


class OperationKind(str, Enum):
    """Token operation handled by the gateway."""

    TRANSFER = "transfer"
    APPROVE = "approve"
    SWAP = "swap"
    BALANCE_QUERY = "balance_query"

    @property
    def relays(self) -> bool:
        """Whether the constructed transaction goes to the signing wallet."""
        return self is not OperationKind.BALANCE_QUERY


@dataclass(frozen=True)
class Parameter:
    """One ABI call argument.

    Attributes:
        internal_type: Solidity internal type (e.g. "address")
        name: Argument name in the contract method
        type: Declared ABI type at this signature position
        value: Argument value as a string
    """

    internal_type: str
    name: str
    type: str
    value: str

    def to_dict(self) -> dict:
        return {
            "internalType": self.internal_type,
            "name": self.name,
            "type": self.type,
            "value": self.value,
        }


@dataclass(frozen=True)
class TransactionIntent:
    """A pending contract call before encoding and signing."""

    sender: str
    parameters: tuple[Parameter, ...]
    native_value: int = 0

    @property
    def signature_types(self) -> list[str]:
        """Declared ABI types in call order."""
        return [p.type for p in self.parameters]

    def to_dict(self) -> dict:
        return {
            "from": self.sender,
            "params": [p.to_dict() for p in self.parameters],
            "value": self.native_value,
        }


@dataclass(frozen=True)
class IssuedCredential:
    """Bearer credential handed out for a client identity."""

    token: str
    client_id: str
    expires_at: Optional[int] = None


@dataclass(frozen=True)
class RelayResult:
    """Verbatim response of the downstream signer."""

    status_code: int
    body: bytes = b""
    content_type: Optional[str] = None

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    @property
    def is_success(self) -> bool:
        return self.status_code == 200


class RequestFields(BaseModel):
    """Business fields of a token operation request body."""

    model_config = ConfigDict(
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )

    to_address: Optional[str] = Field(None, alias="toAddress")
    token_amount: Optional[str] = Field(None, alias="tokenAmount")
    from_address: Optional[str] = Field(None, alias="from")
    pubkey: Optional[str] = None


class PipelineState(str, Enum):
    """Stages of one pipeline run. FAILED is absorbing."""

    START = "start"
    AUTHENTICATING = "authenticating"
    BUILDING = "building"
    CONSTRUCTING = "constructing"
    RELAYING = "relaying"
    DONE = "done"
    FAILED = "failed"


@dataclass
class PipelineRun:
    """Everything one request carries through the pipeline.

    The orchestrator creates one per request and fills it in stage by stage;
    nothing here outlives the response.
    """

    kind: OperationKind
    state: PipelineState
    history: list[PipelineState] = field(default_factory=list)
    fields: Optional[RequestFields] = None
    parameters: tuple[Parameter, ...] = ()
    intent: Optional[TransactionIntent] = None
    blob: Optional[str] = None
    relay_result: Optional[RelayResult] = None
    balance: Optional[int] = None
    failure: Optional[PipelineError] = None

    def __post_init__(self) -> None:
        if not self.history:
            self.history.append(self.state)

    @property
    def failed(self) -> bool:
        return self.state is PipelineState.FAILED

    @property
    def done(self) -> bool:
        return self.state is PipelineState.DONE

