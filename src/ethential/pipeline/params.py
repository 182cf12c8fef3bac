"""Parameter builder: maps request fields to ordered contract-call arguments.

The layout of every operation is fixed. Count, order and types depend only on
the operation kind, matching the target contract methods:

    transfer(address recipient, uint256 amount)
    approve(address spender, uint256 amount)
    swap(uint256 amount)
    balanceOf(address account)
"""

from dataclasses import dataclass
from typing import Optional

from ethential.pipeline.errors import MissingField
from ethential.pipeline.types import OperationKind, Parameter, RequestFields

# Source marker for the configured manager contract address
MANAGER_ADDRESS = "<manager>"


@dataclass(frozen=True)
class ParameterSpec:
    """Position of one argument in a method signature."""

    abi_type: str
    name: str
    source: str  # RequestFields attribute, or MANAGER_ADDRESS


PARAMETER_LAYOUTS: dict[OperationKind, tuple[ParameterSpec, ...]] = {
    OperationKind.TRANSFER: (
        ParameterSpec("address", "recipient", "to_address"),
        ParameterSpec("uint256", "amount", "token_amount"),
    ),
    OperationKind.APPROVE: (
        ParameterSpec("address", "spender", MANAGER_ADDRESS),
        ParameterSpec("uint256", "amount", "token_amount"),
    ),
    OperationKind.SWAP: (
        ParameterSpec("uint256", "amount", "token_amount"),
    ),
    OperationKind.BALANCE_QUERY: (
        ParameterSpec("address", "account", "pubkey"),
    ),
}

# Contract method each operation calls
METHOD_NAMES: dict[OperationKind, str] = {
    OperationKind.TRANSFER: "transfer",
    OperationKind.APPROVE: "approve",
    OperationKind.SWAP: "swap",
    OperationKind.BALANCE_QUERY: "balanceOf",
}

# Request field that holds the sender address
SENDER_FIELDS: dict[OperationKind, str] = {
    OperationKind.TRANSFER: "from_address",
    OperationKind.APPROVE: "pubkey",
    OperationKind.SWAP: "pubkey",
    OperationKind.BALANCE_QUERY: "pubkey",
}

# Wire names of RequestFields attributes, for error messages
_WIRE_NAMES = {
    "to_address": "toAddress",
    "token_amount": "tokenAmount",
    "from_address": "from",
    "pubkey": "pubkey",
    MANAGER_ADDRESS: "manager contract address",
}


def _require(value: Optional[str], source: str) -> str:
    if value is None or not value.strip():
        raise MissingField(_WIRE_NAMES.get(source, source))
    return value.strip()


def build_parameters(
    kind: OperationKind,
    fields: RequestFields,
    manager_address: str,
) -> list[Parameter]:
    """Build the ordered parameter list for an operation.

    Args:
        kind: Operation being requested
        fields: Parsed request body
        manager_address: Configured manager contract (Approve spender)

    Returns:
        Parameters in contract signature order

    Raises:
        MissingField: If a required field is absent or blank
    """
    params = []
    for spec in PARAMETER_LAYOUTS[kind]:
        if spec.source == MANAGER_ADDRESS:
            # Never taken from the request, so approvals cannot be redirected
            value = _require(manager_address, spec.source)
        else:
            value = _require(getattr(fields, spec.source), spec.source)
        params.append(
            Parameter(
                internal_type=spec.abi_type,
                name=spec.name,
                type=spec.abi_type,
                value=value,
            )
        )
    return params


def sender_for(kind: OperationKind, fields: RequestFields) -> Optional[str]:
    """Return the sender address the request supplies for this operation."""
    value = getattr(fields, SENDER_FIELDS[kind])
    return value.strip() if value else value


def method_signature(kind: OperationKind, parameters: list[Parameter]) -> str:
    """Canonical method signature, e.g. ``transfer(address,uint256)``."""
    types = ",".join(p.type for p in parameters)
    return f"{METHOD_NAMES[kind]}({types})"
