"""Transaction intent assembler."""

from typing import Iterable, Optional

from ethential.pipeline.errors import InvalidSender, MalformedRequest
from ethential.pipeline.types import Parameter, TransactionIntent


def assemble_intent(
    sender: Optional[str],
    parameters: Iterable[Parameter],
    native_value: int = 0,
) -> TransactionIntent:
    """Wrap parameters and sender into a transaction intent.

    Token operations never move native currency, so ``native_value`` stays 0
    for every call the gateway makes.

    Raises:
        InvalidSender: If the sender is missing or blank
    """
    if sender is None or not sender.strip():
        raise InvalidSender("Transaction sender address is required")
    if native_value < 0:
        raise MalformedRequest(f"Native value must not be negative: {native_value}")

    return TransactionIntent(
        sender=sender.strip(),
        parameters=tuple(parameters),
        native_value=native_value,
    )
