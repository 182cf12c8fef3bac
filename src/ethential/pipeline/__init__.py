"""Transaction construction and relay pipeline.

The orchestrator lives in ``ethential.pipeline.orchestrator``; it is not
re-exported here because it depends on the collaborator packages, which in
turn depend on these types.
"""

from ethential.pipeline.errors import (
    ConstructionError,
    HeaderParseError,
    InvalidCredential,
    InvalidSender,
    IssuanceError,
    MalformedRequest,
    MissingField,
    NoCredentialSupplied,
    PipelineError,
    RelayUnreachable,
)
from ethential.pipeline.types import (
    IssuedCredential,
    OperationKind,
    Parameter,
    PipelineRun,
    PipelineState,
    RelayResult,
    RequestFields,
    TransactionIntent,
)

__all__ = [
    # Errors
    "PipelineError",
    "NoCredentialSupplied",
    "InvalidCredential",
    "HeaderParseError",
    "MalformedRequest",
    "MissingField",
    "InvalidSender",
    "ConstructionError",
    "RelayUnreachable",
    "IssuanceError",
    # Types
    "OperationKind",
    "Parameter",
    "TransactionIntent",
    "IssuedCredential",
    "RelayResult",
    "RequestFields",
    "PipelineRun",
    "PipelineState",
]
