"""Error taxonomy of the transaction pipeline.

Each error knows the HTTP status it maps to and a machine-readable code, so
controllers never have to guess how to present a failure.
"""

from typing import Optional


class PipelineError(Exception):
    """Base exception for all pipeline failures."""

    status_code: int = 500
    code: str = "PipelineError"

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_payload(self) -> dict:
        """Error body returned to the caller."""
        payload = {"Error": self.message, "ErrorCode": self.code}
        if self.details:
            payload["ErrorDetails"] = self.details
        return payload


class NoCredentialSupplied(PipelineError):
    """Raised when the Authorization header carries no bearer credential."""

    status_code = 403
    code = "NoCredentialSupplied"

    def __init__(self, message: str = "No AuthToken Supplied!", details: Optional[str] = None):
        super().__init__(message, details)


class InvalidCredential(PipelineError):
    """Raised when the credential verifier rejects the bearer token."""

    status_code = 403
    code = "InvalidCredential"

    def __init__(self, message: str = "Invalid AuthToken!", details: Optional[str] = None):
        super().__init__(message, details)


class HeaderParseError(PipelineError):
    """Raised when the request headers cannot be interpreted."""

    status_code = 502
    code = "HeaderParseError"

    def __init__(self, details: str, message: str = "Error Parsing Header"):
        super().__init__(message, details)


class MalformedRequest(PipelineError):
    """Raised when the request body cannot be turned into a transaction intent."""

    status_code = 500
    code = "MalformedRequest"


class MissingField(MalformedRequest):
    """Raised when a field required by the operation is absent or blank."""

    code = "MissingField"

    def __init__(self, field_name: str):
        super().__init__(f"Missing required field: {field_name}")
        self.field_name = field_name


class InvalidSender(MalformedRequest):
    """Raised when a transaction intent would have no sender."""

    code = "InvalidSender"


class ConstructionError(PipelineError):
    """Raised by a construction backend when it cannot produce a transaction."""

    status_code = 500
    code = "ConstructionError"


class RelayUnreachable(PipelineError):
    """Raised when the signing wallet cannot be reached at the transport level."""

    status_code = 500
    code = "RelayUnreachable"


class IssuanceError(PipelineError):
    """Raised when a credential cannot be issued."""

    status_code = 500
    code = "IssuanceError"

    def __init__(self, details: str, message: str = "Error Generating Token"):
        super().__init__(message, details)
