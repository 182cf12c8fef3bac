"""Request and response contracts for the web layer."""

from ethential.web.contracts.tokens import CredentialResponse, ErrorResponse

__all__ = [
    "CredentialResponse",
    "ErrorResponse",
]
