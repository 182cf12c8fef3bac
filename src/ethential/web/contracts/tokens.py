"""Response contracts for the token endpoints.

Key names follow the wire format existing clients already consume
(``clientID``, ``Error``, ``ErrorDetails``).
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ethential.pipeline.types import IssuedCredential


class CredentialResponse(BaseModel):
    """A freshly issued bearer credential."""

    model_config = ConfigDict(populate_by_name=True)

    token: str = Field(..., description="Bearer credential for the Authorization header")
    client_id: str = Field(..., alias="clientID", description="Client the token is bound to")
    expires_at: Optional[int] = Field(
        None, alias="expiresAt", description="Expiry as a Unix timestamp"
    )

    @classmethod
    def from_issued(cls, issued: IssuedCredential) -> "CredentialResponse":
        return cls(
            token=issued.token,
            client_id=issued.client_id,
            expires_at=issued.expires_at,
        )


class ErrorResponse(BaseModel):
    """Error body returned for every failed request."""

    model_config = ConfigDict(populate_by_name=True)

    error: str = Field(..., alias="Error", description="Human-readable message")
    error_code: str = Field(..., alias="ErrorCode", description="Machine-readable classification")
    error_details: Optional[str] = Field(
        None, alias="ErrorDetails", description="Underlying cause, if known"
    )
