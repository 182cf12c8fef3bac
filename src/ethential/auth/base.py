"""Credential verifier interface.

Issuance and verification of bearer credentials live outside the gateway;
the pipeline only depends on this narrow contract.
"""

from abc import ABC, abstractmethod

from ethential.pipeline.types import IssuedCredential


class CredentialVerifier(ABC):
    """Abstract base class for credential backends."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend name identifier."""
        pass

    @abstractmethod
    async def issue(self, client_id: str) -> IssuedCredential:
        """Issue a bearer credential for a client.

        Args:
            client_id: Client identity the credential is bound to

        Returns:
            The issued credential

        Raises:
            IssuanceError: If no credential can be issued
        """
        pass

    @abstractmethod
    async def verify(self, credential: str) -> bool:
        """Check a bearer credential.

        Must not have side effects visible to the gateway.

        Returns:
            True if the credential is currently valid
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name})"
