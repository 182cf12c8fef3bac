"""Bearer credential backends."""

from ethential.auth.base import CredentialVerifier
from ethential.auth.factory import create_verifier
from ethential.auth.local import LocalCredentialVerifier
from ethential.auth.remote import RemoteCredentialVerifier

__all__ = [
    "CredentialVerifier",
    "LocalCredentialVerifier",
    "RemoteCredentialVerifier",
    "create_verifier",
]
