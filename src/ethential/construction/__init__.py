"""Unsigned transaction construction backends.

SECURITY: nothing in this package signs or broadcasts transactions.
"""

from ethential.construction.base import TxConstructionClient
from ethential.construction.factory import create_construction_client
from ethential.construction.local import LocalTxConstructionClient, UnsignedTransaction
from ethential.construction.remote import RemoteTxConstructionClient

__all__ = [
    "TxConstructionClient",
    "LocalTxConstructionClient",
    "RemoteTxConstructionClient",
    "UnsignedTransaction",
    "create_construction_client",
]
