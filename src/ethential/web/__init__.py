"""Web boundary layer.

SECURITY: nothing reachable from this layer holds keys, signs or broadcasts.
Transactions leave the gateway unsigned and go to the signing wallet.
"""

__all__ = [
    "contracts",
    "controllers",
]
