"""Ethential token gateway.

Builds unsigned token transactions for authenticated clients and relays them
to an external signing wallet.
"""

__version__ = "0.1.0"
