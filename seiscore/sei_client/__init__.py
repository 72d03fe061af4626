"""
SEI data access package.

Validates wallet addresses, queries the explorer, Cosmos REST and EVM RPC
providers, and normalizes their payloads into request-scoped records for the
scoring engine.
"""

from seiscore.sei_client.address import classify_address, is_valid_address, shorten_address
from seiscore.sei_client.client import SeiDataClient, merge_transactions
from seiscore.sei_client.models import (
    AddressKind,
    Delegation,
    Transaction,
    WalletAddress,
    WalletCounters,
    WalletFacts,
)

__all__ = [
    "AddressKind",
    "Delegation",
    "SeiDataClient",
    "Transaction",
    "WalletAddress",
    "WalletCounters",
    "WalletFacts",
    "classify_address",
    "is_valid_address",
    "merge_transactions",
    "shorten_address",
]
