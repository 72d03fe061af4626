"""
Data models for SEI provider output.

Normalized records produced by the data fetchers and consumed by the scoring
engine: validated wallet address, transactions, staking delegations, and the
aggregate WalletFacts. All records are immutable and request-scoped.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

SECONDS_PER_DAY = 86400


class AddressKind(str, Enum):
    """Supported SEI address encodings."""

    BECH32 = "bech32"
    EVM = "evm"


@dataclass(frozen=True)
class WalletAddress:
    """An address string that passed validation, tagged with its encoding."""

    value: str
    kind: AddressKind

    @property
    def is_evm(self) -> bool:
        return self.kind is AddressKind.EVM

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Transaction:
    """
    One wallet transaction in canonical shape.

    Built from either the explorer API or a Cosmos tx search result; optional
    fields are None / empty when the provider does not report them.
    """

    hash: str
    height: int
    timestamp: datetime | None = None
    method: str | None = None
    counterparties: tuple[str, ...] = ()


@dataclass(frozen=True)
class Delegation:
    """Stake delegated to one validator, in whole SEI."""

    validator_address: str
    amount: float


@dataclass(frozen=True)
class WalletCounters:
    """Aggregate counters from the explorer: lifetime tx count and counterparties."""

    transaction_count: int = 0
    counterparties: frozenset[str] = frozenset()


@dataclass(frozen=True)
class WalletFacts:
    """
    Everything the scoring engine knows about a wallet.

    Each field degrades to its empty default when its provider failed;
    partial failure is never signalled beyond lower data coverage.
    """

    first_tx_timestamp: datetime | None = None
    first_tx_height: int | None = None
    transaction_count: int = 0
    unique_counterparties: frozenset[str] = frozenset()
    native_balance: float = 0.0
    delegations: tuple[Delegation, ...] = ()
    transactions: tuple[Transaction, ...] = ()

    @property
    def total_staked(self) -> float:
        return sum(d.amount for d in self.delegations)

    def account_age_days(self, now: datetime | None = None) -> int | None:
        """Whole days since the first transaction; None when it is unknown."""
        if self.first_tx_timestamp is None:
            return None
        now = now or datetime.now(timezone.utc)
        delta = now - self.first_tx_timestamp
        return max(0, int(delta.total_seconds() // SECONDS_PER_DAY))
