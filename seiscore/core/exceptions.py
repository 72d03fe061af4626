"""
Application-level exceptions.

InvalidAddressFormat and ScoringUnavailable reach callers of
calculate_credit_score. ProviderUnavailable is internal to the data fetchers:
it is raised by the shared request helper and absorbed at each fetcher
boundary, never propagated.
"""

from __future__ import annotations


class SeiScoreError(Exception):
    """Base class for credit scoring errors."""


class InvalidAddressFormat(SeiScoreError, ValueError):
    """Address matches neither the Bech32 (sei...) nor the EVM (0x...) format."""

    def __init__(self, address: object) -> None:
        self.address = address
        super().__init__(
            "Invalid address format. Please use a valid Bech32 address (sei...) "
            "or EVM address (0x...)"
        )


class ProviderUnavailable(SeiScoreError):
    """A single data provider errored, timed out or returned a non-success response."""

    def __init__(self, provider: str, reason: str) -> None:
        self.provider = provider
        self.reason = reason
        super().__init__(f"{provider} unavailable: {reason}")


class ScoringUnavailable(SeiScoreError):
    """Unexpected failure while scanning or aggregating; distinct from bad input."""

    def __init__(self, message: str = "Failed to calculate credit score from blockchain data") -> None:
        super().__init__(message)
