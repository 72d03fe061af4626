"""
Report models returned to callers and the HTTP API.

Immutable pydantic models: built once per request, never mutated.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Grade = Literal["A+", "A", "A-", "B+", "B", "C", "D", "F"]
RiskLevel = Literal["low", "medium", "high"]


class SubScores(BaseModel):
    """The five independent contributions before weighting."""

    model_config = ConfigDict(frozen=True)

    age: float
    transactions: float
    balance: float
    repayment: float
    diversity: float


class ScoreFactors(BaseModel):
    """Display-oriented factor scores."""

    model_config = ConfigDict(frozen=True)

    transaction_history: int
    balance_strength: int
    repayment_history: int
    account_maturity: int = Field(..., description="Age and protocol diversity sub-scores combined")


class RawData(BaseModel):
    """Counts the score was computed from, echoed for auditability."""

    model_config = ConfigDict(frozen=True)

    transaction_count: int
    total_balance: float
    total_staked: float
    account_age_days: int | None
    defi_transaction_count: int
    unique_counterparties: int
    validator_count: int


class ScoreReport(BaseModel):
    """Credit score for one wallet."""

    model_config = ConfigDict(frozen=True)

    wallet_address: str
    address_kind: Literal["bech32", "evm"]
    score: int = Field(..., ge=0, le=1000)
    accuracy: int = Field(..., ge=0, le=99, description="Data-coverage confidence label, not a statistical bound")
    grade: Grade
    risk_level: RiskLevel
    sub_scores: SubScores
    factors: ScoreFactors
    raw_data: RawData


class ScoreBucket(BaseModel):
    model_config = ConfigDict(frozen=True)

    range: str
    percentage: int
    count: int


class ComparisonReport(BaseModel):
    """Synthetic peer comparison; illustrative only, not real network statistics."""

    model_config = ConfigDict(frozen=True)

    user_score: int
    percentile: int = Field(..., ge=0, lt=100)
    average_score: int
    total_users: int
    rank: int
    standing: str
    score_distribution: list[ScoreBucket]
