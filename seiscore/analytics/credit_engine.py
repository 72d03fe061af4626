"""
Credit engine: fold wallet facts into a 0-1000 credit score, grade and risk tier.

Five threshold sub-scores (age, transactions, balance, repayment, protocol
diversity) are weighted onto a base of 500 and clamped to 0-1000. Pure and
deterministic: the clock is passed in, nothing is random.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable

from seiscore.analytics.models import RawData, ScoreFactors, ScoreReport, SubScores
from seiscore.seiscore_logging import get_logger
from seiscore.sei_client.models import Transaction, WalletAddress, WalletFacts

logger = get_logger(__name__)

BASE_SCORE = 500
SCORE_MIN = 0
SCORE_MAX = 1000

WEIGHT_AGE = 0.15
WEIGHT_TRANSACTIONS = 0.20
WEIGHT_BALANCE = 0.25
WEIGHT_REPAYMENT = 0.30
WEIGHT_DIVERSITY = 0.10

# (exclusive lower bound, points), checked high to low
AGE_TIERS = ((730, 100), (365, 60), (90, 20))
AGE_FLOOR = -30
AGE_UNKNOWN = -50
TX_TIERS = ((2000, 100), (300, 60), (50, 20))
TX_FLOOR = -20
BALANCE_TIERS = ((5000, 100), (500, 60), (50, 20))
BALANCE_FLOOR = -30
DIVERSITY_TIERS = ((25, 30), (10, 10))
DIVERSITY_FLOOR = 0

LIQUIDATION_MAX_PENALTY = -150

# (minimum score, grade, risk), first match wins
GRADE_BANDS = (
    (850, "A+", "low"),
    (800, "A", "low"),
    (750, "A-", "low"),
    (700, "B+", "medium"),
    (650, "B", "medium"),
    (500, "C", "medium"),
    (300, "D", "high"),
)
GRADE_FLOOR = ("F", "high")

ACCURACY_BASE = 75
ACCURACY_AGE_KNOWN = 10
ACCURACY_HAS_TRANSACTIONS = 10
ACCURACY_HAS_BALANCE = 5
ACCURACY_CAP = 99


@dataclass(frozen=True)
class LendingActivity:
    """Lending-flavoured transactions by class; each transaction counts once."""

    borrows: int = 0
    repayments: int = 0
    liquidations: int = 0

    @property
    def total(self) -> int:
        return self.borrows + self.repayments + self.liquidations


def _tiered(value: float, tiers: tuple[tuple[float, int], ...], floor: int) -> int:
    for threshold, points in tiers:
        if value > threshold:
            return points
    return floor


def age_score(age_days: int | None) -> int:
    if age_days is None:
        return AGE_UNKNOWN
    return _tiered(age_days, AGE_TIERS, AGE_FLOOR)


def transaction_score(tx_count: int) -> int:
    return _tiered(tx_count, TX_TIERS, TX_FLOOR)


def balance_score(balance: float) -> int:
    return _tiered(balance, BALANCE_TIERS, BALANCE_FLOOR)


def diversity_score(unique_counterparties: int) -> int:
    return _tiered(unique_counterparties, DIVERSITY_TIERS, DIVERSITY_FLOOR)


def classify_lending(transactions: Iterable[Transaction]) -> LendingActivity:
    """
    Count borrow, repay and liquidation transactions by lower-cased method name.

    Liquidation wins over repay, repay over borrow, so "repayBorrow" is a
    repayment and "liquidateBorrow" a liquidation.
    """
    borrows = repayments = liquidations = 0
    for tx in transactions:
        method = (tx.method or "").lower()
        if "liquidat" in method:
            liquidations += 1
        elif "repay" in method:
            repayments += 1
        elif "borrow" in method:
            borrows += 1
    return LendingActivity(borrows=borrows, repayments=repayments, liquidations=liquidations)


def repayment_score(activity: LendingActivity) -> float:
    """
    Lending behaviour. Without borrows there is no signal and the score is 0,
    whatever the repay or liquidation counts.
    """
    if activity.borrows == 0:
        return 0
    repayment_ratio = activity.repayments / activity.borrows
    liquidation_ratio = activity.liquidations / activity.borrows
    if liquidation_ratio == 0 and repayment_ratio >= 0.8:
        return 100
    if liquidation_ratio < 0.1 and repayment_ratio >= 0.6:
        return 60
    if liquidation_ratio < 0.25:
        return 0
    return max(LIQUIDATION_MAX_PENALTY, LIQUIDATION_MAX_PENALTY * liquidation_ratio)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def effective_transaction_count(facts: WalletFacts) -> int:
    """Lifetime counter, or the fetched list length when the counter is lower (e.g. unavailable)."""
    return max(facts.transaction_count, len(facts.transactions))


def has_no_data(facts: WalletFacts) -> bool:
    """True when every provider came back empty."""
    return (
        facts.first_tx_timestamp is None
        and effective_transaction_count(facts) == 0
        and facts.native_balance <= 0
        and not facts.delegations
        and not facts.unique_counterparties
    )


def compute_sub_scores(facts: WalletFacts, now: datetime) -> SubScores:
    return SubScores(
        age=age_score(facts.account_age_days(now)),
        transactions=transaction_score(effective_transaction_count(facts)),
        balance=balance_score(facts.native_balance),
        repayment=repayment_score(classify_lending(facts.transactions)),
        diversity=diversity_score(len(facts.unique_counterparties)),
    )


def aggregate_score(sub_scores: SubScores) -> int:
    """Weighted sum on the base score, clamped to 0-1000 and rounded half up."""
    raw = (
        BASE_SCORE
        + sub_scores.age * WEIGHT_AGE
        + sub_scores.transactions * WEIGHT_TRANSACTIONS
        + sub_scores.balance * WEIGHT_BALANCE
        + sub_scores.repayment * WEIGHT_REPAYMENT
        + sub_scores.diversity * WEIGHT_DIVERSITY
    )
    return _round_half_up(max(SCORE_MIN, min(SCORE_MAX, raw)))


def grade_for_score(score: int) -> tuple[str, str]:
    """Return (grade, risk_level) for a final score."""
    for minimum, grade, risk in GRADE_BANDS:
        if score >= minimum:
            return grade, risk
    return GRADE_FLOOR


def accuracy_for(facts: WalletFacts) -> int:
    """Confidence label from data coverage; not a statistical error bound."""
    accuracy = ACCURACY_BASE
    if facts.first_tx_timestamp is not None:
        accuracy += ACCURACY_AGE_KNOWN
    if effective_transaction_count(facts) > 0:
        accuracy += ACCURACY_HAS_TRANSACTIONS
    if facts.native_balance > 0:
        accuracy += ACCURACY_HAS_BALANCE
    return min(ACCURACY_CAP, accuracy)


def score_wallet(
    facts: WalletFacts,
    wallet: WalletAddress,
    now: datetime | None = None,
) -> ScoreReport:
    """
    Build the ScoreReport for one wallet.

    A wallet with no data at all keeps its (penalized) sub-scores for display
    but is scored at the neutral BASE_SCORE (500, C, medium). The weighted
    formula alone would give that wallet 481, so the neutral score is a
    special case and not a limit of the formula: a wallet with any fact at
    all, even a dust balance, drops to the formula result (481, D, high).
    Do not smooth this step away; the empty-wallet result is a fixed
    requirement.
    """
    now = now or datetime.now(timezone.utc)
    sub_scores = compute_sub_scores(facts, now)
    if has_no_data(facts):
        score = BASE_SCORE
    else:
        score = aggregate_score(sub_scores)
    grade, risk_level = grade_for_score(score)
    lending = classify_lending(facts.transactions)

    report = ScoreReport(
        wallet_address=wallet.value,
        address_kind=wallet.kind.value,
        score=score,
        accuracy=accuracy_for(facts),
        grade=grade,
        risk_level=risk_level,
        sub_scores=sub_scores,
        factors=ScoreFactors(
            transaction_history=_round_half_up(sub_scores.transactions),
            balance_strength=_round_half_up(sub_scores.balance),
            repayment_history=_round_half_up(sub_scores.repayment),
            account_maturity=_round_half_up(sub_scores.age + sub_scores.diversity),
        ),
        raw_data=RawData(
            transaction_count=effective_transaction_count(facts),
            total_balance=facts.native_balance,
            total_staked=facts.total_staked,
            account_age_days=facts.account_age_days(now),
            defi_transaction_count=lending.total,
            unique_counterparties=len(facts.unique_counterparties),
            validator_count=len({d.validator_address for d in facts.delegations}),
        ),
    )
    logger.debug(
        "credit_engine_result",
        wallet=wallet.value,
        score=score,
        grade=grade,
        risk_level=risk_level,
        sub_scores=sub_scores.model_dump(),
    )
    return report
