"""
SEI credit analytics.

Gathers wallet facts, scores them and produces the synthetic peer comparison.
Modules: wallet_scanner, credit_engine, comparison, analytics_pipeline.
"""

from seiscore.analytics.analytics_pipeline import (
    calculate_credit_score,
    generate_comparison_data,
    validate_address,
)
from seiscore.analytics.credit_engine import score_wallet
from seiscore.analytics.models import ComparisonReport, ScoreReport
from seiscore.analytics.wallet_scanner import scan_wallet

__all__ = [
    "ComparisonReport",
    "ScoreReport",
    "calculate_credit_score",
    "generate_comparison_data",
    "scan_wallet",
    "score_wallet",
    "validate_address",
]
