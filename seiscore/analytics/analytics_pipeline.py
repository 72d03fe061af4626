"""
Credit pipeline: validate -> scan -> score.

Public entrypoints for the API layer: validate_address, calculate_credit_score
and generate_comparison_data. Invalid addresses are rejected before any
network call; provider failures are absorbed by the fetchers; anything else
that breaks during scan or aggregation surfaces as ScoringUnavailable.
"""

from __future__ import annotations

import random
from datetime import datetime

import httpx

from seiscore.analytics.comparison import generate_comparison_data as _generate_comparison
from seiscore.analytics.credit_engine import score_wallet
from seiscore.analytics.models import ComparisonReport, ScoreReport
from seiscore.analytics.wallet_scanner import scan_wallet
from seiscore.config.settings import Settings, get_settings
from seiscore.core.exceptions import InvalidAddressFormat, ScoringUnavailable
from seiscore.seiscore_logging import bind_wallet, get_logger
from seiscore.sei_client.address import classify_address, is_valid_address

logger = get_logger(__name__)


def validate_address(address: object) -> bool:
    """True for a Bech32 (sei...) or EVM (0x...) address."""
    return is_valid_address(address)


async def calculate_credit_score(
    address: str,
    *,
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    now: datetime | None = None,
) -> ScoreReport:
    """
    Compute the credit score report for one wallet.

    Raises:
        InvalidAddressFormat: address matches neither format; no request was made.
        ScoringUnavailable: unexpected failure while scanning or aggregating.
    """
    wallet = classify_address(address)
    if wallet is None:
        logger.info("credit_score_invalid_address", address_length=len(address) if isinstance(address, str) else None)
        raise InvalidAddressFormat(address)

    settings = settings or get_settings()
    log = bind_wallet(wallet.value)
    log.info("credit_score_start", address_kind=wallet.kind.value)
    try:
        facts = await scan_wallet(wallet, settings, transport=transport)
        report = score_wallet(facts, wallet, now=now)
    except Exception as e:
        log.exception("credit_score_failed", error=str(e))
        raise ScoringUnavailable() from e

    log.info(
        "credit_score_done",
        score=report.score,
        grade=report.grade,
        risk_level=report.risk_level,
        accuracy=report.accuracy,
    )
    return report


def generate_comparison_data(score: int, rng: random.Random | None = None) -> ComparisonReport:
    """Synthetic peer comparison for a score; illustrative, not real network data."""
    return _generate_comparison(score, rng=rng)
