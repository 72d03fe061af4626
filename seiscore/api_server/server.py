"""
FastAPI server: credit score API for the presentation layer.

Computes scores on request from live provider data; nothing is stored.
Endpoints: health, address validation, credit score, peer comparison, and a
combined report. Config via env (see seiscore.config).
"""

from __future__ import annotations

from fastapi import Depends, FastAPI, HTTPException, Query
from pydantic import BaseModel, Field

from seiscore.analytics import (
    ComparisonReport,
    ScoreReport,
    calculate_credit_score,
    generate_comparison_data,
)
from seiscore.config import Settings, get_settings
from seiscore.core.exceptions import InvalidAddressFormat, ScoringUnavailable
from seiscore.seiscore_logging import get_logger
from seiscore.sei_client.address import classify_address

logger = get_logger(__name__)


def get_app_settings() -> Settings:
    """Dependency: provider endpoints resolved from env per request."""
    return get_settings()


# -----------------------------------------------------------------------------
# Response models
# -----------------------------------------------------------------------------


class ValidateResponse(BaseModel):
    """GET /validate/{address} response."""

    address: str
    valid: bool
    kind: str | None = Field(None, description="bech32 | evm when valid")


class CreditReportResponse(BaseModel):
    """GET /credit-score/{address}/report: score plus synthetic comparison."""

    credit: ScoreReport
    comparison: ComparisonReport


# -----------------------------------------------------------------------------
# App and routes
# -----------------------------------------------------------------------------

app = FastAPI(
    title="SEI Credit Score API",
    description="Heuristic credit scores for SEI wallets computed from public chain data.",
    version="0.1.0",
)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/validate/{address}", response_model=ValidateResponse)
def validate(address: str) -> ValidateResponse:
    wallet = classify_address(address)
    return ValidateResponse(
        address=address,
        valid=wallet is not None,
        kind=wallet.kind.value if wallet else None,
    )


async def _score_or_http_error(address: str, settings: Settings) -> ScoreReport:
    try:
        return await calculate_credit_score(address, settings=settings)
    except InvalidAddressFormat as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except ScoringUnavailable as e:
        logger.warning("api_credit_score_unavailable", wallet=address)
        raise HTTPException(status_code=503, detail=str(e)) from e


@app.get("/credit-score/{address}", response_model=ScoreReport)
async def credit_score(
    address: str,
    settings: Settings = Depends(get_app_settings),
) -> ScoreReport:
    """Score a wallet. 400 for a malformed address, 503 when scoring itself failed."""
    return await _score_or_http_error(address, settings)


@app.get("/credit-score/{address}/report", response_model=CreditReportResponse)
async def credit_report(
    address: str,
    settings: Settings = Depends(get_app_settings),
) -> CreditReportResponse:
    report = await _score_or_http_error(address, settings)
    return CreditReportResponse(
        credit=report,
        comparison=generate_comparison_data(report.score),
    )


@app.get("/comparison", response_model=ComparisonReport)
def comparison(score: int = Query(..., ge=0, le=1000)) -> ComparisonReport:
    """Synthetic peer comparison for a score. Illustrative only."""
    return generate_comparison_data(score)
