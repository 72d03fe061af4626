"""
Comparison generator: synthetic peer distribution for a credit score.

No network calls and no real network statistics. Population size, average
score and the percentile offset inside each score band are randomized; the
output is illustrative only. Pass a seeded random.Random for reproducible
output in tests.
"""

from __future__ import annotations

import random

from seiscore.analytics.models import ComparisonReport, ScoreBucket

TOTAL_USERS_MIN = 45000
TOTAL_USERS_SPAN = 5000
AVERAGE_SCORE_MIN = 520
AVERAGE_SCORE_SPAN = 40

# (minimum score, percentile low, percentile span), first match wins
PERCENTILE_BANDS = (
    (850, 95, 5),
    (800, 85, 10),
    (750, 70, 15),
    (700, 50, 20),
    (650, 25, 25),
)
PERCENTILE_FLOOR = (0, 25)

STANDING_LABELS = (
    (95, "Exceptional"),
    (90, "Excellent"),
    (75, "Good"),
    (50, "Average"),
)
STANDING_FLOOR = "Below Average"

# Fixed network shape over the grade bands; percentages sum to 100
SCORE_DISTRIBUTION = (
    ("850-1000", 3),
    ("800-849", 5),
    ("750-799", 7),
    ("700-749", 10),
    ("650-699", 15),
    ("500-649", 35),
    ("300-499", 20),
    ("0-299", 5),
)


def percentile_for(score: int, rng: random.Random) -> int:
    for minimum, low, span in PERCENTILE_BANDS:
        if score >= minimum:
            return low + rng.randrange(span)
    low, span = PERCENTILE_FLOOR
    return low + rng.randrange(span)


def standing_for(percentile: int) -> str:
    for minimum, label in STANDING_LABELS:
        if percentile >= minimum:
            return label
    return STANDING_FLOOR


def generate_comparison_data(score: int, rng: random.Random | None = None) -> ComparisonReport:
    rng = rng or random.Random()
    total_users = TOTAL_USERS_MIN + rng.randrange(TOTAL_USERS_SPAN)
    average_score = AVERAGE_SCORE_MIN + rng.randrange(AVERAGE_SCORE_SPAN)
    percentile = percentile_for(score, rng)
    rank = total_users * (100 - percentile) // 100
    return ComparisonReport(
        user_score=score,
        percentile=percentile,
        average_score=average_score,
        total_users=total_users,
        rank=rank,
        standing=standing_for(percentile),
        score_distribution=[
            ScoreBucket(range=label, percentage=pct, count=total_users * pct // 100)
            for label, pct in SCORE_DISTRIBUTION
        ],
    )
