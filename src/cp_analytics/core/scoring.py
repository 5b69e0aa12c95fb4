"""Performance score engine.

Combines heterogeneous, partially-missing metrics from different platforms
into one weighted 0-100 score. Every metric is normalized against a
caller-supplied maximum, weighted, and rounded before the components are
summed, so the displayed breakdown always adds up to the displayed total.

Everything here is pure: no I/O, no shared state, and no exceptions for
bad input. A metric that cannot be normalized contributes zero.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal
from types import MappingProxyType
from typing import Any, Optional, Union

from .models import PerformanceScoreResult, ScoreBreakdown, Tier, TierColor, UserMetrics

# Metric weights (must sum to 100)
WEIGHTS: Mapping[str, int] = MappingProxyType({
    "rating": 25,
    "contests": 15,
    "frequency": 10,
    "upsolve": 10,
    "total_problems": 15,
    "topics": 10,
    "accuracy": 10,
    "virtual": 5,
})

# Reference ceilings; callers may pass platform-specific ones instead
DEFAULT_MAX_VALUES: Mapping[str, float] = MappingProxyType({
    "max_rating": 3500,     # Codeforces Legendary Grandmaster
    "max_contests": 100,
    "max_streak": 100,      # days
    "max_upsolve": 200,
    "max_problems": 1500,   # across platforms
    "max_topics": 40,       # distinct problem tags
})

# breakdown field -> (current field, maximum field); None maximum means a 0-100 percentage
_METRIC_FIELDS: tuple[tuple[str, str, Optional[str]], ...] = (
    ("rating", "rating", "max_rating"),
    ("contests", "contests_participated", "max_contests"),
    ("frequency", "streak_days", "max_streak"),
    ("upsolve", "upsolve_count", "max_upsolve"),
    ("total_problems", "total_problems", "max_problems"),
    ("topics", "topics_covered", "max_topics"),
    ("accuracy", "accuracy", None),
    ("virtual", "virtual_performance", None),
)

EXPERT_THRESHOLD = 71
INTERMEDIATE_THRESHOLD = 41

_TIER_COLORS = {
    Tier.EXPERT: TierColor.GREEN,
    Tier.INTERMEDIATE: TierColor.YELLOW,
    Tier.BEGINNER: TierColor.RED,
}

MetricsInput = Union[UserMetrics, Mapping[str, Any]]


def _round_half_up(value: float, places: int) -> float:
    """Round the exact binary value of ``value``, ties away from zero."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def normalize(current: Optional[float], maximum: Optional[float]) -> float:
    """Map ``current`` onto [0, 1] relative to ``maximum``.

    Returns 0 when either value is absent, when the maximum is zero (or
    negative), or when the current value is negative. Values above the
    maximum are capped at 1.0, never amplified.
    """
    if current is None or maximum is None:
        return 0.0
    if maximum <= 0 or current < 0:
        return 0.0
    ratio = current / maximum
    if math.isnan(ratio):
        return 0.0
    return min(ratio, 1.0)


def normalize_percentage(value: Optional[float]) -> float:
    """Map a 0-100 percentage onto [0, 1].

    Absent or negative values give 0. Values above 100 are capped at 1.0
    without complaint; validate_metrics is where out-of-range input is
    reported.
    """
    if value is None or value < 0 or math.isnan(value):
        return 0.0
    return min(value / 100, 1.0)


def get_tier(score: float) -> Tier:
    """Classify a final score. Lower bounds are inclusive."""
    if score >= EXPERT_THRESHOLD:
        return Tier.EXPERT
    if score >= INTERMEDIATE_THRESHOLD:
        return Tier.INTERMEDIATE
    return Tier.BEGINNER


def get_tier_color(tier: Tier) -> TierColor:
    return _TIER_COLORS[tier]


def _as_metrics(metrics: MetricsInput) -> UserMetrics:
    if isinstance(metrics, UserMetrics):
        return metrics
    return UserMetrics.model_validate(dict(metrics))


def calculate_score(metrics: MetricsInput) -> PerformanceScoreResult:
    """Calculate the composite performance score (0-100).

    Each normalized metric is multiplied by its weight and rounded to two
    decimals before summation; the total of those rounded components is
    then rounded to one decimal. Rounding the components first keeps the
    breakdown and the total consistent at the precision shown, at the cost
    of a few hundredths of drift against rounding the raw sum.

    Example:
        >>> result = calculate_score(UserMetrics(
        ...     rating=1750, max_rating=3500,
        ...     contests_participated=28, max_contests=100,
        ...     streak_days=45, max_streak=100,
        ...     upsolve_count=60, max_upsolve=200,
        ...     total_problems=520, max_problems=1500,
        ...     topics_covered=15, max_topics=40,
        ...     accuracy=87.5, virtual_performance=70,
        ... ))
        >>> result.final_score
        45.4
    """
    metrics = _as_metrics(metrics)

    components: dict[str, float] = {}
    for name, current_field, max_field in _METRIC_FIELDS:
        current = getattr(metrics, current_field)
        if max_field is None:
            ratio = normalize_percentage(current)
        else:
            ratio = normalize(current, getattr(metrics, max_field))
        components[name] = _round_half_up(ratio * WEIGHTS[name], 2)

    breakdown = ScoreBreakdown(**components)
    final_score = _round_half_up(sum(components.values()), 1)
    tier = get_tier(final_score)

    return PerformanceScoreResult(
        final_score=final_score,
        breakdown=breakdown,
        tier=tier,
        tier_color=get_tier_color(tier),
    )


_PAIR_LABELS = {
    "rating": "Rating",
    "contests_participated": "Contests participated",
    "streak_days": "Streak days",
    "upsolve_count": "Upsolve count",
    "total_problems": "Total problems",
    "topics_covered": "Topics covered",
}

_PERCENT_LABELS = {
    "accuracy": "Accuracy",
    "virtual_performance": "Virtual performance",
}


def validate_metrics(metrics: MetricsInput) -> list[str]:
    """Report soft inconsistencies in ``metrics``.

    Purely informational: the result has no effect on calculate_score.
    Warnings follow the fixed metric order; an empty list means nothing
    looked off.
    """
    metrics = _as_metrics(metrics)
    warnings: list[str] = []

    for _, current_field, max_field in _METRIC_FIELDS:
        current = getattr(metrics, current_field)
        if max_field is None:
            if current is not None and (current < 0 or current > 100):
                warnings.append(f"{_PERCENT_LABELS[current_field]} should be between 0 and 100")
            continue
        # Zero counts as "not provided" on both sides
        if current and not getattr(metrics, max_field):
            warnings.append(f"{_PAIR_LABELS[current_field]} provided but {max_field} is missing")

    return warnings
