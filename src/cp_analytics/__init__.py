"""Competitive Programming Analytics.

Codeforces and LeetCode profile lookups, solved-problem statistics, and a
weighted 0-100 performance score with tier classification.
"""

__version__ = "0.1.0"

from .core.models import PerformanceScoreResult, ScoreBreakdown, Tier, TierColor, UserMetrics
from .core.scoring import DEFAULT_MAX_VALUES, WEIGHTS, calculate_score, validate_metrics

__all__ = [
    "DEFAULT_MAX_VALUES",
    "PerformanceScoreResult",
    "ScoreBreakdown",
    "Tier",
    "TierColor",
    "UserMetrics",
    "WEIGHTS",
    "calculate_score",
    "validate_metrics",
]
