"""Competitive Programming Analytics MCP server.

FastMCP server exposing profile lookups and the performance score as tools.
Run: cp-analytics-mcp
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from .core.clients.codeforces import open_codeforces_client
from .core.clients.leetcode import difficulty_color, open_leetcode_client
from .core.models import UserMetrics
from .core.scoring import DEFAULT_MAX_VALUES, WEIGHTS, calculate_score, validate_metrics
from .core.stats import format_rating_change
from .dashboard import fetch_codeforces_view, fetch_leetcode_view

logger = logging.getLogger(__name__)

READ_ONLY = ToolAnnotations(readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=True)
PURE = ToolAnnotations(readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=False)


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncIterator[None]:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    logger.info("CP Analytics server starting")
    yield


mcp = FastMCP(
    "CP Analytics",
    instructions="Look up Codeforces and LeetCode profiles, rating history and solved-problem stats, and compute a 0-100 DSA performance score with tier.",
    lifespan=lifespan,
)


def _metrics_from_args(**kwargs: Optional[float]) -> UserMetrics:
    return UserMetrics(**{k: v for k, v in kwargs.items() if v is not None})


def _score_summary(view) -> str:
    score = view.score
    summary = f"Performance score {score.final_score} ({score.tier.value})"
    if view.warnings:
        summary += ". Warnings: " + "; ".join(view.warnings)
    return summary


# ─── Tool 1: Codeforces profile ──────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def cp_codeforces_profile(handle: str, submission_count: int = 200) -> dict:
    """Codeforces profile, rating history, problem stats and performance score.

    Args:
        handle: Codeforces handle (e.g., 'tourist').
        submission_count: How many recent submissions to analyse. Default 200.
    """
    async with open_codeforces_client() as client:
        view = await fetch_codeforces_view(client, handle.strip(), submission_count)

    user = view.user
    return {
        "title": f"Codeforces: {user.handle}",
        "profile": view.user.model_dump(mode="json"),
        "rank_color": view.rank_color,
        "rating_chart": [p.model_dump(mode="json") for p in view.rating_chart],
        "recent_contests": [
            {**c.model_dump(mode="json"), "rating_change_label": format_rating_change(c.rating_change)}
            for c in view.recent_contests
        ],
        "problem_stats": view.problem_stats.model_dump(mode="json"),
        "performance": view.score.model_dump(mode="json"),
        "warnings": view.warnings,
        "summary": f"{user.handle}: rating {user.rating} ({user.rank or 'unrated'}), "
        f"{len(view.rating_history)} rated contests, {view.problem_stats.unique_solved} problems solved. "
        + _score_summary(view),
    }


# ─── Tool 2: LeetCode profile ────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def cp_leetcode_profile(username: str) -> dict:
    """LeetCode profile, contest ranking, recent submissions and performance score.

    Args:
        username: LeetCode username.
    """
    async with open_leetcode_client() as client:
        view = await fetch_leetcode_view(client, username.strip())

    stats = view.profile.stats
    return {
        "title": f"LeetCode: {view.profile.user.username}",
        "profile": view.profile.model_dump(mode="json"),
        "contest_ranking": view.contest_ranking.model_dump(mode="json") if view.contest_ranking else None,
        "recent_submissions": [s.model_dump(mode="json") for s in view.recent_submissions],
        "difficulty_colors": {d: difficulty_color(d) for d in ("Easy", "Medium", "Hard")},
        "performance": view.score.model_dump(mode="json"),
        "warnings": view.warnings,
        "summary": f"{view.profile.user.username}: {stats.total_solved} solved "
        f"({stats.easy_solved} easy, {stats.medium_solved} medium, {stats.hard_solved} hard). "
        + _score_summary(view),
    }


# ─── Tool 3: Performance score ───────────────────────────────────────────────


@mcp.tool(annotations=PURE)
async def cp_performance_score(
    rating: Optional[float] = None,
    max_rating: Optional[float] = None,
    contests_participated: Optional[float] = None,
    max_contests: Optional[float] = None,
    streak_days: Optional[float] = None,
    max_streak: Optional[float] = None,
    upsolve_count: Optional[float] = None,
    max_upsolve: Optional[float] = None,
    total_problems: Optional[float] = None,
    max_problems: Optional[float] = None,
    topics_covered: Optional[float] = None,
    max_topics: Optional[float] = None,
    accuracy: Optional[float] = None,
    virtual_performance: Optional[float] = None,
    use_default_maxima: bool = False,
) -> dict:
    """Compute the 0-100 DSA performance score from raw metrics.

    Every argument is optional; missing metrics contribute zero. Each
    count is normalized against its max_* argument.

    Args:
        accuracy: Submission success percentage (0-100).
        virtual_performance: Virtual contest percentile (0-100).
        use_default_maxima: Fill any missing max_* from the reference defaults.
    """
    metrics = _metrics_from_args(
        rating=rating, max_rating=max_rating,
        contests_participated=contests_participated, max_contests=max_contests,
        streak_days=streak_days, max_streak=max_streak,
        upsolve_count=upsolve_count, max_upsolve=max_upsolve,
        total_problems=total_problems, max_problems=max_problems,
        topics_covered=topics_covered, max_topics=max_topics,
        accuracy=accuracy, virtual_performance=virtual_performance,
    )
    if use_default_maxima:
        metrics = metrics.with_default_maxima()

    result = calculate_score(metrics)
    warnings = validate_metrics(metrics)
    return {
        "title": "DSA Performance Score",
        "performance": result.model_dump(mode="json"),
        "weights": dict(WEIGHTS),
        "warnings": warnings,
        "summary": f"Score {result.final_score}/100 ({result.tier.value})",
    }


# ─── Tool 4: Validate metrics ────────────────────────────────────────────────


@mcp.tool(annotations=PURE)
async def cp_validate_metrics(
    rating: Optional[float] = None,
    max_rating: Optional[float] = None,
    contests_participated: Optional[float] = None,
    max_contests: Optional[float] = None,
    streak_days: Optional[float] = None,
    max_streak: Optional[float] = None,
    upsolve_count: Optional[float] = None,
    max_upsolve: Optional[float] = None,
    total_problems: Optional[float] = None,
    max_problems: Optional[float] = None,
    topics_covered: Optional[float] = None,
    max_topics: Optional[float] = None,
    accuracy: Optional[float] = None,
    virtual_performance: Optional[float] = None,
) -> dict:
    """Check a metrics set for missing maxima and out-of-range percentages."""
    metrics = _metrics_from_args(
        rating=rating, max_rating=max_rating,
        contests_participated=contests_participated, max_contests=max_contests,
        streak_days=streak_days, max_streak=max_streak,
        upsolve_count=upsolve_count, max_upsolve=max_upsolve,
        total_problems=total_problems, max_problems=max_problems,
        topics_covered=topics_covered, max_topics=max_topics,
        accuracy=accuracy, virtual_performance=virtual_performance,
    )
    warnings = validate_metrics(metrics)
    return {
        "warnings": warnings,
        "count": len(warnings),
        "summary": "Metrics look consistent" if not warnings else f"{len(warnings)} warning(s)",
    }


# ─── Tool 5: Reference maxima ────────────────────────────────────────────────


@mcp.tool(annotations=PURE)
async def cp_default_maxima() -> dict:
    """Reference maxima and weights used for normalization."""
    return {
        "maxima": dict(DEFAULT_MAX_VALUES),
        "weights": dict(WEIGHTS),
    }


# ─── Tool 6: Contest list ────────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def cp_contest_list(limit: int = 20, gym: bool = False) -> dict:
    """Upcoming and recent Codeforces contests.

    Args:
        limit: Maximum number of contests to return. Default 20.
        gym: List gym contests instead of regular rounds.
    """
    async with open_codeforces_client() as client:
        contests = await client.get_contest_list(gym=gym)

    upcoming = [c for c in contests if c.phase == "BEFORE"]
    shown = contests[:limit]
    return {
        "contests": [c.model_dump(mode="json") for c in shown],
        "count": len(shown),
        "upcoming": len(upcoming),
        "summary": f"{len(upcoming)} upcoming contest(s), showing {len(shown)} of {len(contests)}",
    }


def main():
    """Entry point for the CLI command."""
    mcp.run()


if __name__ == "__main__":
    main()
