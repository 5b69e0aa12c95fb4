"""Statistics derived from fetched platform data.

Turns raw submissions and rating history into the aggregates the dashboard
shows (solved problems, tag and difficulty spread, rating chart, recent
contests) and into UserMetrics for the score engine.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from .models import (
    CodeforcesProblem,
    CodeforcesRatingChange,
    CodeforcesSubmission,
    CodeforcesUser,
    ContestResult,
    DifficultyBucket,
    LeetCodeContestRanking,
    LeetCodeProfile,
    LeetCodeSubmission,
    ProblemStats,
    RatingPoint,
    TagCount,
    UserMetrics,
)
from .scoring import DEFAULT_MAX_VALUES

# (label, min rating, max rating), inclusive
DIFFICULTY_RANGES: tuple[tuple[str, int, int], ...] = (
    ("800-1000", 800, 1000),
    ("1100-1300", 1100, 1300),
    ("1400-1600", 1400, 1600),
    ("1700-1900", 1700, 1900),
    ("2000-2200", 2000, 2200),
    ("2300+", 2300, 9999),
)

TOP_TAGS = 10
RECENT_CONTESTS = 10


def _utc_date(timestamp: int) -> date:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).date()


def solved_problems(submissions: Iterable[CodeforcesSubmission]) -> list[CodeforcesProblem]:
    """Unique accepted problems, in order of first accepted submission seen."""
    solved: dict[tuple[Optional[int], str], CodeforcesProblem] = {}
    for sub in submissions:
        if not sub.accepted:
            continue
        key = (sub.problem.contest_id, sub.problem.index)
        if key not in solved:
            solved[key] = sub.problem
    return list(solved.values())


def tag_distribution(problems: Iterable[CodeforcesProblem], limit: Optional[int] = TOP_TAGS) -> list[TagCount]:
    """Count problems per tag, most common first. Ties keep first-seen order."""
    counts: dict[str, int] = {}
    for problem in problems:
        for tag in problem.tags:
            counts[tag] = counts.get(tag, 0) + 1
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    if limit is not None:
        ranked = ranked[:limit]
    return [TagCount(tag=tag, count=count) for tag, count in ranked]


def difficulty_distribution(problems: Iterable[CodeforcesProblem]) -> list[DifficultyBucket]:
    """Count rated problems per difficulty range, dropping empty ranges.

    Ratings that fall between ranges (e.g. 1050) are not counted.
    """
    counts = [0] * len(DIFFICULTY_RANGES)
    for problem in problems:
        if not problem.rating:
            continue
        for i, (_, low, high) in enumerate(DIFFICULTY_RANGES):
            if low <= problem.rating <= high:
                counts[i] += 1
                break

    return [
        DifficultyBucket(name=name, min_rating=low, max_rating=high, count=count)
        for (name, low, high), count in zip(DIFFICULTY_RANGES, counts)
        if count > 0
    ]


def problem_stats(submissions: Sequence[CodeforcesSubmission]) -> ProblemStats:
    accepted = sum(1 for sub in submissions if sub.accepted)
    problems = solved_problems(submissions)
    all_tags = tag_distribution(problems, limit=None)

    return ProblemStats(
        total_submissions=len(submissions),
        accepted_submissions=accepted,
        unique_solved=len(problems),
        accuracy=(accepted / len(submissions)) * 100 if submissions else None,
        topics_covered=len(all_tags),
        top_tags=all_tags[:TOP_TAGS],
        difficulty=difficulty_distribution(problems),
    )


def rating_chart(history: Sequence[CodeforcesRatingChange]) -> list[RatingPoint]:
    """Chart points for the rating history, numbered from 1."""
    return [
        RatingPoint(
            contest=i,
            rating=change.new_rating,
            contest_name=change.contest_name,
            date=_utc_date(change.rating_update_time_seconds),
            rank=change.rank,
        )
        for i, change in enumerate(history, start=1)
    ]


def recent_contests(history: Sequence[CodeforcesRatingChange], limit: int = RECENT_CONTESTS) -> list[ContestResult]:
    """The last ``limit`` contests, newest first."""
    if limit <= 0:
        return []
    return [
        ContestResult(
            contest_id=change.contest_id,
            contest_name=change.contest_name,
            date=_utc_date(change.rating_update_time_seconds),
            rank=change.rank,
            old_rating=change.old_rating,
            new_rating=change.new_rating,
            rating_change=change.rating_change,
        )
        for change in reversed(history[-limit:])
    ]


def format_rating_change(change: int) -> str:
    return f"+{change}" if change > 0 else str(change)


def longest_streak(days: Iterable[date]) -> int:
    """Length of the longest run of consecutive calendar days."""
    ordered = sorted(set(days))
    best = 0
    run = 0
    previous: Optional[date] = None
    for day in ordered:
        if previous is not None and day - previous == timedelta(days=1):
            run += 1
        else:
            run = 1
        best = max(best, run)
        previous = day
    return best


def count_upsolves(
    submissions: Iterable[CodeforcesSubmission],
    history: Iterable[CodeforcesRatingChange],
) -> int:
    """Problems from rated contests solved afterwards in practice mode."""
    rated_contests = {change.contest_id for change in history}
    upsolved = set()
    for sub in submissions:
        if not sub.accepted or sub.author.participant_type != "PRACTICE":
            continue
        if sub.problem.contest_id in rated_contests:
            upsolved.add((sub.problem.contest_id, sub.problem.index))
    return len(upsolved)


def codeforces_metrics(
    user: CodeforcesUser,
    history: Sequence[CodeforcesRatingChange],
    submissions: Sequence[CodeforcesSubmission],
    maxima: Mapping[str, float] = DEFAULT_MAX_VALUES,
) -> UserMetrics:
    """Build score-engine input from one Codeforces search."""
    stats = problem_stats(submissions)
    active_days = (_utc_date(sub.creation_time_seconds) for sub in submissions if sub.accepted)

    return UserMetrics(
        rating=user.rating,
        contests_participated=len(history),
        streak_days=longest_streak(active_days),
        upsolve_count=count_upsolves(submissions, history),
        total_problems=stats.unique_solved,
        topics_covered=stats.topics_covered,
        accuracy=stats.accuracy,
        **maxima,
    )


def leetcode_metrics(
    profile: LeetCodeProfile,
    ranking: Optional[LeetCodeContestRanking],
    submissions: Sequence[LeetCodeSubmission],
    maxima: Mapping[str, float] = DEFAULT_MAX_VALUES,
) -> UserMetrics:
    """Build score-engine input from one LeetCode search.

    LeetCode exposes no tag coverage or upsolve data, so those metrics stay
    absent. Accuracy comes from the recent-submission sample only.
    """
    active_days = []
    for sub in submissions:
        if sub.accepted and sub.timestamp.isdigit():
            active_days.append(_utc_date(int(sub.timestamp)))

    accepted = sum(1 for sub in submissions if sub.accepted)
    virtual = None
    if ranking is not None and ranking.top_percentage is not None:
        virtual = 100 - ranking.top_percentage

    return UserMetrics(
        rating=ranking.rating if ranking else None,
        contests_participated=ranking.attended_contests_count if ranking else None,
        streak_days=longest_streak(active_days),
        total_problems=profile.stats.total_solved,
        accuracy=(accepted / len(submissions)) * 100 if submissions else None,
        virtual_performance=virtual,
        **maxima,
    )
