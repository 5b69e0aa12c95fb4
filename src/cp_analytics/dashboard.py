"""Search orchestration for the analytics dashboard.

A search fetches every resource for one platform concurrently and either
replaces that platform's view as a whole or clears it and posts an error
notification. Nothing is retried and nothing is persisted.

Each search is stamped with a generation number. A response that arrives
after a newer search for the same platform has started is discarded, so a
slow lookup can never overwrite the result of a later one.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import httpx
from pydantic import BaseModel, Field

from . import config
from .core.clients import PlatformAPIError
from .core.clients.codeforces import CodeforcesClient, rank_color
from .core.clients.leetcode import LeetCodeClient
from .core.models import (
    CodeforcesRatingChange,
    CodeforcesSubmission,
    CodeforcesUser,
    ContestResult,
    LeetCodeContestRanking,
    LeetCodeProfile,
    LeetCodeSubmission,
    PerformanceScoreResult,
    Platform,
    ProblemStats,
    RatingPoint,
    UserMetrics,
)
from .core.scoring import calculate_score, validate_metrics
from .core.stats import (
    codeforces_metrics,
    leetcode_metrics,
    problem_stats,
    rating_chart,
    recent_contests,
)

logger = logging.getLogger(__name__)

LEETCODE_RECENT_SUBMISSIONS = 20

FETCH_ERRORS = (PlatformAPIError, httpx.HTTPError)


class CodeforcesView(BaseModel):
    """Everything the dashboard shows after a Codeforces search."""

    user: CodeforcesUser
    rank_color: str
    rating_history: list[CodeforcesRatingChange]
    submissions: list[CodeforcesSubmission]
    problem_stats: ProblemStats
    rating_chart: list[RatingPoint]
    recent_contests: list[ContestResult]
    metrics: UserMetrics
    score: PerformanceScoreResult
    warnings: list[str] = Field(default_factory=list)


class LeetCodeView(BaseModel):
    """Everything the dashboard shows after a LeetCode search."""

    profile: LeetCodeProfile
    contest_ranking: Optional[LeetCodeContestRanking] = None
    recent_submissions: list[LeetCodeSubmission] = Field(default_factory=list)
    metrics: UserMetrics
    score: PerformanceScoreResult
    warnings: list[str] = Field(default_factory=list)


@dataclass(frozen=True)
class Notification:
    """A toast-style message for the user."""

    level: str
    title: str
    message: str


def build_codeforces_view(
    user: CodeforcesUser,
    history: list[CodeforcesRatingChange],
    submissions: list[CodeforcesSubmission],
) -> CodeforcesView:
    metrics = codeforces_metrics(user, history, submissions)
    return CodeforcesView(
        user=user,
        rank_color=rank_color(user.rank),
        rating_history=history,
        submissions=submissions,
        problem_stats=problem_stats(submissions),
        rating_chart=rating_chart(history),
        recent_contests=recent_contests(history),
        metrics=metrics,
        score=calculate_score(metrics),
        warnings=validate_metrics(metrics),
    )


def build_leetcode_view(
    profile: LeetCodeProfile,
    ranking: Optional[LeetCodeContestRanking],
    submissions: list[LeetCodeSubmission],
) -> LeetCodeView:
    metrics = leetcode_metrics(profile, ranking, submissions)
    return LeetCodeView(
        profile=profile,
        contest_ranking=ranking,
        recent_submissions=submissions,
        metrics=metrics,
        score=calculate_score(metrics),
        warnings=validate_metrics(metrics),
    )


async def fetch_codeforces_view(
    client: CodeforcesClient,
    handle: str,
    submission_count: Optional[int] = None,
) -> CodeforcesView:
    """Fetch profile, rating history and submissions concurrently.

    Raises:
        PlatformAPIError: Codeforces rejected one of the calls.
        httpx.HTTPError: the network request itself failed.
    """
    count = submission_count or config.get_submission_count()
    user, history, submissions = await asyncio.gather(
        client.get_user_info(handle),
        client.get_user_rating(handle),
        client.get_user_submissions(handle, 1, count),
    )
    return build_codeforces_view(user, history, submissions)


async def fetch_leetcode_view(client: LeetCodeClient, username: str) -> LeetCodeView:
    """Fetch profile, contest ranking and recent submissions concurrently.

    Only a profile failure is fatal; the other two degrade to empty.
    """
    profile, ranking, submissions = await asyncio.gather(
        client.get_user_profile(username),
        client.get_user_contest_ranking(username),
        client.get_recent_submissions(username, LEETCODE_RECENT_SUBMISSIONS),
    )
    return build_leetcode_view(profile, ranking, submissions)


def _clean_identifier(value: str, what: str) -> str:
    cleaned = value.strip()
    if not cleaned:
        raise ValueError(f"{what} must not be empty")
    return cleaned


class Dashboard:
    """In-memory view state for one user session.

    Clients are passed in; the dashboard never creates its own.
    """

    def __init__(
        self,
        codeforces: Optional[CodeforcesClient] = None,
        leetcode: Optional[LeetCodeClient] = None,
        submission_count: Optional[int] = None,
    ):
        self._codeforces = codeforces
        self._leetcode = leetcode
        self._submission_count = submission_count
        self._generations = {platform: 0 for platform in Platform}
        self._in_flight = {platform: 0 for platform in Platform}
        self.codeforces_view: Optional[CodeforcesView] = None
        self.leetcode_view: Optional[LeetCodeView] = None
        self.notifications: list[Notification] = []

    def is_loading(self, platform: Platform) -> bool:
        return self._in_flight[platform] > 0

    def _notify(self, level: str, title: str, message: str) -> None:
        self.notifications.append(Notification(level=level, title=title, message=message))

    def _begin(self, platform: Platform) -> int:
        self._generations[platform] += 1
        self._in_flight[platform] += 1
        return self._generations[platform]

    def _is_current(self, platform: Platform, generation: int) -> bool:
        return self._generations[platform] == generation

    def clear(self, platform: Optional[Platform] = None) -> None:
        if platform in (None, Platform.CODEFORCES):
            self.codeforces_view = None
        if platform in (None, Platform.LEETCODE):
            self.leetcode_view = None

    async def search_codeforces(self, handle: str) -> Optional[CodeforcesView]:
        """Load a Codeforces handle, replacing the current Codeforces view.

        Returns the view now on display, which is None after a failure.
        """
        if self._codeforces is None:
            raise RuntimeError("Dashboard has no Codeforces client")
        handle = _clean_identifier(handle, "handle")
        platform = Platform.CODEFORCES
        generation = self._begin(platform)
        logger.info("Codeforces search #%d for %s", generation, handle)

        try:
            view = await fetch_codeforces_view(self._codeforces, handle, self._submission_count)
        except FETCH_ERRORS as exc:
            if not self._is_current(platform, generation):
                logger.info("Ignoring failure of superseded Codeforces search #%d: %s", generation, exc)
                return self.codeforces_view
            logger.warning("Codeforces search for %s failed: %s", handle, exc)
            self.codeforces_view = None
            self._notify("error", "Error", str(exc) or "Failed to fetch user data")
            return None
        finally:
            self._in_flight[platform] -= 1

        if not self._is_current(platform, generation):
            logger.info("Discarding stale Codeforces response #%d for %s", generation, handle)
            return self.codeforces_view

        self.codeforces_view = view
        self._notify("success", "Success!", f"Loaded data for {view.user.handle}")
        return view

    async def search_leetcode(self, username: str) -> Optional[LeetCodeView]:
        """Load a LeetCode username, replacing the current LeetCode view."""
        if self._leetcode is None:
            raise RuntimeError("Dashboard has no LeetCode client")
        username = _clean_identifier(username, "username")
        platform = Platform.LEETCODE
        generation = self._begin(platform)
        logger.info("LeetCode search #%d for %s", generation, username)

        try:
            view = await fetch_leetcode_view(self._leetcode, username)
        except FETCH_ERRORS as exc:
            if not self._is_current(platform, generation):
                logger.info("Ignoring failure of superseded LeetCode search #%d: %s", generation, exc)
                return self.leetcode_view
            logger.warning("LeetCode search for %s failed: %s", username, exc)
            self.leetcode_view = None
            self._notify("error", "Error", str(exc) or "Failed to fetch user data")
            return None
        finally:
            self._in_flight[platform] -= 1

        if not self._is_current(platform, generation):
            logger.info("Discarding stale LeetCode response #%d for %s", generation, username)
            return self.leetcode_view

        self.leetcode_view = view
        self._notify("success", "Success!", f"Loaded data for {view.profile.user.username}")
        return view
