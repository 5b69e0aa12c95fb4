"""LeetCode GraphQL client.

Endpoint: https://leetcode.com/graphql (unauthenticated public queries).
Only the profile query is treated as essential; contest ranking and recent
submissions degrade to None / [] on failure because a profile without them
is still worth showing.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import httpx
from pydantic import ValidationError

from ... import config
from ..models import (
    LeetCodeContestRanking,
    LeetCodeProfile,
    LeetCodeStats,
    LeetCodeSubmission,
    LeetCodeUser,
    Platform,
)
from . import PlatformAPIError

logger = logging.getLogger(__name__)

PROFILE_QUERY = """
query userPublicProfile($username: String!) {
  matchedUser(username: $username) {
    username
    profile {
      ranking
      userAvatar
      reputation
    }
    submitStats: submitStatsGlobal {
      acSubmissionNum {
        difficulty
        count
      }
    }
  }
  allQuestionsCount {
    difficulty
    count
  }
}
"""

CONTEST_RANKING_QUERY = """
query userContestRanking($username: String!) {
  userContestRanking(username: $username) {
    rating
    globalRanking
    attendedContestsCount
    topPercentage
  }
}
"""

RECENT_SUBMISSIONS_QUERY = """
query recentSubmissions($username: String!, $limit: Int!) {
  recentSubmissionList(username: $username, limit: $limit) {
    title
    titleSlug
    timestamp
    statusDisplay
    lang
  }
}
"""

DIFFICULTY_COLORS: dict[str, str] = {
    "Easy": "text-green-500",
    "Medium": "text-yellow-500",
    "Hard": "text-red-500",
}
DEFAULT_DIFFICULTY_COLOR = "text-muted-foreground"


def difficulty_color(difficulty: str) -> str:
    return DIFFICULTY_COLORS.get(difficulty, DEFAULT_DIFFICULTY_COLOR)


def _count_for(entries: list[dict], difficulty: str) -> int:
    """Pick the count for one difficulty out of a [{difficulty, count}] list."""
    for entry in entries or []:
        if entry.get("difficulty") == difficulty:
            return entry.get("count") or 0
    return 0


def _parse_profile(matched_user: dict, all_questions: list[dict]) -> LeetCodeProfile:
    profile = matched_user.get("profile") or {}
    ac_counts = (matched_user.get("submitStats") or {}).get("acSubmissionNum", [])

    total_solved = _count_for(ac_counts, "All")
    total_questions = _count_for(all_questions, "All")

    return LeetCodeProfile(
        user=LeetCodeUser(
            username=matched_user["username"],
            avatar=profile.get("userAvatar") or "",
            ranking=profile.get("ranking"),
            reputation=profile.get("reputation"),
        ),
        stats=LeetCodeStats(
            total_solved=total_solved,
            total_questions=total_questions,
            easy_solved=_count_for(ac_counts, "Easy"),
            medium_solved=_count_for(ac_counts, "Medium"),
            hard_solved=_count_for(ac_counts, "Hard"),
            acceptance_rate=(total_solved / total_questions) * 100 if total_questions > 0 else 0.0,
            ranking=profile.get("ranking"),
        ),
    )


class LeetCodeClient:
    """Public LeetCode GraphQL queries behind an injected httpx client."""

    def __init__(self, http: httpx.AsyncClient, url: Optional[str] = None):
        self._http = http
        self._url = url or config.get_leetcode_graphql_url()

    async def _query(self, query: str, variables: dict) -> dict:
        response = await self._http.post(
            self._url,
            json={"query": query, "variables": variables},
            headers={"Content-Type": "application/json"},
        )
        response.raise_for_status()
        body = response.json()
        if not isinstance(body, dict):
            raise PlatformAPIError(Platform.LEETCODE, "Unexpected LeetCode response")
        return body

    async def get_user_profile(self, username: str) -> LeetCodeProfile:
        """Fetch the public profile and solved-problem counts.

        Raises:
            PlatformAPIError: the user does not exist or the request failed.
        """
        try:
            body = await self._query(PROFILE_QUERY, {"username": username})
        except (httpx.HTTPError, ValueError) as exc:
            raise PlatformAPIError(Platform.LEETCODE, f"Failed to fetch LeetCode data: {exc}") from exc

        if body.get("errors"):
            raise PlatformAPIError(Platform.LEETCODE, "User not found")

        data = body.get("data") or {}
        matched_user = data.get("matchedUser")
        if not matched_user:
            raise PlatformAPIError(Platform.LEETCODE, "User not found")

        try:
            return _parse_profile(matched_user, data.get("allQuestionsCount") or [])
        except (KeyError, ValidationError) as exc:
            raise PlatformAPIError(Platform.LEETCODE, f"Failed to fetch LeetCode data: {exc}") from exc

    async def get_user_contest_ranking(self, username: str) -> Optional[LeetCodeContestRanking]:
        """Fetch contest rating, or None if the user never entered a contest.

        Failures are logged and also reported as None.
        """
        try:
            body = await self._query(CONTEST_RANKING_QUERY, {"username": username})
            contest_data = (body.get("data") or {}).get("userContestRanking")
            if not contest_data:
                return None
            return LeetCodeContestRanking(
                rating=round(contest_data["rating"]),
                global_ranking=contest_data.get("globalRanking"),
                attended_contests_count=contest_data.get("attendedContestsCount") or 0,
                top_percentage=contest_data.get("topPercentage"),
            )
        except (PlatformAPIError, httpx.HTTPError, ValueError, KeyError, TypeError, ValidationError) as exc:
            logger.warning("Contest ranking not available for %s: %s", username, exc)
            return None

    async def get_recent_submissions(self, username: str, limit: int = 20) -> list[LeetCodeSubmission]:
        """Fetch the most recent submissions; an empty list on failure."""
        try:
            body = await self._query(RECENT_SUBMISSIONS_QUERY, {"username": username, "limit": limit})
            records: Any = (body.get("data") or {}).get("recentSubmissionList") or []
            return [LeetCodeSubmission.model_validate(r) for r in records]
        except (PlatformAPIError, httpx.HTTPError, ValueError, TypeError, ValidationError) as exc:
            logger.warning("Failed to fetch recent submissions for %s: %s", username, exc)
            return []


@asynccontextmanager
async def open_leetcode_client(url: Optional[str] = None) -> AsyncIterator[LeetCodeClient]:
    """Open a LeetCodeClient backed by a fresh httpx client with the configured timeout."""
    async with httpx.AsyncClient(timeout=config.get_http_timeout()) as http:
        yield LeetCodeClient(http, url)
