"""Codeforces REST API client.

API docs: https://codeforces.com/apiHelp
No authentication required for public methods. Every response is a JSON
envelope: {"status": "OK", "result": ...} or {"status": "FAILED", "comment": ...}.
Failed calls come back as HTTP 400 with that envelope, so the body is read
before the HTTP status.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from ... import config
from ..models import (
    CodeforcesContest,
    CodeforcesRatingChange,
    CodeforcesSubmission,
    CodeforcesUser,
    Platform,
)
from . import PlatformAPIError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# CSS tokens for each rank, used to colour handles
RANK_COLORS: dict[str, str] = {
    "newbie": "cf-newbie",
    "pupil": "cf-pupil",
    "specialist": "cf-specialist",
    "expert": "cf-expert",
    "candidate master": "cf-candidate-master",
    "master": "cf-master",
    "international master": "cf-master",
    "grandmaster": "cf-grandmaster",
    "international grandmaster": "cf-grandmaster",
    "legendary grandmaster": "cf-grandmaster",
}
DEFAULT_RANK_COLOR = "cf-newbie"


def rank_color(rank: Optional[str]) -> str:
    """Return the CSS token for a Codeforces rank name."""
    if not rank:
        return DEFAULT_RANK_COLOR
    return RANK_COLORS.get(rank.lower(), DEFAULT_RANK_COLOR)


def _parse_records(model: type[ModelT], records: Any, method: str) -> list[ModelT]:
    """Parse a result list, skipping records that don't fit the model."""
    parsed = []
    for record in records or []:
        try:
            parsed.append(model.model_validate(record))
        except ValidationError as exc:
            logger.warning("Skipping malformed %s record: %s", method, exc.errors()[:1])
    return parsed


class CodeforcesClient:
    """Thin wrapper over the public Codeforces API methods the dashboard needs.

    The httpx client is injected so callers control its lifetime and tests
    can hand in a mock transport.
    """

    def __init__(self, http: httpx.AsyncClient, base_url: Optional[str] = None):
        self._http = http
        self._base_url = (base_url or config.get_codeforces_api_base()).rstrip("/")

    async def _call(self, method: str, params: dict, error_message: str) -> Any:
        response = await self._http.get(f"{self._base_url}/{method}", params=params)
        try:
            data = response.json()
        except ValueError:
            response.raise_for_status()
            raise PlatformAPIError(Platform.CODEFORCES, error_message) from None

        if not isinstance(data, dict) or data.get("status") != "OK":
            comment = data.get("comment") if isinstance(data, dict) else None
            logger.info("Codeforces %s failed: %s", method, comment or response.status_code)
            raise PlatformAPIError(Platform.CODEFORCES, comment or error_message)
        return data.get("result")

    async def get_user_info(self, handle: str) -> CodeforcesUser:
        """Fetch the public profile for ``handle``."""
        result = await self._call("user.info", {"handles": handle}, "Failed to fetch user info")
        if not result:
            raise PlatformAPIError(Platform.CODEFORCES, f"User {handle} not found")
        if not isinstance(result, list):
            raise PlatformAPIError(Platform.CODEFORCES, "Failed to fetch user info")
        try:
            return CodeforcesUser.model_validate(result[0])
        except ValidationError as exc:
            raise PlatformAPIError(Platform.CODEFORCES, "Failed to fetch user info") from exc

    async def get_user_rating(self, handle: str) -> list[CodeforcesRatingChange]:
        """Fetch the rating history, oldest contest first."""
        result = await self._call("user.rating", {"handle": handle}, "Failed to fetch user rating")
        return _parse_records(CodeforcesRatingChange, result, "user.rating")

    async def get_user_submissions(
        self,
        handle: str,
        start: int = 1,
        count: int = 50,
    ) -> list[CodeforcesSubmission]:
        """Fetch submissions, newest first.

        Args:
            handle: Codeforces handle.
            start: 1-based index of the first submission to return.
            count: Number of submissions to return.
        """
        params = {"handle": handle, "from": start, "count": count}
        result = await self._call("user.status", params, "Failed to fetch user submissions")
        return _parse_records(CodeforcesSubmission, result, "user.status")

    async def get_contest_list(self, gym: bool = False) -> list[CodeforcesContest]:
        """Fetch all contests (or gym contests)."""
        params = {"gym": "true" if gym else "false"}
        result = await self._call("contest.list", params, "Failed to fetch contest list")
        return _parse_records(CodeforcesContest, result, "contest.list")


@asynccontextmanager
async def open_codeforces_client(base_url: Optional[str] = None) -> AsyncIterator[CodeforcesClient]:
    """Open a CodeforcesClient backed by a fresh httpx client with the configured timeout."""
    async with httpx.AsyncClient(timeout=config.get_http_timeout()) as http:
        yield CodeforcesClient(http, base_url)
