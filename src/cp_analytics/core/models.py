"""Pydantic data models shared by the clients, the score engine and the server.

Platform payloads, derived statistics, and the score engine input and output
all live here so every layer agrees on one set of shapes.
"""

from __future__ import annotations

import logging
import math
from datetime import date
from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


class Platform(str, Enum):
    """Competitive programming platforms."""

    CODEFORCES = "codeforces"
    LEETCODE = "leetcode"


class Tier(str, Enum):
    """Qualitative performance tier, ordered from lowest to highest."""

    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    EXPERT = "Expert"


class TierColor(str, Enum):
    """Colour token shown next to a tier."""

    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"


def _metric(name: str, camel: str) -> Any:
    return Field(None, validation_alias=AliasChoices(name, camel))


class UserMetrics(BaseModel):
    """Optional metrics fed into the performance score.

    Every field may be None. Absent, zero and negative values are kept
    distinct; normalization treats each of them differently.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    rating: Optional[float] = None
    max_rating: Optional[float] = _metric("max_rating", "maxRating")

    contests_participated: Optional[float] = _metric("contests_participated", "contestsParticipated")
    max_contests: Optional[float] = _metric("max_contests", "maxContests")

    streak_days: Optional[float] = _metric("streak_days", "streakDays")
    max_streak: Optional[float] = _metric("max_streak", "maxStreak")

    upsolve_count: Optional[float] = _metric("upsolve_count", "upsolveCount")
    max_upsolve: Optional[float] = _metric("max_upsolve", "maxUpsolve")

    total_problems: Optional[float] = _metric("total_problems", "totalProblems")
    max_problems: Optional[float] = _metric("max_problems", "maxProblems")

    topics_covered: Optional[float] = _metric("topics_covered", "topicsCovered")
    max_topics: Optional[float] = _metric("max_topics", "maxTopics")

    accuracy: Optional[float] = Field(None, description="Submission success percentage (0-100)")
    virtual_performance: Optional[float] = Field(
        None,
        validation_alias=AliasChoices("virtual_performance", "virtualPerformance"),
        description="Percentile-based virtual contest performance (0-100)",
    )

    @field_validator("*", mode="before")
    @classmethod
    def _drop_malformed(cls, value: Any) -> Any:
        """Unreadable numbers become absent so they contribute nothing to the score."""
        if value is None or isinstance(value, bool):
            return None
        try:
            number = float(value)
        except (TypeError, ValueError, OverflowError):
            logger.debug("Ignoring malformed metric value %r", value)
            return None
        return None if math.isnan(number) else number

    def with_default_maxima(self) -> UserMetrics:
        """Return a copy with every absent maximum taken from DEFAULT_MAX_VALUES."""
        from .scoring import DEFAULT_MAX_VALUES

        missing = {k: v for k, v in DEFAULT_MAX_VALUES.items() if getattr(self, k) is None}
        if not missing:
            return self
        return self.model_copy(update=missing)


class ScoreBreakdown(BaseModel):
    """Weighted contribution of each metric, rounded to two decimals."""

    model_config = ConfigDict(frozen=True)

    rating: float = Field(ge=0.0, le=25.0)
    contests: float = Field(ge=0.0, le=15.0)
    frequency: float = Field(ge=0.0, le=10.0)
    upsolve: float = Field(ge=0.0, le=10.0)
    total_problems: float = Field(ge=0.0, le=15.0)
    topics: float = Field(ge=0.0, le=10.0)
    accuracy: float = Field(ge=0.0, le=10.0)
    virtual: float = Field(ge=0.0, le=5.0)

    def values(self) -> list[float]:
        return [getattr(self, name) for name in type(self).model_fields]


class PerformanceScoreResult(BaseModel):
    """Composite performance score with breakdown and tier."""

    model_config = ConfigDict(frozen=True)

    final_score: float = Field(ge=0.0, le=100.0, description="Composite score, one decimal")
    breakdown: ScoreBreakdown
    tier: Tier
    tier_color: TierColor


# ─── Codeforces ──────────────────────────────────────────────────────────────


class CodeforcesUser(BaseModel):
    """A Codeforces user as returned by user.info."""

    model_config = ConfigDict(populate_by_name=True)

    handle: str
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    country: Optional[str] = None
    city: Optional[str] = None
    organization: Optional[str] = None
    contribution: int = 0
    # Unrated accounts come back without rank or rating fields
    rank: Optional[str] = None
    rating: Optional[int] = None
    max_rank: Optional[str] = Field(None, alias="maxRank")
    max_rating: Optional[int] = Field(None, alias="maxRating")
    last_online_time_seconds: int = Field(0, alias="lastOnlineTimeSeconds")
    registration_time_seconds: int = Field(0, alias="registrationTimeSeconds")
    friend_of_count: int = Field(0, alias="friendOfCount")
    avatar: str = ""
    title_photo: str = Field("", alias="titlePhoto")


class CodeforcesRatingChange(BaseModel):
    """One rated contest from user.rating."""

    model_config = ConfigDict(populate_by_name=True)

    contest_id: int = Field(alias="contestId")
    contest_name: str = Field(alias="contestName")
    handle: str
    rank: int
    rating_update_time_seconds: int = Field(alias="ratingUpdateTimeSeconds")
    old_rating: int = Field(alias="oldRating")
    new_rating: int = Field(alias="newRating")

    @property
    def rating_change(self) -> int:
        return self.new_rating - self.old_rating


class CodeforcesProblem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    contest_id: Optional[int] = Field(None, alias="contestId")
    problemset_name: Optional[str] = Field(None, alias="problemsetName")
    index: str
    name: str
    type: str = "PROGRAMMING"
    points: Optional[float] = None
    rating: Optional[int] = None
    tags: list[str] = Field(default_factory=list)


class CodeforcesMember(BaseModel):
    handle: str
    name: Optional[str] = None


class CodeforcesParty(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    contest_id: Optional[int] = Field(None, alias="contestId")
    members: list[CodeforcesMember] = Field(default_factory=list)
    participant_type: str = Field(alias="participantType")
    ghost: bool = False
    room: Optional[int] = None
    start_time_seconds: Optional[int] = Field(None, alias="startTimeSeconds")


class CodeforcesSubmission(BaseModel):
    """One submission from user.status."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    contest_id: Optional[int] = Field(None, alias="contestId")
    creation_time_seconds: int = Field(alias="creationTimeSeconds")
    relative_time_seconds: int = Field(0, alias="relativeTimeSeconds")
    problem: CodeforcesProblem
    author: CodeforcesParty
    programming_language: str = Field("", alias="programmingLanguage")
    verdict: Optional[str] = None
    testset: str = ""
    passed_test_count: int = Field(0, alias="passedTestCount")
    time_consumed_millis: int = Field(0, alias="timeConsumedMillis")
    memory_consumed_bytes: int = Field(0, alias="memoryConsumedBytes")
    points: Optional[float] = None

    @property
    def accepted(self) -> bool:
        return self.verdict == "OK"


class CodeforcesContest(BaseModel):
    """A contest from contest.list."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str
    type: str
    phase: str
    frozen: bool = False
    duration_seconds: int = Field(alias="durationSeconds")
    start_time_seconds: Optional[int] = Field(None, alias="startTimeSeconds")
    relative_time_seconds: Optional[int] = Field(None, alias="relativeTimeSeconds")
    prepared_by: Optional[str] = Field(None, alias="preparedBy")
    website_url: Optional[str] = Field(None, alias="websiteUrl")
    description: Optional[str] = None
    difficulty: Optional[int] = None
    kind: Optional[str] = None
    icpc_region: Optional[str] = Field(None, alias="icpcRegion")
    country: Optional[str] = None
    city: Optional[str] = None
    season: Optional[str] = None


# ─── LeetCode ────────────────────────────────────────────────────────────────


class LeetCodeUser(BaseModel):
    username: str
    avatar: str = ""
    ranking: Optional[int] = None
    reputation: Optional[int] = None


class LeetCodeStats(BaseModel):
    """Solved-problem counts from the public profile."""

    total_solved: int = 0
    total_questions: int = 0
    easy_solved: int = 0
    medium_solved: int = 0
    hard_solved: int = 0
    acceptance_rate: float = Field(0.0, description="Solved share of all questions, in percent")
    ranking: Optional[int] = None


class LeetCodeProfile(BaseModel):
    user: LeetCodeUser
    stats: LeetCodeStats


class LeetCodeContestRanking(BaseModel):
    rating: int
    global_ranking: Optional[int] = None
    attended_contests_count: int = 0
    top_percentage: Optional[float] = None


class LeetCodeSubmission(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str
    title_slug: str = Field(alias="titleSlug")
    timestamp: str
    status_display: str = Field(alias="statusDisplay")
    lang: str

    @property
    def accepted(self) -> bool:
        return self.status_display == "Accepted"


# ─── Derived statistics ──────────────────────────────────────────────────────


class TagCount(BaseModel):
    tag: str
    count: int


class DifficultyBucket(BaseModel):
    name: str
    min_rating: int
    max_rating: int
    count: int


class ProblemStats(BaseModel):
    """Aggregates over a batch of Codeforces submissions."""

    total_submissions: int
    accepted_submissions: int
    unique_solved: int
    accuracy: Optional[float] = Field(None, description="Accepted share of submissions, in percent")
    topics_covered: int
    top_tags: list[TagCount] = Field(default_factory=list)
    difficulty: list[DifficultyBucket] = Field(default_factory=list)


class RatingPoint(BaseModel):
    """One point on the rating-history chart."""

    contest: int = Field(description="1-based contest number")
    rating: int
    contest_name: str
    date: date
    rank: int


class ContestResult(BaseModel):
    """A row of the recent-contest table."""

    contest_id: int
    contest_name: str
    date: date
    rank: int
    old_rating: int
    new_rating: int
    rating_change: int
