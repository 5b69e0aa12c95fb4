"""Tests for statistics derived from platform data."""

from __future__ import annotations

from datetime import date

from cp_analytics.core.models import LeetCodeContestRanking, LeetCodeProfile, LeetCodeSubmission
from cp_analytics.core.scoring import calculate_score
from cp_analytics.core.stats import (
    codeforces_metrics,
    count_upsolves,
    difficulty_distribution,
    format_rating_change,
    leetcode_metrics,
    longest_streak,
    problem_stats,
    rating_chart,
    recent_contests,
    solved_problems,
    tag_distribution,
)
from tests.support.payloads import (
    cf_rating_change,
    cf_submission,
    cf_user,
    lc_submission_payload,
    ts,
)


def _submissions():
    return [
        cf_submission(1, 100, "A", tags=("math", "greedy"), rating=800, when=ts(2024, 1, 1)),
        cf_submission(2, 100, "A", tags=("math", "greedy"), rating=800, when=ts(2024, 1, 2)),
        cf_submission(3, 100, "B", verdict="WRONG_ANSWER", tags=("dp",), rating=1200, when=ts(2024, 1, 2)),
        cf_submission(4, 101, "C", tags=("dp", "math"), rating=1500, when=ts(2024, 1, 3)),
        cf_submission(5, 102, "D", tags=("graphs",), rating=2400, participant_type="PRACTICE", when=ts(2024, 1, 10)),
        cf_submission(6, 103, "A", tags=("strings",), rating=1050, participant_type="PRACTICE", when=ts(2024, 1, 11)),
        cf_submission(7, None, "A", tags=(), when=ts(2024, 1, 12)),
        cf_submission(8, 104, "E", verdict=None, tags=("math",), when=ts(2024, 1, 12)),
    ]


def _history():
    return [
        cf_rating_change(100, 0, 1400, ts(2023, 6, 1), rank=2000),
        cf_rating_change(101, 1400, 1520, ts(2023, 7, 1), rank=900),
        cf_rating_change(102, 1520, 1490, ts(2023, 8, 1), rank=1500),
    ]


class TestSolvedProblems:
    def test_unique_accepted_problems(self):
        problems = solved_problems(_submissions())
        keys = [(p.contest_id, p.index) for p in problems]

        assert keys == [(100, "A"), (101, "C"), (102, "D"), (103, "A"), (None, "A")]

    def test_pending_verdict_is_not_solved(self):
        assert solved_problems([cf_submission(1, 5, "A", verdict=None)]) == []


class TestTagDistribution:
    def test_counts_sorted_by_frequency(self):
        tags = tag_distribution(solved_problems(_submissions()))

        assert [(t.tag, t.count) for t in tags] == [
            ("math", 2),
            ("greedy", 1),
            ("dp", 1),
            ("graphs", 1),
            ("strings", 1),
        ]

    def test_limit(self):
        problems = [cf_submission(i, i, "A", tags=(f"tag{i}",)).problem for i in range(15)]
        assert len(tag_distribution(problems)) == 10
        assert len(tag_distribution(problems, limit=None)) == 15


def test_difficulty_distribution_skips_gaps_and_empty_ranges():
    buckets = difficulty_distribution(solved_problems(_submissions()))

    # 1050 falls between ranges and the unrated problem is skipped
    assert [(b.name, b.count) for b in buckets] == [("800-1000", 1), ("1400-1600", 1), ("2300+", 1)]


def test_problem_stats():
    stats = problem_stats(_submissions())

    assert stats.total_submissions == 8
    assert stats.accepted_submissions == 6
    assert stats.unique_solved == 5
    assert stats.accuracy == 75.0
    assert stats.topics_covered == 5
    assert stats.top_tags[0].tag == "math"


def test_problem_stats_without_submissions():
    stats = problem_stats([])

    assert stats.accuracy is None
    assert stats.unique_solved == 0
    assert stats.difficulty == []


def test_rating_chart_numbers_contests_from_one():
    points = rating_chart(_history())

    assert [p.contest for p in points] == [1, 2, 3]
    assert points[1].rating == 1520
    assert points[1].date == date(2023, 7, 1)
    assert points[2].contest_name == "Codeforces Round 102"


def test_recent_contests_newest_first():
    history = [cf_rating_change(i, 1000 + i, 1000 + 2 * i, ts(2023, 1, 1) + i * 86400) for i in range(1, 15)]
    recent = recent_contests(history)

    assert len(recent) == 10
    assert recent[0].contest_id == 14
    assert recent[-1].contest_id == 5
    assert recent[0].rating_change == 14


def test_recent_contests_zero_limit():
    assert recent_contests(_history(), limit=0) == []


def test_format_rating_change():
    assert format_rating_change(35) == "+35"
    assert format_rating_change(-12) == "-12"
    assert format_rating_change(0) == "0"


class TestLongestStreak:
    def test_empty(self):
        assert longest_streak([]) == 0

    def test_longest_run_wins(self):
        days = [date(2024, 1, d) for d in (1, 2, 3, 5, 6)]
        assert longest_streak(days) == 3

    def test_duplicates_and_order_ignored(self):
        days = [date(2024, 3, 2), date(2024, 2, 29), date(2024, 3, 1), date(2024, 3, 1)]
        assert longest_streak(days) == 3


def test_count_upsolves_only_practice_on_rated_contests():
    # 102D is practice on a rated contest; 103A is practice on an unrated one
    assert count_upsolves(_submissions(), _history()) == 1


def test_codeforces_metrics():
    metrics = codeforces_metrics(cf_user(rating=1750), _history(), _submissions())

    assert metrics.rating == 1750
    assert metrics.max_rating == 3500
    assert metrics.contests_participated == 3
    assert metrics.streak_days == 3
    assert metrics.upsolve_count == 1
    assert metrics.total_problems == 5
    assert metrics.topics_covered == 5
    assert metrics.accuracy == 75.0
    assert metrics.virtual_performance is None


def test_codeforces_metrics_custom_maxima():
    metrics = codeforces_metrics(cf_user(), [], [], maxima={"max_rating": 4000})

    assert metrics.max_rating == 4000
    assert metrics.max_contests is None
    assert calculate_score(metrics).breakdown.rating == 10.94


def test_leetcode_metrics():
    profile = LeetCodeProfile.model_validate({
        "user": {"username": "bob"},
        "stats": {"total_solved": 85, "total_questions": 3000},
    })
    ranking = LeetCodeContestRanking(rating=1835, attended_contests_count=12, top_percentage=8.25)
    submissions = [
        LeetCodeSubmission.model_validate(lc_submission_payload("Two Sum", "Accepted", ts(2024, 4, 1))),
        LeetCodeSubmission.model_validate(lc_submission_payload("Add Two Numbers", "Accepted", ts(2024, 4, 2))),
        LeetCodeSubmission.model_validate(lc_submission_payload("LRU Cache", "Wrong Answer", ts(2024, 4, 3))),
        LeetCodeSubmission.model_validate(lc_submission_payload("Median", "Accepted", ts(2024, 4, 5))),
    ]

    metrics = leetcode_metrics(profile, ranking, submissions)

    assert metrics.rating == 1835
    assert metrics.contests_participated == 12
    assert metrics.streak_days == 2
    assert metrics.total_problems == 85
    assert metrics.accuracy == 75.0
    assert metrics.virtual_performance == 91.75
    assert metrics.upsolve_count is None
    assert metrics.topics_covered is None


def test_leetcode_metrics_without_contests():
    profile = LeetCodeProfile.model_validate({"user": {"username": "bob"}, "stats": {"total_solved": 0}})

    metrics = leetcode_metrics(profile, None, [])

    assert metrics.rating is None
    assert metrics.contests_participated is None
    assert metrics.accuracy is None
    assert metrics.virtual_performance is None
    assert calculate_score(metrics).final_score == 0.0

