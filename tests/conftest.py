"""Shared fixtures.

Tests never touch the network: platform clients get an httpx.MockTransport
and the dashboard gets in-memory fakes.
"""

from __future__ import annotations

import socket

import pytest

from cp_analytics.core.models import UserMetrics


def _blocked_socket_connect(self, *args, **kwargs):
    raise RuntimeError(f"Tests must not make network connections. Attempted connection to: {args}")


@pytest.fixture(autouse=True)
def block_network_access(monkeypatch):
    monkeypatch.setattr(socket.socket, "connect", _blocked_socket_connect)
    yield


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "CODEFORCES_API_BASE",
        "LEETCODE_GRAPHQL_URL",
        "CP_HTTP_TIMEOUT",
        "CP_HTTP_CONNECT_TIMEOUT",
        "CP_SUBMISSION_COUNT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def example_metrics() -> UserMetrics:
    """The documented reference profile."""
    return UserMetrics(
        rating=1750,
        max_rating=3500,
        contests_participated=28,
        max_contests=100,
        streak_days=45,
        max_streak=100,
        upsolve_count=60,
        max_upsolve=200,
        total_problems=520,
        max_problems=1500,
        topics_covered=15,
        max_topics=40,
        accuracy=87.5,
        virtual_performance=70,
    )
