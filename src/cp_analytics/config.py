"""Environment-driven settings.

Nothing is cached: each getter reads the environment when called, so tests
and long-running servers see changes without a restart.
"""

from __future__ import annotations

import math
import os

import httpx

DEFAULT_CODEFORCES_API_BASE = "https://codeforces.com/api"
DEFAULT_LEETCODE_GRAPHQL_URL = "https://leetcode.com/graphql"
DEFAULT_HTTP_TIMEOUT = 30.0
DEFAULT_HTTP_CONNECT_TIMEOUT = 10.0
DEFAULT_SUBMISSION_COUNT = 200


def _env_number(name: str, default: float, cast=float):
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = cast(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if not math.isfinite(value):
        raise ValueError(f"{name} must be a finite number, got {raw!r}")
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


def get_codeforces_api_base() -> str:
    return os.environ.get("CODEFORCES_API_BASE", DEFAULT_CODEFORCES_API_BASE).rstrip("/")


def get_leetcode_graphql_url() -> str:
    return os.environ.get("LEETCODE_GRAPHQL_URL", DEFAULT_LEETCODE_GRAPHQL_URL)


def get_http_timeout() -> httpx.Timeout:
    """Build the client timeout from CP_HTTP_TIMEOUT and CP_HTTP_CONNECT_TIMEOUT."""
    return httpx.Timeout(
        _env_number("CP_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT),
        connect=_env_number("CP_HTTP_CONNECT_TIMEOUT", DEFAULT_HTTP_CONNECT_TIMEOUT),
    )


def get_submission_count() -> int:
    """How many recent Codeforces submissions a search loads."""
    return _env_number("CP_SUBMISSION_COUNT", DEFAULT_SUBMISSION_COUNT, cast=int)
