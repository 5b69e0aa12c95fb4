"""Async clients for the Codeforces REST API and the LeetCode GraphQL endpoint."""

from __future__ import annotations

from ..models import Platform


class PlatformAPIError(Exception):
    """A platform rejected a request or returned an unusable response."""

    def __init__(self, platform: Platform, message: str):
        super().__init__(message)
        self.platform = platform
        self.message = message

    def __str__(self) -> str:
        return self.message
