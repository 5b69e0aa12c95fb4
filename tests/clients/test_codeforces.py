"""Tests for the Codeforces REST client."""

from __future__ import annotations

import httpx
import pytest

from cp_analytics.core.clients import PlatformAPIError
from cp_analytics.core.clients.codeforces import CodeforcesClient, open_codeforces_client, rank_color
from cp_analytics.core.models import Platform
from tests.support.payloads import cf_rating_payload, cf_submission_payload, cf_user_payload, ts

BASE = "https://codeforces.test/api"


def _client(handler) -> CodeforcesClient:
    return CodeforcesClient(httpx.AsyncClient(transport=httpx.MockTransport(handler)), base_url=BASE)


def _ok(result) -> httpx.Response:
    return httpx.Response(200, json={"status": "OK", "result": result})


async def test_get_user_info():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _ok([cf_user_payload("tourist", rating=3800, rank="legendary grandmaster")])

    user = await _client(handler).get_user_info("tourist")

    assert user.handle == "tourist"
    assert user.rating == 3800
    assert seen[0].url.path == "/api/user.info"
    assert seen[0].url.params["handles"] == "tourist"


async def test_failed_status_raises_with_platform_comment():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"status": "FAILED", "comment": "handles: User with handle nobody not found"})

    with pytest.raises(PlatformAPIError) as excinfo:
        await _client(handler).get_user_info("nobody")

    assert str(excinfo.value) == "handles: User with handle nobody not found"
    assert excinfo.value.platform is Platform.CODEFORCES


async def test_failed_status_without_comment_uses_default_message():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"status": "FAILED"})

    with pytest.raises(PlatformAPIError, match="Failed to fetch user rating"):
        await _client(handler).get_user_rating("alice")


async def test_non_json_error_raises_http_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="<html>Codeforces is temporarily unavailable</html>")

    with pytest.raises(httpx.HTTPStatusError):
        await _client(handler).get_user_info("alice")


async def test_non_json_success_raises_platform_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="maintenance")

    with pytest.raises(PlatformAPIError, match="Failed to fetch user submissions"):
        await _client(handler).get_user_submissions("alice")


async def test_empty_user_result():
    with pytest.raises(PlatformAPIError, match="not found"):
        await _client(lambda request: _ok([])).get_user_info("ghost")


async def test_non_list_user_result():
    with pytest.raises(PlatformAPIError, match="Failed to fetch user info"):
        await _client(lambda request: _ok({"handle": "alice"})).get_user_info("alice")


async def test_network_failure_propagates():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(httpx.ConnectError):
        await _client(handler).get_user_rating("alice")


async def test_get_user_rating():
    history = [
        cf_rating_payload(1, 0, 1200, ts(2023, 1, 1)),
        cf_rating_payload(2, 1200, 1350, ts(2023, 2, 1)),
    ]

    result = await _client(lambda request: _ok(history)).get_user_rating("alice")

    assert [r.new_rating for r in result] == [1200, 1350]
    assert result[1].rating_change == 150


async def test_get_user_submissions_paging_params():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _ok([cf_submission_payload(1, 100, "A", tags=("math",), when=ts(2024, 1, 1))])

    result = await _client(handler).get_user_submissions("alice", 1, 200)

    assert result[0].accepted
    assert result[0].problem.tags == ["math"]
    params = seen[0].url.params
    assert (params["handle"], params["from"], params["count"]) == ("alice", "1", "200")


async def test_get_user_submissions_default_count():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _ok([])

    assert await _client(handler).get_user_submissions("alice") == []
    assert seen[0].url.params["count"] == "50"


async def test_malformed_records_are_skipped():
    records = [cf_rating_payload(1, 0, 1200, ts(2023, 1, 1)), {"contestId": "oops"}]

    result = await _client(lambda request: _ok(records)).get_user_rating("alice")

    assert len(result) == 1


async def test_get_contest_list():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _ok([{
            "id": 1900,
            "name": "Codeforces Round 900",
            "type": "CF",
            "phase": "BEFORE",
            "frozen": False,
            "durationSeconds": 7200,
            "startTimeSeconds": ts(2030, 1, 1),
        }])

    contests = await _client(handler).get_contest_list()

    assert contests[0].duration_seconds == 7200
    assert seen[0].url.params["gym"] == "false"


async def test_open_codeforces_client_uses_configured_base(monkeypatch):
    monkeypatch.setenv("CODEFORCES_API_BASE", "https://mirror.test/api/")

    async with open_codeforces_client() as client:
        assert client._base_url == "https://mirror.test/api"


@pytest.mark.parametrize(
    ("rank", "token"),
    [
        ("Legendary Grandmaster", "cf-grandmaster"),
        ("candidate master", "cf-candidate-master"),
        ("international master", "cf-master"),
        ("pupil", "cf-pupil"),
        ("headquarters", "cf-newbie"),
        (None, "cf-newbie"),
    ],
)
def test_rank_color(rank, token):
    assert rank_color(rank) == token
