import json
import logging
from collections.abc import Callable
from datetime import date

import httpx
import pytest

from ghcalendar.models import RenderOptions
from ghcalendar.services.calendar_service import ContributionFetchError
from ghcalendar.services.calendar_service import ContributionSourceError
from ghcalendar.services.calendar_service import ContributionsNotFoundError
from ghcalendar.services.calendar_service import NoContributionDataError
from ghcalendar.services.calendar_service import get_user_calendar
from ghcalendar.services.calendar_service import load_contribution_records
from ghcalendar.settings import Settings


TODAY = date(2026, 10, 19)
API_URL = "https://calendar.test/github_calendar"


def mock_client(
    handler: Callable[[httpx.Request], httpx.Response],
) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def endpoint_settings() -> Settings:
    return Settings(contributions_api_url=API_URL, contribution_source="endpoint")


def github_settings(token: str | None = "ghp_test") -> Settings:
    return Settings(
        contribution_source="github",
        github_token=token,
        github_graphql_url="https://graphql.test/graphql",
    )


@pytest.mark.anyio
async def test_load_records_from_endpoint() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(
            200,
            json=[
                {"date": "2026-01-05", "contributionCount": 5},
                {"date": "2026-01-06T00:00:00Z", "contributionCount": 0},
            ],
        )

    async with mock_client(handler) as client:
        records = await load_contribution_records(
            "octocat", endpoint_settings(), TODAY, client
        )

    assert [(item.date, item.contribution_count) for item in records] == [
        (date(2026, 1, 5), 5),
        (date(2026, 1, 6), 0),
    ]
    assert len(requests) == 1
    assert requests[0].method == "GET"
    assert str(requests[0].url) == f"{API_URL}/octocat"


@pytest.mark.anyio
async def test_load_records_skips_malformed_items() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json=[
                "not-an-object",
                {"date": 20260105, "contributionCount": 1},
                {"date": "2026-01-05", "contributionCount": "3"},
                {"date": "2026-01-05", "contributionCount": True},
                {"date": "yesterday", "contributionCount": 2},
                {"date": "2026-01-07", "contributionCount": 4},
            ],
        )

    async with mock_client(handler) as client:
        records = await load_contribution_records(
            "octocat", endpoint_settings(), TODAY, client
        )

    assert [(item.date, item.contribution_count) for item in records] == [
        (date(2026, 1, 7), 4),
    ]


@pytest.mark.anyio
async def test_unknown_user_raises_not_found() -> None:
    async with mock_client(lambda request: httpx.Response(404)) as client:
        with pytest.raises(ContributionsNotFoundError):
            await load_contribution_records("ghost", endpoint_settings(), TODAY, client)


@pytest.mark.anyio
async def test_server_error_raises_fetch_error(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.ERROR)

    async with mock_client(lambda request: httpx.Response(500)) as client:
        with pytest.raises(ContributionFetchError):
            await load_contribution_records("octocat", endpoint_settings(), TODAY, client)

    assert "HTTP 500" in caplog.text


@pytest.mark.anyio
async def test_transport_error_raises_fetch_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with mock_client(handler) as client:
        with pytest.raises(ContributionFetchError):
            await load_contribution_records("octocat", endpoint_settings(), TODAY, client)


@pytest.mark.anyio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, content=b"<html>oops</html>"),
        httpx.Response(200, json={"date": "2026-01-05", "contributionCount": 1}),
        httpx.Response(200, json=[{"date": "2026-01-05", "contributionCount": -2}]),
    ],
)
async def test_malformed_payload_raises_fetch_error(response: httpx.Response) -> None:
    async with mock_client(lambda request: response) as client:
        with pytest.raises(ContributionFetchError):
            await load_contribution_records("octocat", endpoint_settings(), TODAY, client)


@pytest.mark.anyio
async def test_empty_dataset_raises_no_data(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.ERROR)

    async with mock_client(lambda request: httpx.Response(200, json=[])) as client:
        with pytest.raises(NoContributionDataError):
            await load_contribution_records("octocat", endpoint_settings(), TODAY, client)

    assert "No contribution data available" in caplog.text


def test_loader_errors_share_a_base_class() -> None:
    for error in (
        ContributionFetchError,
        ContributionsNotFoundError,
        NoContributionDataError,
    ):
        assert issubclass(error, ContributionSourceError)


@pytest.mark.anyio
async def test_load_records_from_github_graphql() -> None:
    captured: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["authorization"] = request.headers["Authorization"]
        captured["body"] = request.read()
        return httpx.Response(
            200,
            json={
                "data": {
                    "user": {
                        "contributionsCollection": {
                            "contributionCalendar": {
                                "weeks": [
                                    {
                                        "contributionDays": [
                                            {"date": "2026-01-04", "contributionCount": 0},
                                            {"date": "2026-01-05", "contributionCount": 6},
                                        ]
                                    },
                                    {"contributionDays": "broken"},
                                ]
                            }
                        }
                    }
                }
            },
        )

    async with mock_client(handler) as client:
        records = await load_contribution_records(
            "octocat", github_settings(), TODAY, client
        )

    assert [(item.date, item.contribution_count) for item in records] == [
        (date(2026, 1, 4), 0),
        (date(2026, 1, 5), 6),
    ]
    assert captured["authorization"] == "Bearer ghp_test"
    variables = json.loads(captured["body"])["variables"]
    assert variables == {
        "login": "octocat",
        "from": "2025-10-19T00:00:00Z",
        "to": "2026-10-19T23:59:59Z",
    }


@pytest.mark.anyio
async def test_github_source_requires_token() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected without a token")

    async with mock_client(handler) as client:
        with pytest.raises(ContributionFetchError):
            await load_contribution_records(
                "octocat", github_settings(token=None), TODAY, client
            )


@pytest.mark.anyio
@pytest.mark.parametrize(
    "payload",
    [
        {"data": {"user": None}},
        {"data": {"user": None}, "errors": [{"type": "NOT_FOUND", "message": "no user"}]},
    ],
)
async def test_github_missing_user_raises_not_found(payload: dict[str, object]) -> None:
    async with mock_client(lambda request: httpx.Response(200, json=payload)) as client:
        with pytest.raises(ContributionsNotFoundError):
            await load_contribution_records("ghost", github_settings(), TODAY, client)


@pytest.mark.anyio
async def test_github_errors_raise_fetch_error() -> None:
    payload = {"errors": [{"type": "RATE_LIMITED", "message": "slow down"}]}

    async with mock_client(lambda request: httpx.Response(200, json=payload)) as client:
        with pytest.raises(ContributionFetchError):
            await load_contribution_records("octocat", github_settings(), TODAY, client)


@pytest.mark.anyio
async def test_get_user_calendar_builds_full_lattice() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, json=[{"date": "2026-01-05", "contributionCount": 5}]
        )

    async with mock_client(handler) as client:
        calendar = await get_user_calendar(
            username="octocat",
            options=RenderOptions(),
            today=TODAY,
            settings=endpoint_settings(),
            client=client,
        )

    assert len(calendar.cells) == 371
    assert len(calendar.months) == 13
    assert calendar.total == 5
    assert calendar.today == TODAY
