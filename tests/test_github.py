"""Tests for the HTTP lookups against GitHub and the user directory."""

from __future__ import annotations

from typing import Callable

import httpx
import pytest

from shiplog.config import Config
from shiplog.github import (
    find_username_by_email,
    get_pull_request_author_login,
    github_api_base,
)
from shiplog.repo import RepoConfig

Handler = Callable[[httpx.Request], httpx.Response]


def _client(handler: Handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_github_api_base() -> None:
    assert github_api_base(RepoConfig("owner/repo")) == "https://api.github.com"
    assert (
        github_api_base(RepoConfig("owner/repo", "github.example.com", "github"))
        == "https://github.example.com/api/v3"
    )


@pytest.mark.asyncio()
class TestFindUsernameByEmail:
    """User directory lookups never raise."""

    async def test_returns_username(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"user": {"username": "alice"}})

        async with _client(handler) as client:
            assert await find_username_by_email(client, "alice@example.com") == "alice"

        assert seen[0].url.host == "ungh.cc"
        assert seen[0].url.path.startswith("/users/find/")

    async def test_missing_user_is_none(self) -> None:
        async with _client(lambda _request: httpx.Response(200, json={"user": None})) as client:
            assert await find_username_by_email(client, "a@example.com") is None

    async def test_http_error_is_none(self) -> None:
        async with _client(lambda _request: httpx.Response(404)) as client:
            assert await find_username_by_email(client, "a@example.com") is None

    async def test_malformed_json_is_none(self) -> None:
        async with _client(lambda _request: httpx.Response(200, text="<html>")) as client:
            assert await find_username_by_email(client, "a@example.com") is None

    async def test_network_error_is_none(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as client:
            assert await find_username_by_email(client, "a@example.com") is None


@pytest.mark.asyncio()
class TestPullRequestAuthorLogin:
    """Pull request author lookups raise on failure."""

    async def test_returns_login_with_token(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"number": 42, "user": {"login": "octocat"}})

        config = Config(repo=RepoConfig("owner/repo"), github_token="t0ken")
        async with _client(handler) as client:
            login = await get_pull_request_author_login(client, config, 42)

        assert login == "octocat"
        assert seen[0].url.host == "api.github.com"
        assert seen[0].url.path == "/repos/owner/repo/pulls/42"
        assert seen[0].headers["Authorization"] == "Bearer t0ken"

    async def test_missing_login_raises(self) -> None:
        config = Config(repo=RepoConfig("owner/repo"))
        async with _client(lambda _request: httpx.Response(200, json={"user": {}})) as client:
            with pytest.raises(LookupError):
                await get_pull_request_author_login(client, config, 1)

    async def test_http_error_raises(self) -> None:
        config = Config(repo=RepoConfig("owner/repo"))
        async with _client(lambda _request: httpx.Response(500)) as client:
            with pytest.raises(httpx.HTTPStatusError):
                await get_pull_request_author_login(client, config, 1)

    async def test_without_repo_raises(self) -> None:
        async with _client(lambda _request: httpx.Response(200)) as client:
            with pytest.raises(LookupError):
                await get_pull_request_author_login(client, Config(), 1)
