"""Tests for the async HTTP client wrapper."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from scaffoldkit.clients.http import HTTPResponse, _redact_url, raise_for_status, request
from scaffoldkit.errors import HTTPError, TimeoutError


class TestHTTPResponse:
    """Tests for HTTPResponse dataclass."""

    def test_ok_true_for_201(self):
        response = HTTPResponse(status_code=201, body='{"id": 123}', json={"id": 123}, headers={})
        assert response.ok is True

    def test_ok_false_for_404(self):
        response = HTTPResponse(status_code=404, body="Not found", json=None, headers={})
        assert response.ok is False

    def test_json_dict_ignores_lists(self):
        response = HTTPResponse(status_code=200, body="[1]", json=[1], headers={})
        assert response.json_dict() == {}


class TestRequest:
    """Tests for request function."""

    def test_successful_post_request(self, mock_http):
        seen: list[httpx.Request] = []

        def handler(req: httpx.Request) -> httpx.Response:
            seen.append(req)
            return httpx.Response(201, json={"id": "abc"})

        async def scenario() -> HTTPResponse:
            async with mock_http(handler, base_url="https://api.example.com") as client:
                return await request(
                    client,
                    "post",
                    "/items",
                    headers={"X-Test": "1"},
                    json_body={"name": "demo"},
                    params={"teamId": "t1"},
                )

        response = asyncio.run(scenario())

        assert response.status_code == 201
        assert response.json == {"id": "abc"}
        assert seen[0].method == "POST"
        assert seen[0].url.path == "/items"
        assert seen[0].url.params["teamId"] == "t1"
        assert seen[0].headers["X-Test"] == "1"
        assert json.loads(seen[0].content) == {"name": "demo"}

    def test_non_json_body_has_no_json(self, mock_http):
        def handler(req: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="plain", headers={"content-type": "text/plain"})

        async def scenario() -> HTTPResponse:
            async with mock_http(handler) as client:
                return await request(client, "GET", "https://example.com/")

        response = asyncio.run(scenario())

        assert response.body == "plain"
        assert response.json is None

    def test_error_status_is_returned_not_raised(self, mock_http):
        def handler(req: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"message": "Not Found"})

        async def scenario() -> HTTPResponse:
            async with mock_http(handler) as client:
                return await request(client, "GET", "https://example.com/missing")

        response = asyncio.run(scenario())

        assert response.status_code == 404
        assert response.ok is False

    def test_timeout_raises_timeout_error(self, mock_http):
        def handler(req: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=req)

        async def scenario() -> None:
            async with mock_http(handler) as client:
                await request(client, "GET", "https://example.com/slow", timeout=2.5)

        with pytest.raises(TimeoutError) as exc_info:
            asyncio.run(scenario())

        assert exc_info.value.timeout_seconds == 2.5

    def test_connection_error_raises_http_error(self, mock_http):
        def handler(req: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=req)

        async def scenario() -> None:
            async with mock_http(handler) as client:
                await request(client, "PUT", "https://example.com/repos/o/r/actions/secrets/NPM")

        with pytest.raises(HTTPError) as exc_info:
            asyncio.run(scenario())

        assert exc_info.value.method == "PUT"
        assert exc_info.value.url == "https://example.com/repos/o/r/actions/secrets/***"


class TestRaiseForStatus:
    """Tests for raise_for_status."""

    def test_returns_ok_response(self):
        response = HTTPResponse(status_code=200, body="{}", json={}, headers={})
        assert raise_for_status(response, method="GET", url="/x") is response

    def test_raises_with_status(self):
        response = HTTPResponse(status_code=422, body="Validation Failed", json=None, headers={})

        with pytest.raises(HTTPError) as exc_info:
            raise_for_status(response, method="POST", url="/orgs/o/repos")

        assert exc_info.value.status_code == 422
        assert "Validation Failed" in str(exc_info.value)


class TestRedactUrl:
    """Tests for URL redaction."""

    def test_secret_names_hidden(self):
        assert (
            _redact_url("/repos/org/demo/actions/secrets/NPM_TOKEN")
            == "/repos/org/demo/actions/secrets/***"
        )

    def test_database_user_hidden(self):
        assert (
            _redact_url("/groups/p1/databaseUsers/admin/ms-web?x=1")
            == "/groups/p1/databaseUsers/admin/***?x=1"
        )

    def test_vercel_secret_hidden(self):
        assert _redact_url("/v3/now/secrets/npm-token") == "/v3/now/secrets/***"

    def test_plain_url_unchanged(self):
        assert _redact_url("/v8/projects/ms-web-ui-stage") == "/v8/projects/ms-web-ui-stage"
