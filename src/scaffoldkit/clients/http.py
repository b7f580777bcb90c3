"""Async HTTP client wrapper shared by the provider clients.

Provides a clean interface for HTTP requests with:
- Typed response objects
- Consistent error handling
- Centralized logging with secrets redacted
"""

from __future__ import annotations

import contextlib
import logging
import re
from dataclasses import dataclass
from typing import Any

import httpx

from scaffoldkit.errors import HTTPError, TimeoutError

logger = logging.getLogger(__name__)

_SECRET_PATH_RE = re.compile(r"/(actions/secrets|secrets|databaseUsers/admin)/[^/?]+")


@dataclass(frozen=True)
class HTTPResponse:
    """Structured HTTP response.

    Attributes:
        status_code: HTTP status code (200, 404, etc.)
        body: Response body as string
        json: Parsed JSON body (None if not JSON)
        headers: Response headers as dict
        elapsed_ms: Request duration in milliseconds
        ok: True if status code is 2xx
    """

    status_code: int
    body: str
    json: dict[str, Any] | list[Any] | None
    headers: dict[str, str]
    elapsed_ms: float = 0.0

    @property
    def ok(self) -> bool:
        """True if response has 2xx status code."""
        return 200 <= self.status_code < 300

    def json_dict(self) -> dict[str, Any]:
        """The JSON body as a dict (empty if absent or not an object)."""
        return self.json if isinstance(self.json, dict) else {}


async def request(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    json_body: dict[str, Any] | list[Any] | None = None,
    params: dict[str, Any] | None = None,
    auth: httpx.Auth | None = None,
    timeout: float | None = None,
) -> HTTPResponse:
    """Make an HTTP request with consistent error handling.

    Non-2xx responses are returned, not raised; callers decide what a
    404 or a provider error code means.

    Args:
        client: httpx.AsyncClient instance (from deps)
        method: HTTP method (GET, POST, PUT, PATCH, DELETE)
        url: Target URL (absolute, or relative to the client base_url)
        headers: Optional request headers
        json_body: Optional JSON body for POST/PUT/PATCH
        params: Optional query parameters
        auth: Optional per-request auth (e.g. httpx.DigestAuth)
        timeout: Optional timeout override (uses client default if not set)

    Returns:
        HTTPResponse with status, body, and parsed JSON

    Raises:
        HTTPError: If the request could not be sent
        TimeoutError: If request times out
    """
    log_url = _redact_url(url)
    logger.debug(f"HTTP {method} {log_url}")

    kwargs: dict[str, Any] = {
        "method": method.upper(),
        "url": url,
        "headers": headers,
        "json": json_body,
        "params": params,
    }
    if auth is not None:
        kwargs["auth"] = auth
    if timeout is not None:
        kwargs["timeout"] = timeout

    try:
        response = await client.request(**kwargs)
    except httpx.TimeoutException as e:
        raise TimeoutError(
            f"Request timed out: {method} {log_url}",
            timeout_seconds=timeout or client.timeout.connect,
        ) from e
    except httpx.RequestError as e:
        raise HTTPError(
            f"Request failed: {e}",
            url=log_url,
            method=method,
        ) from e

    # Parse JSON if content-type indicates JSON
    json_data = None
    content_type = response.headers.get("content-type", "")
    if "application/json" in content_type:
        with contextlib.suppress(ValueError):
            json_data = response.json()

    elapsed_ms = 0.0
    with contextlib.suppress(RuntimeError):
        elapsed_ms = round(response.elapsed.total_seconds() * 1000, 2)

    result = HTTPResponse(
        status_code=response.status_code,
        body=response.text,
        json=json_data,
        headers=dict(response.headers),
        elapsed_ms=elapsed_ms,
    )

    logger.debug(f"HTTP {method} {log_url} -> {result.status_code} in {elapsed_ms}ms")
    return result


def raise_for_status(response: HTTPResponse, *, method: str, url: str) -> HTTPResponse:
    """Raise HTTPError for a non-2xx response, otherwise return it."""
    if not response.ok:
        raise HTTPError(
            f"Unexpected response: {response.body[:200]}",
            status_code=response.status_code,
            url=_redact_url(url),
            method=method,
        )
    return response


def _redact_url(url: str) -> str:
    """Redact sensitive parts of URLs for logging.

    Hides secret names and database usernames in paths.
    """
    return _SECRET_PATH_RE.sub(lambda m: f"/{m.group(1)}/***", url)
