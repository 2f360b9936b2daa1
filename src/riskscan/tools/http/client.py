"""Certificate-validating async HTTP client used by every HTTP probe."""

import time
from dataclasses import dataclass
from typing import Any

import httpx

from riskscan.config import DEFAULT_USER_AGENT


@dataclass
class HTTPResponse:
    """Represents an HTTP response."""

    url: str
    status_code: int
    headers: dict[str, str]
    body: str
    response_time: float
    content_type: str = ""
    server: str = ""


class HTTPClient:
    """Async HTTP client for probe traffic.

    Certificate verification is always on. The only handshake that skips
    verification lives in :mod:`riskscan.tools.tls` and never goes through
    this client.
    """

    verify_ssl = True

    def __init__(
        self,
        timeout: float = 10.0,
        max_redirects: int = 5,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        self.timeout = timeout
        self.max_redirects = max_redirects
        self.user_agent = user_agent
        self.client: httpx.AsyncClient | None = None

    async def __aenter__(self):
        self.client = httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=self.max_redirects > 0,
            max_redirects=self.max_redirects,
            verify=self.verify_ssl,
            headers={"User-Agent": self.user_agent},
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.client:
            await self.client.aclose()

    async def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
    ) -> HTTPResponse:
        """Make an HTTP request. Any status code is a successful fetch."""
        if not self.client:
            raise RuntimeError("Client not initialized. Use async context manager.")

        start = time.perf_counter()

        response = await self.client.request(
            method=method,
            url=url,
            headers=headers,
            params=params,
        )

        elapsed = time.perf_counter() - start

        return HTTPResponse(
            url=str(response.url),
            status_code=response.status_code,
            headers=dict(response.headers),
            body=response.text,
            response_time=elapsed,
            content_type=response.headers.get("content-type", ""),
            server=response.headers.get("server", ""),
        )

    async def get(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
    ) -> HTTPResponse:
        """Make a GET request."""
        return await self.request("GET", url, headers=headers, params=params)
