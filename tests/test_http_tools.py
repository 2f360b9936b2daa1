"""Tests for HTTP tools module."""

import pytest
import respx
from httpx import Response

from riskscan.config import DEFAULT_USER_AGENT
from riskscan.tools.http import HTTPClient, lookup_headers


class TestHTTPClient:
    """Test HTTPClient functionality."""

    @respx.mock
    async def test_get_request(self):
        """Test basic GET request."""
        respx.get("https://example.com").mock(return_value=Response(200, text="Hello World"))

        async with HTTPClient() as client:
            response = await client.get("https://example.com")

        assert response.status_code == 200
        assert response.body == "Hello World"

    @respx.mock
    async def test_error_status_is_a_response(self):
        respx.get("https://example.com").mock(return_value=Response(503, text="down"))

        async with HTTPClient() as client:
            response = await client.get("https://example.com")

        assert response.status_code == 503

    @respx.mock
    async def test_query_params_and_user_agent(self):
        route = respx.get(host="example.com").mock(return_value=Response(200))

        async with HTTPClient(user_agent="probe/1.0") as client:
            await client.get("https://example.com", params={"q": "<script>"})

        request = route.calls.last.request
        assert request.url.params["q"] == "<script>"
        assert request.headers["user-agent"] == "probe/1.0"

    @respx.mock
    async def test_redirects_followed_up_to_limit(self):
        respx.get("https://example.com/").mock(
            return_value=Response(302, headers={"Location": "https://example.com/home"})
        )
        respx.get("https://example.com/home").mock(
            return_value=Response(200, text="home", headers={"Server": "nginx"})
        )

        async with HTTPClient(max_redirects=5) as client:
            response = await client.get("https://example.com/")

        assert response.url == "https://example.com/home"
        assert response.server == "nginx"

    async def test_requires_context_manager(self):
        with pytest.raises(RuntimeError):
            await HTTPClient().get("https://example.com")

    def test_default_user_agent(self):
        assert HTTPClient().user_agent == DEFAULT_USER_AGENT


def test_lookup_headers_case_insensitive():
    found = lookup_headers({"x-frame-options": "DENY"}, ["X-Frame-Options", "Referrer-Policy"])
    assert found == {"X-Frame-Options": "DENY", "Referrer-Policy": None}
