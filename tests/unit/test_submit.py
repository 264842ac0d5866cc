"""Tests for submission transports."""

import json

import httpx
import pytest

from stepwise.exceptions import SubmissionError
from stepwise.submit import HttpSubmitter, local_submit


def transport_returning(status_code: int, **kwargs) -> tuple[httpx.MockTransport, list[httpx.Request]]:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status_code, **kwargs)

    return httpx.MockTransport(handler), requests


class TestLocalSubmit:
    """Tests for local_submit."""

    @pytest.mark.asyncio
    async def test_echoes_payload(self):
        """Test the payload is returned unchanged."""
        assert await local_submit("/users", "POST", {"a": 1}) == {"a": 1}


class TestHttpSubmitter:
    """Tests for HttpSubmitter."""

    def test_resolve_url(self):
        """Test relative endpoints join the base URL."""
        submitter = HttpSubmitter(base_url="https://api.example.com/v1/")

        assert submitter.resolve_url("/projects") == "https://api.example.com/v1/projects"
        assert submitter.resolve_url("https://other.example.com/x") == "https://other.example.com/x"

    def test_relative_endpoint_without_base_url(self):
        """Test relative endpoints need a base URL."""
        with pytest.raises(SubmissionError, match="no base URL"):
            HttpSubmitter().resolve_url("/projects")

    @pytest.mark.asyncio
    async def test_posts_json(self):
        """Test the payload is sent as JSON and the JSON reply returned."""
        transport, requests = transport_returning(201, json={"id": 7})
        submitter = HttpSubmitter(
            base_url="https://api.example.com",
            headers={"Authorization": "Bearer token"},
            transport=transport,
        )

        result = await submitter("/projects", "post", {"projectName": "Atlas"})

        assert result == {"id": 7}
        request = requests[0]
        assert request.method == "POST"
        assert str(request.url) == "https://api.example.com/projects"
        assert request.headers["Authorization"] == "Bearer token"
        assert json.loads(request.content) == {"projectName": "Atlas"}

    @pytest.mark.asyncio
    async def test_text_reply(self):
        """Test non-JSON replies are returned as text."""
        transport, _ = transport_returning(200, text="ok")
        submitter = HttpSubmitter(base_url="https://api.example.com", transport=transport)

        assert await submitter("/ping", "PUT", {}) == "ok"

    @pytest.mark.asyncio
    async def test_status_error(self):
        """Test error statuses raise with the status code."""
        transport, _ = transport_returning(422, json={"detail": "invalid"})
        submitter = HttpSubmitter(base_url="https://api.example.com", transport=transport)

        with pytest.raises(SubmissionError) as exc_info:
            await submitter("/users", "POST", {})

        assert exc_info.value.status_code == 422
        assert exc_info.value.endpoint == "https://api.example.com/users"

    @pytest.mark.asyncio
    async def test_transport_error(self):
        """Test connection failures raise SubmissionError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        submitter = HttpSubmitter(base_url="https://api.example.com", transport=httpx.MockTransport(handler))

        with pytest.raises(SubmissionError, match="Request failed") as exc_info:
            await submitter("/users", "POST", {})
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_timeout(self):
        """Test timeouts report the configured timeout."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("too slow", request=request)

        submitter = HttpSubmitter(
            base_url="https://api.example.com",
            timeout=2.5,
            transport=httpx.MockTransport(handler),
        )

        with pytest.raises(SubmissionError, match="timed out after 2.5s"):
            await submitter("/users", "POST", {})
