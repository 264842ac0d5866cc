"""
Submission transport for wizards and forms.

The state machines depend only on the ``Submitter`` protocol; ``HttpSubmitter``
is the HTTP implementation used by the CLI.
"""

import logging
from typing import Any, Protocol

import httpx

from stepwise.exceptions import SubmissionError

logger = logging.getLogger(__name__)


class Submitter(Protocol):
    """Sends a payload to an endpoint and returns the response data."""

    async def __call__(self, endpoint: str, method: str, payload: dict[str, Any]) -> Any: ...


async def local_submit(endpoint: str, method: str, payload: dict[str, Any]) -> Any:
    """Submitter used when none is configured: echoes the payload."""
    logger.debug(f"No submitter configured; completing locally ({method} {endpoint or '-'})")
    return payload


class HttpSubmitter:
    """Submit payloads as JSON over HTTP with httpx."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the HTTP submitter.

        Args:
            base_url: Prefix for relative endpoints.
            timeout: Request timeout in seconds.
            headers: Extra request headers.
            transport: Custom httpx transport (tests use ``httpx.MockTransport``).
        """
        self.base_url = base_url
        self.timeout = timeout
        self.headers = dict(headers or {})
        self._transport = transport

    def resolve_url(self, endpoint: str) -> str:
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        if not self.base_url:
            raise SubmissionError(
                f"Endpoint '{endpoint}' is relative and no base URL is configured",
                endpoint=endpoint,
            )
        return f"{self.base_url.rstrip('/')}/{endpoint.lstrip('/')}"

    async def __call__(self, endpoint: str, method: str, payload: dict[str, Any]) -> Any:
        url = self.resolve_url(endpoint)
        method = method.upper()
        logger.info(f"Submitting {method} {url}")

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                headers=self.headers,
                transport=self._transport,
            ) as client:
                response = await client.request(method, url, json=payload)
                response.raise_for_status()
        except httpx.TimeoutException as e:
            raise SubmissionError(f"Request timed out after {self.timeout}s", endpoint=url) from e
        except httpx.HTTPStatusError as e:
            raise SubmissionError(
                f"HTTP {e.response.status_code}: {e.response.reason_phrase}",
                endpoint=url,
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise SubmissionError(f"Request failed: {e}", endpoint=url) from e

        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type:
            try:
                return response.json()
            except ValueError:
                return response.text
        return response.text
