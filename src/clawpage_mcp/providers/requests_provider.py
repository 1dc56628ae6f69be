"""API provider using the Python requests library."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import requests

from clawpage_mcp.providers.base import ApiProvider, ApiResponse

# Configure logging
logger = logging.getLogger(__name__)


class RequestsProvider(ApiProvider):
    """ClawPage API client built on a shared requests session.

    Each call is a single attempt. Failures to connect propagate as
    ``requests.RequestException`` so the caller can report them.
    """

    def __init__(
        self,
        base_url: str = "https://api.clawpage.xyz",
        timeout: float | None = None,
        user_agent: str = "clawpage-mcp",
    ) -> None:
        """Initialize the requests provider.

        Args:
            base_url: ClawPage API base URL
            timeout: Request timeout in seconds (default: None, wait indefinitely)
            user_agent: User agent string
        """
        self._base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.user_agent = user_agent

        # Initialize standard requests session
        self.session = requests.Session()

        logger.info(f"RequestsProvider initialized for {self._base_url}")

    @property
    def base_url(self) -> str:
        return self._base_url

    async def request(
        self,
        method: str,
        path: str,
        headers: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> ApiResponse:
        """Send a request to the ClawPage API.

        Args:
            method: HTTP method
            path: Path relative to the API base
            headers: Extra request headers
            json_body: Body to send as JSON

        Returns:
            ApiResponse with status, headers and raw body text

        Raises:
            requests.RequestException: If the request fails to complete
        """
        url = f"{self._base_url}{path}"
        request_headers = {"User-Agent": self.user_agent}
        request_headers.update(headers or {})

        logger.debug(f"{method} {url}")

        # Run requests in thread pool to avoid blocking
        loop = asyncio.get_event_loop()
        response = await loop.run_in_executor(
            None,
            lambda: self.session.request(
                method,
                url,
                headers=request_headers,
                json=json_body,
                timeout=self.timeout,
            ),
        )

        logger.debug(f"{method} {url} -> {response.status_code}")

        return ApiResponse(
            status_code=response.status_code,
            text=response.text,
            headers=response.headers,
        )
