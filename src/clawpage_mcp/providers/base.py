"""Base provider interface for calling the ClawPage API."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from requests.structures import CaseInsensitiveDict


@dataclass
class ApiResponse:
    """Response from a ClawPage API call."""

    status_code: int
    text: str
    headers: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # HTTP header names are case-insensitive
        self.headers = CaseInsensitiveDict(self.headers)

    def json(self) -> Any:
        """Parse the body as JSON.

        Raises:
            ValueError: If the body is not valid JSON
        """
        return json.loads(self.text)


class ApiProvider(ABC):
    """Abstract base class for API providers."""

    @abstractmethod
    async def request(
        self,
        method: str,
        path: str,
        headers: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> ApiResponse:
        """Perform a single request against the API.

        Args:
            method: HTTP method
            path: Path relative to the API base (e.g. "/extract")
            headers: Extra request headers
            json_body: Body to send as JSON

        Returns:
            ApiResponse for any HTTP status

        Raises:
            Exception: If the request could not complete
        """
        pass

    @property
    @abstractmethod
    def base_url(self) -> str:
        """Base URL that request paths are resolved against."""
        pass
