"""Abstract HTTP client for direct API calls."""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


class HttpError(Exception):
    """Error response (or no response) from an HTTP endpoint.

    status_code is None when the request never produced a response.
    """

    def __init__(self, *, status_code: int | None, message: str, body: str = "") -> None:
        if status_code is None:
            super().__init__(f"HTTP request failed: {message}")
        else:
            super().__init__(f"HTTP {status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.body = body


@dataclass(frozen=True)
class HttpResponse:
    """A completed HTTP exchange."""

    status_code: int
    body: str

    def json(self) -> Any:
        if not self.body:
            return None
        return json.loads(self.body)


class HttpClient(ABC):
    """Abstract HTTP client.

    Endpoints are paths relative to the client's base URL, or absolute URLs.
    Responses with status >= 400 raise HttpError. Implementations do not retry.
    """

    @abstractmethod
    def request(
        self,
        method: str,
        endpoint: str,
        *,
        data: dict[str, Any] | None = None,
        authenticated: bool = True,
    ) -> HttpResponse:
        """Perform a request.

        Args:
            method: HTTP method
            endpoint: Path relative to the base URL, or an absolute URL
            data: JSON body, if any
            authenticated: Whether to send the API token

        Returns:
            The response for any status below 400

        Raises:
            HttpError: On error status or connection failure
        """
        ...
