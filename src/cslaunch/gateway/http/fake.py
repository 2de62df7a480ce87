"""Fake HttpClient for testing."""

import json
from dataclasses import dataclass
from typing import Any

from cslaunch.gateway.http.abc import HttpClient, HttpError, HttpResponse


@dataclass(frozen=True)
class HttpRequest:
    """Record of a request for test assertions."""

    method: str
    endpoint: str
    data: dict[str, Any] | None
    authenticated: bool


class FakeHttpClient(HttpClient):
    """In-memory HTTP client returning canned responses.

    Responses are keyed by "METHOD endpoint". A value may be an HttpResponse,
    any JSON-serialisable object (returned with status 200), or an HttpError
    instance to raise. Unconfigured endpoints answer 404.
    """

    def __init__(self, *, responses: dict[str, Any] | None = None) -> None:
        self._responses = responses or {}
        self._requests: list[HttpRequest] = []

    def request(
        self,
        method: str,
        endpoint: str,
        *,
        data: dict[str, Any] | None = None,
        authenticated: bool = True,
    ) -> HttpResponse:
        self._requests.append(
            HttpRequest(method=method, endpoint=endpoint, data=data, authenticated=authenticated)
        )
        key = f"{method} {endpoint}"
        if key not in self._responses:
            raise HttpError(status_code=404, message="Not Found")

        response = self._responses[key]
        if isinstance(response, HttpError):
            raise response
        if isinstance(response, HttpResponse):
            if response.status_code >= 400:
                raise HttpError(
                    status_code=response.status_code, message="error", body=response.body
                )
            return response
        if isinstance(response, str):
            return HttpResponse(status_code=200, body=response)
        return HttpResponse(status_code=200, body=json.dumps(response))

    @property
    def requests(self) -> list[HttpRequest]:
        """Read-only access to issued requests for test assertions."""
        return self._requests.copy()
