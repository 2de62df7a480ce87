"""Production HTTP client using urllib."""

import json
import logging
import urllib.error
import urllib.request
from typing import Any

from cslaunch.gateway.http.abc import HttpClient, HttpError, HttpResponse

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0


class RealHttpClient(HttpClient):
    """HTTP client for the GitHub REST API.

    The token is sent as a bearer credential and never logged.
    """

    def __init__(
        self,
        *,
        token: str,
        base_url: str,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._token = token
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds

    def request(
        self,
        method: str,
        endpoint: str,
        *,
        data: dict[str, Any] | None = None,
        authenticated: bool = True,
    ) -> HttpResponse:
        url = self._build_url(endpoint)
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if authenticated:
            headers["Authorization"] = f"Bearer {self._token}"

        body: bytes | None = None
        if data is not None:
            body = json.dumps(data).encode("utf-8")
            headers["Content-Type"] = "application/json"

        logger.debug("%s %s", method, url)
        request = urllib.request.Request(url, data=body, headers=headers, method=method)

        try:
            with urllib.request.urlopen(request, timeout=self._timeout_seconds) as response:
                text = response.read().decode("utf-8")
                logger.debug("%s %s -> %d", method, url, response.status)
                return HttpResponse(status_code=response.status, body=text)
        except urllib.error.HTTPError as e:
            text = e.read().decode("utf-8") if e.fp else ""
            logger.debug("%s %s -> %d", method, url, e.code)
            raise HttpError(
                status_code=e.code,
                message=_error_message(text, fallback=str(e.reason)),
                body=text,
            ) from e
        except urllib.error.URLError as e:
            raise HttpError(status_code=None, message=str(e.reason)) from e
        except TimeoutError as e:
            raise HttpError(status_code=None, message="request timed out") from e

    def _build_url(self, endpoint: str) -> str:
        if endpoint.startswith(("https://", "http://")):
            return endpoint
        return f"{self._base_url}/{endpoint.lstrip('/')}"


def _error_message(body: str, *, fallback: str) -> str:
    """Extract the `message` field of a GitHub error body."""
    if not body:
        return fallback
    try:
        data = json.loads(body)
    except json.JSONDecodeError:
        return body.strip() or fallback
    if isinstance(data, dict) and isinstance(data.get("message"), str):
        return data["message"]
    return fallback
