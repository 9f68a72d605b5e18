"""Minimal HTTP adapter for the Vultr v1 API."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

import requests
from requests import Response, Session
from requests import exceptions as requests_exceptions

from .exceptions import ApiException

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.vultr.com/v1"

# Descriptions documented by Vultr for v1 error responses without a body.
_STATUS_MESSAGES = {
    400: "Invalid API location. Check the URL that you are using.",
    403: "Invalid or missing API key. Check that your API key is present and matches your assigned key.",
    405: "Invalid HTTP method. Check that the method (POST|GET) matches what the documentation indicates.",
    412: "Request failed. Check the response body for a more detailed description.",
    500: "Internal server error. Try again at a later time.",
    503: "Rate limit hit. API requests are limited to an average of 2/s.",
}


class Adapter:
    """Issue authenticated requests and decode JSON bodies.

    ``get`` sends its parameters as a query string, ``post`` sends them
    form-encoded. Every response with a status of 400 or above is raised as
    :class:`ApiException`.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: int = 30,
        session: Session | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "API-Key": self.api_key,
                "Accept": "application/json",
            }
        )

    def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """GET ``path`` with ``params`` as the query string; return the JSON body."""

        response = self._request("GET", path, params=dict(params or {}))
        return self._decode(response)

    def post(
        self,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        want_status_code: bool = False,
    ) -> Any:
        """POST ``params`` as form data.

        Returns the HTTP status code when ``want_status_code`` is set, the
        decoded JSON body otherwise.
        """

        response = self._request("POST", path, data=dict(params or {}))
        if want_status_code:
            return response.status_code
        return self._decode(response)

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _request(self, method: str, path: str, **kwargs: Any) -> Response:
        url = self._url(path)
        logger.debug("Sending request to Vultr", extra={"method": method, "path": path})
        try:
            response = self._session.request(method, url, timeout=self.timeout, **kwargs)
        except requests_exceptions.RequestException as exc:
            logger.error("HTTP request to Vultr failed", exc_info=exc)
            raise ApiException("Failed to communicate with Vultr API") from exc

        if response.status_code >= 400:
            raise ApiException(self._error_message(response), status_code=response.status_code)
        return response

    def _error_message(self, response: Response) -> str:
        body = (response.text or "").strip()
        if body:
            return body
        return _STATUS_MESSAGES.get(
            response.status_code,
            f"Unexpected HTTP status {response.status_code} from Vultr API",
        )

    def _decode(self, response: Response) -> Any:
        if not response.content:
            return {}

        try:
            return response.json()
        except ValueError as exc:
            logger.error("Failed to parse JSON response", exc_info=exc)
            raise ApiException(
                "Invalid JSON received from Vultr API",
                status_code=response.status_code,
            ) from exc

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"Adapter(base_url={self.base_url!r})"
