"""HTTP client wrapper shared by every resource service.

One ``ApiClient`` is bound to one backend base URL.  It sends JSON, decodes
JSON and turns every failure into an ``ApiError`` so that views only ever
have to catch one exception type.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """A backend call failed.

    ``message`` is the backend's own message when it sent one, otherwise
    ``None`` so callers can pick their own fallback text.
    """

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None, payload: Any = None):
        super().__init__(message or f"API request failed (status {status_code})")
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def user_message(self, fallback: str) -> str:
        return self.message or fallback


class NotFoundError(ApiError):
    pass


class TransportError(ApiError):
    """Network level failure: nothing came back from the backend."""


class ResponseShapeError(ApiError):
    """The backend answered 2xx but not with the agreed envelope."""


def _error_message(payload: Any) -> Optional[str]:
    if isinstance(payload, dict):
        message = payload.get("message") or payload.get("error")
        if isinstance(message, str) and message.strip():
            return message
    return None


class ApiClient:
    def __init__(self, base_url: str, session: Optional[requests.Session] = None, timeout: Optional[float] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(self, method: str, path: str, params: Optional[Dict[str, Any]] = None, json: Any = None) -> Any:
        url = self.url(path)
        try:
            response = self.session.request(method, url, params=params, json=json, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise TransportError(None) from e

        logger.debug("%s %s -> %s", method, url, response.status_code)

        try:
            payload = response.json() if response.content else None
        except ValueError:
            payload = None

        if response.status_code == 404:
            raise NotFoundError(_error_message(payload), 404, payload)
        if not response.ok:
            logger.warning("%s %s returned %s", method, url, response.status_code)
            raise ApiError(_error_message(payload), response.status_code, payload)
        return payload

    def get(self, path, params=None):
        return self.request("GET", path, params=params)

    def post(self, path, json=None):
        return self.request("POST", path, json=json)

    def put(self, path, json=None):
        return self.request("PUT", path, json=json)

    def delete(self, path):
        return self.request("DELETE", path)
