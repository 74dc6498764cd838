# Overview: HTTP client for the UDH REST API; bearer auth and error translation.

"""
Thin httpx wrapper used by the dashboard store.

Every non-2xx response is raised as ApiError carrying the server message.
There is no retry and no timeout policy beyond httpx's defaults.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Non-2xx response from the backend."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"HTTP {status_code}: {message}")
        self.status_code = status_code
        self.message = message


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return response.text


class ApiClient:
    """
    HTTP client with authentication and JSON convenience methods.

    `transport` lets tests route requests through httpx.MockTransport.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)

    def set_token(self, token: Optional[str]) -> None:
        self.token = token

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def request(self, method: str, path: str, **kwargs) -> httpx.Response:
        response = self.client.request(method, path, headers=self._headers(), **kwargs)
        if response.is_success:
            return response
        message = _error_message(response)
        logger.warning("%s %s failed with %s: %s", method, path, response.status_code, message)
        raise ApiError(response.status_code, message)

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", path, params=params).json()

    def post(self, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("POST", path, json=json or {}).json()

    def put(self, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("PUT", path, json=json or {}).json()

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path).json()

    def download(self, path: str, params: Optional[Dict[str, Any]] = None) -> bytes:
        """Raw body for file endpoints (reports)."""
        return self.request("GET", path, params=params).content

    def close(self) -> None:
        self.client.close()
