"""Client for the MEGA JSON API, with retry handling for busy servers."""

from __future__ import annotations

import enum
import json
import secrets
import time
from typing import Any
from urllib.parse import urlparse

import requests

from .errors import (
    ApiError,
    HttpError,
    InvalidResponseError,
    JsonError,
    RequestError,
    ServerBusyError,
)

API_URL = "https://g.api.mega.co.nz/cs"

_REQUEST_PAUSE = 0.02
_INITIAL_DELAY_MS = 250
_MAX_DELAY_MS = 256_000
_ID_MASK = 0xFFFFFFFF


class ApiErrorCode(enum.IntEnum):
    """Numeric error codes returned by the API."""

    INTERNAL = -1
    ARGS = -2
    AGAIN = -3
    RATE_LIMIT = -4
    FAILED = -5
    TOO_MANY_IPS = -6
    ACCESS_DENIED = -7
    EXIST = -8
    NOT_EXIST = -9
    CIRCULAR = -10
    ACCESS_VIOLATION = -11
    APP_KEY = -12
    EXPIRED = -13
    NOT_CONFIRMED = -14
    BLOCKED = -15
    OVER_QUOTA = -16
    TEMP_UNAVAIL = -17
    TOO_MANY_CONNECTIONS = -18
    UNKNOWN = -9999

    @classmethod
    def from_code(cls, code: int) -> ApiErrorCode:
        """Map a raw code to its member; unrecognised codes give UNKNOWN."""
        try:
            return cls(code)
        except ValueError:
            return cls.UNKNOWN

    def description(self) -> str:
        """Human-readable description of the error."""
        return _DESCRIPTIONS[self]


_DESCRIPTIONS = {
    ApiErrorCode.INTERNAL: "Internal error",
    ApiErrorCode.ARGS: "Invalid arguments",
    ApiErrorCode.AGAIN: "Try again",
    ApiErrorCode.RATE_LIMIT: "Rate limit exceeded",
    ApiErrorCode.FAILED: "Upload failed",
    ApiErrorCode.TOO_MANY_IPS: "Too many IPs",
    ApiErrorCode.ACCESS_DENIED: "Access denied",
    ApiErrorCode.EXIST: "Resource already exists",
    ApiErrorCode.NOT_EXIST: "Resource does not exist",
    ApiErrorCode.CIRCULAR: "Circular linking",
    ApiErrorCode.ACCESS_VIOLATION: "Access violation",
    ApiErrorCode.APP_KEY: "Application key required",
    ApiErrorCode.EXPIRED: "Session expired",
    ApiErrorCode.NOT_CONFIRMED: "Not confirmed",
    ApiErrorCode.BLOCKED: "Resource blocked",
    ApiErrorCode.OVER_QUOTA: "Over quota",
    ApiErrorCode.TEMP_UNAVAIL: "Temporarily unavailable",
    ApiErrorCode.TOO_MANY_CONNECTIONS: "Too many connections",
    ApiErrorCode.UNKNOWN: "Unknown error",
}


def _error_code_of(response: Any) -> int | None:
    if isinstance(response, int) and not isinstance(response, bool):
        return response
    return None


class ApiClient:
    """Sends commands to the API, optionally through a proxy.

    ``session_id`` may be set to authenticate requests, or set to None to
    send them anonymously.
    """

    def __init__(self, proxy: str | None = None) -> None:
        self.session_id: str | None = None
        self.proxy = proxy
        self._request_id = secrets.randbits(32)
        self._http = requests.Session()
        if proxy is not None:
            parsed = urlparse(proxy)
            if not parsed.scheme or not parsed.netloc:
                self._http.close()
                raise RequestError(f"invalid proxy URL: {proxy!r}")
            self._http.proxies = {"http": proxy, "https": proxy}

    def __enter__(self) -> ApiClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Release the underlying HTTP connections."""
        self._http.close()

    def _next_url(self) -> str:
        self._request_id = (self._request_id + 1) & _ID_MASK
        if self.session_id is not None:
            return f"{API_URL}?id={self._request_id}&sid={self.session_id}"
        return f"{API_URL}?id={self._request_id}"

    def _post(self, url: str, body: str) -> str:
        try:
            response = self._http.post(
                url, data=body.encode("utf-8"),
                headers={"Content-Type": "application/json"},
            )
        except requests.RequestException as exc:
            raise RequestError(exc) from exc
        if not response.ok:
            raise HttpError(response.status_code)
        return response.text

    def _send(self, commands: list[Any]) -> Any:
        """Post a command array, retrying with backoff while the server says AGAIN."""
        url = self._next_url()
        try:
            body = json.dumps(commands)
        except (TypeError, ValueError) as exc:
            raise JsonError(exc) from exc

        delay_ms = _INITIAL_DELAY_MS
        while True:
            time.sleep(_REQUEST_PAUSE)
            text = self._post(url, body)
            try:
                response = json.loads(text)
            except ValueError as exc:
                raise JsonError(exc) from exc

            code = _error_code_of(response)
            if code is None:
                return response

            error_code = ApiErrorCode.from_code(code)
            if error_code is ApiErrorCode.AGAIN:
                time.sleep(delay_ms / 1000)
                delay_ms *= 2
                if delay_ms > _MAX_DELAY_MS:
                    raise ServerBusyError()
                continue
            raise ApiError(code, error_code.description())

    def request(self, request: Any) -> Any:
        """Send a single command and return its result."""
        response = self._send([request])
        if not isinstance(response, list) or not response:
            raise InvalidResponseError()
        return response[0]

    def request_batch(self, requests: list[Any]) -> Any:
        """Send several commands at once and return the whole response array."""
        if not requests:
            return []
        return self._send(list(requests))