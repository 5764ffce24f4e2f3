"""
Shared HTTP utilities for API adapters.

The helper provides a thin HTTPX wrapper exposing the two-step
``new_request`` / ``do`` surface expected by :class:`~jira_epic_table.adapters.base.APIClient`.
It stays synchronous, performs no retries, avoids global state, and raises
errors that carry the HTTP status code so callers can classify failures without
parsing messages.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from logging import LoggerAdapter
from typing import Any, Callable, MutableMapping, Optional, TypeVar

import httpx

from ...core.logging import get_logger, log_progress
from ..base import AdapterError

DEFAULT_TIMEOUT = 30.0

T = TypeVar("T")


class APIError(AdapterError):
    """Raised when an HTTP API call fails."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(APIError):
    """Raised when the upstream resource does not exist (HTTP 404)."""


class DecodeError(APIError):
    """Raised when a response body cannot be decoded into the expected shape."""


@dataclass(slots=True)
class BaseAPIClient:
    """
    Base synchronous HTTP client.

    Parameters
    ----------
    base_url:
        Root URL for the upstream service.
    timeout:
        Request timeout in seconds. Timeouts surface as :class:`APIError`.
    default_headers:
        Headers automatically attached to every request.
    auth:
        Optional HTTPX auth object or ``(username, password)`` pair.
    transport:
        Optional HTTPX transport, e.g. :class:`httpx.MockTransport` in tests.
    logger:
        Logger handed down by the execution context.
    """

    base_url: str
    timeout: float = DEFAULT_TIMEOUT
    default_headers: MutableMapping[str, str] = field(default_factory=dict)
    auth: Optional[Any] = field(default=None, repr=False)
    transport: Optional[httpx.BaseTransport] = field(default=None, repr=False)
    logger: Optional[LoggerAdapter] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.logger is None:
            self.logger = get_logger(
                f"{self.__class__.__module__}.{self.__class__.__name__}",
                extra={"base_url": self.base_url},
            )

    def _build_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=self.timeout,
            auth=self.auth,
            transport=self.transport,
            follow_redirects=True,
        )

    def _url(self, path: str) -> httpx.URL:
        return httpx.URL(f"{self.base_url.rstrip('/')}/{path.lstrip('/')}")

    def new_request(self, method: str, path: str, body: Optional[Any] = None) -> httpx.Request:
        """Build a request for ``path`` relative to :attr:`base_url`."""

        headers = dict(self.default_headers)
        if body is None:
            return httpx.Request(method.upper(), self._url(path), headers=headers)
        return httpx.Request(method.upper(), self._url(path), headers=headers, json=body)

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.is_success:
            return
        request = response.request
        message = f"HTTP {response.status_code} error for {request.method} {request.url}: {response.text}"
        if response.status_code == httpx.codes.NOT_FOUND:
            raise NotFoundError(message, status_code=response.status_code)
        raise APIError(message, status_code=response.status_code)

    def do(self, request: httpx.Request, decode: Optional[Callable[[Any], T]] = None) -> Any:
        """
        Send ``request`` and return its decoded JSON body.

        When ``decode`` is given the JSON payload is passed through it and the
        result returned instead; shape mismatches surface as :class:`DecodeError`.
        """

        log_progress(
            self.logger,
            "HTTP request",
            level=logging.DEBUG,
            extra={"method": request.method, "url": str(request.url)},
        )
        try:
            with self._build_client() as client:
                response = client.send(request)
        except httpx.HTTPError as exc:
            log_progress(
                self.logger,
                "HTTP error during request",
                level=logging.ERROR,
                extra={"method": request.method, "url": str(request.url), "error": str(exc)},
            )
            raise APIError(f"HTTP error while calling {request.method} {request.url}: {exc}") from exc

        self._raise_for_status(response)
        log_progress(
            self.logger,
            "HTTP response",
            level=logging.DEBUG,
            extra={"status_code": response.status_code, "url": str(response.url)},
        )

        try:
            payload = response.json()
        except ValueError as exc:
            raise DecodeError(f"Failed to decode JSON from {response.url}: {exc}", status_code=response.status_code) from exc
        if decode is None:
            return payload
        try:
            return decode(payload)
        except (KeyError, TypeError, ValueError) as exc:
            raise DecodeError(f"Unexpected payload shape from {response.url}: {exc}", status_code=response.status_code) from exc
