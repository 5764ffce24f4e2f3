"""
Base protocols and errors for table adapters.

Adapters never build their own HTTP stack. They receive an :class:`APIClient`
from the execution context and only rely on its two-step ``new_request`` /
``do`` surface, which keeps the fetch functions testable with plain stubs.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Protocol, TypeVar

T = TypeVar("T")


class AdapterError(RuntimeError):
    """Raised when an adapter encounters a non-recoverable error."""


class ConnectionConfigError(AdapterError):
    """Raised when the connection settings are insufficient to build a client."""


class QueryCancelledError(AdapterError):
    """Raised when the execution context signalled cancellation mid-query."""


class APIClient(Protocol):
    """Capability surface consumed by the fetch operations."""

    def new_request(self, method: str, path: str, body: Optional[Any] = None) -> Any:
        """Prepare a request relative to the client's base URL."""

    def do(self, request: Any, decode: Optional[Callable[[Any], T]] = None) -> Any:
        """Send a prepared request and return the decoded JSON body."""
