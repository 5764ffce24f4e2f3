"""
Execution context primitives shared by the query planner and table adapters.

A context is created once per query. It bundles the loaded secrets, the
logger operations should write to, an optional client factory used to inject
stub transports, and a cancellation signal that long-running operations poll
between network round-trips.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from logging import LoggerAdapter
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Sequence

from ..adapters.base import APIClient, QueryCancelledError
from ..config import SecretsBundle, load_secrets
from .logging import get_logger as _get_logger

ClientFactory = Callable[["ExecutionContext"], APIClient]


@dataclass(slots=True)
class ExecutionContext:
    """
    Per-query execution context.

    Attributes
    ----------
    secrets:
        Bundled secret values loaded from ``.secrets``.
    client_factory:
        Optional override for building the API client. When unset the adapter
        builds its default HTTP client from :attr:`secrets`.
    observability_tags:
        Tags attached to every log record emitted through :meth:`get_logger`.
    cancel_event:
        Cancellation signal. Set it through :meth:`cancel`.
    extra:
        Free-form metadata attached to log records.
    """

    secrets: SecretsBundle
    client_factory: Optional[ClientFactory] = None
    observability_tags: Sequence[str] = field(default_factory=tuple)
    cancel_event: threading.Event = field(default_factory=threading.Event)
    extra: Mapping[str, object] = field(default_factory=dict)

    @classmethod
    def build_default(
        cls,
        *,
        secrets: Optional[SecretsBundle] = None,
        secrets_path: Optional[Path] = None,
        client_factory: Optional[ClientFactory] = None,
        observability_tags: Optional[Sequence[str]] = None,
    ) -> "ExecutionContext":
        """
        Construct a context using sensible defaults.

        Parameters
        ----------
        secrets:
            Preloaded secret bundle. When omitted the helper calls
            :func:`~jira_epic_table.config.load_secrets`.
        secrets_path:
            Explicit secrets file passed to ``load_secrets`` when ``secrets``
            is not provided.
        client_factory:
            Optional client factory override.
        observability_tags:
            Tags attached to log records.
        """

        resolved_secrets = secrets or load_secrets(strict=secrets_path is not None, path=secrets_path)
        return cls(
            secrets=resolved_secrets,
            client_factory=client_factory,
            observability_tags=tuple(observability_tags or ()),
        )

    def get_logger(self, name: str, *, extra: Optional[Mapping[str, object]] = None) -> LoggerAdapter:
        """Return a logger adapter enriched with the context's observability tags."""

        merged: dict[str, Any] = dict(self.extra)
        if extra:
            merged.update(extra)
        tags = tuple(self.observability_tags)
        return _get_logger(name, tags=tags or None, extra=merged or None)

    def cancel(self) -> None:
        """Request cancellation of the running operation."""

        self.cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def raise_if_cancelled(self) -> None:
        if self.cancel_event.is_set():
            raise QueryCancelledError("Query cancelled by the execution context.")
