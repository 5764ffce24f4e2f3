"""
Jira REST client and connection factory.

Reference: https://developer.atlassian.com/cloud/jira/software/rest/intro/
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, MutableMapping, Optional

import httpx

from ...config import DEFAULT_TIMEOUT, JiraSettings
from ..api.base import BaseAPIClient
from ..base import APIClient, ConnectionConfigError

if TYPE_CHECKING:
    from logging import LoggerAdapter

    from ...core.context import ExecutionContext

AGILE_API_PREFIX = "/rest/agile/1.0"


class JiraClient(BaseAPIClient):
    """HTTP client for a single Jira site."""

    def __init__(
        self,
        *,
        base_url: str,
        username: Optional[str] = None,
        token: Optional[str] = None,
        personal_access_token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        default_headers: Optional[MutableMapping[str, str]] = None,
        transport: Optional[httpx.BaseTransport] = None,
        logger: Optional["LoggerAdapter"] = None,
    ) -> None:
        headers: MutableMapping[str, str] = {"Accept": "application/json"}
        if default_headers:
            headers.update(default_headers)
        auth: Optional[Any] = None
        if personal_access_token:
            headers["Authorization"] = f"Bearer {personal_access_token}"
        elif username and token:
            auth = httpx.BasicAuth(username, token)
        super().__init__(
            base_url=base_url,
            timeout=timeout,
            default_headers=headers,
            auth=auth,
            transport=transport,
            logger=logger,
        )

    @classmethod
    def from_settings(
        cls,
        settings: JiraSettings,
        *,
        transport: Optional[httpx.BaseTransport] = None,
        logger: Optional["LoggerAdapter"] = None,
    ) -> "JiraClient":
        if not settings.base_url:
            raise ConnectionConfigError("Jira base_url is not configured. Set jira.base_url in the secrets file.")
        return cls(
            base_url=settings.base_url,
            username=settings.username,
            token=settings.token,
            personal_access_token=settings.personal_access_token,
            timeout=settings.timeout,
            transport=transport,
            logger=logger,
        )


def connect(context: "ExecutionContext") -> APIClient:
    """
    Return the API client for ``context``.

    A ``client_factory`` on the context takes precedence; otherwise a
    :class:`JiraClient` is built from the ``[jira]`` secrets section. The
    caller borrows the client for one operation and never closes it.
    """

    if context.client_factory is not None:
        return context.client_factory(context)
    return JiraClient.from_settings(context.secrets.jira, logger=context.get_logger(f"{__name__}.JiraClient"))
