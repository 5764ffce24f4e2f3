"""
``jira_epic`` table: Jira Agile epics as queryable rows.

Reference: https://developer.atlassian.com/cloud/jira/software/rest/api-group-epic/
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, List, Mapping, Optional
from urllib.parse import quote

from ...core.logging import log_progress
from ...core.table import Column, ColumnType, GetConfig, ListConfig, Table, any_column, from_field
from ..api.base import APIError, NotFoundError
from ..base import AdapterError
from .client import AGILE_API_PREFIX, connect

if TYPE_CHECKING:
    from ...core.context import ExecutionContext
    from ...core.query import QueryData

TABLE_NAME = "jira_epic"
PAGE_SIZE = 1000
COLUMN_DESCRIPTION_TITLE = "Title of the resource."

# Status codes treated as "no such epic" by point lookups.
SOFT_MISS_STATUS_CODES = frozenset({400, 404})


def _require_mapping(payload: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise TypeError(f"{what} payload must be a JSON object, got {type(payload).__name__}")
    return payload


@dataclass(slots=True)
class Color:
    """Label colour category of an epic, e.g. ``color_1``."""

    key: str = ""

    @classmethod
    def from_payload(cls, payload: Any) -> "Color":
        if payload is None:
            return cls()
        data = _require_mapping(payload, "Color")
        return cls(key=str(data.get("key") or ""))


@dataclass(slots=True)
class Epic:
    """
    One Jira epic as returned by the Agile API.

    ``self_url`` carries the wire field ``self``; ``title`` mirrors ``name``.
    """

    id: int = 0
    key: str = ""
    name: str = ""
    done: bool = False
    self_url: str = ""
    summary: str = ""
    color: Color = field(default_factory=Color)

    @property
    def title(self) -> str:
        return self.name

    @classmethod
    def from_payload(cls, payload: Any) -> "Epic":
        data = _require_mapping(payload, "Epic")
        return cls(
            id=int(data.get("id") or 0),
            key=str(data.get("key") or ""),
            name=str(data.get("name") or ""),
            done=bool(data.get("done", False)),
            self_url=str(data.get("self") or ""),
            summary=str(data.get("summary") or ""),
            color=Color.from_payload(data.get("color")),
        )


@dataclass(slots=True)
class ListEpicResult:
    """One page of ``/epic/search`` results."""

    max_results: int = 0
    start_at: int = 0
    total: int = 0
    is_last: bool = False
    values: List[Epic] = field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: Any) -> "ListEpicResult":
        data = _require_mapping(payload, "Epic search")
        values = data.get("values") or []
        if not isinstance(values, list):
            raise TypeError("Epic search 'values' must be a JSON array")
        return cls(
            max_results=int(data.get("maxResults") or 0),
            start_at=int(data.get("startAt") or 0),
            total=int(data.get("total") or 0),
            is_last=bool(data.get("isLast", False)),
            values=[Epic.from_payload(item) for item in values],
        )


def is_soft_miss(exc: Exception) -> bool:
    """Return ``True`` when ``exc`` means the looked-up epic does not exist."""

    if isinstance(exc, NotFoundError):
        return True
    return isinstance(exc, APIError) and exc.status_code in SOFT_MISS_STATUS_CODES


def list_epics(context: "ExecutionContext", query: "QueryData") -> None:
    """Stream every epic visible to the connected user, page by page, in server order."""

    logger = context.get_logger(__name__, extra={"table": TABLE_NAME})
    log_progress(logger, "listEpics", step="list", level=logging.DEBUG)

    client = connect(context)

    last = 0
    while True:
        context.raise_if_cancelled()
        request = client.new_request("GET", f"{AGILE_API_PREFIX}/epic/search?startAt={last}&maxResults={PAGE_SIZE}")
        try:
            page = client.do(request, ListEpicResult.from_payload)
        except AdapterError as exc:
            log_progress(logger, "listEpics", step="list", status="error", level=logging.ERROR, extra={"error": str(exc)})
            raise

        for epic in page.values:
            query.stream_list_item(epic)

        log_progress(
            logger,
            "Fetched epic page",
            step="list",
            level=logging.DEBUG,
            extra={"start_at": page.start_at, "page_size": PAGE_SIZE, "returned": len(page.values)},
        )

        last = page.start_at + len(page.values)
        # An empty page that is not flagged last would otherwise repeat forever.
        if page.is_last or not page.values:
            return


def get_epic(context: "ExecutionContext", query: "QueryData") -> Optional[Epic]:
    """
    Look up a single epic by ``key`` (preferred) or numeric ``id``.

    A missing epic yields ``None``. Without either qualifier the lookup targets
    id ``0``, which Jira reports as not found.
    """

    logger = context.get_logger(__name__, extra={"table": TABLE_NAME})
    log_progress(logger, "getEpic", step="get", level=logging.DEBUG)

    epic_id = query.int_qual("id")
    epic_key = query.str_qual("key")
    if epic_key:
        path = f"{AGILE_API_PREFIX}/epic/{quote(epic_key, safe='')}"
    else:
        path = f"{AGILE_API_PREFIX}/epic/{epic_id}"

    context.raise_if_cancelled()
    client = connect(context)
    request = client.new_request("GET", path)
    try:
        return client.do(request, Epic.from_payload)
    except APIError as exc:
        if is_soft_miss(exc):
            return None
        log_progress(logger, "getEpic", step="get", status="error", level=logging.ERROR, extra={"error": str(exc)})
        raise


def table_jira_epic() -> Table:
    return Table(
        name=TABLE_NAME,
        description=(
            "An epic is essentially a large user story that can be broken down into a number of smaller stories. "
            "An epic can span more than one project."
        ),
        get_config=GetConfig(key_columns=any_column(["id", "key"]), hydrate=get_epic),
        list_config=ListConfig(hydrate=list_epics),
        columns=(
            Column("id", "The id of the epic.", ColumnType.INT),
            Column("name", "The name of the epic.", ColumnType.STRING),
            Column("key", "The key of the epic.", ColumnType.STRING),
            Column("done", "Indicates the status of the epic.", ColumnType.BOOL),
            Column("self", "The URL of the epic details.", ColumnType.STRING, transform=from_field("self_url")),
            Column("summary", "Description of the epic.", ColumnType.STRING),
            Column("color", "Label colour details for the epic.", ColumnType.JSON),
            # Standard columns
            Column("title", COLUMN_DESCRIPTION_TITLE, ColumnType.STRING, transform=from_field("name")),
        ),
    )
