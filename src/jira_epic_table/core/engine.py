"""
Minimal query planner.

:func:`execute` picks the hydrate path for a set of equality qualifiers: a
point lookup when the table's key columns are satisfied, a full listing
otherwise. Every produced item is projected into a row and checked against all
qualifiers before being emitted, so a lookup by ``key`` that also names a
mismatching ``id`` yields nothing.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from .context import ExecutionContext
from .logging import log_progress
from .query import QueryData
from .table import ColumnType, Table

Row = Dict[str, Any]


class QueryPlanError(ValueError):
    """Raised when qualifiers cannot be served by a table."""


_TRUE_VALUES = {"1", "true", "t", "yes", "y", "on"}
_FALSE_VALUES = {"0", "false", "f", "no", "n", "off"}


def coerce_value(column_type: ColumnType, raw: Any) -> Any:
    """Convert a textual qualifier into the column's Python type."""

    if not isinstance(raw, str):
        return raw
    if column_type is ColumnType.INT:
        try:
            return int(raw)
        except ValueError as exc:
            raise QueryPlanError(f"Expected an integer, got '{raw}'.") from exc
    if column_type is ColumnType.BOOL:
        lowered = raw.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise QueryPlanError(f"Expected a boolean, got '{raw}'.")
    if column_type is ColumnType.JSON:
        try:
            return json.loads(raw)
        except ValueError as exc:
            raise QueryPlanError(f"Expected JSON, got '{raw}'.") from exc
    return raw


def _normalise_quals(table: Table, quals: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    normalised: Dict[str, Any] = {}
    for name, raw in (quals or {}).items():
        column = table.column(name)
        if column is None:
            raise QueryPlanError(f"Table '{table.name}' has no column '{name}'.")
        normalised[name] = coerce_value(column.type, raw)
    return normalised


def execute(
    table: Table,
    context: ExecutionContext,
    quals: Optional[Mapping[str, Any]] = None,
    emit: Optional[Callable[[Row], None]] = None,
) -> int:
    """
    Run a query against ``table`` and pass each matching row to ``emit``.

    Returns the number of rows emitted. Errors raised by hydrate functions
    propagate unchanged.
    """

    filters = _normalise_quals(table, quals)
    logger = context.get_logger(__name__, extra={"table": table.name})
    emitted = 0

    def _accept(item: Any) -> None:
        nonlocal emitted
        row = table.project(item)
        if all(row.get(name) == value for name, value in filters.items()):
            emitted += 1
            if emit is not None:
                emit(row)

    query = QueryData(table=table, quals=filters, sink=_accept)
    if table.get_config is not None and table.get_config.key_columns.is_satisfied_by(filters):
        log_progress(logger, "Planning point lookup", step="get", level=logging.DEBUG)
        item = table.get_config.hydrate(context, query)
        if item is not None:
            _accept(item)
    elif table.list_config is not None:
        log_progress(logger, "Planning full listing", step="list", level=logging.DEBUG)
        table.list_config.hydrate(context, query)
    elif table.get_config is not None:
        raise QueryPlanError(f"Table '{table.name}' requires qualifiers on: {', '.join(table.get_config.key_columns.columns)}")
    else:
        raise QueryPlanError(f"Table '{table.name}' cannot be queried.")

    log_progress(logger, "Query complete", status="done", level=logging.DEBUG, extra={"returned": emitted})
    return emitted


def collect(table: Table, context: ExecutionContext, quals: Optional[Mapping[str, Any]] = None) -> List[Row]:
    """Run :func:`execute` and return the emitted rows as a list."""

    rows: List[Row] = []
    execute(table, context, quals, emit=rows.append)
    return rows
