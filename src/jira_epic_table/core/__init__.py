"""
Core infrastructure shared by the table adapters.

Exposes the execution context, logging helpers, table declarations, the table
registry and the query planner. Nothing in this package talks to Jira directly.
"""

from .context import ExecutionContext
from .engine import QueryPlanError, coerce_value, collect, execute
from .logging import configure_logging, get_logger, log_progress
from .query import QueryData
from .registry import TableRegistry
from .table import (
    Column,
    ColumnType,
    GetConfig,
    KeyColumnSet,
    ListConfig,
    Table,
    TableDefinitionError,
    all_columns,
    any_column,
    from_field,
)

__all__ = [
    "Column",
    "ColumnType",
    "ExecutionContext",
    "GetConfig",
    "KeyColumnSet",
    "ListConfig",
    "QueryData",
    "QueryPlanError",
    "Table",
    "TableDefinitionError",
    "TableRegistry",
    "all_columns",
    "any_column",
    "coerce_value",
    "collect",
    "configure_logging",
    "execute",
    "from_field",
    "get_logger",
    "log_progress",
]
