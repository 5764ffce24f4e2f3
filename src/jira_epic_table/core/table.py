"""
Table declarations consumed by the query planner.

A :class:`Table` describes its columns, how each column value is derived from
a fetched item, and which hydrate functions serve point lookups (``get``) and
full scans (``list``). Declarations are pure metadata: nothing here performs
I/O.
"""

from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Mapping, Optional, Sequence

if TYPE_CHECKING:
    from .context import ExecutionContext
    from .query import QueryData

Transform = Callable[[Any], Any]
Hydrate = Callable[["ExecutionContext", "QueryData"], Any]


class TableDefinitionError(ValueError):
    """Raised when a table declaration is internally inconsistent."""


class ColumnType(str, Enum):
    """Semantic column types understood by the planner."""

    INT = "int"
    STRING = "string"
    BOOL = "bool"
    JSON = "json"


def from_field(name: str) -> Transform:
    """Return a transform reading attribute (or mapping key) ``name`` from an item."""

    def _transform(item: Any) -> Any:
        if isinstance(item, Mapping):
            return item.get(name)
        return getattr(item, name, None)

    _transform.__name__ = f"from_field_{name}"
    return _transform


def _to_json_value(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    return value


@dataclass(slots=True)
class Column:
    """A single queryable attribute."""

    name: str
    description: str
    type: ColumnType
    transform: Optional[Transform] = None

    def value_for(self, item: Any) -> Any:
        transform = self.transform or from_field(self.name)
        value = transform(item)
        if self.type is ColumnType.JSON:
            return _to_json_value(value)
        return value


@dataclass(slots=True)
class KeyColumnSet:
    """
    Key columns required for a point lookup.

    ``mode="any"`` means one qualifier from :attr:`columns` is sufficient,
    ``mode="all"`` requires every one of them.
    """

    columns: Sequence[str]
    mode: str = "any"

    def is_satisfied_by(self, quals: Mapping[str, Any]) -> bool:
        present = [name in quals for name in self.columns]
        if self.mode == "all":
            return all(present)
        return any(present)


def any_column(columns: Sequence[str]) -> KeyColumnSet:
    return KeyColumnSet(columns=tuple(columns), mode="any")


def all_columns(columns: Sequence[str]) -> KeyColumnSet:
    return KeyColumnSet(columns=tuple(columns), mode="all")


@dataclass(slots=True)
class GetConfig:
    key_columns: KeyColumnSet
    hydrate: Hydrate


@dataclass(slots=True)
class ListConfig:
    hydrate: Hydrate


@dataclass(slots=True)
class Table:
    """Declarative description of a queryable table."""

    name: str
    description: str
    columns: Sequence[Column] = field(default_factory=tuple)
    get_config: Optional[GetConfig] = None
    list_config: Optional[ListConfig] = None

    def validate(self) -> None:
        """Validate internal consistency of the declaration."""

        if not self.name or not self.name.isidentifier():
            raise TableDefinitionError(f"Table name '{self.name}' must be a valid identifier.")
        seen: set[str] = set()
        for column in self.columns:
            if column.name in seen:
                raise TableDefinitionError(f"Table '{self.name}' declares column '{column.name}' more than once.")
            seen.add(column.name)
        if self.get_config is not None:
            unknown = [name for name in self.get_config.key_columns.columns if name not in seen]
            if unknown:
                raise TableDefinitionError(f"Table '{self.name}' uses undeclared key columns: {', '.join(unknown)}")
        if self.get_config is None and self.list_config is None:
            raise TableDefinitionError(f"Table '{self.name}' has neither a get nor a list configuration.")

    def column(self, name: str) -> Optional[Column]:
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def column_names(self) -> List[str]:
        return [column.name for column in self.columns]

    def project(self, item: Any) -> Dict[str, Any]:
        """Render a fetched item into a row keyed by column name."""

        return {column.name: column.value_for(item) for column in self.columns}

    def describe(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "columns": [{"name": column.name, "type": column.type.value, "description": column.description} for column in self.columns],
            "key_columns": list(self.get_config.key_columns.columns) if self.get_config else [],
            "key_columns_mode": self.get_config.key_columns.mode if self.get_config else None,
        }

    def to_json(self) -> str:
        """Return a JSON representation useful for CLI output."""

        return json.dumps(self.describe(), ensure_ascii=False, indent=2)
