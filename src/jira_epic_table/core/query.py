"""
Per-invocation query state handed to hydrate functions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Mapping

if TYPE_CHECKING:
    from .table import Table

RowSink = Callable[[Any], None]


@dataclass(slots=True)
class QueryData:
    """
    Qualifier values and the row sink for one table invocation.

    Attributes
    ----------
    table:
        Table being queried.
    quals:
        Equality qualifiers keyed by column name.
    sink:
        Callable receiving every item a list hydrate streams.
    """

    table: "Table"
    quals: Mapping[str, Any] = field(default_factory=dict)
    sink: RowSink = field(default=lambda item: None, repr=False)

    def int_qual(self, name: str) -> int:
        """Return qualifier ``name`` as an integer, ``0`` when absent."""

        value = self.quals.get(name)
        if value is None or value == "":
            return 0
        return int(value)

    def str_qual(self, name: str) -> str:
        """Return qualifier ``name`` as a string, ``""`` when absent."""

        value = self.quals.get(name)
        return "" if value is None else str(value)

    def stream_list_item(self, item: Any) -> None:
        self.sink(item)
