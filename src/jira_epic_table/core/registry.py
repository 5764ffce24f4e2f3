"""
Catalogue of tables exposed by the plugin.
"""

from __future__ import annotations

from typing import Iterator, List, MutableMapping, Optional

from .table import Table


class TableRegistry:
    """In-memory catalogue of :class:`Table` declarations."""

    def __init__(self) -> None:
        self._entries: MutableMapping[str, Table] = {}

    def register(self, table: Table) -> None:
        """Register or overwrite a table in the catalogue."""

        table.validate()
        self._entries[table.name] = table

    def unregister(self, name: str) -> None:
        self._entries.pop(name, None)

    def get(self, name: str) -> Optional[Table]:
        return self._entries.get(name)

    def require(self, name: str) -> Table:
        """Retrieve a table or raise an informative error."""

        table = self.get(name)
        if table is None:
            raise KeyError(f"Table '{name}' is not registered.")
        return table

    def list(self) -> List[Table]:
        return sorted(self._entries.values(), key=lambda table: table.name)

    def __iter__(self) -> Iterator[Table]:
        return iter(self.list())

    def __len__(self) -> int:
        return len(self._entries)
