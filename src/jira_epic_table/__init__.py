"""
Jira epics exposed as a queryable ``jira_epic`` table.

Use :func:`build_registry` to obtain the table catalogue and
:func:`~jira_epic_table.core.engine.execute` to run a query against it with an
:class:`~jira_epic_table.core.context.ExecutionContext`.
"""

from .core import ExecutionContext, collect, execute
from .plugin import PLUGIN_NAME, build_registry

__all__ = [
    "ExecutionContext",
    "PLUGIN_NAME",
    "build_registry",
    "collect",
    "execute",
]
