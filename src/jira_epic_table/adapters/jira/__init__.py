"""
Jira tables.

``client`` holds the HTTP client and the ``connect`` factory; each table lives
in its own module exposing a ``table_*`` declaration plus its hydrate functions.
"""

from .client import AGILE_API_PREFIX, JiraClient, connect
from .epic import Color, Epic, ListEpicResult, get_epic, is_soft_miss, list_epics, table_jira_epic

__all__ = [
    "AGILE_API_PREFIX",
    "Color",
    "Epic",
    "JiraClient",
    "ListEpicResult",
    "connect",
    "get_epic",
    "is_soft_miss",
    "list_epics",
    "table_jira_epic",
]
