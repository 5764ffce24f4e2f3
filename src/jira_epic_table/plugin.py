"""
Plugin entry point: the catalogue of tables this package serves.
"""

from __future__ import annotations

from .adapters.jira import table_jira_epic
from .core.registry import TableRegistry

PLUGIN_NAME = "jira"


def build_registry() -> TableRegistry:
    registry = TableRegistry()
    registry.register(table_jira_epic())
    return registry
