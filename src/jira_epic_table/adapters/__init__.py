"""
Adapter interfaces for external systems.

Concrete adapters live in submodules keyed by upstream service. Each adapter
receives its API client from the execution context and only translates
responses into typed items.
"""

from .base import AdapterError, APIClient, ConnectionConfigError, QueryCancelledError

__all__ = [
    "AdapterError",
    "APIClient",
    "ConnectionConfigError",
    "QueryCancelledError",
]
