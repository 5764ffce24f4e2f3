"""
HTTP plumbing shared by API-backed adapters.
"""

from .base import APIError, BaseAPIClient, DecodeError, NotFoundError

__all__ = [
    "APIError",
    "BaseAPIClient",
    "DecodeError",
    "NotFoundError",
]
