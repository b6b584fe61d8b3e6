"""
API I/O models.

Request and response schemas for every route group. All models inherit
``CamelModel`` so the JSON wire format uses camelCase keys.
"""

from .base import CamelModel, Pagination

__all__ = ["CamelModel", "Pagination"]
