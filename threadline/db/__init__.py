"""Database utilities for Threadline.

This module contains:
- Connection pool management
- Store error hierarchy
"""

from threadline.db.errors import (
    ConflictError,
    ConnectionError,
    NotFoundError,
    StoreError,
    ValidationError,
)

__all__ = [
    "StoreError",
    "ConnectionError",
    "NotFoundError",
    "ConflictError",
    "ValidationError",
]
