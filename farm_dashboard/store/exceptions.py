"""
Store Exceptions
Custom exceptions for the Supabase data store boundary.
"""

from typing import Optional


class StoreError(Exception):
    """Base exception for data store errors."""

    def __init__(self, message: str, table: Optional[str] = None):
        self.message = message
        self.table = table
        super().__init__(self.message)


class StoreReadError(StoreError):
    """Raised when a list/filter query against a table fails."""


class StoreWriteError(StoreError):
    """Raised when an insert, update or delete fails."""


class RecordNotFoundError(StoreError):
    """Raised when a write targets an id that does not exist."""
