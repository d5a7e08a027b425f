"""Exceptions raised by the data access layer."""

from typing import Optional


class DataAccessError(Exception):
    """A statement failed; wraps the underlying driver error."""

    def __init__(self, message: str, operation: Optional[str] = None, table: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.table = table


class DatabaseConnectionError(DataAccessError):
    """No usable connection could be established."""

    def __init__(self, message: str):
        super().__init__(message, operation='connect')
