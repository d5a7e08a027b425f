"""
Data Access Layer (DAL) for the FinSight API.

This module defines the data access interfaces the handlers depend on and the
PostgreSQL base class shared by the concrete implementations. Every owned
table is filtered by ``user_id`` in the same statement that reads or writes
it, so ownership is enforced by the database query itself.
"""

from abc import ABC
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

import psycopg2
from pydantic import BaseModel

from finsight.dal.connection import ConnectionProvider
from finsight.dal.errors import DataAccessError, DatabaseConnectionError
from finsight.handlers.utils.observability import logger
from finsight.models.input import CreateRequest
from finsight.models.user import User


@runtime_checkable
class OwnedResourceStore(Protocol):
    """Protocol for CRUD over a table whose rows belong to one user."""

    def list(self, user_id: str, timeout_ms: Optional[int] = None) -> List[BaseModel]:
        """List the user's rows, newest first."""
        ...

    def get(self, user_id: str, resource_id: str, timeout_ms: Optional[int] = None) -> Optional[BaseModel]:
        """Retrieve one of the user's rows by id."""
        ...

    def create(self, user_id: str, request: CreateRequest, timeout_ms: Optional[int] = None) -> BaseModel:
        """Insert a row owned by the user."""
        ...

    def update(self, user_id: str, resource_id: str, changes: Dict[str, Any],
               timeout_ms: Optional[int] = None) -> Optional[BaseModel]:
        """Update the given columns of one of the user's rows."""
        ...

    def delete(self, user_id: str, resource_id: str, timeout_ms: Optional[int] = None) -> bool:
        """Delete one of the user's rows."""
        ...


@runtime_checkable
class UserStore(Protocol):
    """Protocol for the mapping between external identities and users."""

    def get_by_identity(self, identity: str, timeout_ms: Optional[int] = None) -> Optional[User]:
        """Look a user up by external identity."""
        ...

    def create_placeholder(self, identity: str, timeout_ms: Optional[int] = None) -> User:
        """Provision a placeholder user for a first-time identity."""
        ...

    def get_or_create(self, identity: str, timeout_ms: Optional[int] = None) -> User:
        """Return the user for an identity, provisioning it if needed."""
        ...

    def resolve_internal_id(self, identity: str, timeout_ms: Optional[int] = None) -> str:
        """Return the internal id for an identity, provisioning it if needed."""
        ...

    def update_profile(self, identity: str, changes: Dict[str, Any],
                       timeout_ms: Optional[int] = None) -> Optional[User]:
        """Update the user's own profile columns."""
        ...


class BaseDalHandler(ABC):
    """Base class for PostgreSQL data access implementations."""

    def __init__(self, provider: ConnectionProvider, table_name: str) -> None:
        """
        Initialize the DAL handler.

        Args:
            provider: Shared connection provider
            table_name: Name of the database table
        """
        self.provider = provider
        self.table_name = table_name

    def _fetch_all(self, operation: str, sql: str, params: Sequence[Any],
                   timeout_ms: Optional[int]) -> List[Dict[str, Any]]:
        with self._statement(operation, timeout_ms) as cur:
            cur.execute(sql, tuple(params))
            return list(cur.fetchall())

    def _fetch_one(self, operation: str, sql: str, params: Sequence[Any],
                   timeout_ms: Optional[int]) -> Optional[Dict[str, Any]]:
        with self._statement(operation, timeout_ms) as cur:
            cur.execute(sql, tuple(params))
            return cur.fetchone()

    def _execute(self, operation: str, sql: str, params: Sequence[Any], timeout_ms: Optional[int]) -> int:
        """Run a statement and return the affected row count."""
        with self._statement(operation, timeout_ms) as cur:
            cur.execute(sql, tuple(params))
            return cur.rowcount

    @contextmanager
    def _statement(self, operation: str, timeout_ms: Optional[int]) -> Iterator[Any]:
        """Cursor scope that turns driver errors into ``DataAccessError``."""
        try:
            with self.provider.cursor(timeout_ms) as cur:
                yield cur
        except psycopg2.Error as e:
            logger.error(f'Database error during {operation}', extra={
                'table': self.table_name,
                'operation': operation,
                'pgcode': getattr(e, 'pgcode', None),
                'error': str(e),
            })
            raise DataAccessError(
                f'{operation} on {self.table_name} failed: {e}',
                operation=operation,
                table=self.table_name,
            ) from e


def build_update_assignments(changes: Dict[str, Any]) -> Tuple[str, List[Any]]:
    """
    Build the SET clause for a partial update.

    Only the given columns are assigned; ``updated_at`` is always refreshed.
    Column names must come from model field names, never from request keys.
    """
    assignments = [f'{column} = %s' for column in changes]
    assignments.append('updated_at = NOW()')
    return ', '.join(assignments), list(changes.values())


__all__ = [
    'OwnedResourceStore',
    'UserStore',
    'BaseDalHandler',
    'DataAccessError',
    'DatabaseConnectionError',
    'build_update_assignments',
]
