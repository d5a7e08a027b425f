"""
PostgreSQL access to the ``users`` table.

A user row maps the external identity asserted by the authorizer
(``auth0_user_id``) to the internal id that owns every other row.
"""

from typing import Any, Dict, Optional

from aws_lambda_powertools.metrics import MetricUnit

from finsight.dal import BaseDalHandler, build_update_assignments
from finsight.dal.connection import ConnectionProvider
from finsight.handlers.utils.observability import logger, metrics, tracer
from finsight.models.user import PLACEHOLDER_NAME, User, placeholder_email

USER_COLUMNS = ', '.join(User.model_fields)


class UsersDal(BaseDalHandler):
    """Identity lookup and placeholder provisioning."""

    def __init__(self, provider: ConnectionProvider) -> None:
        super().__init__(provider, 'users')

    @tracer.capture_method
    def get_by_identity(self, identity: str, timeout_ms: Optional[int] = None) -> Optional[User]:
        """
        Look a user up by external identity.

        Returns:
            The user, or None when no row exists
        """
        row = self._fetch_one(
            'get_user',
            f'SELECT {USER_COLUMNS} FROM users WHERE auth0_user_id = %s',
            (identity,),
            timeout_ms,
        )
        return User.model_validate(row) if row else None

    @tracer.capture_method
    def create_placeholder(self, identity: str, timeout_ms: Optional[int] = None) -> User:
        """
        Provision a placeholder user for a first-time identity.

        Concurrent first requests for the same identity race on the unique
        ``auth0_user_id``; the no-op conflict update makes every racer get the
        single surviving row back. Only the racer whose insert won (``xmax = 0``
        on the returned row) records the provisioning.
        """
        row = self._fetch_one(
            'create_user',
            f'INSERT INTO users (auth0_user_id, email, name) VALUES (%s, %s, %s) '
            f'ON CONFLICT (auth0_user_id) DO UPDATE SET auth0_user_id = EXCLUDED.auth0_user_id '
            f'RETURNING {USER_COLUMNS}, (xmax = 0) AS inserted',
            (identity, placeholder_email(identity), PLACEHOLDER_NAME),
            timeout_ms,
        )
        inserted = bool(row.pop('inserted', False))
        user = User.model_validate(row)

        if inserted:
            logger.info('Provisioned placeholder user', extra={'user_id': user.id})
            metrics.add_metric(name='UserProvisioned', unit=MetricUnit.Count, value=1)
            tracer.put_annotation('user_provisioned', user.id)
        else:
            logger.info('Placeholder user already provisioned', extra={'user_id': user.id})
        return user

    def get_or_create(self, identity: str, timeout_ms: Optional[int] = None) -> User:
        """Return the user for an identity, provisioning it on first sight."""
        user = self.get_by_identity(identity, timeout_ms)
        if user is None:
            user = self.create_placeholder(identity, timeout_ms)
        return user

    def resolve_internal_id(self, identity: str, timeout_ms: Optional[int] = None) -> str:
        """Return the internal user id that owns the caller's rows."""
        return self.get_or_create(identity, timeout_ms).id

    @tracer.capture_method
    def update_profile(self, identity: str, changes: Dict[str, Any],
                       timeout_ms: Optional[int] = None) -> Optional[User]:
        """
        Update the caller's own name and email.

        Args:
            identity: External identity of the caller
            changes: Column values to write, already validated

        Returns:
            The updated user, or None when the identity has no row
        """
        assignments, params = build_update_assignments(changes)
        row = self._fetch_one(
            'update_user',
            f'UPDATE users SET {assignments} WHERE auth0_user_id = %s RETURNING {USER_COLUMNS}',
            (*params, identity),
            timeout_ms,
        )
        return User.model_validate(row) if row else None
