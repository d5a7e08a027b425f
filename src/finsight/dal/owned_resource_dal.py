"""
Generic PostgreSQL CRUD for tables whose rows belong to one user.

Every statement filters on ``user_id`` so that a row owned by someone else is
indistinguishable from a row that does not exist.
"""

from typing import Any, Dict, List, Optional

from aws_lambda_powertools.metrics import MetricUnit
from pydantic import BaseModel, ValidationError

from finsight.dal import BaseDalHandler, build_update_assignments
from finsight.dal.connection import ConnectionProvider
from finsight.dal.resources import ResourceDefinition
from finsight.handlers.utils.observability import logger, metrics, tracer
from finsight.models.input import CreateRequest


class OwnedResourceDal(BaseDalHandler):
    """Ownership-scoped CRUD configured by a ``ResourceDefinition``."""

    def __init__(self, provider: ConnectionProvider, resource: ResourceDefinition) -> None:
        super().__init__(provider, resource.table)
        self.resource = resource

    @tracer.capture_method
    def list(self, user_id: str, timeout_ms: Optional[int] = None) -> List[BaseModel]:
        """
        List the user's rows, newest first.

        Rows that do not validate into the model are logged and skipped; the
        caller still receives every row that did.
        """
        rows = self._fetch_all(
            'list',
            f'SELECT {self.resource.columns} FROM {self.table_name} '
            f'WHERE user_id = %s ORDER BY created_at DESC',
            (user_id,),
            timeout_ms,
        )

        items: List[BaseModel] = []
        skipped = 0
        for row in rows:
            try:
                items.append(self.resource.model.model_validate(row))
            except ValidationError as e:
                skipped += 1
                logger.warning(f'Skipping unparseable {self.table_name} row', extra={
                    'row_id': str(row.get('id')),
                    'error_count': e.error_count(),
                })

        if skipped:
            logger.warning(f'Skipped {skipped} unparseable {self.table_name} row(s)', extra={
                'skipped': skipped,
                'returned': len(items),
            })
            metrics.add_metric(name='RowsSkipped', unit=MetricUnit.Count, value=skipped)

        logger.debug(f'Listed {len(items)} {self.table_name} row(s)')
        return items

    @tracer.capture_method
    def get(self, user_id: str, resource_id: str, timeout_ms: Optional[int] = None) -> Optional[BaseModel]:
        """Retrieve one of the user's rows, or None when absent or not owned."""
        row = self._fetch_one(
            'get',
            f'SELECT {self.resource.columns} FROM {self.table_name} WHERE id = %s AND user_id = %s',
            (resource_id, user_id),
            timeout_ms,
        )
        return self.resource.model.model_validate(row) if row else None

    @tracer.capture_method
    def create(self, user_id: str, request: CreateRequest, timeout_ms: Optional[int] = None) -> BaseModel:
        """
        Insert a row owned by the user.

        Resource defaults fill columns the request left empty. ``user_id`` is
        always the resolved caller.
        """
        values = request.values()
        for column, default in self.resource.create_defaults(self.provider.settings).items():
            if values.get(column) is None:
                values[column] = default
        values['user_id'] = user_id

        columns = ', '.join(values)
        placeholders = ', '.join(['%s'] * len(values))
        row = self._fetch_one(
            'create',
            f'INSERT INTO {self.table_name} ({columns}) VALUES ({placeholders}) '
            f'RETURNING {self.resource.columns}',
            list(values.values()),
            timeout_ms,
        )
        created = self.resource.model.model_validate(row)

        logger.info(f'Created {self.resource.name.lower()}', extra={'resource_id': created.id})
        tracer.put_annotation(f'{self.table_name}_created', created.id)
        return created

    @tracer.capture_method
    def update(self, user_id: str, resource_id: str, changes: Dict[str, Any],
               timeout_ms: Optional[int] = None) -> Optional[BaseModel]:
        """
        Write only the given columns of one of the user's rows.

        Returns:
            The updated row, or None when no owned row matched
        """
        assignments, params = build_update_assignments(changes)
        row = self._fetch_one(
            'update',
            f'UPDATE {self.table_name} SET {assignments} WHERE id = %s AND user_id = %s '
            f'RETURNING {self.resource.columns}',
            (*params, resource_id, user_id),
            timeout_ms,
        )
        if not row:
            logger.info(f'No owned {self.table_name} row to update', extra={'resource_id': resource_id})
            return None
        return self.resource.model.model_validate(row)

    @tracer.capture_method
    def delete(self, user_id: str, resource_id: str, timeout_ms: Optional[int] = None) -> bool:
        """Delete one of the user's rows; False when nothing matched."""
        deleted = self._execute(
            'delete',
            f'DELETE FROM {self.table_name} WHERE id = %s AND user_id = %s',
            (resource_id, user_id),
            timeout_ms,
        )
        return deleted > 0
