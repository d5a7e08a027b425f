"""
HTTP glue shared by the ownership-scoped resource handlers.

Each route resolves the caller, parses and validates the body, runs a single
DAL operation bounded by the invocation's remaining time and wraps the result
in the response envelope. Data access failures surface as generic 500s; the
details only reach the logs.
"""

import json
import re
from typing import Any, Optional, Type, TypeVar

from aws_lambda_powertools.event_handler import APIGatewayRestResolver, Response
from aws_lambda_powertools.metrics import MetricUnit
from pydantic import BaseModel, ValidationError

from finsight.dal import OwnedResourceStore, UserStore
from finsight.dal.connection import ConnectionProvider
from finsight.dal.errors import DataAccessError, DatabaseConnectionError
from finsight.dal.owned_resource_dal import OwnedResourceDal
from finsight.dal.resources import ResourceDefinition
from finsight.dal.users_dal import UsersDal
from finsight.handlers.utils.errors import BadRequestError, InternalServiceError, ResourceNotFoundError
from finsight.handlers.utils.identity import CallerIdentity, caller_identity
from finsight.handlers.utils.observability import logger, metrics, tracer
from finsight.handlers.utils.response import build_response
from finsight.models.output import MessageOutput

UUID_RE = re.compile(r'^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$')

RequestModel = TypeVar('RequestModel', bound=BaseModel)


def _reject_constant(token: str) -> Any:
    raise ValueError(f'{token} is not a JSON value')


def parse_body(app: APIGatewayRestResolver, model: Type[RequestModel]) -> RequestModel:
    """
    Parse the current request body into a request model.

    ``NaN`` and ``Infinity`` tokens count as malformed JSON.

    Raises:
        BadRequestError: If the body is not JSON or violates the model
    """
    try:
        payload = json.loads(app.current_event.body or '', parse_constant=_reject_constant)
    except ValueError as e:
        raise BadRequestError(f'Malformed JSON body: {e}') from e

    try:
        return model.model_validate(payload)
    except ValidationError as e:
        logger.info('Request body failed validation', extra={
            'model': model.__name__,
            'error_count': e.error_count(),
            'fields': [".".join(str(part) for part in err['loc']) for err in e.errors()],
        })
        raise BadRequestError(f'{model.__name__} validation failed') from e


def statement_timeout_ms(app: APIGatewayRestResolver, provider: ConnectionProvider) -> int:
    """Statement timeout derived from the current invocation's remaining time."""
    return provider.statement_timeout_ms(app.lambda_context.get_remaining_time_in_millis())


def identify_caller(app: APIGatewayRestResolver) -> CallerIdentity:
    """Validate the caller identity and tag the request's logs with it."""
    identity = caller_identity(app.current_event)
    logger.append_keys(caller_identity=identity.user_id)
    return identity


class ResourceController:
    """Ownership-scoped CRUD routes for one resource collection."""

    def __init__(
        self,
        app: APIGatewayRestResolver,
        resource: ResourceDefinition,
        provider: ConnectionProvider,
        dal: Optional[OwnedResourceStore] = None,
        users: Optional[UserStore] = None,
    ) -> None:
        self.app = app
        self.resource = resource
        self.provider = provider
        self.dal = dal or OwnedResourceDal(provider, resource)
        self.users = users or UsersDal(provider)

    @property
    def _noun(self) -> str:
        return self.resource.name.lower()

    def _timeout_ms(self) -> int:
        return statement_timeout_ms(self.app, self.provider)

    def _require_uuid(self, resource_id: str) -> None:
        if not UUID_RE.match(resource_id):
            raise ResourceNotFoundError(self.resource.name, resource_id)

    def _failed(self, user_message: str, error: DataAccessError) -> InternalServiceError:
        return InternalServiceError(user_message, message=f'{user_message}: {error.message}')

    def resolve_caller(self, identity: CallerIdentity) -> str:
        """
        Resolve a validated caller to the internal user id, provisioning it on first sight.

        Raises:
            InternalServiceError: If the users lookup fails
        """
        try:
            user_id = self.users.resolve_internal_id(identity.user_id, self._timeout_ms())
        except DatabaseConnectionError:
            raise
        except DataAccessError as e:
            raise self._failed('Failed to get user', e) from e

        logger.append_keys(user_id=user_id)
        return user_id

    @tracer.capture_method
    def list(self) -> Response:
        tracer.put_annotation('operation', f'list_{self.resource.table}')
        user_id = self.resolve_caller(identify_caller(self.app))
        try:
            items = self.dal.list(user_id, self._timeout_ms())
        except DatabaseConnectionError:
            raise
        except DataAccessError as e:
            raise self._failed(f'Failed to fetch {self.resource.table}', e) from e

        logger.info(f'Listed {self.resource.table}', extra={'count': len(items)})
        return build_response(200, items)

    @tracer.capture_method
    def get(self, resource_id: str) -> Response:
        tracer.put_annotation('operation', f'get_{self._noun}')
        identity = identify_caller(self.app)
        self._require_uuid(resource_id)
        user_id = self.resolve_caller(identity)
        try:
            item = self.dal.get(user_id, resource_id, self._timeout_ms())
        except DatabaseConnectionError:
            raise
        except DataAccessError as e:
            raise self._failed(f'Failed to fetch {self._noun}', e) from e

        if item is None:
            raise ResourceNotFoundError(self.resource.name, resource_id)
        return build_response(200, item)

    @tracer.capture_method
    def create(self) -> Response:
        tracer.put_annotation('operation', f'create_{self._noun}')
        identity = identify_caller(self.app)
        request = parse_body(self.app, self.resource.create_request)
        user_id = self.resolve_caller(identity)
        try:
            item = self.dal.create(user_id, request, self._timeout_ms())
        except DatabaseConnectionError:
            raise
        except DataAccessError as e:
            raise self._failed(f'Failed to create {self._noun}', e) from e

        metrics.add_metric(name=f'{self.resource.name}Created', unit=MetricUnit.Count, value=1)
        return build_response(201, item, headers={'Location': f'{self.resource.path}/{item.id}'})

    @tracer.capture_method
    def update(self, resource_id: str) -> Response:
        tracer.put_annotation('operation', f'update_{self._noun}')
        identity = identify_caller(self.app)
        self._require_uuid(resource_id)
        request = parse_body(self.app, self.resource.update_request)
        user_id = self.resolve_caller(identity)
        try:
            item = self.dal.update(user_id, resource_id, request.changes(), self._timeout_ms())
        except DatabaseConnectionError:
            raise
        except DataAccessError as e:
            raise self._failed(f'Failed to update {self._noun}', e) from e

        if item is None:
            raise ResourceNotFoundError(self.resource.name, resource_id)
        return build_response(200, item)

    @tracer.capture_method
    def delete(self, resource_id: str) -> Response:
        tracer.put_annotation('operation', f'delete_{self._noun}')
        identity = identify_caller(self.app)
        self._require_uuid(resource_id)
        user_id = self.resolve_caller(identity)
        try:
            deleted = self.dal.delete(user_id, resource_id, self._timeout_ms())
        except DatabaseConnectionError:
            raise
        except DataAccessError as e:
            raise self._failed(f'Failed to delete {self._noun}', e) from e

        if not deleted:
            raise ResourceNotFoundError(self.resource.name, resource_id)

        metrics.add_metric(name=f'{self.resource.name}Deleted', unit=MetricUnit.Count, value=1)
        return build_response(200, MessageOutput(message=f'{self.resource.name} deleted successfully'))


def register_crud_routes(app: APIGatewayRestResolver, controller: ResourceController) -> None:
    """
    Register list, get, create, update and delete routes for the controller's resource.

    Collection routes are served at the resource path and item routes one
    segment below it, e.g. ``/accounts`` and ``/accounts/<resource_id>``.
    """
    path = controller.resource.path
    item_path = f'{path}/<resource_id>'

    @app.get(path)
    @tracer.capture_method
    def list_resources() -> Response:
        return controller.list()

    @app.get(item_path)
    @tracer.capture_method
    def get_resource(resource_id: str) -> Response:
        return controller.get(resource_id)

    @app.post(path)
    @tracer.capture_method
    def create_resource() -> Response:
        return controller.create()

    @app.put(item_path)
    @tracer.capture_method
    def update_resource(resource_id: str) -> Response:
        return controller.update(resource_id)

    @app.delete(item_path)
    @tracer.capture_method
    def delete_resource(resource_id: str) -> Response:
        return controller.delete(resource_id)
