"""
REST API resolver factory for the FinSight Lambda handlers.

Every function gets an API Gateway REST resolver that serves its routes both
bare and under the deployed ``/v1`` stage prefix, and turns every failure
into the uniform ``{"error": ...}`` envelope.
"""

from typing import Iterable

from aws_lambda_powertools.event_handler import APIGatewayRestResolver, Response
from aws_lambda_powertools.event_handler.exceptions import NotFoundError
from aws_lambda_powertools.metrics import MetricUnit

from finsight.dal.errors import DatabaseConnectionError
from finsight.handlers.utils.errors import (
    BaseServiceError,
    MethodNotAllowedError,
    UnauthorizedError,
    log_error_metrics,
)
from finsight.handlers.utils.identity import caller_identity
from finsight.handlers.utils.observability import logger, metrics
from finsight.handlers.utils.response import build_error_response

# API path constants
API_PREFIX = '/v1'
USERS_PATH = '/users'
ACCOUNTS_PATH = '/accounts'
CATEGORIES_PATH = '/categories'
TRANSACTIONS_PATH = '/transactions'
BUDGETS_PATH = '/budgets'
HEALTH_PATH = '/health'


def _strip_prefix(path: str) -> str:
    if path == API_PREFIX or path.startswith(f'{API_PREFIX}/'):
        path = path[len(API_PREFIX):] or '/'
    return path.rstrip('/') or '/'


def is_known_path(path: str, collection_paths: Iterable[str], item_routes: bool = True) -> bool:
    """True for a served collection path or, with ``item_routes``, a single-item path below it."""
    path = _strip_prefix(path)
    for collection in collection_paths:
        if path == collection:
            return True
        if not item_routes:
            continue
        item = path[len(collection) + 1:] if path.startswith(f'{collection}/') else ''
        if item and '/' not in item:
            return True
    return False


def build_resolver(
    collection_paths: Iterable[str],
    item_routes: bool = True,
    require_identity: bool = True,
) -> APIGatewayRestResolver:
    """
    Create a resolver with the shared error handling registered.

    Args:
        collection_paths: Paths this function serves
        item_routes: Whether one segment below a collection path is an item path
        require_identity: Whether unmatched requests must carry a caller
            identity before method errors are reported

    Returns:
        Configured API Gateway REST resolver
    """
    known_paths = tuple(collection_paths)
    app = APIGatewayRestResolver(strip_prefixes=[API_PREFIX])

    @app.exception_handler(BaseServiceError)
    def handle_service_error(ex: BaseServiceError) -> Response:
        log_error_metrics(ex)
        return build_error_response(ex.status_code, ex.user_message)

    @app.exception_handler(DatabaseConnectionError)
    def handle_connection_error(ex: DatabaseConnectionError) -> Response:
        logger.error('Database connection error', extra={'error': ex.message})
        metrics.add_metric(name='ErrorCount', unit=MetricUnit.Count, value=1)
        metrics.add_metric(name='DatabaseConnectionError', unit=MetricUnit.Count, value=1)
        return build_error_response(500, 'Database connection error')

    @app.exception_handler(Exception)
    def handle_unexpected_error(ex: Exception) -> Response:
        logger.exception('Unexpected error in route', extra={'error_type': type(ex).__name__})
        metrics.add_metric(name='ErrorCount', unit=MetricUnit.Count, value=1)
        metrics.add_metric(name='UnexpectedError', unit=MetricUnit.Count, value=1)
        return build_error_response(500, 'Internal server error')

    @app.not_found
    def handle_not_found(ex: NotFoundError) -> Response:
        event = app.current_event
        if require_identity:
            try:
                caller_identity(event)
            except UnauthorizedError as e:
                log_error_metrics(e)
                return build_error_response(e.status_code, e.user_message)

        if is_known_path(event.path, known_paths, item_routes):
            error = MethodNotAllowedError(event.http_method, event.path)
            log_error_metrics(error)
            return build_error_response(error.status_code, error.user_message)

        logger.warning('Route not found', extra={'path': event.path, 'method': event.http_method})
        return build_error_response(404, 'Not found')

    return app
