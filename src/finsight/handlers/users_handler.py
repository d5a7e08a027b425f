"""
Users Handler - Lambda function for the caller's own profile.

The profile is looked up by the external identity the authorizer asserted.
A first ``GET`` provisions a placeholder user so that every later request,
including those of the other resource functions, finds a row.
"""

from typing import Any, Dict

from aws_lambda_powertools.event_handler import Response
from aws_lambda_powertools.logging import correlation_paths
from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.typing import LambdaContext

from finsight.dal import UserStore
from finsight.dal.connection import ConnectionProvider
from finsight.dal.errors import DataAccessError, DatabaseConnectionError
from finsight.dal.users_dal import UsersDal
from finsight.handlers.utils.errors import InternalServiceError, ResourceNotFoundError
from finsight.handlers.utils.observability import logger, metrics, tracer
from finsight.handlers.utils.resource_controller import identify_caller, parse_body, statement_timeout_ms
from finsight.handlers.utils.response import build_response, create_api_response
from finsight.handlers.utils.rest_api_resolver import USERS_PATH, build_resolver
from finsight.models.input import UpdateUserRequest

CURRENT_USER_PATH = f'{USERS_PATH}/me'

provider = ConnectionProvider()
app = build_resolver([USERS_PATH, CURRENT_USER_PATH], item_routes=False)
users_dal: UserStore = UsersDal(provider)


@app.get(USERS_PATH)
@app.get(CURRENT_USER_PATH)
@tracer.capture_method
def get_current_user() -> Response:
    """
    Return the caller's profile, creating a placeholder on first call.

    Returns:
        200 with the user
    """
    identity = identify_caller(app)
    timeout_ms = statement_timeout_ms(app, provider)
    tracer.put_annotation('operation', 'get_user')

    try:
        user = users_dal.get_by_identity(identity.user_id, timeout_ms)
    except DatabaseConnectionError:
        raise
    except DataAccessError as e:
        raise InternalServiceError('Failed to fetch user', message=e.message) from e

    if user is None:
        logger.info('No user for identity, provisioning placeholder')
        try:
            user = users_dal.create_placeholder(identity.user_id, timeout_ms)
        except DatabaseConnectionError:
            raise
        except DataAccessError as e:
            raise InternalServiceError('Failed to create user', message=e.message) from e

    logger.append_keys(user_id=user.id)
    return build_response(200, user)


@app.put(USERS_PATH)
@app.put(CURRENT_USER_PATH)
@tracer.capture_method
def update_current_user() -> Response:
    """
    Update the caller's name and/or email.

    Returns:
        200 with the updated user, 404 when the caller has no user row yet
    """
    identity = identify_caller(app)
    request = parse_body(app, UpdateUserRequest)
    tracer.put_annotation('operation', 'update_user')

    try:
        user = users_dal.update_profile(identity.user_id, request.changes(), statement_timeout_ms(app, provider))
    except DatabaseConnectionError:
        raise
    except DataAccessError as e:
        raise InternalServiceError('Failed to update user', message=e.message) from e

    if user is None:
        raise ResourceNotFoundError('User', identity.user_id)

    metrics.add_metric(name='UserUpdated', unit=MetricUnit.Count, value=1)
    return build_response(200, user)


@tracer.capture_lambda_handler
@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST, clear_state=True)
@metrics.log_metrics(capture_cold_start_metric=True)
def lambda_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    """
    Main Lambda handler function.

    Args:
        event: API Gateway proxy event
        context: Lambda context object

    Returns:
        API Gateway proxy response
    """
    try:
        metrics.add_metric(name="RequestCount", unit=MetricUnit.Count, value=1)
        tracer.put_annotation("resource", "users")

        response = app.resolve(event, context)

        metrics.add_metric(name="RequestSuccess", unit=MetricUnit.Count, value=1)
        return response

    except Exception as e:
        metrics.add_metric(name="RequestError", unit=MetricUnit.Count, value=1)
        logger.exception("Unhandled error in lambda handler", extra={"error": str(e)})

        return create_api_response(status_code=500, body={"error": "Internal server error"})
