"""
Health Handler - Lambda function for the unauthenticated health probe.

Reports whether the database answers a trivial statement. The probe goes
through the same connection provider as every other function, so a healthy
answer also proves the secret and the network path.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from aws_lambda_powertools.event_handler import Response
from aws_lambda_powertools.logging import correlation_paths
from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.typing import LambdaContext

from finsight.dal.connection import ConnectionProvider
from finsight.dal.errors import DataAccessError
from finsight.dal.health_dal import HealthDal
from finsight.handlers.models.env_vars import get_handler_env_vars
from finsight.handlers.utils.observability import logger, metrics, tracer
from finsight.handlers.utils.resource_controller import statement_timeout_ms
from finsight.handlers.utils.response import build_response, create_api_response
from finsight.handlers.utils.rest_api_resolver import HEALTH_PATH, build_resolver
from finsight.models.output import HealthCheckOutput

provider = ConnectionProvider()
app = build_resolver([HEALTH_PATH], item_routes=False, require_identity=False)
health_dal = HealthDal(provider)

UNKNOWN = 'unknown'


@app.get(HEALTH_PATH)
@tracer.capture_method
def health_check() -> Response:
    """
    Health check endpoint.

    Returns:
        200 when configuration loads and the database answers, 503 otherwise
    """
    try:
        checks = health_dal.health_check(statement_timeout_ms(app, provider))
    except DataAccessError as e:
        logger.error("Health check failed", extra={"error": e.message})
        checks = {"database": "unhealthy", "error": type(e).__name__}

    try:
        settings = get_handler_env_vars()
    except ValueError as e:
        logger.error("Invalid configuration", extra={"error": str(e)})
        settings = None
        checks = {**checks, "configuration": "invalid"}

    healthy = settings is not None and checks.get("database") == "healthy"
    if healthy:
        metrics.add_metric(name="HealthCheckSuccess", unit=MetricUnit.Count, value=1)
    else:
        metrics.add_metric(name="HealthCheckFailure", unit=MetricUnit.Count, value=1)

    output = HealthCheckOutput(
        status="healthy" if healthy else "unhealthy",
        timestamp=datetime.now(timezone.utc),
        version=settings.APP_VERSION if settings else UNKNOWN,
        service=settings.POWERTOOLS_SERVICE_NAME if settings else logger.service,
        environment=settings.ENVIRONMENT if settings else UNKNOWN,
        request_id=app.lambda_context.aws_request_id,
        checks=checks,
    )
    return build_response(200 if healthy else 503, output)


@tracer.capture_lambda_handler
@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST, clear_state=True)
@metrics.log_metrics(capture_cold_start_metric=True)
def lambda_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    try:
        metrics.add_metric(name="RequestCount", unit=MetricUnit.Count, value=1)
        return app.resolve(event, context)
    except Exception as e:
        logger.exception("Unhandled error in lambda handler", extra={"error": str(e)})
        return create_api_response(status_code=500, body={"error": "Internal server error"})
