"""
Budgets Handler - Lambda function for the budgets API.

Every route is scoped to the caller: a budget that belongs to someone else
answers exactly like one that does not exist.
"""

from typing import Any, Dict

from aws_lambda_powertools.logging import correlation_paths
from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.typing import LambdaContext

from finsight.dal.connection import ConnectionProvider
from finsight.dal.resources import BUDGETS
from finsight.handlers.utils.observability import logger, metrics, tracer
from finsight.handlers.utils.resource_controller import ResourceController, register_crud_routes
from finsight.handlers.utils.response import create_api_response
from finsight.handlers.utils.rest_api_resolver import BUDGETS_PATH, build_resolver

provider = ConnectionProvider()
app = build_resolver([BUDGETS_PATH])
controller = ResourceController(app, BUDGETS, provider)
register_crud_routes(app, controller)


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
        tracer.put_annotation("resource", "budgets")

        response = app.resolve(event, context)

        metrics.add_metric(name="RequestSuccess", unit=MetricUnit.Count, value=1)
        return response

    except Exception as e:
        metrics.add_metric(name="RequestError", unit=MetricUnit.Count, value=1)
        logger.exception("Unhandled error in lambda handler", extra={"error": str(e)})

        return create_api_response(status_code=500, body={"error": "Internal server error"})
