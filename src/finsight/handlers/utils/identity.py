"""
Caller identity extraction from the API Gateway authorizer context.

The upstream Lambda authorizer verifies the caller's token and injects the
verified identity as ``requestContext.authorizer.userId``. The context is
validated once here; anything missing or of the wrong shape is rejected.
"""

from typing import Annotated, Any, Dict

from aws_lambda_powertools.utilities.data_classes import APIGatewayProxyEvent
from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError

from finsight.handlers.utils.errors import UnauthorizedError


class CallerIdentity(BaseModel):
    """Verified identity claim injected by the upstream authorizer."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    user_id: Annotated[StrictStr, Field(
        alias='userId',
        min_length=1,
        description='External identity id (e.g. Auth0 subject) of the caller',
        examples=['auth0|64f1c2e9a1b2c3d4e5f60718']
    )]


def caller_identity(event: APIGatewayProxyEvent) -> CallerIdentity:
    """
    Extract the caller identity from the authorizer context.

    Args:
        event: Current API Gateway proxy event

    Returns:
        Validated caller identity

    Raises:
        UnauthorizedError: If the authorizer context is absent or malformed
    """
    request_context: Dict[str, Any] = event.raw_event.get("requestContext") or {}
    authorizer = request_context.get("authorizer")
    if not isinstance(authorizer, dict):
        raise UnauthorizedError("Authorizer context missing")

    try:
        return CallerIdentity.model_validate(authorizer)
    except ValidationError as e:
        raise UnauthorizedError(f"Authorizer context rejected: {e.error_count()} error(s)") from e
