"""
Uniform response envelope for every FinSight route.

Success and error responses share the same JSON content type and the same
fixed CORS headers, whatever the outcome of the request.
"""

import json
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from aws_lambda_powertools.event_handler import Response, content_types
from pydantic import BaseModel

from finsight.models.output import ErrorOutput

CORS_HEADERS: Dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type,Authorization",
    "Access-Control-Allow-Methods": "GET,POST,PUT,DELETE,OPTIONS",
}


def _to_jsonable(payload: Any) -> Any:
    if isinstance(payload, BaseModel):
        return payload.model_dump(mode="json", exclude_none=True)
    if isinstance(payload, (list, tuple)):
        return [_to_jsonable(item) for item in payload]
    if isinstance(payload, dict):
        return {key: _to_jsonable(value) for key, value in payload.items()}
    return payload


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return str(value)


def serialize_body(payload: Any) -> str:
    """Serialize models, lists of models and plain dicts to a JSON string."""
    return json.dumps(_to_jsonable(payload), default=_json_default)


def build_response(
    status_code: int,
    payload: Any,
    headers: Optional[Dict[str, str]] = None,
) -> Response:
    """
    Wrap a payload into the uniform API Gateway response envelope.

    Args:
        status_code: HTTP status code
        payload: Pydantic model, list of models or JSON-compatible value
        headers: Extra headers merged over the CORS defaults

    Returns:
        Powertools Response with a pre-serialized JSON body
    """
    response_headers = dict(CORS_HEADERS)
    if headers:
        response_headers.update(headers)

    return Response(
        status_code=status_code,
        content_type=content_types.APPLICATION_JSON,
        body=serialize_body(payload),
        headers=response_headers,
    )


def build_error_response(status_code: int, message: str) -> Response:
    """Create an error response with an ``{"error": message}`` body."""
    return build_response(status_code, ErrorOutput(error=message))


def create_api_response(status_code: int, body: Any) -> Dict[str, Any]:
    """
    Create the same envelope as a raw API Gateway proxy dict.

    Used only where no resolver is available to build the response, such as
    the last-resort handler wrapped around ``app.resolve``.
    """
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": content_types.APPLICATION_JSON, **CORS_HEADERS},
        "body": body if isinstance(body, str) else serialize_body(body),
        "isBase64Encoded": False,
    }
