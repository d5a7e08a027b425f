"""
Service error taxonomy for the FinSight handlers.

Every failure a handler can surface is a ``BaseServiceError`` carrying the HTTP
status, an error code for logs and metrics, and the message that is safe to
return to the caller. Internal details stay in ``message`` and are only logged.
"""

import uuid
from enum import Enum
from typing import Any, Dict, Optional

from aws_lambda_powertools.metrics import MetricUnit

from finsight.handlers.utils.observability import logger, metrics, tracer


class ErrorCategory(str, Enum):
    """Error categories for classification."""
    VALIDATION = "VALIDATION"
    SECURITY = "SECURITY"
    BUSINESS_LOGIC = "BUSINESS_LOGIC"
    INFRASTRUCTURE = "INFRASTRUCTURE"


class BaseServiceError(Exception):
    """Base exception class for service errors."""

    def __init__(
        self,
        message: str,
        error_code: str,
        status_code: int = 500,
        category: ErrorCategory = ErrorCategory.INFRASTRUCTURE,
        user_message: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.category = category
        self.user_message = user_message or "Internal server error"
        self.error_id = str(uuid.uuid4())

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging."""
        return {
            "error_id": self.error_id,
            "error_code": self.error_code,
            "status_code": self.status_code,
            "message": self.message,
            "user_message": self.user_message,
            "category": self.category.value,
        }


class UnauthorizedError(BaseServiceError):
    """Raised when the caller identity is missing or malformed."""

    def __init__(self, message: str = "Caller identity missing from authorizer context"):
        super().__init__(
            message=message,
            error_code="UNAUTHORIZED",
            status_code=401,
            category=ErrorCategory.SECURITY,
            user_message="Unauthorized",
        )


class BadRequestError(BaseServiceError):
    """Raised when a request body cannot be parsed into the expected shape."""

    def __init__(self, message: str = "Request body failed to parse"):
        super().__init__(
            message=message,
            error_code="INVALID_REQUEST_BODY",
            status_code=400,
            category=ErrorCategory.VALIDATION,
            user_message="Invalid request body",
        )


class ResourceNotFoundError(BaseServiceError):
    """Raised when an ownership-scoped lookup or mutation matches no row."""

    def __init__(self, resource_type: str, resource_id: Optional[str] = None):
        message = f"{resource_type} with ID '{resource_id}' not found"
        super().__init__(
            message=message,
            error_code="RESOURCE_NOT_FOUND",
            status_code=404,
            category=ErrorCategory.BUSINESS_LOGIC,
            user_message=f"{resource_type} not found",
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class MethodNotAllowedError(BaseServiceError):
    """Raised when a known path is called with an unsupported HTTP method."""

    def __init__(self, method: str, path: str):
        super().__init__(
            message=f"Method {method} not allowed on {path}",
            error_code="METHOD_NOT_ALLOWED",
            status_code=405,
            category=ErrorCategory.VALIDATION,
            user_message="Method not allowed",
        )


class InternalServiceError(BaseServiceError):
    """Raised when a database, secret or query failure stops an operation."""

    def __init__(self, user_message: str, message: Optional[str] = None):
        super().__init__(
            message=message or user_message,
            error_code="INTERNAL_SERVER_ERROR",
            status_code=500,
            category=ErrorCategory.INFRASTRUCTURE,
            user_message=user_message,
        )


@tracer.capture_method
def log_error_metrics(error: BaseServiceError) -> None:
    """Log error metrics for monitoring and alerting."""

    metrics.add_metric(name="ErrorCount", unit=MetricUnit.Count, value=1)
    metrics.add_metric(name=f"Error{error.category.value}Count", unit=MetricUnit.Count, value=1)

    tracer.put_annotation("error_code", error.error_code)
    tracer.put_metadata("error_details", error.to_dict())

    log = logger.error if error.status_code >= 500 else logger.warning
    log(
        "Service error occurred",
        extra={
            "error_id": error.error_id,
            "error_code": error.error_code,
            "status_code": error.status_code,
            "error_category": error.category.value,
            "error_message": error.message,
        },
    )


def format_error_response(error: BaseServiceError) -> Dict[str, Any]:
    """Format error for API response."""
    return {"error": error.user_message}
