"""
Output models for API responses using Pydantic.

Resource routes return the domain models themselves; this module holds the
remaining response shapes.
"""

from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, Field


class MessageOutput(BaseModel):
    """Response model for operations that only acknowledge success."""

    message: Annotated[str, Field(
        description='Human-readable confirmation',
        examples=['Account deleted successfully']
    )]


class HealthCheckOutput(BaseModel):
    """Response model for health check endpoint."""

    status: Annotated[str, Field(
        description='Health status of the service',
        examples=['healthy', 'unhealthy']
    )]

    timestamp: Annotated[datetime, Field(
        description='Timestamp of the health check'
    )]

    version: Annotated[str, Field(
        description='Application version',
        examples=['1.0.0']
    )]

    service: Annotated[str, Field(
        description='Service name',
        examples=['finsight-api']
    )]

    environment: Annotated[str, Field(
        description='Deployment environment',
        examples=['dev', 'staging', 'prod']
    )]

    request_id: Annotated[str, Field(
        description='Request correlation ID',
        examples=['c6af9ac6-7b61-11e6-9a41-93e8deadbeef']
    )]

    checks: Annotated[dict[str, Any] | None, Field(
        default=None,
        description='Per-dependency check results'
    )] = None


class ErrorOutput(BaseModel):
    """Error envelope shared by every failing route."""

    error: Annotated[str, Field(
        description='Message that is safe to show the caller',
        examples=['Unauthorized', 'Invalid request body', 'Account not found']
    )]
