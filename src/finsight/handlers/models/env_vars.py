"""
Environment variable models for type-safe configuration.

This module defines the Pydantic model for the environment variables shared by
every FinSight Lambda function. Values are parsed and validated with
aws-lambda-env-modeler the first time a request needs them, never at import.
"""

from typing import Annotated

from aws_lambda_env_modeler import get_environment_variables
from pydantic import BaseModel, Field


class FinsightEnvVars(BaseModel):
    """Environment variables for the FinSight Lambda handlers."""

    # Secrets Manager secret holding the database username/password
    DB_SECRET_ARN: Annotated[str, Field(
        description='ARN or name of the database credentials secret',
        min_length=1
    )]

    # Database host (RDS instance endpoint)
    DB_ENDPOINT: Annotated[str, Field(
        description='Hostname of the PostgreSQL instance',
        min_length=1
    )]

    DB_PORT: Annotated[int, Field(
        default=5432,
        description='PostgreSQL port',
        ge=1,
        le=65535
    )] = 5432

    DB_NAME: Annotated[str, Field(
        default='finsight',
        description='Database name',
        min_length=1
    )] = 'finsight'

    # Transport encryption is required against RDS
    DB_SSL_MODE: Annotated[str, Field(
        default='require',
        description='libpq sslmode for the database connection',
        pattern=r'^(require|verify-ca|verify-full)$'
    )] = 'require'

    DB_CONNECT_TIMEOUT: Annotated[int, Field(
        default=5,
        description='Database connection timeout in seconds',
        ge=1,
        le=300
    )] = 5

    # Subtracted from the invocation's remaining time before it becomes statement_timeout
    STATEMENT_TIMEOUT_MARGIN_MS: Annotated[int, Field(
        default=500,
        description='Safety margin in milliseconds kept free for building the response',
        ge=0,
        le=60000
    )] = 500

    # AWS region
    AWS_REGION: Annotated[str, Field(
        default='us-east-1',
        description='AWS region for service deployment'
    )] = 'us-east-1'

    # Environment name (dev, staging, prod)
    ENVIRONMENT: Annotated[str, Field(
        default='dev',
        description='Deployment environment name',
        pattern=r'^(dev|staging|prod|test)$'
    )] = 'dev'

    # Application version
    APP_VERSION: Annotated[str, Field(
        default='1.0.0',
        description='Application version string'
    )] = '1.0.0'

    # Applied to new accounts created without a currency
    DEFAULT_CURRENCY: Annotated[str, Field(
        default='JPY',
        description='ISO 4217 code used when an account payload omits currency',
        pattern=r'^[A-Z]{3}$'
    )] = 'JPY'

    # Service name for observability
    POWERTOOLS_SERVICE_NAME: Annotated[str, Field(
        default='finsight-api',
        description='Service name for AWS Powertools'
    )] = 'finsight-api'

    # Metrics namespace
    POWERTOOLS_METRICS_NAMESPACE: Annotated[str, Field(
        default='FinSight',
        description='Namespace for CloudWatch metrics'
    )] = 'FinSight'

    # Log level for AWS Powertools Logger
    LOG_LEVEL: Annotated[str, Field(
        default='INFO',
        description='Log level for application logging',
        pattern=r'^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$'
    )] = 'INFO'

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT == 'prod'


# Utility function to get typed environment variables
def get_handler_env_vars() -> FinsightEnvVars:
    """
    Get typed environment variables for Lambda handlers.

    Returns:
        Validated environment variables model instance

    Raises:
        ValueError: If a required variable is missing or fails validation
    """
    return get_environment_variables(model=FinsightEnvVars)
