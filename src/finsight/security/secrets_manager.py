"""
AWS Secrets Manager integration for database credentials.

Resolution is a plain lookup: no caching and no retry. The connection
provider memoizes the connection built from the credentials, so a secret is
only read again after a connection has to be rebuilt.
"""

import json
import time
from typing import Annotated, Any, Dict, Optional, Union

import boto3
from aws_lambda_powertools.metrics import MetricUnit
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from finsight.handlers.utils.observability import logger, metrics, tracer


class SecretsManagerError(Exception):
    """Base exception for secret resolution failures."""
    pass


class SecretNotFoundError(SecretsManagerError):
    """Exception raised when secret is not found."""
    pass


class SecretDecryptionError(SecretsManagerError):
    """Exception raised when a secret cannot be decrypted or has the wrong shape."""
    pass


class SecretResolutionError(SecretsManagerError):
    """Exception raised for any other failure talking to Secrets Manager."""
    pass


class DatabaseCredentials(BaseModel):
    """Username and password stored in the database secret."""

    model_config = ConfigDict(frozen=True)

    username: Annotated[str, Field(min_length=1, description='Database user name')]
    password: Annotated[str, Field(min_length=1, description='Database password', repr=False)]


class AWSSecretsManager:
    """Thin reader over the Secrets Manager ``GetSecretValue`` API."""

    def __init__(self, region_name: str = "us-east-1", endpoint_url: Optional[str] = None):
        """
        Initialize AWS Secrets Manager client.

        Args:
            region_name: AWS region name
            endpoint_url: Custom endpoint URL (for testing)
        """
        self.region_name = region_name
        self.client = boto3.client(
            'secretsmanager',
            region_name=region_name,
            endpoint_url=endpoint_url
        )

    @tracer.capture_method
    def get_secret(self, secret_id: str) -> Union[str, Dict[str, Any]]:
        """
        Get secret value from AWS Secrets Manager.

        Args:
            secret_id: Name or ARN of the secret

        Returns:
            Secret value (parsed JSON dict, or the raw string)

        Raises:
            SecretNotFoundError: If secret doesn't exist
            SecretDecryptionError: If secret cannot be decrypted
            SecretResolutionError: For any other service or transport failure
        """
        start_time = time.time()

        try:
            response = self.client.get_secret_value(SecretId=secret_id)
        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code', 'Unknown')

            if error_code == 'ResourceNotFoundException':
                logger.error("Secret not found", extra={"secret_id": secret_id})
                metrics.add_metric(name="SecretNotFound", unit=MetricUnit.Count, value=1)
                raise SecretNotFoundError(f"Secret '{secret_id}' not found") from e

            if error_code == 'DecryptionFailure':
                logger.error("Secret decryption failed", extra={"secret_id": secret_id})
                metrics.add_metric(name="SecretDecryptionFailed", unit=MetricUnit.Count, value=1)
                raise SecretDecryptionError(f"Failed to decrypt secret '{secret_id}'") from e

            logger.error("Failed to retrieve secret", extra={"secret_id": secret_id, "error_code": error_code})
            metrics.add_metric(name="SecretRetrievalError", unit=MetricUnit.Count, value=1)
            raise SecretResolutionError(f"Failed to retrieve secret '{secret_id}': {error_code}") from e
        except BotoCoreError as e:
            logger.error("Secrets Manager unreachable", extra={"secret_id": secret_id, "error": str(e)})
            metrics.add_metric(name="SecretRetrievalError", unit=MetricUnit.Count, value=1)
            raise SecretResolutionError(f"Failed to retrieve secret '{secret_id}'") from e

        duration_ms = (time.time() - start_time) * 1000
        metrics.add_metric(name="SecretRetrieved", unit=MetricUnit.Count, value=1)
        logger.info(
            "Secret retrieved successfully",
            extra={
                "secret_id": secret_id,
                "version_id": response.get("VersionId"),
                "duration_ms": duration_ms,
            }
        )

        return self._parse_secret_value(response)

    def get_database_credentials(self, secret_id: str) -> DatabaseCredentials:
        """
        Get database credentials from secrets manager.

        Args:
            secret_id: Name or ARN of the database secret

        Returns:
            Validated username/password pair

        Raises:
            SecretNotFoundError: If secret doesn't exist
            SecretDecryptionError: If secret is not a JSON object with username and password
            SecretResolutionError: For any other service or transport failure
        """
        secret_value = self.get_secret(secret_id)

        if not isinstance(secret_value, dict):
            raise SecretDecryptionError("Database secret must be a JSON object")

        try:
            return DatabaseCredentials.model_validate(secret_value)
        except ValidationError as e:
            missing = [".".join(str(part) for part in err["loc"]) for err in e.errors()]
            raise SecretDecryptionError(f"Database secret missing or invalid fields: {missing}") from e

    def _parse_secret_value(self, response: Dict[str, Any]) -> Union[str, Dict[str, Any]]:
        """Parse secret value from AWS response."""
        if 'SecretString' not in response:
            raise SecretDecryptionError("No secret string found in response")

        secret_string = response['SecretString']
        try:
            return json.loads(secret_string)
        except (json.JSONDecodeError, TypeError):
            return secret_string


def get_database_credentials(secret_id: str, region_name: str = "us-east-1") -> DatabaseCredentials:
    """
    Convenience function resolving database credentials with a fresh client.

    Args:
        secret_id: Name or ARN of the database secret
        region_name: AWS region

    Returns:
        Validated username/password pair
    """
    return AWSSecretsManager(region_name=region_name).get_database_credentials(secret_id)
