"""
Security utilities for the FinSight handlers.

Caller authentication happens upstream in the API Gateway authorizer; this
package only resolves the credentials the service itself needs.
"""

from .secrets_manager import (
    AWSSecretsManager,
    DatabaseCredentials,
    SecretDecryptionError,
    SecretNotFoundError,
    SecretResolutionError,
    SecretsManagerError,
    get_database_credentials,
)

__all__ = [
    "AWSSecretsManager",
    "DatabaseCredentials",
    "SecretsManagerError",
    "SecretNotFoundError",
    "SecretDecryptionError",
    "SecretResolutionError",
    "get_database_credentials",
]
