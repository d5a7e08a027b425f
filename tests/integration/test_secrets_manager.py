"""
Integration tests for database credential resolution.

Secrets Manager is mocked with moto so the real boto3 calls and error
responses are exercised.
"""

import json

import boto3
import pytest
from moto import mock_aws

from finsight.dal.connection import ConnectionProvider
from finsight.handlers.models.env_vars import FinsightEnvVars
from finsight.security.secrets_manager import (
    AWSSecretsManager,
    DatabaseCredentials,
    SecretDecryptionError,
    SecretNotFoundError,
    SecretsManagerError,
)


@pytest.fixture
def secretsmanager():
    with mock_aws():
        yield boto3.client("secretsmanager", region_name="us-east-1")


def create_secret(client, name, value):
    secret_string = value if isinstance(value, str) else json.dumps(value)
    return client.create_secret(Name=name, SecretString=secret_string)["ARN"]


@pytest.mark.integration
class TestAWSSecretsManager:
    """Test cases for AWSSecretsManager against moto."""

    def test_json_secret_parsed(self, secretsmanager):
        arn = create_secret(secretsmanager, "finsight/db", {"username": "finsight", "password": "s3cret"})

        value = AWSSecretsManager(region_name="us-east-1").get_secret(arn)

        assert value == {"username": "finsight", "password": "s3cret"}

    def test_plain_string_secret(self, secretsmanager):
        create_secret(secretsmanager, "finsight/token", "plain-value")

        assert AWSSecretsManager().get_secret("finsight/token") == "plain-value"

    def test_database_credentials(self, secretsmanager):
        arn = create_secret(secretsmanager, "finsight/db", {
            "username": "finsight",
            "password": "s3cret",
            "engine": "postgres",
            "host": "ignored.example.com",
        })

        credentials = AWSSecretsManager().get_database_credentials(arn)

        assert credentials == DatabaseCredentials(username="finsight", password="s3cret")
        assert "s3cret" not in repr(credentials)

    def test_missing_secret(self, secretsmanager):
        with pytest.raises(SecretNotFoundError):
            AWSSecretsManager().get_secret("finsight/does-not-exist")

    def test_secret_without_password(self, secretsmanager):
        create_secret(secretsmanager, "finsight/db", {"username": "finsight"})

        with pytest.raises(SecretDecryptionError):
            AWSSecretsManager().get_database_credentials("finsight/db")

    def test_non_json_database_secret(self, secretsmanager):
        create_secret(secretsmanager, "finsight/db", "user:password")

        with pytest.raises(SecretDecryptionError):
            AWSSecretsManager().get_database_credentials("finsight/db")

    def test_errors_share_base_class(self, secretsmanager):
        with pytest.raises(SecretsManagerError):
            AWSSecretsManager().get_database_credentials("finsight/missing")


@pytest.mark.integration
class TestProviderWithSecretsManager:
    """The provider resolves credentials through Secrets Manager by default."""

    def test_credentials_passed_to_connect(self, secretsmanager):
        arn = create_secret(secretsmanager, "finsight/db", {"username": "app", "password": "pw"})
        calls = []

        class Conn:
            closed = 0
            autocommit = False

        def connect(**kwargs):
            calls.append(kwargs)
            return Conn()

        provider = ConnectionProvider(settings_loader=lambda: FinsightEnvVars(DB_SECRET_ARN=arn, DB_ENDPOINT="db.test.local"), connect=connect)

        provider.get_connection()

        assert calls[0]["user"] == "app"
        assert calls[0]["password"] == "pw"
        assert calls[0]["host"] == "db.test.local"
