"""
Pytest configuration and shared fixtures for the FinSight API.

This module provides common test fixtures and configuration used across
unit, integration, and end-to-end tests: environment, API Gateway events,
Lambda contexts, and in-memory stand-ins for the data access layer.
"""

import json
import os
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

import pytest

# Powertools and the environment model read these when the handler modules are
# imported during collection, so they have to be in place before any fixture runs.
TEST_ENVIRONMENT = {
    "AWS_DEFAULT_REGION": "us-east-1",
    "AWS_REGION": "us-east-1",
    "AWS_ACCESS_KEY_ID": "test",
    "AWS_SECRET_ACCESS_KEY": "test",
    "DB_SECRET_ARN": "arn:aws:secretsmanager:us-east-1:123456789012:secret:finsight-db-test",
    "DB_ENDPOINT": "finsight-test.cluster.local",
    "ENVIRONMENT": "test",
    "APP_VERSION": "test-1.0.0",
    "POWERTOOLS_SERVICE_NAME": "finsight-api-test",
    "POWERTOOLS_METRICS_NAMESPACE": "FinSightTest",
    "POWERTOOLS_TRACE_DISABLED": "true",  # Disable X-Ray in tests
    "LOG_LEVEL": "DEBUG",
    "LAMBDA_ENV_MODELER_DISABLE_CACHE": "true",
}
os.environ.update(TEST_ENVIRONMENT)

from finsight.dal.errors import DataAccessError  # noqa: E402
from finsight.dal.resources import ResourceDefinition  # noqa: E402
from finsight.handlers.models.env_vars import get_handler_env_vars  # noqa: E402
from finsight.handlers.utils.observability import metrics  # noqa: E402
from finsight.models.input import CreateRequest  # noqa: E402
from finsight.models.user import PLACEHOLDER_NAME, User, placeholder_email  # noqa: E402

DEFAULT_IDENTITY = "auth0|user-1"
OTHER_IDENTITY = "auth0|user-2"


# Test environment configuration
@pytest.fixture(scope="session", autouse=True)
def test_environment():
    """Keep the test environment variables in place for the whole session."""
    os.environ.update(TEST_ENVIRONMENT)
    yield TEST_ENVIRONMENT


@pytest.fixture(autouse=True)
def reset_metrics():
    """Drop metrics recorded outside a flushed handler invocation."""
    yield
    metrics.clear_metrics()


def _now() -> datetime:
    return datetime.now(timezone.utc)


# In-memory data access fakes
class FakeUserStore:
    """Thread-safe stand-in for UsersDal keyed by external identity."""

    def __init__(self) -> None:
        self.users: Dict[str, User] = {}
        self.created = 0
        self.error: Optional[DataAccessError] = None
        self._lock = threading.Lock()

    def _check(self) -> None:
        if self.error is not None:
            raise self.error

    def get_by_identity(self, identity: str, timeout_ms: Optional[int] = None) -> Optional[User]:
        self._check()
        return self.users.get(identity)

    def create_placeholder(self, identity: str, timeout_ms: Optional[int] = None) -> User:
        self._check()
        # Mirrors the unique auth0_user_id upsert: racers all get the same row
        with self._lock:
            if identity not in self.users:
                now = _now()
                self.users[identity] = User(
                    id=str(uuid.uuid4()),
                    auth0_user_id=identity,
                    email=placeholder_email(identity),
                    name=PLACEHOLDER_NAME,
                    created_at=now,
                    updated_at=now,
                )
                self.created += 1
            return self.users[identity]

    def get_or_create(self, identity: str, timeout_ms: Optional[int] = None) -> User:
        return self.get_by_identity(identity, timeout_ms) or self.create_placeholder(identity, timeout_ms)

    def resolve_internal_id(self, identity: str, timeout_ms: Optional[int] = None) -> str:
        return self.get_or_create(identity, timeout_ms).id

    def update_profile(self, identity: str, changes: Dict[str, Any],
                       timeout_ms: Optional[int] = None) -> Optional[User]:
        self._check()
        user = self.users.get(identity)
        if user is None:
            return None
        updated = user.model_copy(update={**changes, "updated_at": _now()})
        self.users[identity] = updated
        return updated


class FakeOwnedStore:
    """In-memory stand-in for OwnedResourceDal with the same ownership rules."""

    def __init__(self, resource: ResourceDefinition) -> None:
        self.resource = resource
        self.rows: List[Any] = []
        self.error: Optional[DataAccessError] = None
        self.calls: List[str] = []

    def _check(self, operation: str) -> None:
        self.calls.append(operation)
        if self.error is not None:
            raise self.error

    def _find(self, user_id: str, resource_id: str) -> Optional[int]:
        for index, row in enumerate(self.rows):
            if row.id == resource_id and row.user_id == user_id:
                return index
        return None

    def list(self, user_id: str, timeout_ms: Optional[int] = None) -> List[Any]:
        self._check("list")
        owned = [row for row in self.rows if row.user_id == user_id]
        return sorted(owned, key=lambda row: row.created_at, reverse=True)

    def get(self, user_id: str, resource_id: str, timeout_ms: Optional[int] = None) -> Optional[Any]:
        self._check("get")
        index = self._find(user_id, resource_id)
        return self.rows[index] if index is not None else None

    def create(self, user_id: str, request: CreateRequest, timeout_ms: Optional[int] = None) -> Any:
        self._check("create")
        values = request.values()
        for column, default in self.resource.create_defaults(get_handler_env_vars()).items():
            if values.get(column) is None:
                values[column] = default
        now = _now()
        row = self.resource.model.model_validate({
            **values,
            "id": str(uuid.uuid4()),
            "user_id": user_id,
            "created_at": now,
            "updated_at": now,
        })
        self.rows.append(row)
        return row

    def update(self, user_id: str, resource_id: str, changes: Dict[str, Any],
               timeout_ms: Optional[int] = None) -> Optional[Any]:
        self._check("update")
        index = self._find(user_id, resource_id)
        if index is None:
            return None
        self.rows[index] = self.rows[index].model_copy(update={**changes, "updated_at": _now()})
        return self.rows[index]

    def delete(self, user_id: str, resource_id: str, timeout_ms: Optional[int] = None) -> bool:
        self._check("delete")
        index = self._find(user_id, resource_id)
        if index is None:
            return False
        del self.rows[index]
        return True


@pytest.fixture
def user_store() -> FakeUserStore:
    """Fresh in-memory user store."""
    return FakeUserStore()


@pytest.fixture
def owned_store_factory() -> Callable[[ResourceDefinition], FakeOwnedStore]:
    """Build an in-memory store for a resource definition."""
    return FakeOwnedStore


# API Gateway fixtures
@pytest.fixture
def api_gateway_event() -> Callable[..., Dict[str, Any]]:
    """
    Factory for API Gateway REST proxy events.

    ``identity=None`` produces an event without an authorizer context.
    """

    def make_event(
        method: str,
        path: str,
        body: Any = None,
        identity: Optional[str] = DEFAULT_IDENTITY,
        path_parameters: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        if body is not None and not isinstance(body, str):
            body = json.dumps(body)

        request_context: Dict[str, Any] = {
            "requestId": f"test-request-{uuid.uuid4()}",
            "accountId": "123456789012",
            "stage": "v1",
            "httpMethod": method,
            "path": path,
            "protocol": "HTTP/1.1",
            "requestTimeEpoch": 1704110400000,
            "identity": {
                "sourceIp": "127.0.0.1",
                "userAgent": "test-agent/1.0",
            },
        }
        if identity is not None:
            request_context["authorizer"] = {"userId": identity}

        return {
            "resource": path,
            "httpMethod": method,
            "path": path,
            "headers": {"Content-Type": "application/json"},
            "multiValueHeaders": {"Content-Type": ["application/json"]},
            "queryStringParameters": None,
            "multiValueQueryStringParameters": None,
            "pathParameters": path_parameters,
            "stageVariables": None,
            "requestContext": request_context,
            "body": body,
            "isBase64Encoded": False,
        }

    return make_event


class FakeLambdaContext:
    """Minimal LambdaContext with a fixed amount of remaining time."""

    function_name = "finsight-test-function"
    function_version = "$LATEST"
    memory_limit_in_mb = 512
    invoked_function_arn = "arn:aws:lambda:us-east-1:123456789012:function:finsight-test-function"
    aws_request_id = "test-request-id-123"
    log_group_name = "/aws/lambda/finsight-test-function"
    log_stream_name = "2024/01/01/[$LATEST]test123"

    def __init__(self, remaining_ms: int = 30000) -> None:
        self.remaining_ms = remaining_ms

    def get_remaining_time_in_millis(self) -> int:
        return self.remaining_ms


@pytest.fixture
def lambda_context() -> FakeLambdaContext:
    """Create a Lambda context for testing."""
    return FakeLambdaContext()


def response_header(response: Dict[str, Any], name: str) -> Optional[str]:
    """Read a header from a proxy response, single or multi-value."""
    headers = response.get("headers") or {}
    if name in headers:
        return headers[name]
    values = (response.get("multiValueHeaders") or {}).get(name)
    return values[0] if values else None


def response_json(response: Dict[str, Any]) -> Any:
    """Decode a proxy response body."""
    return json.loads(response["body"])


@pytest.fixture
def read_header() -> Callable[[Dict[str, Any], str], Optional[str]]:
    return response_header


@pytest.fixture
def read_body() -> Callable[[Dict[str, Any]], Any]:
    return response_json


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "e2e: End-to-end tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        path = str(item.fspath)
        if f"{os.sep}unit{os.sep}" in path:
            item.add_marker(pytest.mark.unit)
        elif f"{os.sep}integration{os.sep}" in path:
            item.add_marker(pytest.mark.integration)
        elif f"{os.sep}e2e{os.sep}" in path:
            item.add_marker(pytest.mark.e2e)
