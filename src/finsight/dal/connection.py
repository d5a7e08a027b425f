"""
Process-wide PostgreSQL connection for the FinSight handlers.

A warm Lambda container serves many invocations, so the connection is built
once and reused. Building it needs the database secret, which makes the first
request of a container the slow one.
"""

import threading
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional

import psycopg2
from aws_lambda_powertools.metrics import MetricUnit
from psycopg2.extras import RealDictCursor

from finsight.dal.errors import DatabaseConnectionError
from finsight.handlers.models.env_vars import FinsightEnvVars, get_handler_env_vars
from finsight.handlers.utils.observability import logger, metrics, tracer
from finsight.security.secrets_manager import AWSSecretsManager, DatabaseCredentials, SecretsManagerError

# Lower bound so a nearly expired invocation still sends a valid timeout
MIN_STATEMENT_TIMEOUT_MS = 100

SecretResolver = Callable[[str], DatabaseCredentials]


class ConnectionProvider:
    """
    Owns exactly one live database connection per process.

    Initialization is lazy and guarded by a lock with double-checked locking,
    so concurrent cold-start callers end up sharing a single connection. A
    failed initialization caches nothing; the next caller starts over. A
    connection psycopg2 has marked ``closed`` is dropped and rebuilt.
    """

    def __init__(
        self,
        settings_loader: Callable[[], FinsightEnvVars] = get_handler_env_vars,
        secret_resolver: Optional[SecretResolver] = None,
        connect: Callable[..., Any] = psycopg2.connect,
    ) -> None:
        """
        Initialize the provider without touching the network.

        Args:
            settings_loader: Returns validated environment settings
            secret_resolver: Maps a secret id to database credentials;
                defaults to AWS Secrets Manager in the configured region
            connect: psycopg2-compatible connect function
        """
        self._settings_loader = settings_loader
        self._secret_resolver = secret_resolver
        self._connect = connect
        self._lock = threading.Lock()
        self._connection: Optional[Any] = None
        self._settings: Optional[FinsightEnvVars] = None

    @property
    def settings(self) -> FinsightEnvVars:
        """Environment settings, loaded on first use."""
        if self._settings is None:
            try:
                self._settings = self._settings_loader()
            except ValueError as e:
                raise DatabaseConnectionError(f'Invalid database configuration: {e}') from e
        return self._settings

    def get_connection(self) -> Any:
        """
        Return the shared connection, creating it on first use.

        Raises:
            DatabaseConnectionError: If configuration, credentials or connect fail
        """
        conn = self._connection
        if conn is not None and not conn.closed:
            return conn

        with self._lock:
            conn = self._connection
            if conn is not None and not conn.closed:
                return conn
            if conn is not None:
                logger.warning('Discarding closed database connection')
                self._connection = None

            self._connection = self._open()
            return self._connection

    def reset(self) -> None:
        """Close and forget the current connection, if any."""
        with self._lock:
            conn, self._connection = self._connection, None
        if conn is not None and not conn.closed:
            conn.close()

    def statement_timeout_ms(self, remaining_time_ms: int) -> int:
        """Turn the invocation's remaining time into a statement timeout."""
        return max(remaining_time_ms - self.settings.STATEMENT_TIMEOUT_MARGIN_MS, MIN_STATEMENT_TIMEOUT_MS)

    @contextmanager
    def cursor(self, timeout_ms: Optional[int] = None) -> Iterator[Any]:
        """
        Yield a dict-row cursor on the shared connection.

        Args:
            timeout_ms: When given, bounds every following statement on this
                cursor via ``statement_timeout``
        """
        conn = self.get_connection()
        with conn.cursor() as cur:
            if timeout_ms is not None:
                cur.execute('SET statement_timeout = %s', (int(timeout_ms),))
            yield cur

    @tracer.capture_method
    def _open(self) -> Any:
        settings = self.settings
        resolver = self._secret_resolver
        if resolver is None:
            resolver = AWSSecretsManager(region_name=settings.AWS_REGION).get_database_credentials

        try:
            credentials = resolver(settings.DB_SECRET_ARN)
        except SecretsManagerError as e:
            logger.error('Failed to resolve database credentials', extra={'error': str(e)})
            raise DatabaseConnectionError('Failed to resolve database credentials') from e

        try:
            conn = self._connect(
                host=settings.DB_ENDPOINT,
                port=settings.DB_PORT,
                dbname=settings.DB_NAME,
                user=credentials.username,
                password=credentials.password,
                sslmode=settings.DB_SSL_MODE,
                connect_timeout=settings.DB_CONNECT_TIMEOUT,
                cursor_factory=RealDictCursor,
            )
            conn.autocommit = True
        except psycopg2.Error as e:
            logger.error('Failed to connect to database', extra={
                'host': settings.DB_ENDPOINT,
                'dbname': settings.DB_NAME,
                'error': str(e),
            })
            raise DatabaseConnectionError('Failed to connect to database') from e

        metrics.add_metric(name='DatabaseConnectionOpened', unit=MetricUnit.Count, value=1)
        logger.info('Database connection established', extra={'host': settings.DB_ENDPOINT, 'dbname': settings.DB_NAME})
        return conn
