"""Unit tests for the process-wide connection provider."""

import threading
import time

import psycopg2
import pytest
from psycopg2.extras import RealDictCursor

from db_fakes import RecordingConnection, make_settings
from finsight.dal.connection import MIN_STATEMENT_TIMEOUT_MS, ConnectionProvider
from finsight.dal.errors import DatabaseConnectionError
from finsight.security.secrets_manager import DatabaseCredentials, SecretNotFoundError


class ConnectRecorder:
    """psycopg2.connect replacement counting calls."""

    def __init__(self, delay: float = 0.0, failures: int = 0) -> None:
        self.calls = []
        self.delay = delay
        self.failures = failures
        self._lock = threading.Lock()

    def __call__(self, **kwargs):
        with self._lock:
            self.calls.append(kwargs)
            failing = len(self.calls) <= self.failures
        if self.delay:
            time.sleep(self.delay)
        if failing:
            raise psycopg2.OperationalError('could not connect to server')
        return RecordingConnection()


class SecretRecorder:
    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def __call__(self, secret_id):
        self.calls.append(secret_id)
        if self.error is not None:
            raise self.error
        return DatabaseCredentials(username='finsight', password='secret')


def _provider(connect, resolver=None, **settings):
    return ConnectionProvider(
        settings_loader=lambda: make_settings(**settings),
        secret_resolver=resolver or SecretRecorder(),
        connect=connect,
    )


class TestConnectionProvider:
    """Test cases for ConnectionProvider."""

    def test_connect_arguments(self):
        connect = ConnectRecorder()
        resolver = SecretRecorder()
        provider = _provider(connect, resolver, DB_PORT=6543)

        conn = provider.get_connection()

        assert resolver.calls == ['arn:test:secret']
        assert connect.calls == [{
            'host': 'db.test.local',
            'port': 6543,
            'dbname': 'finsight',
            'user': 'finsight',
            'password': 'secret',
            'sslmode': 'require',
            'connect_timeout': 5,
            'cursor_factory': RealDictCursor,
        }]
        assert conn.autocommit is True

    def test_connection_is_memoized(self):
        connect = ConnectRecorder()
        provider = _provider(connect)

        first = provider.get_connection()
        second = provider.get_connection()

        assert first is second
        assert len(connect.calls) == 1

    def test_concurrent_cold_start_creates_one_connection(self):
        connect = ConnectRecorder(delay=0.05)
        provider = _provider(connect)
        barrier = threading.Barrier(8)
        results = []

        def worker():
            barrier.wait()
            results.append(provider.get_connection())

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(connect.calls) == 1
        assert len(results) == 8
        assert all(conn is results[0] for conn in results)

    def test_failed_connect_is_not_cached(self):
        connect = ConnectRecorder(failures=1)
        resolver = SecretRecorder()
        provider = _provider(connect, resolver)

        with pytest.raises(DatabaseConnectionError):
            provider.get_connection()

        conn = provider.get_connection()

        assert conn is not None
        assert len(connect.calls) == 2
        # Secrets are re-resolved on the retry
        assert len(resolver.calls) == 2

    def test_secret_failure_raises_connection_error(self):
        connect = ConnectRecorder()
        provider = _provider(connect, SecretRecorder(error=SecretNotFoundError('missing')))

        with pytest.raises(DatabaseConnectionError):
            provider.get_connection()

        assert connect.calls == []

    def test_invalid_settings_raise_connection_error(self):
        def broken_settings():
            raise ValueError('DB_ENDPOINT missing')

        provider = ConnectionProvider(settings_loader=broken_settings, connect=ConnectRecorder())

        with pytest.raises(DatabaseConnectionError):
            provider.get_connection()

    def test_closed_connection_is_rebuilt(self):
        connect = ConnectRecorder()
        provider = _provider(connect)
        first = provider.get_connection()

        first.closed = 2  # server link lost

        second = provider.get_connection()

        assert second is not first
        assert len(connect.calls) == 2

    def test_reset_closes_connection(self):
        provider = _provider(ConnectRecorder())
        conn = provider.get_connection()

        provider.reset()

        assert conn.closed
        assert provider.get_connection() is not conn

    def test_cursor_sets_statement_timeout(self):
        provider = _provider(ConnectRecorder())

        with provider.cursor(2500) as cur:
            cur.execute('SELECT 1')

        statements = provider.get_connection().statements
        assert statements[0] == ('SET statement_timeout = %s', (2500,))
        assert statements[1] == ('SELECT 1', None)

    def test_cursor_without_timeout(self):
        provider = _provider(ConnectRecorder())

        with provider.cursor() as cur:
            cur.execute('SELECT 1')

        assert provider.get_connection().statements == [('SELECT 1', None)]

    def test_statement_timeout_subtracts_margin(self):
        provider = _provider(ConnectRecorder(), STATEMENT_TIMEOUT_MARGIN_MS=500)

        assert provider.statement_timeout_ms(3000) == 2500

    def test_statement_timeout_has_lower_bound(self):
        provider = _provider(ConnectRecorder(), STATEMENT_TIMEOUT_MARGIN_MS=500)

        assert provider.statement_timeout_ms(200) == MIN_STATEMENT_TIMEOUT_MS

    def test_settings_loaded_lazily(self):
        calls = []

        def loader():
            calls.append(1)
            return make_settings()

        provider = ConnectionProvider(settings_loader=loader, connect=ConnectRecorder())

        assert calls == []
        provider.statement_timeout_ms(1000)
        provider.statement_timeout_ms(1000)
        assert calls == [1]
