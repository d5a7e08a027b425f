"""Database reachability probe for the health endpoint."""

from typing import Dict, Optional

from finsight.dal import BaseDalHandler
from finsight.dal.connection import ConnectionProvider
from finsight.handlers.utils.observability import tracer


class HealthDal(BaseDalHandler):
    """Runs a statement that reads no table."""

    def __init__(self, provider: ConnectionProvider) -> None:
        super().__init__(provider, 'health')

    @tracer.capture_method
    def health_check(self, timeout_ms: Optional[int] = None) -> Dict[str, str]:
        """Round-trip a trivial statement to prove the connection is usable."""
        row = self._fetch_one('health_check', 'SELECT 1 AS ok', (), timeout_ms)
        return {'database': 'healthy' if row else 'unhealthy'}
