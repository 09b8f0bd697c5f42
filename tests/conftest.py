"""Shared fixtures.

Unit tests run a real DatabasePool around a mocked asyncpg pool, so the
pool's own accounting and error mapping stay under test. Integration tests
use a real PostgreSQL configured by the PAWPAL_DB_* env vars and are
skipped when it cannot be reached.
"""
import os
from unittest.mock import AsyncMock, MagicMock

import asyncpg
import pytest

from config.settings import Settings
from shared.database.pool import DatabasePool
from shared.observability.context import RequestContext


@pytest.fixture
def test_settings() -> Settings:
    """Settings built from env vars with local fallbacks; .env files are ignored."""
    return Settings(
        environment="test",
        app_host="127.0.0.1",
        app_port=8000,
        log_level="DEBUG",
        pawpal_db_host=os.getenv("PAWPAL_DB_HOST", "localhost"),
        pawpal_db_port=int(os.getenv("PAWPAL_DB_PORT", "5432")),
        pawpal_db_user=os.getenv("PAWPAL_DB_USER", "pawpal"),
        pawpal_db_password=os.getenv("PAWPAL_DB_PASSWORD", "pawpal"),
        pawpal_db_name=os.getenv("PAWPAL_DB_NAME", "pawpal_test"),
        pawpal_db_pool_max=2,
        pawpal_db_acquire_timeout=2.0,
        _env_file=None,
    )


@pytest.fixture
def request_context():
    """Create a test request context."""
    return RequestContext(
        trace_id="t1234567890abcdef1234",
        trace_source="TEST:test",
        request_id="r1234567890abcdef1234",
        request_source="TEST:test",
        span_id="s12345678",
        span_source="TEST:test"
    )


@pytest.fixture
def mock_conn():
    """Create a mock database connection with an explicit transaction."""
    conn = AsyncMock(spec=asyncpg.Connection)
    tx = AsyncMock()
    conn.transaction = MagicMock(return_value=tx)
    return conn


@pytest.fixture
def mock_pool(mock_conn):
    """Create a mock asyncpg pool handing out mock_conn."""
    pool = MagicMock(spec=asyncpg.Pool)
    pool.acquire = AsyncMock(return_value=mock_conn)
    pool.release = AsyncMock()
    pool.close = AsyncMock()
    pool.get_size = MagicMock(return_value=1)
    pool.get_idle_size = MagicMock(return_value=1)
    return pool


@pytest.fixture
def db_pool(test_settings, mock_pool):
    """DatabasePool that is initialized around mock_pool."""
    pool = DatabasePool(test_settings)
    pool._pool = mock_pool
    return pool
