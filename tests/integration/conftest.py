"""Fixtures for tests against a real PostgreSQL.

Every test here is skipped when the database in PAWPAL_DB_* cannot be
reached. The users and dogs tables are recreated for each test.
"""
import pytest
import pytest_asyncio

from shared.database.errors import ConnectivityError
from shared.database.pool import close_pool, create_pool

SCHEMA = (
    "DROP TABLE IF EXISTS dogs",
    "DROP TABLE IF EXISTS users",
    """
    CREATE TABLE users (
        id SERIAL PRIMARY KEY,
        name VARCHAR(100) NOT NULL,
        email VARCHAR(150) NOT NULL UNIQUE,
        role VARCHAR(10) NOT NULL CHECK (role IN ('owner', 'walker')),
        phone VARCHAR(20),
        location VARCHAR(200),
        profile_image_url VARCHAR(500),
        bio TEXT,
        rating NUMERIC(3, 2) NOT NULL DEFAULT 0 CHECK (rating >= 0 AND rating <= 5),
        total_reviews INTEGER NOT NULL DEFAULT 0 CHECK (total_reviews >= 0),
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        is_active BOOLEAN NOT NULL DEFAULT TRUE
    )
    """,
    """
    CREATE TABLE dogs (
        id SERIAL PRIMARY KEY,
        owner_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        name VARCHAR(50) NOT NULL,
        breed VARCHAR(50),
        age INTEGER CHECK (age >= 0 AND age <= 30),
        size VARCHAR(20) NOT NULL CHECK (size IN ('small', 'medium', 'large', 'extra_large')),
        temperament VARCHAR(200),
        special_needs TEXT,
        medical_notes TEXT,
        profile_image_url VARCHAR(500),
        is_friendly_with_other_dogs BOOLEAN NOT NULL DEFAULT TRUE,
        is_friendly_with_children BOOLEAN NOT NULL DEFAULT TRUE,
        energy_level VARCHAR(10) NOT NULL DEFAULT 'medium'
            CHECK (energy_level IN ('low', 'medium', 'high')),
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        is_active BOOLEAN NOT NULL DEFAULT TRUE
    )
    """,
)


def pytest_collection_modifyitems(items):
    for item in items:
        if "integration" in item.path.parts:
            item.add_marker(pytest.mark.integration)


@pytest_asyncio.fixture
async def live_pool(test_settings):
    """Initialized pool over the test database, or skip."""
    try:
        pool = await create_pool(test_settings)
    except ConnectivityError as e:
        pytest.skip(f"PostgreSQL not reachable: {e}")
    yield pool
    await close_pool(pool)


@pytest_asyncio.fixture
async def schema(live_pool):
    """Fresh users and dogs tables."""
    async with live_pool.connection() as conn:
        for statement in SCHEMA:
            await conn.execute(statement)
    yield live_pool
    async with live_pool.connection() as conn:
        await conn.execute("DROP TABLE IF EXISTS dogs")
        await conn.execute("DROP TABLE IF EXISTS users")
