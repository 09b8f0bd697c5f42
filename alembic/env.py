"""Async Alembic environment for the PawPal database.

Migrations are raw SQL (op.execute), so there is no target metadata.
The connection URL is built from the same settings the application uses.
"""
import asyncio

from alembic import context
from sqlalchemy.engine import URL
from sqlalchemy.ext.asyncio import create_async_engine

from config.settings import get_settings


def database_url() -> URL:
    settings = get_settings()
    return URL.create(
        "postgresql+asyncpg",
        username=settings.pawpal_db_user,
        password=settings.pawpal_db_password,
        host=settings.pawpal_db_host,
        port=settings.pawpal_db_port,
        database=settings.pawpal_db_name,
    )


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of running it."""
    context.configure(
        url=database_url().render_as_string(hide_password=False),
        target_metadata=None,
        literal_binds=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def _do_run_migrations(connection) -> None:
    context.configure(connection=connection, target_metadata=None)
    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    engine = create_async_engine(database_url())
    async with engine.connect() as connection:
        await connection.run_sync(_do_run_migrations)
    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_async_migrations())
