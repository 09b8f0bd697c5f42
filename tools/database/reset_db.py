#!/usr/bin/env python
"""Reset the PawPal database: drop users and dogs and forget applied migrations."""
import asyncio
import sys
import os

# Add repository root to Python path
repo_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.insert(0, repo_root)

import asyncpg
from config.settings import get_settings


async def reset_db():
    settings = get_settings()
    if settings.environment == "production":
        print("Refusing to reset a production database")
        sys.exit(1)

    conn = await asyncpg.connect(
        host=settings.pawpal_db_host,
        port=settings.pawpal_db_port,
        user=settings.pawpal_db_user,
        password=settings.pawpal_db_password,
        database=settings.pawpal_db_name
    )
    try:
        print(f"Dropping PawPal tables in {settings.pawpal_db_name}...")

        # dogs references users
        await conn.execute("DROP TABLE IF EXISTS dogs CASCADE")
        await conn.execute("DROP TABLE IF EXISTS users CASCADE")

        # Next `alembic upgrade head` starts from scratch
        await conn.execute("DROP TABLE IF EXISTS alembic_version")
    finally:
        await conn.close()
    print("Database reset complete!")


if __name__ == "__main__":
    asyncio.run(reset_db())
