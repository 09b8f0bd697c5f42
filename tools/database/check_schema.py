#!/usr/bin/env python
"""Print the PawPal tables' columns and live/inactive row counts."""
import asyncio
import sys
import os

# Add repository root to Python path
repo_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.insert(0, repo_root)

import asyncpg
from config.settings import get_settings

TABLES = ("users", "dogs")


async def check_schema():
    settings = get_settings()
    conn = await asyncpg.connect(
        host=settings.pawpal_db_host,
        port=settings.pawpal_db_port,
        user=settings.pawpal_db_user,
        password=settings.pawpal_db_password,
        database=settings.pawpal_db_name
    )
    try:
        version = None
        if await conn.fetchval("SELECT to_regclass('alembic_version')"):
            version = await conn.fetchval("SELECT version_num FROM alembic_version")
        print(f"Alembic version: {version or 'not migrated'}")

        for table in TABLES:
            print(f"\n=== {table} table columns ===")
            result = await conn.fetch("""
                SELECT column_name, data_type, is_nullable, column_default
                FROM information_schema.columns
                WHERE table_name = $1
                ORDER BY ordinal_position
            """, table)
            if not result:
                print("  (missing)")
                continue
            for row in result:
                nullable = "" if row['is_nullable'] == 'YES' else " NOT NULL"
                default = f" DEFAULT {row['column_default']}" if row['column_default'] else ""
                print(f"  {row['column_name']}: {row['data_type']}{nullable}{default}")

            counts = await conn.fetchrow(
                f"SELECT COUNT(*) FILTER (WHERE is_active) AS live, "
                f"COUNT(*) FILTER (WHERE NOT is_active) AS inactive FROM {table}"
            )
            print(f"  rows: {counts['live']} live, {counts['inactive']} inactive")
    finally:
        await conn.close()


if __name__ == "__main__":
    asyncio.run(check_schema())
