"""Statement execution against a DatabasePool.

Single statements borrow a connection for exactly one call. run_transaction
borrows one connection for a whole statement sequence and commits it
all-or-nothing. In both paths the connection goes back to the pool on every
exit, and asyncpg errors are translated into the StoreError family with the
original exception chained.
"""

import asyncio
from typing import Any, List, NamedTuple, Optional, Sequence

import asyncpg

from shared.observability.logger import get_logger
from .errors import ConflictError, StoreError, TransactionFailure
from .pool import DatabasePool

logger = get_logger("pawpal.database.executor")


class Statement(NamedTuple):
    """One SQL statement and its positional parameters."""
    sql: str
    params: Sequence[Any] = ()


def translate_error(e: Exception, operation: str, entity: Optional[str] = None) -> StoreError:
    """Map an asyncpg/driver failure onto the StoreError family."""
    if isinstance(e, StoreError):
        return e
    if isinstance(e, asyncpg.UniqueViolationError):
        return ConflictError(
            "Unique constraint violated",
            entity=entity,
            operation=operation,
            details={"constraint": getattr(e, "constraint_name", None)}
        )
    if isinstance(e, asyncio.TimeoutError):
        return StoreError("Database statement timed out", entity=entity, operation=operation)
    return StoreError(f"Database error: {e}", entity=entity, operation=operation)


def _records(rows) -> List[dict]:
    return [dict(row) for row in rows]


async def fetch(
    pool: DatabasePool,
    sql: str,
    params: Sequence[Any] = (),
    timeout: Optional[float] = None,
    entity: Optional[str] = None,
) -> List[dict]:
    """Run a query and return all rows as dicts."""
    async with pool.connection() as conn:
        try:
            return _records(await conn.fetch(sql, *params, timeout=timeout))
        except (asyncpg.PostgresError, asyncpg.InterfaceError, asyncio.TimeoutError) as e:
            raise translate_error(e, "fetch", entity) from e


async def fetchrow(
    pool: DatabasePool,
    sql: str,
    params: Sequence[Any] = (),
    timeout: Optional[float] = None,
    entity: Optional[str] = None,
) -> Optional[dict]:
    """Run a query and return the first row as a dict, or None."""
    async with pool.connection() as conn:
        try:
            row = await conn.fetchrow(sql, *params, timeout=timeout)
        except (asyncpg.PostgresError, asyncpg.InterfaceError, asyncio.TimeoutError) as e:
            raise translate_error(e, "fetchrow", entity) from e
    return dict(row) if row is not None else None


async def fetchval(
    pool: DatabasePool,
    sql: str,
    params: Sequence[Any] = (),
    timeout: Optional[float] = None,
    entity: Optional[str] = None,
) -> Any:
    """Run a query and return the first column of the first row."""
    async with pool.connection() as conn:
        try:
            return await conn.fetchval(sql, *params, timeout=timeout)
        except (asyncpg.PostgresError, asyncpg.InterfaceError, asyncio.TimeoutError) as e:
            raise translate_error(e, "fetchval", entity) from e


async def execute(
    pool: DatabasePool,
    sql: str,
    params: Sequence[Any] = (),
    timeout: Optional[float] = None,
    entity: Optional[str] = None,
) -> str:
    """Run a statement and return asyncpg's status string (e.g. "UPDATE 1")."""
    async with pool.connection() as conn:
        try:
            return await conn.execute(sql, *params, timeout=timeout)
        except (asyncpg.PostgresError, asyncpg.InterfaceError, asyncio.TimeoutError) as e:
            raise translate_error(e, "execute", entity) from e


def affected_rows(status: str) -> int:
    """Row count from a status string such as "UPDATE 3" or "INSERT 0 1"."""
    try:
        return int(status.rsplit(" ", 1)[-1])
    except (AttributeError, ValueError):
        return 0


async def run_transaction(
    pool: DatabasePool,
    statements: Sequence[Statement],
    timeout: Optional[float] = None,
    entity: Optional[str] = None,
) -> List[List[dict]]:
    """Run statements in order inside one transaction on one connection.

    Args:
        pool: Pool to borrow the connection from
        statements: Ordered (sql, params) pairs
        timeout: Per-statement timeout; defaults to the pool's command timeout
        entity: Entity name recorded on raised errors

    Returns:
        One list of row dicts per statement, in statement order

    Raises:
        TransactionFailure: A statement failed. Nothing was committed and
            statement_index says which one; the driver error is __cause__.
        StoreError: BEGIN or COMMIT itself failed
    """
    conn = await pool.acquire()
    try:
        tx = conn.transaction()
        try:
            await tx.start()
        except (asyncpg.PostgresError, asyncpg.InterfaceError, asyncio.TimeoutError) as e:
            raise translate_error(e, "begin", entity) from e

        results: List[List[dict]] = []
        for index, (sql, params) in enumerate(statements):
            try:
                rows = await conn.fetch(sql, *params, timeout=timeout)
            except Exception as e:
                await _rollback(tx, index)
                logger.error("Transaction rolled back", data={
                    "statement_index": index,
                    "statement_count": len(statements),
                    "error": str(e),
                })
                raise TransactionFailure(
                    f"Statement {index} failed: {e}",
                    statement_index=index,
                    entity=entity,
                    operation="transaction"
                ) from e
            results.append(_records(rows))

        try:
            await tx.commit()
        except (asyncpg.PostgresError, asyncpg.InterfaceError, asyncio.TimeoutError) as e:
            await _rollback(tx, len(statements))
            raise translate_error(e, "commit", entity) from e

        logger.debug("Transaction committed", data={"statement_count": len(statements)})
        return results
    finally:
        await pool.release(conn)


async def _rollback(tx, index: int) -> None:
    # The statement failure is what the caller needs; a rollback failure
    # is only logged. Postgres discards the transaction when the connection
    # is reset on release.
    try:
        await tx.rollback()
    except (asyncpg.PostgresError, asyncpg.InterfaceError, asyncio.TimeoutError, OSError) as e:
        logger.error("Rollback failed", data={"statement_index": index, "error": str(e)})
