"""Base repository with connection pooling."""
from typing import Any, List, Optional, Sequence

from . import executor
from .executor import Statement
from .pool import DatabasePool


class BaseRepository:
    """Base repository over an injected DatabasePool.

    All repositories MUST inherit from this class and go through these
    methods so every statement is parameterized, time-bounded and releases
    its connection. Nothing here holds a connection between calls.
    """

    # Recorded on every StoreError raised through this repository
    entity = "record"

    def __init__(self, pool: DatabasePool):
        """Initialize repository with connection pool.

        Args:
            pool: Initialized DatabasePool owned by the application
        """
        self.pool = pool

    async def fetch(self, sql: str, params: Sequence[Any] = ()) -> List[dict]:
        return await executor.fetch(self.pool, sql, params, entity=self.entity)

    async def fetchrow(self, sql: str, params: Sequence[Any] = ()) -> Optional[dict]:
        return await executor.fetchrow(self.pool, sql, params, entity=self.entity)

    async def fetchval(self, sql: str, params: Sequence[Any] = ()) -> Any:
        return await executor.fetchval(self.pool, sql, params, entity=self.entity)

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> str:
        return await executor.execute(self.pool, sql, params, entity=self.entity)

    async def run_transaction(self, statements: Sequence[Statement]) -> List[List[dict]]:
        return await executor.run_transaction(self.pool, statements, entity=self.entity)
