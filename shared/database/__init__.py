"""Database infrastructure."""
from .base_repository import BaseRepository
from .executor import Statement, run_transaction
from .pool import DatabasePool, create_pool, close_pool
from .query_builder import QueryBuilder, build_update

__all__ = [
    "BaseRepository",
    "DatabasePool",
    "QueryBuilder",
    "Statement",
    "build_update",
    "close_pool",
    "create_pool",
    "run_transaction",
]
