"""Database error hierarchy.

Every failure the data layer surfaces is a StoreError subclass, so callers
can catch the family once and map each subtype to a response. Errors carry
the entity and operation they came from for logging.
"""

from typing import Any, Dict, Optional


class StoreError(Exception):
    """Base for all data-layer errors; also raised for unclassified store failures."""

    code: str = "DATABASE_ERROR"

    def __init__(
        self,
        message: str,
        *,
        entity: Optional[str] = None,
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.entity = entity
        self.operation = operation
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.entity:
            data["entity"] = self.entity
        if self.operation:
            data["operation"] = self.operation
        if self.details:
            data["details"] = self.details
        return data


class ConnectivityError(StoreError):
    """Pool creation or the startup probe failed. The process should not serve traffic."""

    code = "DATABASE_UNAVAILABLE"


class NotInitializedError(StoreError):
    """The pool was used before initialize() succeeded."""

    code = "DATABASE_NOT_READY"


class PoolClosedError(NotInitializedError):
    """The pool was used after shutdown()."""


class PoolExhaustedError(StoreError):
    """Every connection is checked out and the wait queue is full."""

    code = "DATABASE_BUSY"


class InvalidArgumentError(StoreError):
    """Malformed filter or pagination values reached the query builder."""

    code = "INVALID_ARGUMENT"


class NoUpdatableFieldsError(StoreError):
    """An update payload contained none of the entity's mutable fields."""

    code = "NO_UPDATABLE_FIELDS"


class NotFoundError(StoreError):
    """A lookup by key found no live row."""

    code = "NOT_FOUND"


class ConflictError(StoreError):
    """A uniqueness rule was violated (e.g. duplicate email)."""

    code = "CONFLICT"


class TransactionFailure(StoreError):
    """A statement inside a transaction failed; the whole transaction was rolled back.

    The original error is chained as __cause__.
    """

    code = "TRANSACTION_FAILED"

    def __init__(self, message: str, *, statement_index: int, **kwargs):
        super().__init__(message, **kwargs)
        self.statement_index = statement_index
        self.details.setdefault("statement_index", statement_index)
