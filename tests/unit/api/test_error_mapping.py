"""Unit tests for StoreError to HTTP status mapping."""
import asyncpg
import pytest

from shared.database.errors import (
    ConflictError,
    ConnectivityError,
    InvalidArgumentError,
    NoUpdatableFieldsError,
    NotFoundError,
    NotInitializedError,
    PoolClosedError,
    PoolExhaustedError,
    StoreError,
    TransactionFailure,
)
from pawpal.api.errors import public_message, status_for


@pytest.mark.parametrize("error,expected", [
    (InvalidArgumentError("bad limit"), 400),
    (NoUpdatableFieldsError("nothing to update"), 400),
    (NotFoundError("missing"), 404),
    (ConflictError("taken"), 409),
    (ConnectivityError("down"), 500),
    (NotInitializedError("not ready"), 500),
    (PoolClosedError("closed"), 500),
    (PoolExhaustedError("busy"), 500),
    (StoreError("boom"), 500),
    (TransactionFailure("failed", statement_index=0), 500),
])
def test_status_for(error, expected):
    assert status_for(error) == expected


def test_transaction_failure_from_constraint_is_conflict():
    """Test a constraint violation inside a transaction maps to 409."""
    failure = TransactionFailure("failed", statement_index=2)
    failure.__cause__ = asyncpg.UniqueViolationError("users_email_key")

    assert status_for(failure) == 409


def test_public_message_hides_driver_text():
    assert public_message(StoreError("Database error: syntax error at or near")) == "Database operation failed"
    assert public_message(TransactionFailure("Statement 0 failed: x", statement_index=0)) == (
        "Transaction failed and was rolled back"
    )
    assert public_message(NotFoundError("Dog not found")) == "Dog not found"
