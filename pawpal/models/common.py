"""Models shared by the user and dog endpoints."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from shared.database.query_builder import MAX_PAGE_SIZE


class Pagination(BaseModel):
    """Page window. limit=None means no bound, offset=None means 0."""
    limit: Optional[int] = Field(None, ge=1, le=MAX_PAGE_SIZE, description="Number of records to return")
    offset: Optional[int] = Field(None, ge=0, description="Number of records to skip")


class DeleteMode(str, Enum):
    """How a record leaves normal reads.

    SOFT flips is_active and keeps the row; HARD removes it for good.
    """
    SOFT = "soft"
    HARD = "hard"


def reject_null(value, info):
    """Shared validator body: a column that is NOT NULL may be omitted but not nulled."""
    if value is None:
        raise ValueError(f"{info.field_name} may not be null")
    return value
