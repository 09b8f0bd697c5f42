"""FastAPI dependencies: pool, repositories and query parameters."""
from typing import Optional

from fastapi import Depends, Query, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from shared.database.errors import NotInitializedError
from shared.database.pool import DatabasePool
from shared.database.query_builder import MAX_PAGE_SIZE
from pawpal.models.common import Pagination
from pawpal.models.dogs import DogFilter, DogSize, EnergyLevel
from pawpal.models.users import UserFilter, UserRole
from pawpal.repositories import DogRepository, UserRepository


def get_db_pool(request: Request) -> DatabasePool:
    """Dependency to get the database pool created at startup."""
    pool = getattr(request.app.state, "db_pool", None)
    if pool is None:
        raise NotInitializedError("Database pool not initialized", operation="get_pool")
    return pool


def get_user_repository(pool: DatabasePool = Depends(get_db_pool)) -> UserRepository:
    return UserRepository(pool)


def get_dog_repository(pool: DatabasePool = Depends(get_db_pool)) -> DogRepository:
    return DogRepository(pool)


def pagination_params(
    limit: Optional[int] = Query(None, ge=1, le=MAX_PAGE_SIZE, description="Number of records to return"),
    offset: Optional[int] = Query(None, ge=0, description="Number of records to skip"),
) -> Pagination:
    return Pagination(limit=limit, offset=offset)


def user_filters(
    role: Optional[UserRole] = Query(None),
    location: Optional[str] = Query(None, max_length=200),
    is_active: Optional[bool] = Query(None),
    min_rating: Optional[float] = Query(None, ge=0, le=5),
) -> UserFilter:
    return UserFilter(role=role, location=location, is_active=is_active, min_rating=min_rating)


def dog_filters(
    owner_id: Optional[int] = Query(None, gt=0),
    size: Optional[DogSize] = Query(None),
    breed: Optional[str] = Query(None, max_length=50),
    energy_level: Optional[EnergyLevel] = Query(None),
    is_friendly_with_other_dogs: Optional[bool] = Query(None),
    is_friendly_with_children: Optional[bool] = Query(None),
    min_age: Optional[int] = Query(None, ge=0, le=30),
    max_age: Optional[int] = Query(None, ge=0, le=30),
) -> DogFilter:
    try:
        return DogFilter(
            owner_id=owner_id,
            size=size,
            breed=breed,
            energy_level=energy_level,
            is_friendly_with_other_dogs=is_friendly_with_other_dogs,
            is_friendly_with_children=is_friendly_with_children,
            min_age=min_age,
            max_age=max_age,
        )
    except ValidationError as e:
        # Cross-field checks (age range) surface like any other bad query
        raise RequestValidationError(
            [{"loc": ("query",) + tuple(err["loc"]), "msg": err["msg"], "type": err["type"]} for err in e.errors()]
        ) from e
