"""User endpoints."""
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status

from shared.database.errors import InvalidArgumentError
from shared.database.query_builder import MAX_PAGE_SIZE
from shared.observability.context import RequestContext
from shared.observability.dependencies import get_request_context
from shared.observability.logger import get_logger
from pawpal.models.common import DeleteMode, Pagination
from pawpal.models.users import UserCreate, UserFilter, UserUpdate
from pawpal.repositories import UserRepository
from .dependencies import get_user_repository, pagination_params, user_filters
from .responses import listing, ok

logger = get_logger("pawpal.api.users")
router = APIRouter()


@router.get("")
async def list_users(
    filters: UserFilter = Depends(user_filters),
    pagination: Pagination = Depends(pagination_params),
    repo: UserRepository = Depends(get_user_repository),
    ctx: RequestContext = Depends(get_request_context),
):
    """List live users, newest first."""
    return listing(await repo.list_users(filters, pagination, ctx))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    repo: UserRepository = Depends(get_user_repository),
    ctx: RequestContext = Depends(get_request_context),
):
    """Create a user. Rating and review count start at zero."""
    logger.info("Creating user", ctx, data={"role": user_data.role})
    return ok(await repo.create_user(user_data, ctx))


@router.get("/search")
async def search_users(
    q: str = Query("", max_length=100, description="Text to look for in name, email, location or bio"),
    filters: UserFilter = Depends(user_filters),
    pagination: Pagination = Depends(pagination_params),
    repo: UserRepository = Depends(get_user_repository),
    ctx: RequestContext = Depends(get_request_context),
):
    """Case-insensitive search, best rated first."""
    term = q.strip()
    if not term:
        raise InvalidArgumentError("Search query is required", entity="user", operation="search")
    return listing(await repo.search_users(term, filters, pagination, ctx))


@router.get("/walkers")
async def list_walkers(
    filters: UserFilter = Depends(user_filters),
    pagination: Pagination = Depends(pagination_params),
    repo: UserRepository = Depends(get_user_repository),
    ctx: RequestContext = Depends(get_request_context),
):
    walkers = filters.model_copy(update={"role": "walker"})
    return listing(await repo.list_users(walkers, pagination, ctx))


@router.get("/owners")
async def list_owners(
    filters: UserFilter = Depends(user_filters),
    pagination: Pagination = Depends(pagination_params),
    repo: UserRepository = Depends(get_user_repository),
    ctx: RequestContext = Depends(get_request_context),
):
    owners = filters.model_copy(update={"role": "owner"})
    return listing(await repo.list_users(owners, pagination, ctx))


@router.get("/top-walkers")
async def list_top_walkers(
    limit: Optional[int] = Query(10, ge=1, le=MAX_PAGE_SIZE),
    repo: UserRepository = Depends(get_user_repository),
    ctx: RequestContext = Depends(get_request_context),
):
    """Walkers rated 4.0 or higher."""
    return listing(await repo.list_top_walkers(limit, ctx))


@router.get("/email/{email}")
async def get_user_by_email(
    email: str,
    repo: UserRepository = Depends(get_user_repository),
    ctx: RequestContext = Depends(get_request_context),
):
    return ok(await repo.get_user_by_email(email, ctx))


@router.get("/{user_id}")
async def get_user(
    user_id: int = Path(..., gt=0),
    repo: UserRepository = Depends(get_user_repository),
    ctx: RequestContext = Depends(get_request_context),
):
    return ok(await repo.get_user(user_id, ctx))


@router.put("/{user_id}")
async def update_user(
    user_data: UserUpdate,
    user_id: int = Path(..., gt=0),
    repo: UserRepository = Depends(get_user_repository),
    ctx: RequestContext = Depends(get_request_context),
):
    """Update the fields sent in the body; unknown fields are ignored."""
    changes = user_data.model_dump(exclude_unset=True)
    return ok(await repo.update_user(user_id, changes, ctx))


@router.delete("/{user_id}")
async def delete_user(
    user_id: int = Path(..., gt=0),
    repo: UserRepository = Depends(get_user_repository),
    ctx: RequestContext = Depends(get_request_context),
):
    """Deactivate a user. The row is kept."""
    await repo.delete_user(user_id, DeleteMode.SOFT, ctx)
    return {"success": True, "message": "User deactivated successfully"}


@router.delete("/{user_id}/hard")
async def hard_delete_user(
    user_id: int = Path(..., gt=0),
    repo: UserRepository = Depends(get_user_repository),
    ctx: RequestContext = Depends(get_request_context),
):
    """Permanently remove a user and their dogs."""
    await repo.delete_user(user_id, DeleteMode.HARD, ctx)
    return {"success": True, "message": "User permanently deleted"}


@router.get("/{user_id}/dogs")
async def list_user_dogs(
    user_id: int = Path(..., gt=0),
    repo: UserRepository = Depends(get_user_repository),
    ctx: RequestContext = Depends(get_request_context),
):
    return listing(await repo.list_user_dogs(user_id, ctx))


@router.get("/{user_id}/stats")
async def get_user_stats(
    user_id: int = Path(..., gt=0),
    repo: UserRepository = Depends(get_user_repository),
    ctx: RequestContext = Depends(get_request_context),
):
    return ok(await repo.get_user_stats(user_id, ctx))
