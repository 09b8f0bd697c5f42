"""Dog endpoints."""
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status

from shared.observability.context import RequestContext
from shared.observability.dependencies import get_request_context
from shared.observability.logger import get_logger
from pawpal.models.common import DeleteMode, Pagination
from pawpal.models.dogs import DogBatchCreate, DogCreate, DogFilter, DogSize, DogUpdate, EnergyLevel
from pawpal.repositories import DogRepository
from .dependencies import dog_filters, get_dog_repository, pagination_params
from .responses import listing, ok

logger = get_logger("pawpal.api.dogs")
router = APIRouter()

SENIOR_AGE = 7


@router.get("")
async def list_dogs(
    filters: DogFilter = Depends(dog_filters),
    pagination: Pagination = Depends(pagination_params),
    repo: DogRepository = Depends(get_dog_repository),
    ctx: RequestContext = Depends(get_request_context),
):
    """List live dogs, newest first."""
    return listing(await repo.list_dogs(filters, pagination, ctx))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_dog(
    dog_data: DogCreate,
    repo: DogRepository = Depends(get_dog_repository),
    ctx: RequestContext = Depends(get_request_context),
):
    """Register a dog for an active owner."""
    logger.info("Creating dog", ctx, owner_id=dog_data.owner_id)
    return ok(await repo.create_dog(dog_data, ctx))


@router.post("/batch", status_code=status.HTTP_201_CREATED)
async def create_dogs(
    batch: DogBatchCreate,
    repo: DogRepository = Depends(get_dog_repository),
    ctx: RequestContext = Depends(get_request_context),
):
    """Register several dogs; either all are stored or none."""
    logger.info("Creating dog batch", ctx, data={"count": len(batch.dogs)})
    return listing(await repo.create_dogs(batch.dogs, ctx))


@router.get("/search")
async def search_dogs(
    q: Optional[str] = Query(None, max_length=100, description="Text to look for in name, breed or temperament"),
    filters: DogFilter = Depends(dog_filters),
    pagination: Pagination = Depends(pagination_params),
    repo: DogRepository = Depends(get_dog_repository),
    ctx: RequestContext = Depends(get_request_context),
):
    """Case-insensitive search. Without q this is a filtered list."""
    term = q.strip() if q else None
    return listing(await repo.search_dogs(term or None, filters, pagination, ctx))


@router.get("/friendly")
async def list_friendly_dogs(
    filters: DogFilter = Depends(dog_filters),
    pagination: Pagination = Depends(pagination_params),
    repo: DogRepository = Depends(get_dog_repository),
    ctx: RequestContext = Depends(get_request_context),
):
    """Dogs that get along with both other dogs and children."""
    friendly = filters.model_copy(update={
        "is_friendly_with_other_dogs": True,
        "is_friendly_with_children": True,
    })
    return listing(await repo.list_dogs(friendly, pagination, ctx))


@router.get("/high-energy")
async def list_high_energy_dogs(
    filters: DogFilter = Depends(dog_filters),
    pagination: Pagination = Depends(pagination_params),
    repo: DogRepository = Depends(get_dog_repository),
    ctx: RequestContext = Depends(get_request_context),
):
    high_energy = filters.model_copy(update={"energy_level": "high"})
    return listing(await repo.list_dogs(high_energy, pagination, ctx))


@router.get("/senior")
async def list_senior_dogs(
    filters: DogFilter = Depends(dog_filters),
    pagination: Pagination = Depends(pagination_params),
    repo: DogRepository = Depends(get_dog_repository),
    ctx: RequestContext = Depends(get_request_context),
):
    """Dogs aged 7 or older."""
    min_age = max(filters.min_age or 0, SENIOR_AGE)
    seniors = filters.model_copy(update={"min_age": min_age})
    return listing(await repo.list_dogs(seniors, pagination, ctx))


@router.get("/stats/breeds")
async def get_breed_stats(
    repo: DogRepository = Depends(get_dog_repository),
    ctx: RequestContext = Depends(get_request_context),
):
    return ok(await repo.get_breed_stats(ctx))


@router.get("/stats/sizes")
async def get_size_stats(
    repo: DogRepository = Depends(get_dog_repository),
    ctx: RequestContext = Depends(get_request_context),
):
    return ok(await repo.get_size_stats(ctx))


@router.get("/size/{dog_size}")
async def list_dogs_by_size(
    dog_size: DogSize,
    filters: DogFilter = Depends(dog_filters),
    pagination: Pagination = Depends(pagination_params),
    repo: DogRepository = Depends(get_dog_repository),
    ctx: RequestContext = Depends(get_request_context),
):
    by_size = filters.model_copy(update={"size": dog_size})
    return listing(await repo.list_dogs(by_size, pagination, ctx))


@router.get("/energy/{level}")
async def list_dogs_by_energy_level(
    level: EnergyLevel,
    filters: DogFilter = Depends(dog_filters),
    pagination: Pagination = Depends(pagination_params),
    repo: DogRepository = Depends(get_dog_repository),
    ctx: RequestContext = Depends(get_request_context),
):
    by_energy = filters.model_copy(update={"energy_level": level})
    return listing(await repo.list_dogs(by_energy, pagination, ctx))


@router.get("/breed/{breed_text}")
async def list_dogs_by_breed(
    breed_text: str = Path(..., min_length=1, max_length=50),
    filters: DogFilter = Depends(dog_filters),
    pagination: Pagination = Depends(pagination_params),
    repo: DogRepository = Depends(get_dog_repository),
    ctx: RequestContext = Depends(get_request_context),
):
    """Dogs whose breed contains the given text."""
    by_breed = filters.model_copy(update={"breed": breed_text})
    return listing(await repo.list_dogs(by_breed, pagination, ctx))


@router.get("/owner/{owner_id}")
async def list_dogs_by_owner(
    owner_id: int = Path(..., gt=0),
    repo: DogRepository = Depends(get_dog_repository),
    ctx: RequestContext = Depends(get_request_context),
):
    owner, dogs = await repo.list_dogs_by_owner(owner_id, ctx)
    return ok({"owner": owner, "dogs": dogs}, count=len(dogs))


@router.get("/{dog_id}")
async def get_dog(
    dog_id: int = Path(..., gt=0),
    repo: DogRepository = Depends(get_dog_repository),
    ctx: RequestContext = Depends(get_request_context),
):
    return ok(await repo.get_dog(dog_id, ctx))


@router.put("/{dog_id}")
async def update_dog(
    dog_data: DogUpdate,
    dog_id: int = Path(..., gt=0),
    repo: DogRepository = Depends(get_dog_repository),
    ctx: RequestContext = Depends(get_request_context),
):
    """Update the fields sent in the body; unknown fields are ignored."""
    changes = dog_data.model_dump(exclude_unset=True)
    return ok(await repo.update_dog(dog_id, changes, ctx))


@router.delete("/{dog_id}")
async def delete_dog(
    dog_id: int = Path(..., gt=0),
    repo: DogRepository = Depends(get_dog_repository),
    ctx: RequestContext = Depends(get_request_context),
):
    await repo.delete_dog(dog_id, DeleteMode.SOFT, ctx)
    return {"success": True, "message": "Dog deactivated successfully"}


@router.delete("/{dog_id}/hard")
async def hard_delete_dog(
    dog_id: int = Path(..., gt=0),
    repo: DogRepository = Depends(get_dog_repository),
    ctx: RequestContext = Depends(get_request_context),
):
    await repo.delete_dog(dog_id, DeleteMode.HARD, ctx)
    return {"success": True, "message": "Dog permanently deleted"}


@router.get("/{dog_id}/owner")
async def get_dog_owner(
    dog_id: int = Path(..., gt=0),
    repo: DogRepository = Depends(get_dog_repository),
    ctx: RequestContext = Depends(get_request_context),
):
    return ok(await repo.get_dog_owner(dog_id, ctx))
