"""Repository for dog operations."""
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from shared.database.base_repository import BaseRepository
from shared.database.errors import NotFoundError, StoreError
from shared.database.executor import Statement, affected_rows
from shared.database.query_builder import QueryBuilder, build_update
from shared.observability.context import RequestContext
from shared.observability.logger import get_logger
from pawpal.models.common import DeleteMode, Pagination
from pawpal.models.dogs import DogCreate, DogFilter
from .columns import DOG_COLUMNS, NEWEST_FIRST, SELECT_LIVE_DOGS, SELECT_LIVE_USERS

logger = get_logger("pawpal.repositories.dog")

UPDATABLE_FIELDS = (
    "owner_id", "name", "breed", "age", "size", "temperament",
    "special_needs", "medical_notes", "profile_image_url",
    "is_friendly_with_other_dogs", "is_friendly_with_children", "energy_level",
)

SEARCH_COLUMNS = ("name", "breed", "temperament")

INSERT_DOG = f"""
    INSERT INTO dogs (
        owner_id, name, breed, age, size, temperament,
        special_needs, medical_notes, profile_image_url,
        is_friendly_with_other_dogs, is_friendly_with_children,
        energy_level, is_active
    )
    VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, TRUE)
    RETURNING {DOG_COLUMNS}
"""


def _insert_params(payload: DogCreate) -> Tuple[Any, ...]:
    return (
        payload.owner_id,
        payload.name,
        payload.breed,
        payload.age,
        payload.size,
        payload.temperament,
        payload.special_needs,
        payload.medical_notes,
        payload.profile_image_url,
        payload.is_friendly_with_other_dogs,
        payload.is_friendly_with_children,
        payload.energy_level,
    )


def _filter_dogs(qb: QueryBuilder, filters: Optional[DogFilter]) -> QueryBuilder:
    """Apply dog filters in their declared order."""
    if filters is None:
        return qb
    return (
        qb.where_equals("owner_id", filters.owner_id)
        .where_equals("size", filters.size)
        .where_contains("breed", filters.breed)
        .where_equals("energy_level", filters.energy_level)
        .where_equals("is_friendly_with_other_dogs", filters.is_friendly_with_other_dogs)
        .where_equals("is_friendly_with_children", filters.is_friendly_with_children)
        .where_at_least("age", filters.min_age)
        .where_at_most("age", filters.max_age)
    )


class DogRepository(BaseRepository):
    """Repository for dog operations.

    Every dog belongs to one user. Writes check that the owner is a live
    user; reads only return live dogs.
    """

    entity = "dog"

    async def _require_live_owner(self, owner_id: int, ctx: RequestContext, operation: str) -> dict:
        owner = await self.fetchrow(f"{SELECT_LIVE_USERS} AND id = $1", (owner_id,))
        if owner is None:
            logger.warning("Owner not found", ctx, owner_id=owner_id, data={"operation": operation})
            raise NotFoundError(
                "Owner not found",
                entity="user",
                operation=operation,
                details={"owner_id": owner_id}
            )
        return owner

    async def list_dogs(
        self,
        filters: Optional[DogFilter],
        pagination: Optional[Pagination],
        ctx: RequestContext
    ) -> List[dict]:
        """List live dogs, newest first."""
        qb = _filter_dogs(QueryBuilder(SELECT_LIVE_DOGS), filters).order_by(NEWEST_FIRST)
        if pagination is not None:
            qb.paginate(pagination.limit, pagination.offset)
        sql, params = qb.build()
        try:
            dogs = await self.fetch(sql, params)
        except StoreError as e:
            logger.error("Failed to list dogs", ctx, data={"error": str(e)})
            raise
        logger.debug("Dogs listed", ctx, data={"count": len(dogs)})
        return dogs

    async def get_dog(self, dog_id: int, ctx: RequestContext) -> dict:
        """Get a live dog by ID.

        Raises:
            NotFoundError: No live dog with this ID
        """
        dog = await self.fetchrow(f"{SELECT_LIVE_DOGS} AND id = $1", (dog_id,))
        if dog is None:
            logger.warning("Dog not found", ctx, dog_id=dog_id)
            raise NotFoundError("Dog not found", entity=self.entity, operation="get", details={"id": dog_id})
        return dog

    async def search_dogs(
        self,
        term: Optional[str],
        filters: Optional[DogFilter],
        pagination: Optional[Pagination],
        ctx: RequestContext
    ) -> List[dict]:
        """Case-insensitive literal search over name, breed and temperament.

        With no term this is a filtered list.
        """
        qb = QueryBuilder(SELECT_LIVE_DOGS)
        if term is not None:
            qb.where_any_contains(SEARCH_COLUMNS, term)
        qb = _filter_dogs(qb, filters).order_by(NEWEST_FIRST)
        if pagination is not None:
            qb.paginate(pagination.limit, pagination.offset)
        sql, params = qb.build()
        try:
            dogs = await self.fetch(sql, params)
        except StoreError as e:
            logger.error("Failed to search dogs", ctx, data={"error": str(e)})
            raise
        logger.debug("Dogs searched", ctx, data={"term": term, "count": len(dogs)})
        return dogs

    async def create_dog(self, payload: DogCreate, ctx: RequestContext) -> dict:
        """Register a dog for a live owner.

        Raises:
            NotFoundError: The owner is not a live user
        """
        await self._require_live_owner(payload.owner_id, ctx, "create")
        try:
            dog = await self.fetchrow(INSERT_DOG, _insert_params(payload))
        except StoreError as e:
            logger.error("Failed to create dog", ctx, owner_id=payload.owner_id, data={"error": str(e)})
            raise
        logger.info("Dog created", ctx, dog_id=dog["id"], owner_id=payload.owner_id)
        return dog

    async def create_dogs(self, payloads: Sequence[DogCreate], ctx: RequestContext) -> List[dict]:
        """Register several dogs all-or-nothing.

        Every owner is checked up front; the inserts then run in one
        transaction, so a failing row leaves none of them stored.

        Raises:
            NotFoundError: An owner is not a live user
            TransactionFailure: An insert failed; details name its index
        """
        owner_ids = sorted({payload.owner_id for payload in payloads})
        rows = await self.fetch(
            "SELECT id FROM users WHERE id = ANY($1::int[]) AND is_active = TRUE",
            (owner_ids,)
        )
        missing = sorted(set(owner_ids) - {row["id"] for row in rows})
        if missing:
            logger.warning("Owners not found for batch create", ctx, data={"owner_ids": missing})
            raise NotFoundError(
                "Owner not found",
                entity="user",
                operation="create_batch",
                details={"owner_ids": missing}
            )

        statements = [Statement(INSERT_DOG, _insert_params(payload)) for payload in payloads]
        try:
            results = await self.run_transaction(statements)
        except StoreError as e:
            logger.error("Batch dog create rolled back", ctx, data={
                "count": len(statements),
                "error": str(e),
            })
            raise

        dogs = [row for result in results for row in result]
        logger.info("Dogs created", ctx, data={"count": len(dogs)})
        return dogs

    async def update_dog(
        self,
        dog_id: int,
        payload: Mapping[str, Any],
        ctx: RequestContext
    ) -> dict:
        """Apply the whitelisted fields of payload to a live dog.

        Raises:
            NotFoundError: No live dog, or the new owner is not a live user
            NoUpdatableFieldsError: payload has no updatable field
        """
        current = await self.get_dog(dog_id, ctx)

        owner_id = payload.get("owner_id")
        if owner_id is not None and owner_id != current["owner_id"]:
            await self._require_live_owner(owner_id, ctx, "update")

        changes: Dict[str, Any] = dict(payload)
        sql, params = build_update("dogs", changes, UPDATABLE_FIELDS, dog_id)
        try:
            await self.execute(sql, params)
        except StoreError as e:
            logger.error("Failed to update dog", ctx, dog_id=dog_id, data={"error": str(e)})
            raise

        logger.info("Dog updated", ctx, dog_id=dog_id, data={
            "fields": [name for name in UPDATABLE_FIELDS if name in changes]
        })
        return await self.get_dog(dog_id, ctx)

    async def delete_dog(self, dog_id: int, mode: DeleteMode, ctx: RequestContext) -> None:
        """Soft or hard delete a dog.

        Raises:
            NotFoundError: No row with this ID exists at all
        """
        if mode is DeleteMode.SOFT:
            status = await self.execute(
                "UPDATE dogs SET is_active = FALSE, updated_at = NOW() WHERE id = $1",
                (dog_id,)
            )
            operation = "delete"
        else:
            status = await self.execute("DELETE FROM dogs WHERE id = $1", (dog_id,))
            operation = "hard_delete"

        if affected_rows(status) == 0:
            logger.warning("Dog not found for delete", ctx, dog_id=dog_id, data={"mode": mode.value})
            raise NotFoundError("Dog not found", entity=self.entity, operation=operation, details={"id": dog_id})
        logger.info("Dog deleted", ctx, dog_id=dog_id, data={"mode": mode.value})

    async def list_dogs_by_owner(self, owner_id: int, ctx: RequestContext) -> Tuple[dict, List[dict]]:
        """A live owner and their live dogs, newest first.

        Raises:
            NotFoundError: The owner is not a live user
        """
        owner = await self._require_live_owner(owner_id, ctx, "list_by_owner")
        dogs = await self.list_dogs(DogFilter(owner_id=owner_id), None, ctx)
        return owner, dogs

    async def get_dog_owner(self, dog_id: int, ctx: RequestContext) -> dict:
        """The live owner of a live dog.

        Raises:
            NotFoundError: The dog is not live, or its owner is not
        """
        dog = await self.get_dog(dog_id, ctx)
        return await self._require_live_owner(dog["owner_id"], ctx, "get_owner")

    async def get_breed_stats(self, ctx: RequestContext) -> Dict[str, int]:
        """Live dog count per breed, most common first. Missing breeds count as "unknown"."""
        rows = await self.fetch(
            """
            SELECT COALESCE(breed, 'unknown') AS breed, COUNT(*) AS count
            FROM dogs
            WHERE is_active = TRUE
            GROUP BY 1
            ORDER BY count DESC, breed
            """
        )
        return {row["breed"]: row["count"] for row in rows}

    async def get_size_stats(self, ctx: RequestContext) -> Dict[str, int]:
        """Live dog count per size."""
        rows = await self.fetch(
            """
            SELECT size, COUNT(*) AS count
            FROM dogs
            WHERE is_active = TRUE
            GROUP BY size
            ORDER BY count DESC, size
            """
        )
        return {row["size"]: row["count"] for row in rows}
