"""Repository for user operations."""
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional

from shared.database.base_repository import BaseRepository
from shared.database.errors import ConflictError, NotFoundError, StoreError
from shared.database.executor import Statement, affected_rows
from shared.database.query_builder import QueryBuilder, build_update
from shared.observability.context import RequestContext
from shared.observability.logger import get_logger
from pawpal.models.common import DeleteMode, Pagination
from pawpal.models.users import UserCreate, UserFilter
from .columns import DOG_COLUMNS, NEWEST_FIRST, SELECT_LIVE_USERS

logger = get_logger("pawpal.repositories.user")

# Columns a caller may change; anything else in an update payload is ignored
UPDATABLE_FIELDS = (
    "name", "email", "role", "phone", "location",
    "profile_image_url", "bio", "rating", "total_reviews",
)

SEARCH_COLUMNS = ("name", "email", "location", "bio")

BEST_RATED_FIRST = "rating DESC, created_at DESC, id DESC"

TOP_WALKER_MIN_RATING = 4.0


def _numeric(value: Optional[float]) -> Optional[Decimal]:
    # rating is NUMERIC(3,2); asyncpg binds it from Decimal
    return None if value is None else Decimal(str(value))


def _filter_users(qb: QueryBuilder, filters: Optional[UserFilter]) -> QueryBuilder:
    """Apply user filters in their declared order."""
    if filters is None:
        return qb
    return (
        qb.where_equals("role", filters.role)
        .where_contains("location", filters.location)
        .where_equals("is_active", filters.is_active)
        .where_at_least("rating", _numeric(filters.min_rating))
    )


def _paginate(qb: QueryBuilder, pagination: Optional[Pagination]) -> QueryBuilder:
    if pagination is None:
        return qb
    return qb.paginate(pagination.limit, pagination.offset)


class UserRepository(BaseRepository):
    """Repository for user operations.

    Handles reads, writes and the deletion lifecycle for the users table.
    Normal reads only ever see live rows (is_active = TRUE).
    """

    entity = "user"

    async def list_users(
        self,
        filters: Optional[UserFilter],
        pagination: Optional[Pagination],
        ctx: RequestContext
    ) -> List[dict]:
        """List live users, newest first.

        Args:
            filters: Optional constraints; None fields are ignored
            pagination: Optional limit/offset
            ctx: Request context

        Returns:
            User records as dicts
        """
        qb = _filter_users(QueryBuilder(SELECT_LIVE_USERS), filters)
        sql, params = _paginate(qb.order_by(NEWEST_FIRST), pagination).build()
        try:
            users = await self.fetch(sql, params)
        except StoreError as e:
            logger.error("Failed to list users", ctx, data={"error": str(e)})
            raise
        logger.debug("Users listed", ctx, data={"count": len(users)})
        return users

    async def get_user(self, user_id: int, ctx: RequestContext) -> dict:
        """Get a live user by ID.

        Raises:
            NotFoundError: No live user with this ID
        """
        user = await self.fetchrow(f"{SELECT_LIVE_USERS} AND id = $1", (user_id,))
        if user is None:
            logger.warning("User not found", ctx, user_id=user_id)
            raise NotFoundError("User not found", entity=self.entity, operation="get", details={"id": user_id})
        return user

    async def find_user_by_email(self, email: str, ctx: RequestContext) -> Optional[dict]:
        """Get a live user by email, or None."""
        return await self.fetchrow(f"{SELECT_LIVE_USERS} AND email = $1", (email,))

    async def get_user_by_email(self, email: str, ctx: RequestContext) -> dict:
        user = await self.find_user_by_email(email, ctx)
        if user is None:
            logger.warning("User not found by email", ctx)
            raise NotFoundError("User not found", entity=self.entity, operation="get_by_email")
        return user

    async def search_users(
        self,
        term: str,
        filters: Optional[UserFilter],
        pagination: Optional[Pagination],
        ctx: RequestContext
    ) -> List[dict]:
        """Free-text search over name, email, location and bio.

        Matching is case-insensitive and the term is taken literally
        (% and _ are not wildcards). Results are ordered best rated first.
        """
        qb = QueryBuilder(SELECT_LIVE_USERS).where_any_contains(SEARCH_COLUMNS, term)
        qb = _filter_users(qb, filters).order_by(BEST_RATED_FIRST)
        sql, params = _paginate(qb, pagination).build()
        try:
            users = await self.fetch(sql, params)
        except StoreError as e:
            logger.error("Failed to search users", ctx, data={"error": str(e)})
            raise
        logger.debug("Users searched", ctx, data={"term": term, "count": len(users)})
        return users

    async def list_top_walkers(self, limit: Optional[int], ctx: RequestContext) -> List[dict]:
        """Walkers rated at least 4.0, newest first."""
        return await self.list_users(
            UserFilter(role="walker", min_rating=TOP_WALKER_MIN_RATING),
            Pagination(limit=limit),
            ctx
        )

    async def create_user(self, payload: UserCreate, ctx: RequestContext) -> dict:
        """Create a user with rating 0, no reviews and active status.

        Returns:
            The stored row, re-read by its generated ID

        Raises:
            ConflictError: The email already belongs to a user
        """
        if await self.find_user_by_email(payload.email, ctx) is not None:
            logger.warning("Duplicate email on create", ctx)
            raise ConflictError(
                "User with this email already exists",
                entity=self.entity,
                operation="create",
                details={"field": "email"}
            )

        try:
            user_id = await self.fetchval(
                """
                INSERT INTO users (
                    name, email, role, phone, location,
                    profile_image_url, bio, rating, total_reviews, is_active
                )
                VALUES ($1, $2, $3, $4, $5, $6, $7, 0, 0, TRUE)
                RETURNING id
                """,
                (
                    payload.name,
                    payload.email,
                    payload.role,
                    payload.phone,
                    payload.location,
                    payload.profile_image_url,
                    payload.bio,
                )
            )
        except ConflictError:
            # Unique index also covers soft-deleted users
            logger.warning("Email held by an inactive user", ctx)
            raise
        except StoreError as e:
            logger.error("Failed to create user", ctx, data={"error": str(e)})
            raise

        logger.info("User created", ctx, user_id=user_id, data={"role": payload.role})
        return await self.get_user(user_id, ctx)

    async def update_user(
        self,
        user_id: int,
        payload: Mapping[str, Any],
        ctx: RequestContext
    ) -> dict:
        """Apply the whitelisted fields of payload to a live user.

        Unknown keys are ignored. Concurrent updates are last-writer-wins.

        Raises:
            NotFoundError: No live user with this ID
            ConflictError: The new email belongs to another user
            NoUpdatableFieldsError: payload has no updatable field
        """
        current = await self.get_user(user_id, ctx)

        email = payload.get("email")
        if email is not None and email != current["email"]:
            other = await self.find_user_by_email(email, ctx)
            if other is not None and other["id"] != user_id:
                logger.warning("Duplicate email on update", ctx, user_id=user_id)
                raise ConflictError(
                    "Email already in use",
                    entity=self.entity,
                    operation="update",
                    details={"field": "email"}
                )

        changes: Dict[str, Any] = dict(payload)
        if "rating" in changes:
            changes["rating"] = _numeric(changes["rating"])
        sql, params = build_update("users", changes, UPDATABLE_FIELDS, user_id)

        try:
            await self.execute(sql, params)
        except StoreError as e:
            logger.error("Failed to update user", ctx, user_id=user_id, data={"error": str(e)})
            raise

        logger.info("User updated", ctx, user_id=user_id, data={
            "fields": [name for name in UPDATABLE_FIELDS if name in changes]
        })
        return await self.get_user(user_id, ctx)

    async def delete_user(self, user_id: int, mode: DeleteMode, ctx: RequestContext) -> None:
        """Soft or hard delete a user.

        SOFT marks the row inactive and succeeds again for an already
        inactive row. HARD removes the row and the user's dogs in one
        transaction.

        Raises:
            NotFoundError: No row with this ID exists at all
        """
        if mode is DeleteMode.SOFT:
            status = await self.execute(
                "UPDATE users SET is_active = FALSE, updated_at = NOW() WHERE id = $1",
                (user_id,)
            )
            if affected_rows(status) == 0:
                logger.warning("User not found for delete", ctx, user_id=user_id)
                raise NotFoundError("User not found", entity=self.entity, operation="delete", details={"id": user_id})
            logger.info("User deactivated", ctx, user_id=user_id)
            return

        # Hard delete looks up the row regardless of is_active
        exists = await self.fetchval("SELECT id FROM users WHERE id = $1", (user_id,))
        if exists is None:
            logger.warning("User not found for hard delete", ctx, user_id=user_id)
            raise NotFoundError("User not found", entity=self.entity, operation="hard_delete", details={"id": user_id})

        try:
            await self.run_transaction([
                Statement("DELETE FROM dogs WHERE owner_id = $1", (user_id,)),
                Statement("DELETE FROM users WHERE id = $1", (user_id,)),
            ])
        except StoreError as e:
            logger.error("Failed to hard delete user", ctx, user_id=user_id, data={"error": str(e)})
            raise
        logger.info("User permanently deleted", ctx, user_id=user_id)

    async def list_user_dogs(self, user_id: int, ctx: RequestContext) -> List[dict]:
        """Live dogs of a live user, newest first."""
        await self.get_user(user_id, ctx)
        return await self.fetch(
            f"SELECT {DOG_COLUMNS} FROM dogs WHERE owner_id = $1 AND is_active = TRUE ORDER BY {NEWEST_FIRST}",
            (user_id,)
        )

    async def get_user_stats(self, user_id: int, ctx: RequestContext) -> dict:
        """Dog count and energy-level mix for a live user.

        Ratios are None when the user has no live dogs.

        Returns:
            {"user": <user row>, "stats": {...}}
        """
        user = await self.get_user(user_id, ctx)
        stats = await self.fetchrow(
            """
            SELECT
                COUNT(*) AS dog_count,
                AVG(CASE WHEN energy_level = 'high' THEN 1.0 ELSE 0.0 END)::float8 AS high_energy_dogs_ratio,
                AVG(CASE WHEN energy_level = 'medium' THEN 1.0 ELSE 0.0 END)::float8 AS medium_energy_dogs_ratio,
                AVG(CASE WHEN energy_level = 'low' THEN 1.0 ELSE 0.0 END)::float8 AS low_energy_dogs_ratio
            FROM dogs
            WHERE owner_id = $1 AND is_active = TRUE
            """,
            (user_id,)
        )
        return {"user": user, "stats": stats}

