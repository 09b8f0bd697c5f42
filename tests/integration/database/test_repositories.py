"""Integration tests for the user and dog repositories."""
from decimal import Decimal

import pytest
import pytest_asyncio

from shared.database.errors import ConflictError, NotFoundError, TransactionFailure
from pawpal.models.common import DeleteMode, Pagination
from pawpal.models.dogs import DogCreate, DogFilter
from pawpal.models.users import UserCreate, UserFilter
from pawpal.repositories import DogRepository, UserRepository


@pytest.fixture
def users(schema):
    return UserRepository(schema)


@pytest.fixture
def dogs(schema):
    return DogRepository(schema)


@pytest_asyncio.fixture
async def owner(users, request_context):
    return await users.create_user(
        UserCreate(name="Ana", email="ana@x.io", role="owner", location="Oslo"), request_context
    )


@pytest.mark.asyncio
async def test_create_and_read_user(users, owner, request_context):
    """Test a created user reads back with server defaults."""
    # Act
    fetched = await users.get_user(owner["id"], request_context)

    # Assert
    assert fetched == owner
    assert fetched["rating"] == Decimal("0")
    assert fetched["total_reviews"] == 0
    assert fetched["is_active"] is True
    assert fetched["created_at"] is not None


@pytest.mark.asyncio
async def test_duplicate_email_conflicts(users, owner, request_context):
    with pytest.raises(ConflictError):
        await users.create_user(UserCreate(name="Other", email="ana@x.io", role="walker"), request_context)


@pytest.mark.asyncio
async def test_email_of_soft_deleted_user_stays_taken(users, owner, request_context):
    await users.delete_user(owner["id"], DeleteMode.SOFT, request_context)

    with pytest.raises(ConflictError):
        await users.create_user(UserCreate(name="Ana", email="ana@x.io", role="owner"), request_context)


@pytest.mark.asyncio
async def test_newest_first_with_limit(users, owner, request_context):
    """Test limit=1 returns the most recently created user."""
    newer = await users.create_user(UserCreate(name="Bo", email="bo@x.io", role="walker"), request_context)

    result = await users.list_users(None, Pagination(limit=1), request_context)

    assert [u["id"] for u in result] == [newer["id"]]


@pytest.mark.asyncio
async def test_update_only_applies_known_fields(users, owner, request_context):
    updated = await users.update_user(owner["id"], {"bio": "hi", "unknownField": "x"}, request_context)

    assert updated["bio"] == "hi"
    assert updated["name"] == "Ana"
    assert updated["updated_at"] >= owner["updated_at"]


@pytest.mark.asyncio
async def test_soft_delete_hides_user_and_is_idempotent(users, owner, request_context):
    await users.delete_user(owner["id"], DeleteMode.SOFT, request_context)
    await users.delete_user(owner["id"], DeleteMode.SOFT, request_context)

    with pytest.raises(NotFoundError):
        await users.get_user(owner["id"], request_context)
    assert await users.list_users(UserFilter(is_active=False), None, request_context) == []


@pytest.mark.asyncio
async def test_search_is_case_insensitive(users, request_context):
    """Test search matches bio text and keeps the role filter."""
    # Arrange
    walker = await users.create_user(
        UserCreate(name="Cy", email="cy@x.io", role="walker", bio="Loves Labradors"), request_context
    )
    await users.create_user(
        UserCreate(name="Di", email="di@x.io", role="owner", bio="Has a lab"), request_context
    )

    # Act
    result = await users.search_users("LAB", UserFilter(role="walker"), None, request_context)

    # Assert
    assert [u["id"] for u in result] == [walker["id"]]


@pytest.mark.asyncio
async def test_search_takes_wildcards_literally(users, owner, request_context):
    assert await users.search_users("%", None, None, request_context) == []


@pytest.mark.asyncio
async def test_top_walkers(users, request_context):
    high = await users.create_user(UserCreate(name="Ed", email="ed@x.io", role="walker"), request_context)
    low = await users.create_user(UserCreate(name="Fa", email="fa@x.io", role="walker"), request_context)
    await users.update_user(high["id"], {"rating": 4.5}, request_context)
    await users.update_user(low["id"], {"rating": 3.9}, request_context)

    result = await users.list_top_walkers(10, request_context)

    assert [u["id"] for u in result] == [high["id"]]
    assert result[0]["rating"] == Decimal("4.50")


@pytest.mark.asyncio
async def test_dog_lifecycle(dogs, owner, request_context):
    """Test create, filter, update and delete of a dog."""
    # Arrange
    dog = await dogs.create_dog(
        DogCreate(owner_id=owner["id"], name="Rex", breed="Labrador", age=8, size="large"), request_context
    )

    # Act / Assert
    assert dog["energy_level"] == "medium"
    seniors = await dogs.list_dogs(DogFilter(min_age=7), None, request_context)
    assert [d["id"] for d in seniors] == [dog["id"]]

    updated = await dogs.update_dog(dog["id"], {"energy_level": "high"}, request_context)
    assert updated["energy_level"] == "high"

    await dogs.delete_dog(dog["id"], DeleteMode.SOFT, request_context)
    with pytest.raises(NotFoundError):
        await dogs.get_dog(dog["id"], request_context)
    await dogs.delete_dog(dog["id"], DeleteMode.HARD, request_context)
    with pytest.raises(NotFoundError):
        await dogs.delete_dog(dog["id"], DeleteMode.HARD, request_context)


@pytest.mark.asyncio
async def test_dog_for_inactive_owner_rejected(users, dogs, owner, request_context):
    await users.delete_user(owner["id"], DeleteMode.SOFT, request_context)

    with pytest.raises(NotFoundError):
        await dogs.create_dog(DogCreate(owner_id=owner["id"], name="Rex", size="small"), request_context)


@pytest.mark.asyncio
async def test_batch_create_is_all_or_nothing(dogs, owner, request_context):
    """Test a failing row in a batch leaves no dogs stored."""
    # Arrange - the last name is too long for VARCHAR(50)
    payloads = [
        DogCreate(owner_id=owner["id"], name="A", size="small"),
        DogCreate(owner_id=owner["id"], name="B", size="small"),
        DogCreate.model_construct(**{
            **DogCreate(owner_id=owner["id"], name="C", size="small").model_dump(),
            "name": "C" * 60,
        }),
    ]

    # Act
    with pytest.raises(TransactionFailure) as exc_info:
        await dogs.create_dogs(payloads, request_context)

    # Assert
    assert exc_info.value.statement_index == 2
    assert await dogs.list_dogs(None, None, request_context) == []


@pytest.mark.asyncio
async def test_hard_delete_user_removes_dogs(users, dogs, owner, request_context):
    await dogs.create_dogs([
        DogCreate(owner_id=owner["id"], name="A", size="small"),
        DogCreate(owner_id=owner["id"], name="B", size="large", energy_level="high"),
    ], request_context)

    stats = await users.get_user_stats(owner["id"], request_context)
    assert stats["stats"]["dog_count"] == 2
    assert stats["stats"]["high_energy_dogs_ratio"] == 0.5

    await users.delete_user(owner["id"], DeleteMode.HARD, request_context)

    assert await dogs.get_size_stats(request_context) == {}
    with pytest.raises(NotFoundError):
        await users.delete_user(owner["id"], DeleteMode.HARD, request_context)


@pytest.mark.asyncio
async def test_breed_stats_counts_unknown(dogs, owner, request_context):
    await dogs.create_dogs([
        DogCreate(owner_id=owner["id"], name="A", breed="Pug", size="small"),
        DogCreate(owner_id=owner["id"], name="B", breed="Pug", size="small"),
        DogCreate(owner_id=owner["id"], name="C", size="small"),
    ], request_context)

    assert await dogs.get_breed_stats(request_context) == {"Pug": 2, "unknown": 1}
