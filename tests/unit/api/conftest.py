"""API fixtures: the real app with repositories swapped for AsyncMocks."""
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from pawpal.api.dependencies import get_dog_repository, get_user_repository
from pawpal.main import app
from pawpal.repositories import DogRepository, UserRepository


@pytest.fixture
def user_repo():
    return AsyncMock(spec=UserRepository)


@pytest.fixture
def dog_repo():
    return AsyncMock(spec=DogRepository)


@pytest.fixture
def client(user_repo, dog_repo):
    """TestClient without the lifespan, so no database is needed."""
    app.dependency_overrides[get_user_repository] = lambda: user_repo
    app.dependency_overrides[get_dog_repository] = lambda: dog_repo
    yield TestClient(app)
    app.dependency_overrides.clear()
