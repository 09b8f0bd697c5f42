"""PawPal repositories."""
from .dog_repository import DogRepository
from .user_repository import UserRepository

__all__ = ["DogRepository", "UserRepository"]
