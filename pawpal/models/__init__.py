"""Pydantic models for PawPal requests and filters."""
from .common import DeleteMode, Pagination
from .dogs import DogBatchCreate, DogCreate, DogFilter, DogUpdate
from .users import UserCreate, UserFilter, UserUpdate

__all__ = [
    "DeleteMode",
    "DogBatchCreate",
    "DogCreate",
    "DogFilter",
    "DogUpdate",
    "Pagination",
    "UserCreate",
    "UserFilter",
    "UserUpdate",
]
