"""Pydantic models for user requests and filters."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .common import reject_null

UserRole = Literal["owner", "walker"]

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class UserFilter(BaseModel):
    """Optional constraints for user reads. None means "no constraint"."""
    role: Optional[UserRole] = Field(None, description="Exact role")
    location: Optional[str] = Field(None, max_length=200, description="Substring of location")
    is_active: Optional[bool] = Field(None, description="Exact active flag (reads only ever see live users)")
    min_rating: Optional[float] = Field(None, ge=0, le=5, description="Minimum rating")


class UserCreate(BaseModel):
    """Request model for creating a user."""
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., max_length=150, pattern=EMAIL_PATTERN)
    role: UserRole
    phone: Optional[str] = Field(None, max_length=20)
    location: Optional[str] = Field(None, max_length=200)
    profile_image_url: Optional[str] = Field(None, max_length=500)
    bio: Optional[str] = Field(None, max_length=1000)


class UserUpdate(BaseModel):
    """Request model for updating a user. Only the fields sent are applied."""
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[str] = Field(None, max_length=150, pattern=EMAIL_PATTERN)
    role: Optional[UserRole] = None
    phone: Optional[str] = Field(None, max_length=20)
    location: Optional[str] = Field(None, max_length=200)
    profile_image_url: Optional[str] = Field(None, max_length=500)
    bio: Optional[str] = Field(None, max_length=1000)
    rating: Optional[float] = Field(None, ge=0, le=5)
    total_reviews: Optional[int] = Field(None, ge=0)

    @field_validator("name", "email", "role", "rating", "total_reviews")
    @classmethod
    def _not_null(cls, value, info):
        return reject_null(value, info)
