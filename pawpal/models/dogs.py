"""Pydantic models for dog requests and filters."""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .common import reject_null

DogSize = Literal["small", "medium", "large", "extra_large"]
EnergyLevel = Literal["low", "medium", "high"]


class DogFilter(BaseModel):
    """Optional constraints for dog reads. None means "no constraint"; False is a value."""
    owner_id: Optional[int] = Field(None, gt=0)
    size: Optional[DogSize] = None
    breed: Optional[str] = Field(None, max_length=50, description="Substring of breed")
    energy_level: Optional[EnergyLevel] = None
    is_friendly_with_other_dogs: Optional[bool] = None
    is_friendly_with_children: Optional[bool] = None
    min_age: Optional[int] = Field(None, ge=0, le=30)
    max_age: Optional[int] = Field(None, ge=0, le=30)

    @model_validator(mode="after")
    def _check_age_range(self):
        if self.min_age is not None and self.max_age is not None and self.min_age > self.max_age:
            raise ValueError("min_age must not exceed max_age")
        return self


class DogCreate(BaseModel):
    """Request model for registering a dog."""
    owner_id: int = Field(..., gt=0)
    name: str = Field(..., min_length=1, max_length=50)
    breed: Optional[str] = Field(None, max_length=50)
    age: Optional[int] = Field(None, ge=0, le=30)
    size: DogSize
    temperament: Optional[str] = Field(None, max_length=200)
    special_needs: Optional[str] = Field(None, max_length=1000)
    medical_notes: Optional[str] = Field(None, max_length=1000)
    profile_image_url: Optional[str] = Field(None, max_length=500)
    is_friendly_with_other_dogs: bool = True
    is_friendly_with_children: bool = True
    energy_level: EnergyLevel = "medium"


class DogBatchCreate(BaseModel):
    """Several dogs registered all-or-nothing."""
    dogs: List[DogCreate] = Field(..., min_length=1, max_length=50)


class DogUpdate(BaseModel):
    """Request model for updating a dog. Only the fields sent are applied."""
    model_config = ConfigDict(extra="ignore")

    owner_id: Optional[int] = Field(None, gt=0, description="New owner (must be an active user)")
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    breed: Optional[str] = Field(None, max_length=50)
    age: Optional[int] = Field(None, ge=0, le=30)
    size: Optional[DogSize] = None
    temperament: Optional[str] = Field(None, max_length=200)
    special_needs: Optional[str] = Field(None, max_length=1000)
    medical_notes: Optional[str] = Field(None, max_length=1000)
    profile_image_url: Optional[str] = Field(None, max_length=500)
    is_friendly_with_other_dogs: Optional[bool] = None
    is_friendly_with_children: Optional[bool] = None
    energy_level: Optional[EnergyLevel] = None

    @field_validator(
        "owner_id", "name", "size", "energy_level",
        "is_friendly_with_other_dogs", "is_friendly_with_children"
    )
    @classmethod
    def _not_null(cls, value, info):
        return reject_null(value, info)
