"""
Category request/response schemas.
"""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.db.models import MAX_INT_ID

CATEGORY_NAME_MAX_LENGTH = 100


def _clean_name(value: str) -> str:
    name = " ".join(value.strip().split())
    if not name:
        raise ValueError("Category name is required")
    if len(name) > CATEGORY_NAME_MAX_LENGTH:
        raise ValueError(
            f"Category name cannot exceed {CATEGORY_NAME_MAX_LENGTH} characters"
        )
    return name


class CategoryResponse(BaseModel):
    id: int
    name: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CreateCategoryRequest(BaseModel):
    """Payload for POST /category."""

    name: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _clean_name(v)


class UpdateCategoryRequest(BaseModel):
    """Payload for PATCH /category/{category_id}. *id* must match the path."""

    id: int = Field(..., ge=1, le=MAX_INT_ID)
    name: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _clean_name(v)
