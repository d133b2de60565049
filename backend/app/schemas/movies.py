"""
Movie request/response schemas.

Create and update requests arrive as multipart forms (they may carry an
image), so the routers collect form fields and build these models.
"""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.db.models import MAX_INT_ID, ClassificationEnum

MOVIE_NAME_MAX_LENGTH = 200


class MovieResponse(BaseModel):
    id: int
    name: str
    description: str | None
    duration: int
    image_path: str | None
    image_local_path: str | None
    classification: ClassificationEnum
    created_at: datetime
    category_id: int

    model_config = ConfigDict(from_attributes=True)


class MoviePageResponse(BaseModel):
    """Envelope for GET /movies."""

    total_movies: int
    page_number: int
    page_size: int
    total_pages: int
    movies: list[MovieResponse]


class MovieWriteRequest(BaseModel):
    """Fields shared by create and update."""

    name: str
    description: str | None = None
    duration: int = Field(..., ge=1, le=MAX_INT_ID)
    classification: ClassificationEnum
    category_id: int = Field(..., ge=1, le=MAX_INT_ID)
    image_path: str | None = Field(default=None, max_length=500)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        name = " ".join(value.strip().split())
        if not name:
            raise ValueError("Movie name is required")
        if len(name) > MOVIE_NAME_MAX_LENGTH:
            raise ValueError(f"Movie name cannot exceed {MOVIE_NAME_MAX_LENGTH} characters")
        return name

    @field_validator("description", "image_path")
    @classmethod
    def blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        return value or None


class CreateMovieRequest(MovieWriteRequest):
    pass


class UpdateMovieRequest(MovieWriteRequest):
    id: int = Field(..., ge=1, le=MAX_INT_ID)
