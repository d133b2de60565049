"""
Movie business logic — paging, search, CRUD and image bookkeeping.
"""
import logging
import math
from typing import BinaryIO

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.config import settings
from app.db.models import Movie
from app.schemas.movies import CreateMovieRequest, UpdateMovieRequest
from app.services.category_service import CategoryNotFoundError, category_exists
from app.services.image_service import delete_movie_image, save_movie_image

logger = logging.getLogger(__name__)


class MovieNotFoundError(Exception):
    """Raised when a movie does not exist."""

    def __init__(self, movie_id: int) -> None:
        self.movie_id = movie_id
        super().__init__(f"Movie {movie_id} not found")


class DuplicateMovieError(Exception):
    """Raised when a movie name is already taken."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"A movie named '{name}' already exists")


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def total_pages(total: int, page_size: int) -> int:
    return math.ceil(total / page_size) if page_size > 0 else 0


# ── Reads ─────────────────────────────────────────────────────────────────────

def count_movies(db: Session) -> int:
    return db.query(func.count(Movie.id)).scalar() or 0


def list_movies(db: Session, page_number: int, page_size: int) -> list[Movie]:
    """One page of movies ordered by name. *page_number* starts at 1."""
    offset = (page_number - 1) * page_size
    return (
        db.query(Movie)
        .order_by(Movie.name, Movie.id)
        .offset(offset)
        .limit(page_size)
        .all()
    )


def list_movies_by_category(db: Session, category_id: int) -> list[Movie]:
    if not category_exists(db, category_id):
        raise CategoryNotFoundError(category_id)
    return (
        db.query(Movie)
        .filter(Movie.category_id == category_id)
        .order_by(Movie.name, Movie.id)
        .all()
    )


def search_movies(db: Session, name: str | None) -> list[Movie]:
    """Case-insensitive substring match on the movie name. Empty returns all."""
    query = db.query(Movie)
    term = name or ""
    if term:
        pattern = _escape_like(term.lower())
        query = query.filter(func.lower(Movie.name).like(f"%{pattern}%", escape="\\"))
    return query.order_by(Movie.name, Movie.id).all()


def get_movie(db: Session, movie_id: int) -> Movie | None:
    return db.query(Movie).filter(Movie.id == movie_id).first()


def movie_name_exists(db: Session, name: str, exclude_id: int | None = None) -> bool:
    query = db.query(Movie.id).filter(func.lower(Movie.name) == name.lower())
    if exclude_id is not None:
        query = query.filter(Movie.id != exclude_id)
    return query.first() is not None


# ── Writes ────────────────────────────────────────────────────────────────────

def create_movie(
    db: Session,
    payload: CreateMovieRequest,
    image: BinaryIO | None = None,
    image_filename: str | None = None,
) -> Movie:
    """
    Insert a movie, then attach its image.

    The row is flushed first so the generated id can be part of the stored
    file name. Without an upload, *payload.image_path* or the configured
    placeholder URL is used.
    """
    if movie_name_exists(db, payload.name):
        raise DuplicateMovieError(payload.name)
    if not category_exists(db, payload.category_id):
        raise CategoryNotFoundError(payload.category_id)

    movie = Movie(
        name=payload.name,
        description=payload.description,
        duration=payload.duration,
        classification=payload.classification,
        category_id=payload.category_id,
    )
    db.add(movie)
    db.flush()

    local_path = None
    try:
        if image is not None:
            movie.image_path, local_path = save_movie_image(image, image_filename or "", movie.id)
            movie.image_local_path = local_path
        else:
            movie.image_path = payload.image_path or settings.DEFAULT_MOVIE_IMAGE_URL
            movie.image_local_path = None
        db.commit()
    except Exception:
        db.rollback()
        delete_movie_image(local_path)
        raise

    db.refresh(movie)
    logger.info("Created movie %s (%s)", movie.id, movie.name)
    return movie


def update_movie(
    db: Session,
    payload: UpdateMovieRequest,
    image: BinaryIO | None = None,
    image_filename: str | None = None,
) -> Movie:
    """
    Overwrite a movie's fields. A new upload replaces (and deletes) the old
    stored image; an explicit *image_path* switches to an external URL.
    """
    movie = get_movie(db, payload.id)
    if movie is None:
        raise MovieNotFoundError(payload.id)
    if movie_name_exists(db, payload.name, exclude_id=payload.id):
        raise DuplicateMovieError(payload.name)
    if not category_exists(db, payload.category_id):
        raise CategoryNotFoundError(payload.category_id)

    previous_local_path = movie.image_local_path

    movie.name = payload.name
    movie.description = payload.description
    movie.duration = payload.duration
    movie.classification = payload.classification
    movie.category_id = payload.category_id

    new_local_path = None
    try:
        if image is not None:
            movie.image_path, new_local_path = save_movie_image(
                image, image_filename or "", movie.id
            )
            movie.image_local_path = new_local_path
        elif payload.image_path:
            movie.image_path = payload.image_path
            movie.image_local_path = None
        db.commit()
    except Exception:
        db.rollback()
        delete_movie_image(new_local_path)
        raise

    if previous_local_path and previous_local_path != movie.image_local_path:
        delete_movie_image(previous_local_path)

    db.refresh(movie)
    logger.info("Updated movie %s", movie.id)
    return movie


def delete_movie(db: Session, movie_id: int) -> None:
    movie = get_movie(db, movie_id)
    if movie is None:
        raise MovieNotFoundError(movie_id)

    local_path = movie.image_local_path
    db.delete(movie)
    db.commit()

    delete_movie_image(local_path)
    logger.info("Deleted movie %s", movie_id)
