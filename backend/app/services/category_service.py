"""
Category business logic.

All DB writes go through this layer (not directly in routes).
"""
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.db.models import Category
from app.services.image_service import delete_movie_image

logger = logging.getLogger(__name__)


class CategoryNotFoundError(Exception):
    """Raised when a category does not exist."""

    def __init__(self, category_id: int) -> None:
        self.category_id = category_id
        super().__init__(f"Category {category_id} not found")


class DuplicateCategoryError(Exception):
    """Raised when a category name is already taken."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"A category named '{name}' already exists")


def list_categories(db: Session) -> list[Category]:
    return db.query(Category).order_by(Category.name).all()


def get_category(db: Session, category_id: int) -> Category | None:
    return db.query(Category).filter(Category.id == category_id).first()


def category_exists(db: Session, category_id: int) -> bool:
    return db.query(Category.id).filter(Category.id == category_id).first() is not None


def category_name_exists(db: Session, name: str, exclude_id: int | None = None) -> bool:
    """Case-insensitive name check, optionally ignoring one category."""
    query = db.query(Category.id).filter(func.lower(Category.name) == name.lower())
    if exclude_id is not None:
        query = query.filter(Category.id != exclude_id)
    return query.first() is not None


def create_category(db: Session, name: str) -> Category:
    if category_name_exists(db, name):
        raise DuplicateCategoryError(name)

    category = Category(name=name)
    db.add(category)
    db.commit()
    db.refresh(category)
    logger.info("Created category %s (%s)", category.id, category.name)
    return category


def update_category(db: Session, category_id: int, name: str) -> Category:
    """Rename a category. The creation timestamp is left untouched."""
    category = get_category(db, category_id)
    if category is None:
        raise CategoryNotFoundError(category_id)
    if category_name_exists(db, name, exclude_id=category_id):
        raise DuplicateCategoryError(name)

    category.name = name
    db.commit()
    db.refresh(category)
    logger.info("Updated category %s", category_id)
    return category


def delete_category(db: Session, category_id: int) -> None:
    """Delete a category together with its movies and their stored images."""
    category = get_category(db, category_id)
    if category is None:
        raise CategoryNotFoundError(category_id)

    movie_count = len(category.movies)
    image_paths = [m.image_local_path for m in category.movies if m.image_local_path]

    db.delete(category)
    db.commit()

    for path in image_paths:
        delete_movie_image(path)
    logger.info("Deleted category %s and %d movie(s)", category_id, movie_count)
