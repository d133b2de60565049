"""
SQLAlchemy ORM models.

Types are kept portable (no Postgres-only columns) so the same models run
against PostgreSQL in production and SQLite in the test suite.
"""
import uuid
from datetime import datetime, timezone
from enum import Enum as PyEnum

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import DeclarativeBase, relationship


# ── Base ──────────────────────────────────────────────────────────────────────

class Base(DeclarativeBase):
    pass


# Largest value an Integer id column holds on every supported backend
MAX_INT_ID = 2**31 - 1


# ── Enums ─────────────────────────────────────────────────────────────────────

class ClassificationEnum(str, PyEnum):
    """Minimum viewer age for a movie."""

    SEVEN = "SEVEN"
    THIRTEEN = "THIRTEEN"
    SIXTEEN = "SIXTEEN"
    EIGHTEEN = "EIGHTEEN"


class RoleEnum(str, PyEnum):
    ADMIN = "Admin"
    REGISTERED = "Registered"


# ── Timestamp helper ──────────────────────────────────────────────────────────

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_user_id() -> str:
    return str(uuid.uuid4())


# ── Models ────────────────────────────────────────────────────────────────────

class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), unique=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    movies = relationship(
        "Movie",
        back_populates="category",
        cascade="all, delete-orphan",
    )


class Movie(Base):
    __tablename__ = "movies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=True)
    duration = Column(Integer, nullable=False, comment="Running time in minutes")
    image_path = Column(String(500), nullable=True, comment="Public image URL")
    image_local_path = Column(
        String(500),
        nullable=True,
        comment="Image location relative to STATIC_DIR; null for external URLs",
    )
    classification = Column(
        SAEnum(
            ClassificationEnum,
            name="classification_type",
            values_callable=lambda enum: [e.value for e in enum],
        ),
        nullable=False,
    )
    category_id = Column(
        Integer,
        ForeignKey("categories.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    category = relationship("Category", back_populates="movies")


class AppUser(Base):
    """
    Application user.

    user_name doubles as the e-mail address, mirroring how accounts are
    registered. Lookups on user_name are case-insensitive.
    """
    __tablename__ = "app_users"

    id = Column(String(36), primary_key=True, default=_new_user_id)
    user_name = Column(String(256), unique=True, nullable=False, index=True)
    name = Column(String(256), nullable=True)
    email = Column(String(256), nullable=True)
    password_hash = Column(String, nullable=False)
    role = Column(
        SAEnum(
            RoleEnum,
            name="user_role",
            values_callable=lambda enum: [e.value for e in enum],
        ),
        nullable=False,
        default=RoleEnum.REGISTERED,
    )
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
