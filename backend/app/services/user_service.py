"""
User business logic — registration, login, token issuance and lookups.

All DB writes go through this layer (not directly in routes).
"""
import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.security import create_access_token, hash_password, verify_password
from app.db.models import AppUser, RoleEnum

logger = logging.getLogger(__name__)


# ── Custom exceptions ────────────────────────────────────────────────────────


class DuplicateUserError(Exception):
    """Raised when registration conflicts with an existing user name."""

    def __init__(self, user_name: str) -> None:
        self.user_name = user_name
        super().__init__(f"The user name '{user_name}' is already taken")


class InvalidCredentialsError(Exception):
    """Raised when a login does not match any account."""

    def __init__(self) -> None:
        super().__init__("Incorrect user name or password")


# ── Lookups ──────────────────────────────────────────────────────────────────


def list_users(db: Session) -> list[AppUser]:
    return db.query(AppUser).order_by(AppUser.user_name).all()


def get_user(db: Session, user_id: str) -> AppUser | None:
    return db.query(AppUser).filter(AppUser.id == user_id).first()


def get_user_by_user_name(db: Session, user_name: str) -> AppUser | None:
    """Case-insensitive lookup by user name."""
    return (
        db.query(AppUser)
        .filter(func.lower(AppUser.user_name) == user_name.strip().lower())
        .first()
    )


def is_user_unique(db: Session, user_name: str) -> bool:
    return get_user_by_user_name(db, user_name) is None


# ── Service functions ────────────────────────────────────────────────────────


def _default_role() -> RoleEnum:
    return RoleEnum(settings.DEFAULT_USER_ROLE)


def register_user(
    db: Session,
    user_name: str,
    name: str,
    password: str,
    role: RoleEnum | None = None,
) -> AppUser:
    """
    Register a new account.

    - The user name is also stored as the e-mail address.
    - Hashes the password with bcrypt.
    - Raises DuplicateUserError when the user name (any case) exists.
    """
    user_name = user_name.strip()
    if not is_user_unique(db, user_name):
        raise DuplicateUserError(user_name)

    user = AppUser(
        user_name=user_name,
        email=user_name,
        name=name,
        password_hash=hash_password(password),
        role=role or _default_role(),
    )
    db.add(user)

    try:
        db.flush()  # trigger INSERT; raises on duplicate
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateUserError(user_name) from exc

    db.commit()
    db.refresh(user)
    logger.info("Registered user %s with role %s", user.user_name, user.role.value)
    return user


def authenticate_user(db: Session, user_name: str, password: str) -> AppUser | None:
    """Verify credentials and return the AppUser, or None on failure."""
    user = get_user_by_user_name(db, user_name)
    if user is None:
        return None

    if not verify_password(password, user.password_hash):
        return None

    return user


def issue_access_token(user: AppUser) -> str:
    """Create a signed JWT asserting the user name and role."""
    return create_access_token(user_name=user.user_name, role=user.role.value)


def login(db: Session, user_name: str, password: str) -> tuple[AppUser, str]:
    """Authenticate and return ``(user, token)``."""
    user = authenticate_user(db, user_name, password)
    if user is None:
        logger.warning("Failed login for user name %r", user_name)
        raise InvalidCredentialsError()
    return user, issue_access_token(user)
