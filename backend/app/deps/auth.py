"""
Auth dependencies — shared across all protected endpoints.

Usage in any route:
    from app.deps.auth import get_current_user, require_admin
    from app.db.models import AppUser

    @router.get("/protected")
    def protected(user: AppUser = Depends(get_current_user)):
        ...

    @router.delete("/admin-only", dependencies=[Depends(require_admin)])
    def admin_only():
        ...
"""
from collections.abc import Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from app.core.errors import error_body
from app.core.security import decode_access_token
from app.db.models import AppUser, RoleEnum
from app.db.session import get_db
from app.services.user_service import get_user_by_user_name

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/user/login")


def _role_value(role: object) -> str:
    return role.value if hasattr(role, "value") else str(role)


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> AppUser:
    """
    Decode the bearer JWT and return the corresponding AppUser.

    Raises 401 on any failure (missing/invalid token, unknown user). A token
    whose role claim no longer matches the stored role is rejected too, so
    role checks see the role the token asserts.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=error_body("UNAUTHORIZED", "Invalid or expired token"),
        headers={"WWW-Authenticate": "Bearer"},
    )

    claims = decode_access_token(token)
    if claims is None:
        raise credentials_exception

    user = get_user_by_user_name(db, claims.user_name)
    if user is None or _role_value(user.role) != claims.role:
        raise credentials_exception

    return user


def require_role(*roles: RoleEnum) -> Callable[..., AppUser]:
    """Build a dependency that allows only users holding one of *roles* (403 otherwise)."""
    allowed = {_role_value(r) for r in roles}

    def dependency(current_user: AppUser = Depends(get_current_user)) -> AppUser:
        if _role_value(current_user.role) not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=error_body("FORBIDDEN", "You do not have permission to perform this action"),
            )
        return current_user

    return dependency


require_admin = require_role(RoleEnum.ADMIN)
