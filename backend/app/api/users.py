"""
User API — /api/v1/user
────────────────────────
Endpoints:
  GET  /user              — All users ordered by user name (Admin, cached)
  GET  /user/{user_id}    — Single user (Admin, cached)
  POST /user/register     — Create account (201, ApiResponse envelope)
  POST /user/login        — Authenticate, return user + role + JWT (ApiResponse envelope)
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.errors import error_body as _error
from app.db.session import get_db
from app.deps.auth import require_admin
from app.deps.cache import cache_response
from app.schemas.users import (
    ApiResponse,
    LoginRequest,
    LoginResult,
    RegisterRequest,
    UserDataResponse,
    UserResponse,
)
from app.services.user_service import (
    DuplicateUserError,
    InvalidCredentialsError,
    get_user,
    list_users,
    login,
    register_user,
)

router = APIRouter()


# ── Routes ────────────────────────────────────────────────────────────────────

@router.get(
    "",
    response_model=list[UserResponse],
    dependencies=[Depends(require_admin), Depends(cache_response())],
)
def list_users_endpoint(db: Session = Depends(get_db)) -> list:
    return list_users(db)


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    dependencies=[Depends(require_admin), Depends(cache_response())],
)
def get_user_endpoint(user_id: str, db: Session = Depends(get_db)):
    user = get_user(db, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=_error("USER_NOT_FOUND", f"User {user_id} not found"),
        )
    return user


@router.post(
    "/register",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
)
def register(payload: RegisterRequest, db: Session = Depends(get_db)) -> ApiResponse:
    """
    Create a new account.

    Returns 201 + the new user's summary. Returns 400 if the user name exists.
    """
    try:
        user = register_user(
            db,
            user_name=payload.user_name,
            name=payload.name,
            password=payload.password,
            role=payload.role,
        )
    except DuplicateUserError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=_error("USER_EXISTS", str(exc)),
        ) from exc

    return ApiResponse(
        status_code=status.HTTP_201_CREATED,
        result=UserDataResponse.model_validate(user),
    )


@router.post("/login", response_model=ApiResponse)
def login_endpoint(payload: LoginRequest, db: Session = Depends(get_db)) -> ApiResponse:
    """Authenticate with user name + password, return the user, role and JWT."""
    try:
        user, token = login(db, payload.user_name, payload.password)
    except InvalidCredentialsError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=_error("INVALID_CREDENTIALS", str(exc)),
        ) from exc

    return ApiResponse(
        status_code=status.HTTP_200_OK,
        result=LoginResult(
            user=UserDataResponse.model_validate(user),
            role=user.role,
            token=token,
        ),
    )
