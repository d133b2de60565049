"""
Category API — /api/v1/category
────────────────────────────────
Endpoints:
  GET    /category                 — All categories ordered by name (cached)
  GET    /category/{category_id}   — Single category (cached)
  POST   /category                 — Create (Admin, 201)
  PATCH  /category/{category_id}   — Rename (Admin, 204)
  DELETE /category/{category_id}   — Delete with its movies (Admin, 204)
"""
from fastapi import APIRouter, Depends, HTTPException, Path, Request, Response, status
from sqlalchemy.orm import Session

from app.core.errors import error_body as _error
from app.db.models import MAX_INT_ID
from app.db.session import get_db
from app.deps.auth import require_admin
from app.deps.cache import cache_response
from app.schemas.categories import (
    CategoryResponse,
    CreateCategoryRequest,
    UpdateCategoryRequest,
)
from app.services.category_service import (
    CategoryNotFoundError,
    DuplicateCategoryError,
    create_category,
    delete_category,
    get_category,
    list_categories,
    update_category,
)

router = APIRouter()


# ── Routes ────────────────────────────────────────────────────────────────────

@router.get(
    "",
    response_model=list[CategoryResponse],
    dependencies=[Depends(cache_response())],
)
def list_categories_endpoint(db: Session = Depends(get_db)) -> list:
    return list_categories(db)


@router.get(
    "/{category_id}",
    response_model=CategoryResponse,
    name="get_category",
    dependencies=[Depends(cache_response())],
)
def get_category_endpoint(
    category_id: int = Path(..., ge=1, le=MAX_INT_ID),
    db: Session = Depends(get_db),
):
    category = get_category(db, category_id)
    if category is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=_error("CATEGORY_NOT_FOUND", f"Category {category_id} not found"),
        )
    return category


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_category_endpoint(
    payload: CreateCategoryRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
):
    """
    Create a category. Returns 400 when the name already exists.
    """
    try:
        category = create_category(db, payload.name)
    except DuplicateCategoryError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=_error("CATEGORY_EXISTS", str(exc)),
        ) from exc

    response.headers["Location"] = str(
        request.url_for("get_category", category_id=category.id)
    )
    return category


@router.patch(
    "/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
def update_category_endpoint(
    payload: UpdateCategoryRequest,
    category_id: int = Path(..., ge=1, le=MAX_INT_ID),
    db: Session = Depends(get_db),
) -> None:
    """Rename a category. The body id must match the path id."""
    if payload.id != category_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=_error("ID_MISMATCH", "Body id does not match the category id in the path"),
        )

    try:
        update_category(db, category_id, payload.name)
    except CategoryNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=_error("CATEGORY_NOT_FOUND", str(exc)),
        ) from exc
    except DuplicateCategoryError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=_error("CATEGORY_EXISTS", str(exc)),
        ) from exc


@router.delete(
    "/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
def delete_category_endpoint(
    category_id: int = Path(..., ge=1, le=MAX_INT_ID),
    db: Session = Depends(get_db),
) -> None:
    try:
        delete_category(db, category_id)
    except CategoryNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=_error("CATEGORY_NOT_FOUND", str(exc)),
        ) from exc
