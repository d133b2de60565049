"""
Movie API — /api/v1/movies
───────────────────────────
Endpoints:
  GET    /movies                          — Paged list ordered by name (cached)
  GET    /movies/search?name=             — Case-insensitive name search
  GET    /movies/category/{category_id}   — Movies in a category (cached)
  GET    /movies/{movie_id}               — Single movie (cached)
  POST   /movies                          — Create, multipart with optional image (Admin, 201)
  PATCH  /movies/{movie_id}               — Update, multipart with optional image (Admin, 204)
  DELETE /movies/{movie_id}               — Delete movie and its stored image (Admin, 204)
"""
from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    Path,
    HTTPException,
    Query,
    Request,
    Response,
    UploadFile,
    status,
)
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.core.errors import error_body as _error
from app.db.models import MAX_INT_ID, ClassificationEnum
from app.db.session import get_db
from app.deps.auth import require_admin
from app.deps.cache import cache_response
from app.schemas.movies import (
    CreateMovieRequest,
    MoviePageResponse,
    MovieResponse,
    UpdateMovieRequest,
)
from app.services.category_service import CategoryNotFoundError
from app.services.image_service import InvalidImageError
from app.services.movie_service import (
    DuplicateMovieError,
    MovieNotFoundError,
    count_movies,
    create_movie,
    delete_movie,
    get_movie,
    list_movies,
    list_movies_by_category,
    search_movies,
    total_pages,
    update_movie,
)

router = APIRouter()

MAX_PAGE_SIZE = 100


def _no_movies(message: str = "No movies found") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=_error("NO_MOVIES", message),
    )


def _category_not_found(exc: CategoryNotFoundError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=_error("CATEGORY_NOT_FOUND", str(exc)),
    )


def _build_request(model, **fields):
    """Validate collected form fields; failures surface as a normal 400."""
    try:
        return model(**fields)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors()) from exc


def _image_args(image: UploadFile | None) -> dict:
    # Browsers send an empty part when no file is picked
    if image is None or not image.filename:
        return {"image": None, "image_filename": None}
    return {"image": image.file, "image_filename": image.filename}


# ── Reads ─────────────────────────────────────────────────────────────────────

@router.get(
    "",
    response_model=MoviePageResponse,
    dependencies=[Depends(cache_response())],
)
def list_movies_endpoint(
    page_number: int = Query(1, ge=1, le=MAX_INT_ID),
    page_size: int = Query(2, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
) -> MoviePageResponse:
    """
    Offset/limit pagination. Returns 404 when the requested page is empty.
    """
    total = count_movies(db)
    rows = list_movies(db, page_number, page_size)
    if not rows:
        raise _no_movies()

    return MoviePageResponse(
        total_movies=total,
        page_number=page_number,
        page_size=page_size,
        total_pages=total_pages(total, page_size),
        movies=[MovieResponse.model_validate(row) for row in rows],
    )


@router.get("/search", response_model=list[MovieResponse])
def search_movies_endpoint(
    name: str = Query("", max_length=200, description="Substring of the movie name"),
    db: Session = Depends(get_db),
) -> list:
    rows = search_movies(db, name)
    if not rows:
        raise _no_movies(f"No movies match '{name}'")
    return rows


@router.get(
    "/category/{category_id}",
    response_model=list[MovieResponse],
    dependencies=[Depends(cache_response())],
)
def list_movies_by_category_endpoint(
    category_id: int = Path(..., ge=1, le=MAX_INT_ID),
    db: Session = Depends(get_db),
) -> list:
    try:
        return list_movies_by_category(db, category_id)
    except CategoryNotFoundError as exc:
        raise _category_not_found(exc) from exc


@router.get(
    "/{movie_id}",
    response_model=MovieResponse,
    name="get_movie",
    dependencies=[Depends(cache_response())],
)
def get_movie_endpoint(
    movie_id: int = Path(..., ge=1, le=MAX_INT_ID),
    db: Session = Depends(get_db),
):
    movie = get_movie(db, movie_id)
    if movie is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=_error("MOVIE_NOT_FOUND", f"Movie {movie_id} not found"),
        )
    return movie


# ── Writes ────────────────────────────────────────────────────────────────────

@router.post(
    "",
    response_model=MovieResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_movie_endpoint(
    request: Request,
    response: Response,
    name: str = Form(...),
    duration: int = Form(...),
    classification: ClassificationEnum = Form(...),
    category_id: int = Form(...),
    description: str | None = Form(None),
    image_path: str | None = Form(None),
    image: UploadFile | None = File(None),
    db: Session = Depends(get_db),
):
    payload = _build_request(
        CreateMovieRequest,
        name=name,
        description=description,
        duration=duration,
        classification=classification,
        category_id=category_id,
        image_path=image_path,
    )

    try:
        movie = create_movie(db, payload, **_image_args(image))
    except DuplicateMovieError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=_error("MOVIE_EXISTS", str(exc)),
        ) from exc
    except CategoryNotFoundError as exc:
        raise _category_not_found(exc) from exc
    except InvalidImageError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=_error("INVALID_IMAGE", str(exc)),
        ) from exc

    response.headers["Location"] = str(request.url_for("get_movie", movie_id=movie.id))
    return movie


@router.patch(
    "/{movie_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
def update_movie_endpoint(
    movie_id: int = Path(..., ge=1, le=MAX_INT_ID),
    id: int = Form(...),
    name: str = Form(...),
    duration: int = Form(...),
    classification: ClassificationEnum = Form(...),
    category_id: int = Form(...),
    description: str | None = Form(None),
    image_path: str | None = Form(None),
    image: UploadFile | None = File(None),
    db: Session = Depends(get_db),
) -> None:
    """Overwrite a movie. The form id must match the path id."""
    if id != movie_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=_error("ID_MISMATCH", "Form id does not match the movie id in the path"),
        )

    payload = _build_request(
        UpdateMovieRequest,
        id=id,
        name=name,
        description=description,
        duration=duration,
        classification=classification,
        category_id=category_id,
        image_path=image_path,
    )

    try:
        update_movie(db, payload, **_image_args(image))
    except MovieNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=_error("MOVIE_NOT_FOUND", str(exc)),
        ) from exc
    except DuplicateMovieError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=_error("MOVIE_EXISTS", str(exc)),
        ) from exc
    except CategoryNotFoundError as exc:
        raise _category_not_found(exc) from exc
    except InvalidImageError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=_error("INVALID_IMAGE", str(exc)),
        ) from exc


@router.delete(
    "/{movie_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
def delete_movie_endpoint(
    movie_id: int = Path(..., ge=1, le=MAX_INT_ID),
    db: Session = Depends(get_db),
) -> None:
    try:
        delete_movie(db, movie_id)
    except MovieNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=_error("MOVIE_NOT_FOUND", str(exc)),
        ) from exc
