"""
Movie Catalog API — FastAPI application entry point.

Routers are registered here. Each resource lives in app/api/.
"""
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.api import categories, movies, users
from app.core.config import settings
from app.core.errors import register_exception_handlers
from app.core.logging import configure_logging

API_PREFIX = "/api/v1"

configure_logging()

app = FastAPI(
    title="Movie Catalog API",
    description="Categories, movies and user accounts for the movie catalog.",
    version="1.0.0",
    docs_url="/docs" if settings.ENABLE_DOCS else None,
    redoc_url="/redoc" if settings.ENABLE_DOCS else None,
)

register_exception_handlers(app)

# ── CORS ──────────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ───────────────────────────────────────────────────────────────────
app.include_router(categories.router, prefix=f"{API_PREFIX}/category", tags=["category"])
app.include_router(movies.router,     prefix=f"{API_PREFIX}/movies",   tags=["movies"])
app.include_router(users.router,      prefix=f"{API_PREFIX}/user",     tags=["user"])

# ── Uploaded images ───────────────────────────────────────────────────────────
Path(settings.STATIC_DIR).mkdir(parents=True, exist_ok=True)
app.mount(
    settings.STATIC_URL,
    StaticFiles(directory=settings.STATIC_DIR, check_dir=False),
    name="static",
)


# ── Health check ──────────────────────────────────────────────────────────────
@app.get("/health", tags=["system"])
def health_check() -> dict:
    """Liveness probe. Returns 200 when the server is up."""
    return {"status": "ok", "version": app.version, "env": settings.APP_ENV}
