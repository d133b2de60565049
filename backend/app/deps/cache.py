"""
Response cache header dependency.

    @router.get("", dependencies=[Depends(cache_response())])
"""
from collections.abc import Callable

from fastapi import Response

from app.core.config import settings


def cache_response(seconds: int | None = None) -> Callable[[Response], None]:
    """Set ``Cache-Control: public, max-age=<seconds>`` (default RESPONSE_CACHE_SECONDS)."""

    def dependency(response: Response) -> None:
        max_age = settings.RESPONSE_CACHE_SECONDS if seconds is None else seconds
        response.headers["Cache-Control"] = f"public, max-age={max_age}"

    return dependency
