"""
API dependencies for dependency injection
"""

from uuid import UUID

from fastapi import Request

from app.config import settings
from app.exceptions import UnauthorizedError


def get_current_user_id(request: Request) -> UUID:
    """
    Identify the caller from the user id header.

    Every entity is scoped to this id; a missing or malformed header is
    rejected before any data is touched.
    """
    raw = request.headers.get(settings.user_id_header)
    if not raw:
        raise UnauthorizedError(
            f"Missing {settings.user_id_header} header", code="UNAUTHORIZED"
        )
    try:
        return UUID(raw.strip())
    except ValueError:
        raise UnauthorizedError(
            f"Invalid {settings.user_id_header} header", code="UNAUTHORIZED"
        )
