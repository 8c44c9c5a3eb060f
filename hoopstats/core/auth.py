"""
API key authentication.

Any client holding the shared key may act on any team; there is no per-team
authorization model.
"""
from typing import Optional
from fastapi import HTTPException, Security, status
from fastapi.security import APIKeyHeader
from starlette.requests import Request

from hoopstats.core.config import settings
from hoopstats.core.logging import get_logger

logger = get_logger(__name__)

API_KEY_NAME = "X-API-Key"

# Public endpoint paths (no auth required)
PUBLIC_PATHS = {
    "/",
    "/health",
    "/api/health",
    "/docs",
    "/redoc",
    "/openapi.json",
    "/metrics",
}

api_key_header = APIKeyHeader(name=API_KEY_NAME, auto_error=False)


def get_api_key(request: Request, api_key: Optional[str] = Security(api_key_header)) -> str:
    """
    Validate API key from request header.

    Returns:
        The validated API key (or a marker when auth is skipped)

    Raises:
        HTTPException: If API key is missing or invalid
    """
    if request.url.path in PUBLIC_PATHS:
        return "_public_"

    if not settings.API_KEY:
        if settings.is_production():
            logger.warning("API_KEY not configured in production - rejecting request")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="API key required. Configure API_KEY environment variable."
            )
        logger.debug("API_KEY not configured - allowing request outside production")
        return "_dev_skip_"

    if not api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="API key missing. Provide X-API-Key header."
        )

    if api_key != settings.API_KEY:
        logger.warning(f"Invalid API key attempt from {request.client.host if request.client else 'unknown'}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid API key."
        )

    return api_key
