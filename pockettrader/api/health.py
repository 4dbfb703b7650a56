"""
Health check endpoints.

Liveness, plus readiness that checks the database and reports whether the
card catalog has been loaded.
"""

from fastapi import APIRouter, Response, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from pockettrader.api.deps import CatalogDep, SessionDep

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    database: str | None = None
    catalog: str | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Liveness probe. Does not check dependencies."""
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(response: Response, session: SessionDep, catalog: CatalogDep) -> HealthResponse:
    """
    Readiness probe.

    Returns 503 if the database is unreachable. The catalog is loaded
    lazily, so "not loaded" does not make the service unready.
    """
    catalog_state = "loaded" if catalog.loaded else "not loaded"
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(status="not ready", database="disconnected", catalog=catalog_state)
    return HealthResponse(status="ready", database="connected", catalog=catalog_state)
