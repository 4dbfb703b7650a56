import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pockettrader.api import (
    auth_router,
    cards_router,
    collection_router,
    health_router,
    image_proxy_router,
    profiles_router,
    trades_router,
)
from pockettrader.config import settings
from pockettrader.db.database import dispose_db, init_db
from pockettrader.models.errors import AuthRequired, TrackerError
from pockettrader.services.card_catalog import CardCatalog

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    await init_db()
    app.state.catalog = CardCatalog()
    yield
    await dispose_db()


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("pockettrader"),
    lifespan=lifespan,
)


@app.exception_handler(TrackerError)
async def tracker_error_handler(_request: Request, exc: TrackerError) -> JSONResponse:
    """Turn a known failure into a JSON error with a user-facing message."""
    if exc.status_code >= 500:
        logger.error("%s: %s (%s)", exc.code, exc.message, exc.detail)

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthRequired) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.code},
        headers=headers,
    )


app.include_router(auth_router)
app.include_router(cards_router)
app.include_router(collection_router)
app.include_router(health_router)
app.include_router(image_proxy_router)
app.include_router(profiles_router)
app.include_router(trades_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Access-Token", "X-Refresh-Token"],
)
