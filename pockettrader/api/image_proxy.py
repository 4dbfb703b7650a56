"""
Image relay endpoint.

The card image host does not allow cross-origin embedding, so images are
fetched server-side and passed through unchanged.
"""

import logging
from urllib.parse import urlsplit

import httpx
from fastapi import APIRouter, Response

from pockettrader.config import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["images"])

DEFAULT_CONTENT_TYPE = "image/webp"
CACHE_CONTROL = "public, max-age=31536000, immutable"
ALLOWED_SCHEMES = frozenset({"http", "https"})


def _is_web_url(url: str) -> bool:
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return parts.scheme.lower() in ALLOWED_SCHEMES and bool(parts.netloc)


@router.get("/image-proxy")
async def image_proxy(url: str | None = None) -> Response:
    """
    Fetch an image and relay it with long-lived caching headers.

    Returns 400 without an http(s) `url`, the upstream status if the upstream
    request fails, and 500 on any other error.
    """
    if not url:
        return Response("Missing image URL", status_code=400, media_type="text/plain")
    if not _is_web_url(url):
        return Response("Invalid image URL", status_code=400, media_type="text/plain")

    try:
        async with httpx.AsyncClient(
            timeout=settings.image_proxy_timeout, follow_redirects=True
        ) as client:
            upstream = await client.get(
                url, headers={"User-Agent": settings.image_proxy_user_agent}
            )
    except Exception as e:
        logger.error("Error proxying image %s: %s", url, e)
        return Response("Internal server error", status_code=500, media_type="text/plain")

    if upstream.is_error:
        logger.warning("Image fetch failed with HTTP %d: %s", upstream.status_code, url)
        return Response(
            "Failed to fetch image", status_code=upstream.status_code, media_type="text/plain"
        )

    return Response(
        content=upstream.content,
        media_type=upstream.headers.get("content-type") or DEFAULT_CONTENT_TYPE,
        headers={
            "Cache-Control": CACHE_CONTROL,
            "Access-Control-Allow-Origin": "*",
        },
    )
