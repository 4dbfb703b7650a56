"""Tests for the image relay endpoint."""

import httpx
import pytest
import respx
from httpx import AsyncClient

from pockettrader.api.image_proxy import CACHE_CONTROL, image_proxy

IMAGE_URL = "https://images.test/a1-001.webp"


async def test_missing_url(client: AsyncClient) -> None:
    response = await client.get("/api/image-proxy")

    assert response.status_code == 400
    assert response.text == "Missing image URL"


@pytest.mark.parametrize(
    "url",
    ["file:///etc/passwd", "gopher://images.test/a.webp", "images.test/a.webp", "http://[::1"],
)
async def test_rejects_non_web_urls(client: AsyncClient, url: str) -> None:
    response = await client.get("/api/image-proxy", params={"url": url})

    assert response.status_code == 400
    assert response.text == "Invalid image URL"


@respx.mock
async def test_relays_image_with_cache_headers() -> None:
    route = respx.get(IMAGE_URL).mock(
        return_value=httpx.Response(200, content=b"RIFF", headers={"content-type": "image/png"})
    )

    response = await image_proxy(url=IMAGE_URL)

    assert response.status_code == 200
    assert response.body == b"RIFF"
    assert response.media_type == "image/png"
    assert response.headers["cache-control"] == CACHE_CONTROL
    assert response.headers["access-control-allow-origin"] == "*"
    assert route.calls.last.request.headers["user-agent"].startswith("Mozilla/5.0")


@respx.mock
async def test_defaults_content_type() -> None:
    respx.get(IMAGE_URL).mock(return_value=httpx.Response(200, content=b"RIFF"))

    response = await image_proxy(url=IMAGE_URL)

    assert response.media_type == "image/webp"


@respx.mock
async def test_upstream_error_status_passed_through() -> None:
    respx.get(IMAGE_URL).mock(return_value=httpx.Response(404))

    response = await image_proxy(url=IMAGE_URL)

    assert response.status_code == 404
    assert response.body == b"Failed to fetch image"


@respx.mock
async def test_network_failure_is_500() -> None:
    respx.get(IMAGE_URL).mock(side_effect=httpx.ConnectError("unreachable"))

    response = await image_proxy(url=IMAGE_URL)

    assert response.status_code == 500
    assert response.body == b"Internal server error"
