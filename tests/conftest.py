"""
Shared pytest fixtures.
Provides: background images, a mocked relay client, and an API test client.
"""

import io

import httpx
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from wallpaper_editor.api import editor_routes, relay_routes
from wallpaper_editor.canvas.state_manager import EditorSession
from wallpaper_editor.server import app
from wallpaper_editor.services.image_relay import ImageRelayClient

BACKGROUND_SIZE = (40, 30)
BACKGROUND_COLOR = (255, 0, 0)


def make_png(size=BACKGROUND_SIZE, color=BACKGROUND_COLOR) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def relay_handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/bg.png":
        return httpx.Response(200, content=make_png(), headers={"content-type": "image/png"})
    if path == "/no-type.png":
        return httpx.Response(200, content=make_png())
    if path == "/not-an-image.png":
        return httpx.Response(200, content=b"hello", headers={"content-type": "text/plain"})
    if path == "/slow.png":
        raise httpx.ConnectTimeout("timed out", request=request)
    return httpx.Response(404, content=b"not found")


@pytest.fixture
def background_png() -> bytes:
    return make_png()


@pytest.fixture
def background_image() -> Image.Image:
    return Image.new("RGB", BACKGROUND_SIZE, BACKGROUND_COLOR)


@pytest.fixture
def session(background_image) -> EditorSession:
    return EditorSession(
        "test-session",
        background_image,
        image_url="https://cdn.example.com/assets/bg.png",
        name="브랜드 배경.png",
    )


@pytest.fixture
def relay_client() -> ImageRelayClient:
    return ImageRelayClient(transport=httpx.MockTransport(relay_handler))


@pytest.fixture
def client(relay_client):
    with TestClient(app) as test_client:
        app.dependency_overrides[relay_routes.get_image_relay] = lambda: relay_client
        app.dependency_overrides[editor_routes.get_image_relay] = lambda: relay_client
        try:
            yield test_client
        finally:
            app.dependency_overrides.clear()


@pytest.fixture
def editor(client):
    """An open editor session over the mocked background."""
    response = client.post(
        "/api/editor/session",
        json={"url": "https://cdn.example.com/bg.png", "name": "배경.png"},
    )
    assert response.status_code == 200
    return response.json()
