"""
Image Relay Client
==================

Fetches remote background images so they can be re-served same-origin.

Also decodes fetched bytes into Pillow images for the editor, which
renders the background itself.
"""

import asyncio
import io
import logging
import os
import warnings
from typing import Optional
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

import httpx
from PIL import Image, UnidentifiedImageError
from pydantic import BaseModel

logger = logging.getLogger(__name__)

RELAY_TIMEOUT = float(os.getenv("IMAGE_RELAY_TIMEOUT", "30"))
DEFAULT_CONTENT_TYPE = "image/jpeg"

# Storage image transformation parameters; dropping them yields the original
TRANSFORM_PARAMS = frozenset({"width", "height", "resize", "quality"})


class RelayResponse(BaseModel):
    """Result of fetching a remote image."""
    success: bool
    url: str
    content: bytes = b""
    content_type: str = DEFAULT_CONTENT_TYPE
    status_code: Optional[int] = None
    error: Optional[str] = None


class BackgroundLoadError(RuntimeError):
    """The background image could not be fetched or decoded."""


def original_image_url(url: str) -> str:
    """Strip image transformation query parameters from ``url``."""
    try:
        parts = urlparse(url)
    except ValueError:
        return url
    if not parts.scheme or not parts.query:
        return url
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k not in TRANSFORM_PARAMS]
    return urlunparse(parts._replace(query=urlencode(query)))


def decode_image(content: bytes) -> Image.Image:
    """
    Decode image bytes fully into memory.

    Images above Pillow's MAX_IMAGE_PIXELS are refused.

    Raises:
        BackgroundLoadError: bytes are not a decodable image, or the image
            is too large
    """
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("error", Image.DecompressionBombWarning)
            image = Image.open(io.BytesIO(content))
            image.load()
    except (Image.DecompressionBombError, Image.DecompressionBombWarning) as e:
        raise BackgroundLoadError(f"Image too large: {e}") from e
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise BackgroundLoadError(f"Cannot decode image: {e}") from e
    return image


class ImageRelayClient:
    """
    HTTP client for relaying remote images.

    Usage:
        client = ImageRelayClient()
        response = await client.fetch("https://cdn.example.com/bg.png")
        if response.success:
            data = response.content
    """

    def __init__(self, timeout: float = RELAY_TIMEOUT, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize relay client.

        Args:
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def fetch(self, url: str) -> RelayResponse:
        """
        Fetch ``url`` and return its bytes and content type.

        Never raises for network or HTTP errors; they come back as
        ``success=False`` with ``error`` set.
        """
        try:
            parsed = urlparse(url)
        except ValueError:
            parsed = None
        if parsed is None or parsed.scheme not in ("http", "https") or not parsed.netloc:
            logger.warning(f"[ImageRelay] Rejected non-http URL: {url[:100]}")
            return RelayResponse(success=False, url=url, error="Only http(s) URLs can be relayed")

        logger.info(f"[ImageRelay] Fetching {url[:100]}")
        try:
            client = await self._get_client()
            response = await client.get(url)

            if response.status_code != 200:
                error_msg = f"Upstream error: HTTP {response.status_code}"
                logger.error(f"[ImageRelay] {error_msg} for {url[:100]}")
                return RelayResponse(
                    success=False,
                    url=url,
                    status_code=response.status_code,
                    error=error_msg
                )

            content_type = response.headers.get("content-type") or DEFAULT_CONTENT_TYPE
            return RelayResponse(
                success=True,
                url=url,
                content=response.content,
                content_type=content_type,
                status_code=response.status_code
            )

        except httpx.TimeoutException:
            logger.error(f"[ImageRelay] Timeout fetching {url[:100]}")
            return RelayResponse(success=False, url=url, error="Image fetch timeout")
        except httpx.RequestError as e:
            logger.error(f"[ImageRelay] Network error: {e}")
            return RelayResponse(success=False, url=url, error=f"Network error: {str(e)}")

    async def load_background(self, url: str) -> Image.Image:
        """
        Fetch the original (untransformed) image and decode it.

        Raises:
            BackgroundLoadError: fetch or decode failed
        """
        response = await self.fetch(original_image_url(url))
        if not response.success:
            raise BackgroundLoadError(response.error or "Failed to fetch image")
        return await asyncio.to_thread(decode_image, response.content)
