"""
Relay Routes
============

Same-origin image relay, so backgrounds can be drawn to a canvas without
cross-origin taint.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse, Response

from ..services.image_relay import ImageRelayClient

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["relay"])

# Injected by server
image_relay: Optional[ImageRelayClient] = None

RELAY_CACHE_CONTROL = "public, max-age=31536000, immutable"


def get_image_relay() -> ImageRelayClient:
    """Dependency to get the image relay client."""
    if image_relay is None:
        raise HTTPException(500, "Image relay not initialized")
    return image_relay


@router.get("/proxy-image")
async def proxy_image(url: Optional[str] = None, relay: ImageRelayClient = Depends(get_image_relay)):
    """Fetch ``url`` and re-serve its bytes with a permissive CORS header."""
    if not url:
        return PlainTextResponse("Missing URL parameter", status_code=400)

    result = await relay.fetch(url)
    if not result.success:
        logger.error(f"[RELAY] Proxy error: {result.error}")
        return PlainTextResponse("Failed to fetch image", status_code=500)

    return Response(
        content=result.content,
        media_type=result.content_type,
        headers={
            "Cache-Control": RELAY_CACHE_CONTROL,
            "Access-Control-Allow-Origin": "*",
        },
    )
