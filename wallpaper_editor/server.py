"""
Wallpaper Editor Server
=======================

FastAPI server for the wallpaper/calendar editor.

Features:
- Text and calendar overlays on a background image
- Zoom-aware dragging and a property panel per item type
- Korean holiday calendar grids
- PNG/JPG export rendered server-side with Pillow
- Same-origin image relay for canvas-safe backgrounds
"""

import os
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Import services
from .services.image_relay import ImageRelayClient
from .render.export import ExportService
from .render.rasterizer import Rasterizer, ExportFormat

# Import editor state manager
from .canvas.state_manager import StateManager
from .canvas.properties import COLOR_PRESETS
from .calendars.holidays import supported_years
from .models.item_models import (
    FontFamily, TextKind, TEXT_FONT_SIZE_RANGE, CALENDAR_FONT_SIZE_RANGE, CELL_SIZE_RANGE
)
from .models.editor_models import MIN_SCALE, MAX_SCALE

# Import API routers
from .api import relay_routes, editor_routes, item_routes, calendar_routes


# Shared service instances
state_manager: StateManager = None
image_relay: ImageRelayClient = None
export_service: ExportService = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    global state_manager, image_relay, export_service

    logger.info("[WALLPAPER-EDITOR] Starting up...")

    # Sessions live in memory only
    state_manager = StateManager()

    # Relay client (background loading + /api/proxy-image)
    image_relay = ImageRelayClient()

    # Export at 2x natural resolution by default
    export_service = ExportService(Rasterizer())

    # Inject into route modules
    relay_routes.image_relay = image_relay

    editor_routes.state_manager = state_manager
    editor_routes.image_relay = image_relay
    editor_routes.export_service = export_service

    item_routes.state_manager = state_manager

    logger.info("[WALLPAPER-EDITOR] Services initialized")

    yield

    # Cleanup
    logger.info("[WALLPAPER-EDITOR] Shutting down...")
    if image_relay:
        await image_relay.close()
    if state_manager:
        state_manager.clear()


# Create FastAPI app
app = FastAPI(
    title="Wallpaper Editor",
    description="Text and calendar overlay editor for brand wallpapers",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(relay_routes.router)
app.include_router(editor_routes.router)
app.include_router(item_routes.router)
app.include_router(calendar_routes.router)


@app.get("/")
async def root():
    """Return API info."""
    return {
        "service": "Wallpaper Editor",
        "version": "1.0.0",
        "status": "running",
        "endpoints": {
            "editor": "/api/editor/session",
            "items": "/api/editor/{session_id}/items",
            "export": "/api/editor/{session_id}/export",
            "calendar": "/api/calendar/{year}/{month}",
            "relay": "/api/proxy-image?url="
        }
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "wallpaper-editor",
        "sessions": len(state_manager) if state_manager else 0
    }


@app.get("/api/info")
async def api_info():
    """Get editor options: fonts, control ranges, export formats."""
    return {
        "service": "Wallpaper Editor",
        "version": "1.0.0",
        "text_kinds": [k.value for k in TextKind],
        "fonts": [f.value for f in FontFamily],
        "color_presets": COLOR_PRESETS,
        "ranges": {
            "text_font_size": list(TEXT_FONT_SIZE_RANGE),
            "calendar_font_size": list(CALENDAR_FONT_SIZE_RANGE),
            "cell_size": list(CELL_SIZE_RANGE),
            "opacity": [0.0, 1.0],
            "scale": [MIN_SCALE, MAX_SCALE]
        },
        "export_formats": [f.value for f in ExportFormat],
        "holiday_years": supported_years()
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "wallpaper_editor.server:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8080")),
        reload=True
    )
