"""
Editor Routes
=============

API routes for opening, viewing, zooming, exporting and leaving editor
sessions.
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from pydantic import BaseModel, Field

from ..canvas.properties import FieldSpec
from ..canvas.state_manager import EditorSession, StateManager
from ..models.editor_models import EditorState
from ..render.export import ExportError, ExportService
from ..render.rasterizer import ExportFormat
from ..render.scene import Scene
from ..services.image_relay import BackgroundLoadError, ImageRelayClient

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/editor", tags=["editor"])

# Injected by server
state_manager: Optional[StateManager] = None
image_relay: Optional[ImageRelayClient] = None
export_service: Optional[ExportService] = None

LOAD_FAILED_MESSAGE = "이미지를 불러올 수 없습니다."


def get_state_manager() -> StateManager:
    """Dependency to get state manager."""
    if state_manager is None:
        raise HTTPException(500, "State manager not initialized")
    return state_manager


def get_image_relay() -> ImageRelayClient:
    """Dependency to get the image relay client."""
    if image_relay is None:
        raise HTTPException(500, "Image relay not initialized")
    return image_relay


def get_export_service() -> ExportService:
    """Dependency to get export service."""
    if export_service is None:
        raise HTTPException(500, "Export service not initialized")
    return export_service


def require_session(manager: StateManager, session_id: str) -> EditorSession:
    session = manager.get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


class OpenEditorRequest(BaseModel):
    """Request to open the editor over a background image."""
    url: str = Field(min_length=1)
    name: Optional[str] = None
    viewport_width: Optional[float] = Field(default=None, gt=0)
    viewport_height: Optional[float] = Field(default=None, gt=0)


class EditorStateResponse(BaseModel):
    """Response for editor state."""
    session_id: str
    image_url: Optional[str] = None
    name: Optional[str] = None
    state: EditorState
    selected: Optional[Dict[str, Any]] = None
    panel: List[FieldSpec] = Field(default_factory=list)


class ZoomAction(str, Enum):
    IN = "in"
    OUT = "out"
    RESET = "reset"
    FIT = "fit"
    SET = "set"


class ZoomRequest(BaseModel):
    action: ZoomAction
    scale: Optional[float] = Field(default=None, allow_inf_nan=False)
    viewport_width: Optional[float] = Field(default=None, gt=0)
    viewport_height: Optional[float] = Field(default=None, gt=0)


def state_response(session: EditorSession) -> EditorStateResponse:
    selected = session.store.selected_item()
    return EditorStateResponse(
        session_id=session.session_id,
        image_url=session.image_url,
        name=session.name,
        state=session.store.state,
        selected=selected.model_dump(mode="json") if selected else None,
        panel=session.panel.selected_fields(),
    )


@router.post("/session")
async def open_editor(
    request: OpenEditorRequest,
    manager: StateManager = Depends(get_state_manager),
    relay: ImageRelayClient = Depends(get_image_relay)
) -> EditorStateResponse:
    """Load the background and create an editor session."""
    try:
        background = await relay.load_background(request.url)
    except BackgroundLoadError as e:
        logger.error(f"[EDITOR] Background load failed for {request.url[:100]}: {e}")
        raise HTTPException(status_code=422, detail=LOAD_FAILED_MESSAGE)

    session = manager.create_session(background, image_url=request.url, name=request.name)
    if request.viewport_width and request.viewport_height:
        session.viewport.fit_to_viewport(request.viewport_width, request.viewport_height)

    return state_response(session)


@router.get("/{session_id}")
async def get_editor(session_id: str, manager: StateManager = Depends(get_state_manager)) -> EditorStateResponse:
    """Get editor state for session."""
    return state_response(require_session(manager, session_id))


@router.delete("/{session_id}")
async def leave_editor(session_id: str, manager: StateManager = Depends(get_state_manager)):
    """Leave the editor; the composition is discarded."""
    if not manager.remove_session(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return {"message": "Editor closed", "session_id": session_id}


@router.get("/{session_id}/panel")
async def get_panel(session_id: str, manager: StateManager = Depends(get_state_manager)) -> List[FieldSpec]:
    """Property panel controls for the current selection."""
    return require_session(manager, session_id).panel.selected_fields()


@router.get("/{session_id}/scene")
async def get_scene(session_id: str, manager: StateManager = Depends(get_state_manager)) -> Scene:
    """Draw commands for the current composition."""
    return require_session(manager, session_id).scene_view.scene


@router.post("/{session_id}/zoom")
async def zoom(
    session_id: str,
    request: ZoomRequest,
    manager: StateManager = Depends(get_state_manager)
) -> EditorStateResponse:
    """Change the zoom factor. Item positions are never affected."""
    session = require_session(manager, session_id)
    viewport = session.viewport

    if request.action == ZoomAction.IN:
        viewport.zoom_in()
    elif request.action == ZoomAction.OUT:
        viewport.zoom_out()
    elif request.action == ZoomAction.RESET:
        viewport.reset_zoom()
    elif request.action == ZoomAction.FIT:
        if not (request.viewport_width and request.viewport_height):
            raise HTTPException(status_code=422, detail="viewport_width and viewport_height are required")
        viewport.fit_to_viewport(request.viewport_width, request.viewport_height)
    else:
        if request.scale is None:
            raise HTTPException(status_code=422, detail="scale is required")
        viewport.set_scale(request.scale)

    return state_response(session)


@router.post("/{session_id}/export")
async def export_image(
    session_id: str,
    format: ExportFormat = Query(default=ExportFormat.PNG),
    manager: StateManager = Depends(get_state_manager),
    service: ExportService = Depends(get_export_service)
):
    """Flatten the composition and return it as a download."""
    session = require_session(manager, session_id)
    try:
        result = await service.export(session, format)
    except ExportError as e:
        raise HTTPException(status_code=500, detail=e.message)

    disposition = f"attachment; filename*=UTF-8''{quote(result.filename)}"
    return Response(
        content=result.data,
        media_type=result.media_type,
        headers={"Content-Disposition": disposition},
    )
