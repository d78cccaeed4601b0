"""
Item Routes
===========

API routes for placing, editing, dragging and deleting overlay items.
"""

import logging
from datetime import date
from enum import Enum
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ..canvas.drag import FocusTarget
from ..canvas.properties import PropertyError
from ..canvas.state_manager import StateManager
from ..models.item_models import TextKind
from .editor_routes import EditorStateResponse, require_session, state_response

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/editor/{session_id}", tags=["items"])

# Injected by server
state_manager: Optional[StateManager] = None


def get_state_manager() -> StateManager:
    """Dependency to get state manager."""
    if state_manager is None:
        raise HTTPException(500, "State manager not initialized")
    return state_manager


class AddTextRequest(BaseModel):
    kind: TextKind = TextKind.TITLE


class AddCalendarRequest(BaseModel):
    """Defaults to the current month when year/month are omitted."""
    year: Optional[int] = None
    month: Optional[int] = None


class UpdateItemRequest(BaseModel):
    """Property panel values, keyed by field name."""
    values: Dict[str, Any] = Field(default_factory=dict)


class SelectRequest(BaseModel):
    id: Optional[str] = None


class DragPhase(str, Enum):
    START = "start"
    STOP = "stop"


class DragRequest(BaseModel):
    """Pointer drag event; dx/dy are on-screen pixels."""
    phase: DragPhase
    dx: float = Field(default=0.0, allow_inf_nan=False)
    dy: float = Field(default=0.0, allow_inf_nan=False)


class KeyRequest(BaseModel):
    key: str
    focus: FocusTarget = FocusTarget.NONE


class ItemResponse(EditorStateResponse):
    item_id: Optional[str] = None
    changed: bool = True


@router.post("/items/text")
async def add_text(
    session_id: str,
    request: AddTextRequest,
    manager: StateManager = Depends(get_state_manager)
) -> ItemResponse:
    """Add a title or content text item."""
    session = require_session(manager, session_id)
    item_id = session.store.add_text(request.kind)
    logger.info(f"[ITEMS] Session {session_id}: added {request.kind.value} text {item_id}")
    return ItemResponse(item_id=item_id, **state_response(session).model_dump())


@router.post("/items/calendar")
async def add_calendar(
    session_id: str,
    request: Optional[AddCalendarRequest] = None,
    manager: StateManager = Depends(get_state_manager)
) -> ItemResponse:
    """Add a calendar for the current (or requested) month."""
    session = require_session(manager, session_id)
    item_id = session.store.add_calendar(date.today())

    values: Dict[str, Any] = {}
    if request is not None:
        if request.year is not None:
            values["year"] = request.year
        if request.month is not None:
            values["month"] = request.month
    if values:
        try:
            session.panel.apply_many(item_id, values)
        except PropertyError as e:
            raise HTTPException(status_code=422, detail=str(e))

    logger.info(f"[ITEMS] Session {session_id}: added calendar {item_id}")
    return ItemResponse(item_id=item_id, **state_response(session).model_dump())


@router.patch("/items/{item_id}")
async def update_item(
    session_id: str,
    item_id: str,
    request: UpdateItemRequest,
    manager: StateManager = Depends(get_state_manager)
) -> ItemResponse:
    """Apply property panel values. Unknown item ids are ignored."""
    session = require_session(manager, session_id)
    before = session.store.state
    try:
        session.panel.apply_many(item_id, request.values)
    except PropertyError as e:
        raise HTTPException(status_code=422, detail=str(e))
    changed = session.store.state is not before
    return ItemResponse(item_id=item_id, changed=changed, **state_response(session).model_dump())


@router.delete("/items/{item_id}")
async def delete_item(
    session_id: str,
    item_id: str,
    manager: StateManager = Depends(get_state_manager)
) -> ItemResponse:
    """Delete an item. Unknown item ids are ignored."""
    session = require_session(manager, session_id)
    before = session.store.state
    session.store.delete_item(item_id)
    changed = session.store.state is not before
    return ItemResponse(item_id=item_id, changed=changed, **state_response(session).model_dump())


@router.post("/select")
async def select_item(
    session_id: str,
    request: SelectRequest,
    manager: StateManager = Depends(get_state_manager)
) -> EditorStateResponse:
    """Select an item, or clear the selection (background click) with id=null."""
    session = require_session(manager, session_id)
    session.store.select(request.id)
    return state_response(session)


@router.post("/items/{item_id}/drag")
async def drag_item(
    session_id: str,
    item_id: str,
    request: DragRequest,
    manager: StateManager = Depends(get_state_manager)
) -> ItemResponse:
    """Drag start selects the item; drag stop commits the scaled delta."""
    session = require_session(manager, session_id)
    if session.store.get_item(item_id) is None:
        return ItemResponse(item_id=item_id, changed=False, **state_response(session).model_dump())

    if request.phase == DragPhase.START:
        session.drag.drag_start(item_id)
    else:
        session.drag.drag_stop(item_id, request.dx, request.dy)
    return ItemResponse(item_id=item_id, **state_response(session).model_dump())


@router.post("/keys")
async def press_key(
    session_id: str,
    request: KeyRequest,
    manager: StateManager = Depends(get_state_manager)
) -> ItemResponse:
    """Global key handler; Delete/Backspace remove the selected item unless typing."""
    session = require_session(manager, session_id)
    selected_id = session.store.state.selected_id
    deleted = session.drag.handle_key(request.key, request.focus)
    return ItemResponse(
        item_id=selected_id if deleted else None,
        changed=deleted,
        **state_response(session).model_dump()
    )
