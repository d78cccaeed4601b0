"""
Editor Store
============

Explicit state container for the placed-item model.

All changes go through ``dispatch(action)``; the reducer is a pure function
of (state, action). Subscribers are called after every change, which is the
editor's equivalent of a render pass.
"""

import asyncio
import logging
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Union

from ..models.editor_models import (
    AddCalendarAction,
    AddTextAction,
    DeleteItemAction,
    EditorAction,
    EditorState,
    SelectAction,
    SetImageSizeAction,
    SetScaleAction,
    UpdateItemAction,
)
from ..models.item_models import (
    IMMUTABLE_FIELDS,
    CalendarItem,
    Position,
    TextItem,
    TextKind,
)
from .viewport import clamp_scale

logger = logging.getLogger(__name__)

Listener = Callable[[EditorState], None]
Item = Union[TextItem, CalendarItem]


def _patched(item: Item, patch: Dict[str, Any]) -> Item:
    """Return a validated copy of ``item`` with ``patch`` merged in."""
    allowed = set(type(item).model_fields) - IMMUTABLE_FIELDS
    changes = {k: v for k, v in patch.items() if k in allowed}
    if not changes:
        return item

    if isinstance(item, CalendarItem):
        # One control drives both cell dimensions
        if "cell_width" in changes and "cell_height" not in changes:
            changes["cell_height"] = changes["cell_width"]
        elif "cell_height" in changes and "cell_width" not in changes:
            changes["cell_width"] = changes["cell_height"]

    if isinstance(changes.get("position"), Position):
        changes["position"] = changes["position"].model_dump()

    data = item.model_dump()
    data.update(changes)
    return type(item).model_validate(data)


def _has_item(state: EditorState, item_id: Optional[str]) -> bool:
    return any(i.id == item_id for i in state.texts) or any(c.id == item_id for c in state.calendars)


def reduce(state: EditorState, action: EditorAction) -> EditorState:
    """
    Apply one action to the state.

    Returns the same state object when the action changes nothing (unknown
    ids, identical values), otherwise a new state.
    """
    if isinstance(action, AddTextAction):
        return state.model_copy(update={
            "texts": state.texts + [action.item],
            "selected_id": action.item.id,
        })

    if isinstance(action, AddCalendarAction):
        return state.model_copy(update={
            "calendars": state.calendars + [action.item],
            "selected_id": action.item.id,
        })

    if isinstance(action, UpdateItemAction):
        for field in ("texts", "calendars"):
            items = getattr(state, field)
            for index, item in enumerate(items):
                if item.id == action.id:
                    updated = _patched(item, action.patch)
                    if updated is item:
                        return state
                    new_items = list(items)
                    new_items[index] = updated
                    return state.model_copy(update={field: new_items})
        return state

    if isinstance(action, DeleteItemAction):
        if not _has_item(state, action.id):
            return state
        update: Dict[str, Any] = {
            "texts": [i for i in state.texts if i.id != action.id],
            "calendars": [c for c in state.calendars if c.id != action.id],
        }
        if state.selected_id == action.id:
            update["selected_id"] = None
        return state.model_copy(update=update)

    if isinstance(action, SelectAction):
        if action.id == state.selected_id:
            return state
        if action.id is not None and not _has_item(state, action.id):
            return state
        return state.model_copy(update={"selected_id": action.id})

    if isinstance(action, SetScaleAction):
        scale = clamp_scale(action.scale)
        if scale == state.viewport.scale:
            return state
        viewport = state.viewport.model_copy(update={"scale": scale})
        return state.model_copy(update={"viewport": viewport})

    if isinstance(action, SetImageSizeAction):
        viewport = state.viewport.model_copy(update={
            "image_width": action.width,
            "image_height": action.height,
        })
        return state.model_copy(update={"viewport": viewport})

    raise TypeError(f"Unknown editor action: {action!r}")


class EditorStore:
    """Holds the editor state for one session."""

    def __init__(self, state: Optional[EditorState] = None):
        self._state = state or EditorState()
        self._listeners: List[Listener] = []

    @property
    def state(self) -> EditorState:
        return self._state

    def dispatch(self, action: EditorAction) -> EditorState:
        """Reduce ``action`` into the state and notify subscribers on change."""
        new_state = reduce(self._state, action)
        if new_state is self._state:
            logger.debug(f"[STORE] {action.type} changed nothing")
            return self._state
        self._state = new_state
        for listener in list(self._listeners):
            listener(new_state)
        return new_state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Placed-item operations
    # ------------------------------------------------------------------

    def add_text(self, kind: Union[TextKind, str] = TextKind.TITLE) -> str:
        item = TextItem.create(TextKind(kind))
        self.dispatch(AddTextAction(item=item))
        return item.id

    def add_calendar(self, today: Optional[date] = None) -> str:
        item = CalendarItem.create(today)
        self.dispatch(AddCalendarAction(item=item))
        return item.id

    def update_text(self, item_id: str, patch: Dict[str, Any]) -> None:
        if isinstance(self.get_item(item_id), TextItem):
            self.dispatch(UpdateItemAction(id=item_id, patch=patch))

    def update_calendar(self, item_id: str, patch: Dict[str, Any]) -> None:
        if isinstance(self.get_item(item_id), CalendarItem):
            self.dispatch(UpdateItemAction(id=item_id, patch=patch))

    def update_item(self, item_id: str, patch: Dict[str, Any]) -> None:
        """Patch whichever item has ``item_id``."""
        self.dispatch(UpdateItemAction(id=item_id, patch=patch))

    def delete_item(self, item_id: str) -> None:
        self.dispatch(DeleteItemAction(id=item_id))

    def select(self, item_id: Optional[str]) -> None:
        self.dispatch(SelectAction(id=item_id))

    def deselect(self) -> "asyncio.Future[EditorState]":
        """
        Clear the selection.

        The returned future resolves on the next event loop turn, after every
        subscriber has seen the deselected state. Must be called from a
        running event loop.
        """
        loop = asyncio.get_running_loop()
        committed = loop.create_future()
        self.select(None)
        loop.call_soon(_resolve, committed, self._state)
        return committed

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_item(self, item_id: Optional[str]) -> Optional[Item]:
        if item_id is None:
            return None
        for item in self._state.texts:
            if item.id == item_id:
                return item
        for calendar in self._state.calendars:
            if calendar.id == item_id:
                return calendar
        return None

    def selected_item(self) -> Optional[Item]:
        return self.get_item(self._state.selected_id)

    def items_in_paint_order(self) -> List[Item]:
        """Texts, then calendars; the selected item is painted last (on top)."""
        return paint_order(self._state)


def paint_order(state: EditorState) -> List[Item]:
    items: List[Item] = [*state.texts, *state.calendars]
    selected = [i for i in items if i.id == state.selected_id]
    return [i for i in items if i.id != state.selected_id] + selected


def _resolve(future: "asyncio.Future[EditorState]", state: EditorState) -> None:
    if not future.done():
        future.set_result(state)
