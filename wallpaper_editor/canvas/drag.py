"""
Drag Controller
===============

Turns pointer drags and keyboard shortcuts into store updates.
"""

import logging
import math
from enum import Enum
from typing import Optional

from ..models.item_models import CalendarItem, Position
from .store import EditorStore

logger = logging.getLogger(__name__)

DELETE_KEYS = frozenset({"Delete", "Backspace"})


class FocusTarget(str, Enum):
    """Where keyboard focus was when a key was pressed."""
    NONE = "none"
    CANVAS = "canvas"
    INPUT = "input"
    TEXTAREA = "textarea"
    SELECT = "select"
    BUTTON = "button"


# Typing in these must never delete the selected item
TEXT_ENTRY_TARGETS = frozenset({FocusTarget.INPUT, FocusTarget.TEXTAREA})


class DragController:
    """Moves items by on-screen pointer deltas, honouring the zoom factor."""

    def __init__(self, store: EditorStore):
        self.store = store

    def drag_start(self, item_id: str) -> None:
        """Dragging an item selects it."""
        self.store.select(item_id)

    def drag_stop(self, item_id: str, dx: float, dy: float) -> Optional[Position]:
        """
        Commit a finished drag.

        Args:
            item_id: The dragged item
            dx: Horizontal pointer movement in screen pixels
            dy: Vertical pointer movement in screen pixels

        Returns:
            The new canvas-space position, or None for an unknown id or a
            non-finite result
        """
        item = self.store.get_item(item_id)
        if item is None:
            return None

        scale = self.store.state.viewport.scale
        x = item.position.x + dx / scale
        y = item.position.y + dy / scale
        if not (math.isfinite(x) and math.isfinite(y)):
            logger.warning(f"[DRAG] Ignoring non-finite drag of {item_id}: dx={dx!r}, dy={dy!r}")
            return None
        position = Position(x=x, y=y)
        patch = {"position": position}
        if isinstance(item, CalendarItem):
            self.store.update_calendar(item_id, patch)
        else:
            self.store.update_text(item_id, patch)
        return position

    def handle_key(self, key: str, focus: FocusTarget = FocusTarget.NONE) -> bool:
        """
        Global keyboard handler.

        Returns True when the key deleted the selected item.
        """
        selected_id = self.store.state.selected_id
        if selected_id is None or key not in DELETE_KEYS:
            return False
        if FocusTarget(focus) in TEXT_ENTRY_TARGETS:
            logger.debug(f"[DRAG] Ignoring {key} while typing in {focus}")
            return False
        self.store.delete_item(selected_id)
        return True
