"""
Editor State Models
===================

State held by one editor session and the typed actions that change it.
"""

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from .item_models import CalendarItem, TextItem

MIN_SCALE = 0.1
MAX_SCALE = 5.0


class ViewportState(BaseModel):
    """Zoom factor and the natural size of the background image."""
    scale: float = Field(default=1.0, ge=MIN_SCALE, le=MAX_SCALE)
    image_width: int = 0
    image_height: int = 0


class EditorState(BaseModel):
    """Everything the editor knows about one composition."""
    texts: List[TextItem] = Field(default_factory=list)
    calendars: List[CalendarItem] = Field(default_factory=list)
    selected_id: Optional[str] = None
    viewport: ViewportState = Field(default_factory=ViewportState)


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

class AddTextAction(BaseModel):
    type: Literal["ADD_TEXT"] = "ADD_TEXT"
    item: TextItem


class AddCalendarAction(BaseModel):
    type: Literal["ADD_CALENDAR"] = "ADD_CALENDAR"
    item: CalendarItem


class UpdateItemAction(BaseModel):
    """Merge-patch the item with ``id``; ignored when the id is unknown."""
    type: Literal["UPDATE_ITEM"] = "UPDATE_ITEM"
    id: str
    patch: Dict[str, Any] = Field(default_factory=dict)


class DeleteItemAction(BaseModel):
    type: Literal["DELETE_ITEM"] = "DELETE_ITEM"
    id: str


class SelectAction(BaseModel):
    """Select an item, or clear the selection with ``id=None``."""
    type: Literal["SELECT"] = "SELECT"
    id: Optional[str] = None


class SetScaleAction(BaseModel):
    """Set the zoom factor. Out-of-range values are clamped by the store."""
    type: Literal["SET_SCALE"] = "SET_SCALE"
    scale: float = Field(allow_inf_nan=False)


class SetImageSizeAction(BaseModel):
    type: Literal["SET_IMAGE_SIZE"] = "SET_IMAGE_SIZE"
    width: int = Field(ge=0)
    height: int = Field(ge=0)


EditorAction = Annotated[
    Union[
        AddTextAction,
        AddCalendarAction,
        UpdateItemAction,
        DeleteItemAction,
        SelectAction,
        SetScaleAction,
        SetImageSizeAction,
    ],
    Field(discriminator="type"),
]
