"""
Placed Item Models
==================

Text and calendar overlays placed on top of the background image.

Both variants share the selection slot, so they form a tagged union keyed by
``item_type``. Positions are canvas-space (unscaled) coordinates.
"""

import uuid
from datetime import date
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

HEX_COLOR_PATTERN = r"^#[0-9a-fA-F]{6}$"

TEXT_FONT_SIZE_RANGE = (12, 120)
CALENDAR_FONT_SIZE_RANGE = (10, 32)
CELL_SIZE_RANGE = (30, 80)


class TextKind(str, Enum):
    """Which text widget created the item."""
    TITLE = "title"      # Single-line input
    CONTENT = "content"  # Multi-line textarea


class FontFamily(str, Enum):
    """Fonts offered by the editor."""
    PRETENDARD = "Pretendard"
    NANUM_GOTHIC = "Nanum Gothic"
    NANUM_MYEONGJO = "Nanum Myeongjo"
    MALGUN_GOTHIC = "Malgun Gothic"
    DOTUM = "Dotum"
    GULIM = "Gulim"
    ARIAL = "Arial"
    HELVETICA = "Helvetica"
    VERDANA = "Verdana"
    TAHOMA = "Tahoma"
    TREBUCHET_MS = "Trebuchet MS"
    IMPACT = "Impact"
    TIMES_NEW_ROMAN = "Times New Roman"
    GEORGIA = "Georgia"
    GARAMOND = "Garamond"
    COURIER_NEW = "Courier New"
    COMIC_SANS_MS = "Comic Sans MS"


class Position(BaseModel):
    """Canvas-space position (unaffected by zoom)."""
    x: float = Field(default=0.0, allow_inf_nan=False)
    y: float = Field(default=0.0, allow_inf_nan=False)


def _new_id() -> str:
    return str(uuid.uuid4())


class TextItem(BaseModel):
    """A free text overlay."""
    item_type: Literal["text"] = "text"
    id: str = Field(default_factory=_new_id)
    kind: TextKind = TextKind.TITLE
    text: str = ""
    position: Position = Field(default_factory=lambda: Position(x=50, y=50))
    font_size: int = Field(default=64, ge=TEXT_FONT_SIZE_RANGE[0], le=TEXT_FONT_SIZE_RANGE[1])
    color: str = Field(default="#000000", pattern=HEX_COLOR_PATTERN)
    font_family: FontFamily = FontFamily.PRETENDARD
    is_bold: bool = True

    @classmethod
    def create(cls, kind: TextKind) -> "TextItem":
        """New item with the defaults for its kind."""
        kind = TextKind(kind)
        if kind == TextKind.TITLE:
            return cls(kind=kind, text="제목을 입력하세요", font_size=64, is_bold=True)
        return cls(
            kind=kind,
            text="내용을 입력하세요\n여러 줄을 입력할 수 있습니다.",
            font_size=24,
            is_bold=False,
        )


class CalendarItem(BaseModel):
    """A month calendar overlay."""
    item_type: Literal["calendar"] = "calendar"
    id: str = Field(default_factory=_new_id)
    position: Position = Field(default_factory=lambda: Position(x=100, y=100))
    year: int = Field(default_factory=lambda: date.today().year, ge=1, le=9999)
    month: int = Field(default_factory=lambda: date.today().month, ge=1, le=12)

    # Style
    font_size: int = Field(default=16, ge=CALENDAR_FONT_SIZE_RANGE[0], le=CALENDAR_FONT_SIZE_RANGE[1])
    font_family: FontFamily = FontFamily.PRETENDARD
    header_color: str = Field(default="#ffffff", pattern=HEX_COLOR_PATTERN)
    weekday_color: str = Field(default="#ffffff", pattern=HEX_COLOR_PATTERN)
    sunday_color: str = Field(default="#ff4444", pattern=HEX_COLOR_PATTERN)
    saturday_color: str = Field(default="#4444ff", pattern=HEX_COLOR_PATTERN)
    day_color: str = Field(default="#ffffff", pattern=HEX_COLOR_PATTERN)
    background_color: str = Field(default="#000000", pattern=HEX_COLOR_PATTERN)
    opacity: float = Field(default=1.0, ge=0.0, le=1.0)

    # Layout
    cell_width: int = Field(default=40, ge=CELL_SIZE_RANGE[0], le=CELL_SIZE_RANGE[1])
    cell_height: int = Field(default=40, ge=CELL_SIZE_RANGE[0], le=CELL_SIZE_RANGE[1])
    show_weekdays: bool = True

    # Holidays
    show_holidays: bool = True
    holiday_color: str = Field(default="#ff4444", pattern=HEX_COLOR_PATTERN)

    @classmethod
    def create(cls, today: Optional[date] = None) -> "CalendarItem":
        """New calendar showing the month of ``today``."""
        today = today or date.today()
        return cls(year=today.year, month=today.month)


PlacedItem = Annotated[Union[TextItem, CalendarItem], Field(discriminator="item_type")]

# Fields that identify an item and never change after creation
IMMUTABLE_FIELDS = frozenset({"id", "item_type", "kind"})
