"""
Scene Description
=================

Renderer-agnostic description of the composed canvas.

The builder walks the editor state and produces an ordered list of draw
commands in canvas-space (unscaled) pixels. Rasterizers only need to know
how to paint these commands.
"""

from typing import Annotated, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, Field

from ..calendars.grid import WEEKDAY_LABELS, annotate_grid, header_title
from ..canvas.store import EditorStore, paint_order
from ..models.editor_models import EditorState
from ..models.item_models import CalendarItem, TextItem

CANVAS_BACKGROUND = "#171717"
SELECTION_COLOR = "#3b82f6"
LINE_HEIGHT = 1.5

# Free text box: 2px border + 8px padding
TEXT_BORDER = 2
TEXT_PADDING = 8
TEXT_MIN_WIDTH = 50
# Soft dark halo behind free text (0 0 1px rgba(0,0,0,0.5))
TEXT_SHADOW_COLOR = "#000000"
TEXT_SHADOW_ALPHA = 0.5
TEXT_SHADOW_BLUR = 1.0

# Calendar box layout
CALENDAR_PADDING = 16
CALENDAR_GAP = 4
CALENDAR_RADIUS = 8
HEADER_MARGIN = 12
WEEKDAY_MARGIN = 8
HEADER_FONT_RATIO = 1.2
WEEKDAY_FONT_RATIO = 0.8


class Box(BaseModel):
    x: float
    y: float
    width: float
    height: float


class FillCommand(BaseModel):
    """Fill the whole canvas."""
    op: Literal["fill"] = "fill"
    color: str


class ImageCommand(BaseModel):
    """Draw the background image at its natural size."""
    op: Literal["image"] = "image"
    box: Box


class RectCommand(BaseModel):
    op: Literal["rect"] = "rect"
    box: Box
    fill: str
    radius: float = 0


class TextCommand(BaseModel):
    """
    A run of text lines.

    Without ``align_box`` the first line starts at (x, y). With it, the text
    is centred horizontally and vertically inside the box. A ``shadow_color``
    adds a blurred copy of the text underneath.
    """
    op: Literal["text"] = "text"
    x: float = 0
    y: float = 0
    lines: List[str]
    font_size: float
    font_family: str
    color: str
    bold: bool = False
    line_height: float = LINE_HEIGHT
    align_box: Optional[Box] = None
    shadow_color: Optional[str] = None
    shadow_alpha: float = TEXT_SHADOW_ALPHA
    shadow_blur: float = TEXT_SHADOW_BLUR


class SelectionBoxCommand(BaseModel):
    """Editing affordance around the selected item; never part of an export."""
    op: Literal["selection"] = "selection"
    box: Box
    color: str = SELECTION_COLOR
    width: int = 2
    item_id: str


class GroupCommand(BaseModel):
    """Children painted onto their own layer, then composited with ``opacity``."""
    op: Literal["group"] = "group"
    box: Box
    opacity: float = 1.0
    children: List[Union[RectCommand, TextCommand]] = Field(default_factory=list)


DrawCommand = Annotated[
    Union[FillCommand, ImageCommand, RectCommand, TextCommand, SelectionBoxCommand, GroupCommand],
    Field(discriminator="op"),
]


class Scene(BaseModel):
    width: int
    height: int
    commands: List[DrawCommand] = Field(default_factory=list)

    def has_selection(self) -> bool:
        return any(isinstance(c, SelectionBoxCommand) for c in self.commands)


def _is_wide(char: str) -> bool:
    # Hangul syllables, jamo and CJK ideographs
    return (
        '\uAC00' <= char <= '\uD7AF'
        or '\u1100' <= char <= '\u11FF'
        or '\u3130' <= char <= '\u318F'
        or '\u4E00' <= char <= '\u9FFF'
    )


def estimate_text_width(line: str, font_size: float) -> float:
    """Rough advance width; only used to size the selection outline."""
    return sum(font_size if _is_wide(ch) else font_size * 0.6 for ch in line)


def text_box(item: TextItem) -> Box:
    lines = item.text.split("\n")
    inset = TEXT_BORDER + TEXT_PADDING
    content_width = max(estimate_text_width(line, item.font_size) for line in lines)
    content_height = len(lines) * item.font_size * LINE_HEIGHT
    return Box(
        x=item.position.x,
        y=item.position.y,
        width=max(TEXT_MIN_WIDTH, content_width + inset * 2),
        height=content_height + inset * 2,
    )


def text_commands(item: TextItem) -> List[TextCommand]:
    inset = TEXT_BORDER + TEXT_PADDING
    return [TextCommand(
        x=item.position.x + inset,
        y=item.position.y + inset,
        lines=item.text.split("\n"),
        font_size=item.font_size,
        font_family=item.font_family.value,
        color=item.color,
        bold=item.is_bold,
        shadow_color=TEXT_SHADOW_COLOR,
    )]


def calendar_size(item: CalendarItem) -> Tuple[float, float]:
    """(width, height) of a calendar box."""
    cell = item.cell_width
    header_height = item.font_size * HEADER_FONT_RATIO * LINE_HEIGHT
    width = CALENDAR_PADDING * 2 + cell * 7 + CALENDAR_GAP * 6
    height = CALENDAR_PADDING * 2 + header_height + HEADER_MARGIN
    if item.show_weekdays:
        height += item.cell_height + WEEKDAY_MARGIN
    height += item.cell_height * 6 + CALENDAR_GAP * 5
    return width, height


def _day_color(item: CalendarItem, weekday: int, holiday: Optional[str]) -> str:
    if holiday and item.show_holidays:
        return item.holiday_color
    if weekday == 0:
        return item.sunday_color
    if weekday == 6:
        return item.saturday_color
    return item.day_color


def _weekday_color(item: CalendarItem, weekday: int) -> str:
    if weekday == 0:
        return item.sunday_color
    if weekday == 6:
        return item.saturday_color
    return item.weekday_color


def calendar_command(item: CalendarItem) -> GroupCommand:
    """Background, header, weekday row and day grid of one calendar."""
    x0, y0 = item.position.x, item.position.y
    width, height = calendar_size(item)
    cell_w, cell_h = item.cell_width, item.cell_height
    font = item.font_family.value
    inner_x = x0 + CALENDAR_PADDING
    inner_width = width - CALENDAR_PADDING * 2

    children: List[Union[RectCommand, TextCommand]] = [
        RectCommand(
            box=Box(x=x0, y=y0, width=width, height=height),
            fill=item.background_color,
            radius=CALENDAR_RADIUS,
        )
    ]

    header_size = item.font_size * HEADER_FONT_RATIO
    header_height = header_size * LINE_HEIGHT
    cursor_y = y0 + CALENDAR_PADDING
    children.append(TextCommand(
        lines=[header_title(item.year, item.month)],
        font_size=header_size,
        font_family=font,
        color=item.header_color,
        bold=True,
        align_box=Box(x=inner_x, y=cursor_y, width=inner_width, height=header_height),
    ))
    cursor_y += header_height + HEADER_MARGIN

    def cell_box(column: int, top: float) -> Box:
        return Box(x=inner_x + column * (cell_w + CALENDAR_GAP), y=top, width=cell_w, height=cell_h)

    if item.show_weekdays:
        for weekday, label in enumerate(WEEKDAY_LABELS):
            children.append(TextCommand(
                lines=[label],
                font_size=item.font_size * WEEKDAY_FONT_RATIO,
                font_family=font,
                color=_weekday_color(item, weekday),
                bold=True,
                align_box=cell_box(weekday, cursor_y),
            ))
        cursor_y += cell_h + WEEKDAY_MARGIN

    for cell in annotate_grid(item.year, item.month, item.show_holidays):
        if cell.day is None:
            continue
        row = cell.index // 7
        children.append(TextCommand(
            lines=[str(cell.day)],
            font_size=item.font_size,
            font_family=font,
            color=_day_color(item, cell.weekday, cell.holiday),
            align_box=cell_box(cell.weekday, cursor_y + row * (cell_h + CALENDAR_GAP)),
        ))

    return GroupCommand(
        box=Box(x=x0, y=y0, width=width, height=height),
        opacity=item.opacity,
        children=children,
    )


def build_scene(state: EditorState, background_size: Optional[Tuple[int, int]] = None) -> Scene:
    """
    Describe the full composition: background, then items in paint order.

    Args:
        state: Editor state to draw
        background_size: Natural (width, height) of the background; defaults
            to the size recorded in the viewport state
    """
    if background_size is None:
        background_size = (state.viewport.image_width, state.viewport.image_height)
    width, height = background_size

    commands: List[DrawCommand] = [
        FillCommand(color=CANVAS_BACKGROUND),
        ImageCommand(box=Box(x=0, y=0, width=width, height=height)),
    ]

    for item in paint_order(state):
        if isinstance(item, CalendarItem):
            group = calendar_command(item)
            commands.append(group)
            bounds = group.box
        else:
            commands.extend(text_commands(item))
            bounds = text_box(item)
        if item.id == state.selected_id:
            commands.append(SelectionBoxCommand(box=bounds, item_id=item.id))

    return Scene(width=width, height=height, commands=commands)


class SceneView:
    """
    Keeps the scene in sync with a store.

    The scene is rebuilt after every state change, so ``scene`` always
    reflects the last committed state.
    """

    def __init__(self, store: EditorStore, background_size: Tuple[int, int]):
        self.background_size = background_size
        self.renders = 0
        self.scene = build_scene(store.state, background_size)
        self._unsubscribe = store.subscribe(self._on_change)

    def _on_change(self, state: EditorState) -> None:
        self.scene = build_scene(state, self.background_size)
        self.renders += 1

    def close(self) -> None:
        self._unsubscribe()
