"""
Property Panel
==============

Form bindings for the selected item.

Every control clamps its own value (sliders have min/max, selects have a
fixed option list), so writes never fail on range. Only a value that cannot
be interpreted at all, or a field the panel does not offer, is an error.
"""

import logging
import math
import re
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from ..models.item_models import (
    CALENDAR_FONT_SIZE_RANGE,
    CELL_SIZE_RANGE,
    TEXT_FONT_SIZE_RANGE,
    CalendarItem,
    FontFamily,
    TextItem,
    TextKind,
)
from .store import EditorStore

logger = logging.getLogger(__name__)

COLOR_PRESETS = ["#ffffff", "#000000", "#ff0000", "#00ff00", "#0000ff", "#ffff00"]
YEAR_SPAN = 5
_HEX_COLOR = re.compile(r"^#([0-9a-fA-F]{6}|[0-9a-fA-F]{3})$")


class PropertyError(ValueError):
    """A panel write that no control could produce."""


class ControlType(str, Enum):
    INPUT = "input"
    TEXTAREA = "textarea"
    SLIDER = "slider"
    COLOR = "color"
    SELECT = "select"
    TOGGLE = "toggle"


class FieldSpec(BaseModel):
    """One control of the property panel."""
    name: str
    label: str
    control: ControlType
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    step: Optional[float] = None
    options: List[Any] = Field(default_factory=list)
    presets: List[str] = Field(default_factory=list)
    value: Any = None

    class Config:
        use_enum_values = True


def _font_options() -> List[str]:
    return [f.value for f in FontFamily]


def _text_fields(item: TextItem) -> List[FieldSpec]:
    text_control = ControlType.TEXTAREA if item.kind == TextKind.CONTENT else ControlType.INPUT
    return [
        FieldSpec(name="text", label="내용", control=text_control, value=item.text),
        FieldSpec(
            name="font_size", label="크기", control=ControlType.SLIDER,
            minimum=TEXT_FONT_SIZE_RANGE[0], maximum=TEXT_FONT_SIZE_RANGE[1], step=1,
            value=item.font_size,
        ),
        FieldSpec(name="color", label="색상", control=ControlType.COLOR, presets=COLOR_PRESETS, value=item.color),
        FieldSpec(
            name="font_family", label="폰트", control=ControlType.SELECT,
            options=_font_options(), value=item.font_family.value,
        ),
        FieldSpec(name="is_bold", label="Bold", control=ControlType.TOGGLE, value=item.is_bold),
    ]


def _calendar_fields(item: CalendarItem, today: date) -> List[FieldSpec]:
    years = list(range(today.year - YEAR_SPAN, today.year + YEAR_SPAN + 1))
    colors = [
        ("header_color", "헤더 색상"),
        ("sunday_color", "일요일"),
        ("weekday_color", "평일"),
        ("saturday_color", "토요일"),
        ("day_color", "날짜 색상"),
        ("background_color", "배경 색상"),
    ]
    fields = [
        FieldSpec(name="year", label="연도", control=ControlType.SELECT, options=years, value=item.year),
        FieldSpec(name="month", label="월", control=ControlType.SELECT, options=list(range(1, 13)), value=item.month),
        FieldSpec(
            name="font_size", label="폰트 크기", control=ControlType.SLIDER,
            minimum=CALENDAR_FONT_SIZE_RANGE[0], maximum=CALENDAR_FONT_SIZE_RANGE[1], step=1,
            value=item.font_size,
        ),
        FieldSpec(
            name="cell_size", label="셀 크기", control=ControlType.SLIDER,
            minimum=CELL_SIZE_RANGE[0], maximum=CELL_SIZE_RANGE[1], step=5,
            value=item.cell_width,
        ),
        FieldSpec(
            name="font_family", label="폰트", control=ControlType.SELECT,
            options=_font_options(), value=item.font_family.value,
        ),
    ]
    fields.extend(
        FieldSpec(name=name, label=label, control=ControlType.COLOR, value=getattr(item, name))
        for name, label in colors
    )
    fields.extend([
        FieldSpec(
            name="opacity", label="투명도", control=ControlType.SLIDER,
            minimum=0.0, maximum=1.0, step=0.05, value=item.opacity,
        ),
        FieldSpec(name="show_weekdays", label="요일 표시", control=ControlType.TOGGLE, value=item.show_weekdays),
        FieldSpec(name="show_holidays", label="공휴일 표시", control=ControlType.TOGGLE, value=item.show_holidays),
        FieldSpec(name="holiday_color", label="공휴일 색상", control=ControlType.COLOR, value=item.holiday_color),
    ])
    return fields


def _clamp(value: float, spec: FieldSpec) -> float:
    if spec.minimum is not None:
        value = max(spec.minimum, value)
    if spec.maximum is not None:
        value = min(spec.maximum, value)
    return value


def _snap(value: float, spec: FieldSpec) -> float:
    """Round to the slider step, anchored at the slider minimum."""
    if not spec.step:
        return value
    base = spec.minimum or 0
    return base + round((value - base) / spec.step) * spec.step


def coerce_value(spec: FieldSpec, value: Any) -> Any:
    """
    Convert a raw control value into the field value.

    Raises:
        PropertyError: value cannot be produced by this control
    """
    control = ControlType(spec.control)
    try:
        if control in (ControlType.INPUT, ControlType.TEXTAREA):
            text = "" if value is None else str(value)
            if control == ControlType.INPUT:
                # Single-line input cannot hold line breaks
                text = text.replace("\r", " ").replace("\n", " ")
            return text

        if control == ControlType.SLIDER:
            number = float(value)
            if not math.isfinite(number):
                raise PropertyError(f"{spec.name} must be a finite number, got {value!r}")
            number = _clamp(_snap(number, spec), spec)
            if float(spec.step or 0).is_integer() and spec.step:
                return int(round(number))
            return round(number, 4)

        if control == ControlType.TOGGLE:
            if isinstance(value, str):
                lowered = value.strip().lower()
                if lowered in ("true", "1", "on", "yes"):
                    return True
                if lowered in ("false", "0", "off", "no"):
                    return False
                raise PropertyError(f"Not a toggle value: {value!r}")
            return bool(value)

        if control == ControlType.COLOR:
            color = str(value).strip()
            if not _HEX_COLOR.match(color):
                raise PropertyError(f"Not a hex color: {value!r}")
            if len(color) == 4:
                color = "#" + "".join(ch * 2 for ch in color[1:])
            return color.lower()

        if control == ControlType.SELECT:
            options = spec.options
            if options and isinstance(options[0], int):
                number = int(value)
                # Numeric selects clamp to their first/last option
                return max(options[0], min(options[-1], number))
            if value not in options:
                raise PropertyError(f"{value!r} is not one of the {spec.name} options")
            return value
    except (TypeError, ValueError, OverflowError) as e:
        if isinstance(e, PropertyError):
            raise
        raise PropertyError(f"Invalid value for {spec.name}: {value!r}") from e

    raise PropertyError(f"Unsupported control {control}")


class PropertyPanel:
    """Binds panel controls to the currently selected item."""

    def __init__(self, store: EditorStore, today: Optional[date] = None):
        self.store = store
        self._today = today

    @property
    def today(self) -> date:
        return self._today or date.today()

    def fields_for(self, item: Union[TextItem, CalendarItem, None]) -> List[FieldSpec]:
        """Controls for an item, chosen by its ``item_type`` tag."""
        if item is None:
            return []
        if item.item_type == "text":
            return _text_fields(item)
        if item.item_type == "calendar":
            return _calendar_fields(item, self.today)
        raise TypeError(f"Unknown item type: {item.item_type}")

    def selected_fields(self) -> List[FieldSpec]:
        return self.fields_for(self.store.selected_item())

    def apply(self, item_id: str, field: str, value: Any) -> None:
        """Write one control value to the item."""
        self.apply_many(item_id, {field: value})

    def apply_many(self, item_id: str, values: Dict[str, Any]) -> None:
        """
        Write several control values to the item in one update.

        Unknown ids are ignored.

        Raises:
            PropertyError: unknown field or uninterpretable value
        """
        item = self.store.get_item(item_id)
        if item is None:
            logger.debug(f"[PANEL] Ignoring update for unknown item {item_id}")
            return

        specs = {spec.name: spec for spec in self.fields_for(item)}
        patch: Dict[str, Any] = {}
        for name, raw in values.items():
            spec = specs.get(name)
            if spec is None:
                raise PropertyError(f"{item.item_type} items have no '{name}' property")
            value = coerce_value(spec, raw)
            if spec.control == ControlType.SLIDER and value != float(raw):
                logger.warning(f"[PANEL] {name}: {raw!r} clamped to {value!r}")
            if name == "cell_size":
                patch["cell_width"] = value
                patch["cell_height"] = value
            else:
                patch[name] = value

        if isinstance(item, CalendarItem):
            self.store.update_calendar(item_id, patch)
        else:
            self.store.update_text(item_id, patch)
