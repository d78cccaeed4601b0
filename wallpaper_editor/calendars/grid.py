"""
Calendar Grid Generator
=======================

Builds the fixed 6-week (42 cell) month grid rendered by calendar overlays.
"""

import calendar
from typing import List, Optional, Union

from pydantic import BaseModel

from .holidays import holidays_for

GRID_CELLS = 42
WEEKDAY_LABELS = ["일", "월", "화", "수", "목", "금", "토"]
SUNDAY = 0
SATURDAY = 6


class DayCell(BaseModel):
    """A cell holding a day of the month (1-indexed)."""
    day: int


class BlankCell(BaseModel):
    """Padding cell before day 1 or after the last day."""
    day: None = None


Cell = Union[DayCell, BlankCell]


class CalendarCell(BaseModel):
    """A grid cell annotated for rendering."""
    index: int
    day: Optional[int] = None
    weekday: int
    is_sunday: bool = False
    is_saturday: bool = False
    holiday: Optional[str] = None


def first_weekday(year: int, month: int) -> int:
    """Weekday of the 1st of the month, 0=Sunday .. 6=Saturday."""
    # calendar.weekday() counts from Monday
    return (calendar.weekday(year, month, 1) + 1) % 7


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def generate_grid(year: int, month: int) -> List[Cell]:
    """
    Generate the 42-cell grid for a month.

    Leading blanks equal the weekday index of day 1, followed by every day of
    the month, then trailing blanks up to 42 cells.

    Raises:
        ValueError: month outside 1..12
    """
    if not 1 <= month <= 12:
        raise ValueError(f"month must be in 1..12, got {month}")

    leading = first_weekday(year, month)
    count = days_in_month(year, month)

    cells: List[Cell] = [BlankCell() for _ in range(leading)]
    cells.extend(DayCell(day=day) for day in range(1, count + 1))
    while len(cells) < GRID_CELLS:
        cells.append(BlankCell())
    return cells


def annotate_grid(year: int, month: int, show_holidays: bool = True) -> List[CalendarCell]:
    """Grid cells with weekday and holiday information attached."""
    holidays = holidays_for(year, month) if show_holidays else {}
    annotated = []
    for index, cell in enumerate(generate_grid(year, month)):
        weekday = index % 7
        annotated.append(CalendarCell(
            index=index,
            day=cell.day,
            weekday=weekday,
            is_sunday=weekday == SUNDAY,
            is_saturday=weekday == SATURDAY,
            holiday=holidays.get(cell.day) if cell.day else None,
        ))
    return annotated


def header_title(year: int, month: int) -> str:
    return f"{year}년 {month}월"
