"""
Calendar Routes
===============

Month grid and holiday lookup, for clients that draw calendars themselves.
"""

from typing import Dict, List

from fastapi import APIRouter, Path
from pydantic import BaseModel

from ..calendars.grid import WEEKDAY_LABELS, CalendarCell, annotate_grid, header_title
from ..calendars.holidays import holidays_for, supported_years

router = APIRouter(prefix="/api/calendar", tags=["calendar"])


class CalendarGridResponse(BaseModel):
    year: int
    month: int
    title: str
    weekdays: List[str]
    cells: List[CalendarCell]
    holidays: Dict[int, str]
    holidays_supported: bool


@router.get("/{year}/{month}")
async def get_calendar(
    year: int = Path(ge=1, le=9999),
    month: int = Path(ge=1, le=12),
    show_holidays: bool = True
) -> CalendarGridResponse:
    """42-cell grid for a month, annotated with weekdays and holidays."""
    return CalendarGridResponse(
        year=year,
        month=month,
        title=header_title(year, month),
        weekdays=WEEKDAY_LABELS,
        cells=annotate_grid(year, month, show_holidays),
        holidays=holidays_for(year, month) if show_holidays else {},
        holidays_supported=year in supported_years(),
    )
