"""Holiday table and month grid tests."""

from datetime import date

import pytest

from wallpaper_editor.calendars.grid import (
    GRID_CELLS,
    BlankCell,
    DayCell,
    annotate_grid,
    first_weekday,
    generate_grid,
    header_title,
)
from wallpaper_editor.calendars.holidays import holidays_for, supported_years


def _days_in(year: int, month: int) -> int:
    start = date(year, month, 1)
    end = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    return (end - start).days


def _day_values(cells):
    return [c.day for c in cells if isinstance(c, DayCell)]


# ---------------------------------------------------------------------------
# Holidays
# ---------------------------------------------------------------------------

def test_holidays_october_2025():
    holidays = holidays_for(2025, 10)
    assert holidays[3] == "개천절"
    assert holidays[9] == "한글날"
    assert [holidays[d] for d in (5, 6, 7)] == ["추석", "추석", "추석"]
    assert holidays[8] == "대체공휴일"


def test_holidays_unknown_year_is_empty():
    assert holidays_for(1999, 1) == {}
    assert holidays_for(2030, 12) == {}


def test_holidays_month_without_entries():
    assert holidays_for(2025, 4) == {}


def test_holidays_result_is_a_copy():
    holidays_for(2024, 12)[1] = "bogus"
    assert holidays_for(2024, 12) == {25: "크리스마스"}


def test_supported_years():
    assert supported_years() == [2024, 2025, 2026]


# ---------------------------------------------------------------------------
# Grid
# ---------------------------------------------------------------------------

def test_every_month_has_42_cells_and_all_days():
    for year in range(1990, 2041):
        for month in range(1, 13):
            cells = generate_grid(year, month)
            assert len(cells) == GRID_CELLS
            days = _day_values(cells)
            assert days == list(range(1, _days_in(year, month) + 1))


def test_leading_blanks_match_weekday_of_first():
    for year, month in [(2025, 10), (2026, 2), (2025, 3), (2024, 9)]:
        cells = generate_grid(year, month)
        leading = (date(year, month, 1).isoweekday()) % 7
        assert first_weekday(year, month) == leading
        assert all(isinstance(c, BlankCell) for c in cells[:leading])
        assert cells[leading] == DayCell(day=1)


def test_october_2025_starts_on_wednesday():
    cells = generate_grid(2025, 10)
    assert [c.day for c in cells[:4]] == [None, None, None, 1]


def test_february_2026_starts_on_sunday():
    assert generate_grid(2026, 2)[0] == DayCell(day=1)


@pytest.mark.parametrize("year,expected", [(2024, 29), (2025, 28), (2000, 29), (1900, 28)])
def test_february_leap_years(year, expected):
    assert len(_day_values(generate_grid(year, 2))) == expected


def test_grid_is_deterministic():
    assert generate_grid(2025, 3) == generate_grid(2025, 3)


@pytest.mark.parametrize("month", [0, 13, -1])
def test_invalid_month_raises(month):
    with pytest.raises(ValueError):
        generate_grid(2025, month)


def test_annotated_grid_weekdays_and_holidays():
    cells = annotate_grid(2025, 10, show_holidays=True)
    assert [c.weekday for c in cells[:8]] == [0, 1, 2, 3, 4, 5, 6, 0]

    by_day = {c.day: c for c in cells if c.day}
    assert by_day[3].holiday == "개천절"
    assert by_day[5].is_sunday and by_day[5].holiday == "추석"
    assert by_day[4].is_saturday
    assert by_day[10].holiday is None


def test_annotated_grid_without_holidays():
    cells = annotate_grid(2025, 10, show_holidays=False)
    assert all(c.holiday is None for c in cells)


def test_header_title():
    assert header_title(2025, 10) == "2025년 10월"
