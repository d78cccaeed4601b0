"""
Korean Holiday Table
====================

Static lookup of Korean public holidays used to annotate calendar overlays.

Only the years embedded below are covered. Any other (year, month) simply
has no holidays.
"""

from typing import Dict, List, Tuple

# {year: {month: ((day, label), ...)}}
KOREAN_HOLIDAYS: Dict[int, Dict[int, Tuple[Tuple[int, str], ...]]] = {
    2024: {
        1: ((1, "신정"),),
        2: ((9, "설날"), (10, "설날"), (11, "설날"), (12, "대체공휴일")),
        3: ((1, "삼일절"),),
        4: ((10, "국회의원선거"),),
        5: ((5, "어린이날"), (6, "대체공휴일"), (15, "부처님오신날")),
        6: ((6, "현충일"),),
        8: ((15, "광복절"),),
        9: ((16, "추석"), (17, "추석"), (18, "추석")),
        10: ((3, "개천절"), (9, "한글날")),
        12: ((25, "크리스마스"),),
    },
    2025: {
        1: ((1, "신정"), (28, "설날"), (29, "설날"), (30, "설날")),
        3: ((1, "삼일절"), (3, "대체공휴일")),
        5: ((5, "어린이날"), (6, "부처님오신날")),
        6: ((6, "현충일"),),
        8: ((15, "광복절"),),
        10: ((3, "개천절"), (5, "추석"), (6, "추석"), (7, "추석"), (8, "대체공휴일"), (9, "한글날")),
        12: ((25, "크리스마스"),),
    },
    2026: {
        1: ((1, "신정"),),
        2: ((16, "설날"), (17, "설날"), (18, "설날")),
        3: ((1, "삼일절"),),
        5: ((5, "어린이날"), (24, "부처님오신날"), (25, "대체공휴일")),
        6: ((6, "현충일"),),
        8: ((15, "광복절"),),
        9: ((24, "추석"), (25, "추석"), (26, "추석")),
        10: ((3, "개천절"), (9, "한글날")),
        12: ((25, "크리스마스"),),
    },
}


def holidays_for(year: int, month: int) -> Dict[int, str]:
    """Return {day: label} for the given month, empty if not in the table."""
    entries = KOREAN_HOLIDAYS.get(year, {}).get(month, ())
    return {day: label for day, label in entries}


def supported_years() -> List[int]:
    """Years covered by the embedded table."""
    return sorted(KOREAN_HOLIDAYS)
