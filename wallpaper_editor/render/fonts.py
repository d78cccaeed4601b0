"""
Font Loading
============

Resolves the editor's font families to TrueType files for Pillow.

Search order: directories from EDITOR_FONT_DIRS, the bundled ``fonts``
directory, then common system font directories. When nothing matches, a
Korean-capable fallback is tried before Pillow's built-in font.
"""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from PIL import ImageFont

logger = logging.getLogger(__name__)

FONT_DIRS_ENV = os.getenv("EDITOR_FONT_DIRS", "")

SYSTEM_FONT_DIRS = [
    Path(__file__).resolve().parent.parent / "fonts",
    Path("/usr/share/fonts"),
    Path("/usr/local/share/fonts"),
    Path.home() / ".fonts",
    Path("/Library/Fonts"),
    Path("/System/Library/Fonts"),
    Path("C:/Windows/Fonts"),
]

# family -> (regular candidates, bold candidates)
FONT_FILES: Dict[str, Tuple[List[str], List[str]]] = {
    "Pretendard": (["Pretendard-Regular.otf", "Pretendard-Regular.ttf"], ["Pretendard-Bold.otf", "Pretendard-Bold.ttf"]),
    "Nanum Gothic": (["NanumGothic.ttf", "NanumGothic-Regular.ttf"], ["NanumGothicBold.ttf", "NanumGothic-Bold.ttf"]),
    "Nanum Myeongjo": (["NanumMyeongjo.ttf", "NanumMyeongjo-Regular.ttf"], ["NanumMyeongjoBold.ttf", "NanumMyeongjo-Bold.ttf"]),
    "Malgun Gothic": (["malgun.ttf"], ["malgunbd.ttf"]),
    "Dotum": (["dotum.ttc", "gulim.ttc"], []),
    "Gulim": (["gulim.ttc", "NGULIM.TTF"], []),
    "Arial": (["arial.ttf", "Arial.ttf", "LiberationSans-Regular.ttf"], ["arialbd.ttf", "Arial Bold.ttf", "LiberationSans-Bold.ttf"]),
    "Helvetica": (["Helvetica.ttc", "LiberationSans-Regular.ttf"], ["LiberationSans-Bold.ttf"]),
    "Verdana": (["verdana.ttf", "Verdana.ttf", "DejaVuSans.ttf"], ["verdanab.ttf", "Verdana Bold.ttf", "DejaVuSans-Bold.ttf"]),
    "Tahoma": (["tahoma.ttf", "Tahoma.ttf", "DejaVuSans.ttf"], ["tahomabd.ttf", "Tahoma Bold.ttf", "DejaVuSans-Bold.ttf"]),
    "Trebuchet MS": (["trebuc.ttf", "Trebuchet MS.ttf"], ["trebucbd.ttf", "Trebuchet MS Bold.ttf"]),
    "Impact": (["impact.ttf", "Impact.ttf"], []),
    "Times New Roman": (["times.ttf", "Times New Roman.ttf", "LiberationSerif-Regular.ttf"], ["timesbd.ttf", "Times New Roman Bold.ttf", "LiberationSerif-Bold.ttf"]),
    "Georgia": (["georgia.ttf", "Georgia.ttf"], ["georgiab.ttf", "Georgia Bold.ttf"]),
    "Garamond": (["GARA.TTF", "EBGaramond-Regular.ttf"], ["GARABD.TTF", "EBGaramond-Bold.ttf"]),
    "Courier New": (["cour.ttf", "Courier New.ttf", "LiberationMono-Regular.ttf"], ["courbd.ttf", "Courier New Bold.ttf", "LiberationMono-Bold.ttf"]),
    "Comic Sans MS": (["comic.ttf", "Comic Sans MS.ttf"], ["comicbd.ttf", "Comic Sans MS Bold.ttf"]),
}

# Tried when a family has no file installed; Korean glyph coverage first
FALLBACK_FILES = [
    "NanumGothic.ttf",
    "malgun.ttf",
    "NotoSansCJK-Regular.ttc",
    "NotoSansKR-Regular.otf",
    "AppleSDGothicNeo.ttc",
    "gulim.ttc",
    "DejaVuSans.ttf",
]


def font_dirs() -> List[Path]:
    """Directories searched for font files, configured ones first."""
    configured = [Path(p) for p in FONT_DIRS_ENV.split(os.pathsep) if p]
    return configured + SYSTEM_FONT_DIRS


@lru_cache(maxsize=512)
def find_font_file(filename: str) -> Optional[str]:
    """Locate a font file by name in the search directories (recursively)."""
    for directory in font_dirs():
        if not directory.is_dir():
            continue
        direct = directory / filename
        if direct.is_file():
            return str(direct)
        for match in directory.rglob(filename):
            if match.is_file():
                return str(match)
    return None


def _first_existing(candidates: List[str]) -> Optional[str]:
    for name in candidates:
        path = find_font_file(name)
        if path:
            return path
    return None


@lru_cache(maxsize=256)
def load_font(font_family: str, font_size: int, bold: bool = False) -> Tuple[ImageFont.ImageFont, bool]:
    """
    Load a font for rendering.

    Args:
        font_family: One of the editor font families
        font_size: Pixel size
        bold: Whether a bold face is wanted

    Returns:
        (font, synthetic_bold): synthetic_bold is True when no bold face was
        found and the caller should embolden the regular face itself.
    """
    font_size = max(1, int(round(font_size)))
    regular, bold_files = FONT_FILES.get(font_family, ([], []))

    if bold:
        path = _first_existing(bold_files)
        if path:
            try:
                return ImageFont.truetype(path, font_size), False
            except OSError as e:
                logger.error(f"[FONTS] Failed to load {path}: {e}")

    for path in filter(None, [_first_existing(regular), _first_existing(FALLBACK_FILES)]):
        try:
            return ImageFont.truetype(path, font_size), bold
        except OSError as e:
            logger.error(f"[FONTS] Failed to load {path}: {e}")

    logger.warning(f"[FONTS] No font file for '{font_family}', using Pillow default")
    return ImageFont.load_default(size=font_size), bold
