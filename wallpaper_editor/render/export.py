"""
Export Service
==============

Flattens an editor session into a downloadable image.

Export is a two-phase operation: the selection is cleared first and the
capture only starts once the store reports that every subscriber (the scene
view in particular) has seen the deselected state. Selection outlines
therefore never end up in the file.
"""

import asyncio
import logging
import re
from datetime import date
from typing import TYPE_CHECKING, Optional
from urllib.parse import urlparse

from pydantic import BaseModel

from .rasterizer import CaptureError, ExportFormat, Rasterizer

if TYPE_CHECKING:
    from ..canvas.state_manager import EditorSession

logger = logging.getLogger(__name__)

EXPORT_FAILED_MESSAGE = "이미지 저장에 실패했습니다."
DEFAULT_BASENAME = "wallpaper"


class ExportError(RuntimeError):
    """User-facing export failure. The item model is left untouched."""

    def __init__(self, message: str = EXPORT_FAILED_MESSAGE):
        super().__init__(message)
        self.message = message


class ExportResult(BaseModel):
    filename: str
    media_type: str
    data: bytes
    width: int
    height: int


def export_basename(name: Optional[str], image_url: Optional[str]) -> str:
    """
    Base of the download filename.

    The display name wins (extension stripped); otherwise the last path
    segment of the image URL, up to its first dot.
    """
    if name and name.strip():
        base = re.sub(r"\.[^/.]+$", "", name.strip())
        if base:
            return base
    if image_url:
        segment = urlparse(image_url).path.rsplit("/", 1)[-1]
        base = segment.split(".")[0]
        if base:
            return base
    return DEFAULT_BASENAME


def export_filename(
    name: Optional[str],
    image_url: Optional[str],
    fmt: ExportFormat,
    today: Optional[date] = None
) -> str:
    """``{base}_edit_{yymmdd}.{ext}``"""
    today = today or date.today()
    return f"{export_basename(name, image_url)}_edit_{today.strftime('%y%m%d')}.{ExportFormat(fmt).value}"


class ExportService:
    """Runs exports for editor sessions, one at a time per session."""

    def __init__(self, rasterizer: Optional[Rasterizer] = None):
        self.rasterizer = rasterizer or Rasterizer()

    async def export(
        self,
        session: "EditorSession",
        fmt: ExportFormat = ExportFormat.PNG,
        today: Optional[date] = None
    ) -> ExportResult:
        """
        Export the session's composition.

        Raises:
            ExportError: capture or encoding failed
        """
        fmt = ExportFormat(fmt)
        async with session.export_lock:
            await session.store.deselect()
            scene = session.scene_view.scene
            if scene.has_selection():
                # Subscribers must have rebuilt the scene by now
                logger.error(f"[EXPORT] Session {session.session_id}: selection still visible at capture")
                raise ExportError()

            logger.info(
                f"[EXPORT] Session {session.session_id}: capturing {scene.width}x{scene.height} "
                f"at {self.rasterizer.supersample}x as {fmt.value}"
            )
            try:
                # Pillow work runs off the event loop
                image = await asyncio.to_thread(self.rasterizer.render, scene, session.background)
                data = await asyncio.to_thread(self.rasterizer.encode, image, fmt)
            except CaptureError as e:
                logger.error(f"[EXPORT] Session {session.session_id}: capture failed: {e}")
                raise ExportError() from e

        return ExportResult(
            filename=export_filename(session.name, session.image_url, fmt, today),
            media_type=fmt.media_type,
            data=data,
            width=image.width,
            height=image.height,
        )
