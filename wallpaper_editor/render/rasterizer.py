"""
Rasterizer
==========

Paints a Scene with Pillow and encodes the result.

The canvas is rendered at ``supersample`` times the natural resolution of
the background for output quality; every scene coordinate is multiplied by
the same factor.
"""

import io
import logging
import os
from enum import Enum
from typing import Optional, Tuple

from PIL import Image, ImageColor, ImageDraw, ImageFilter

from .fonts import load_font
from .scene import (
    Box,
    FillCommand,
    GroupCommand,
    ImageCommand,
    RectCommand,
    Scene,
    SelectionBoxCommand,
    TextCommand,
)

logger = logging.getLogger(__name__)

DEFAULT_SUPERSAMPLE = int(os.getenv("EDITOR_EXPORT_SUPERSAMPLE", "2"))
JPEG_QUALITY = 90


class ExportFormat(str, Enum):
    PNG = "png"  # Lossless
    JPG = "jpg"  # Lossy

    @property
    def media_type(self) -> str:
        return "image/png" if self is ExportFormat.PNG else "image/jpeg"


class CaptureError(RuntimeError):
    """Raised when a scene cannot be painted or encoded."""


def _rgba(color: str, alpha: int = 255) -> Tuple[int, int, int, int]:
    r, g, b = ImageColor.getrgb(color)[:3]
    return r, g, b, alpha


class Rasterizer:
    """Pillow renderer for scene descriptions."""

    def __init__(self, supersample: int = DEFAULT_SUPERSAMPLE):
        if supersample < 1:
            raise ValueError("supersample must be >= 1")
        self.supersample = supersample

    def _scaled(self, box: Box) -> Tuple[int, int, int, int]:
        s = self.supersample
        return (
            int(round(box.x * s)),
            int(round(box.y * s)),
            int(round((box.x + box.width) * s)),
            int(round((box.y + box.height) * s)),
        )

    # ------------------------------------------------------------------
    # Painting
    # ------------------------------------------------------------------

    def render(self, scene: Scene, background: Optional[Image.Image] = None) -> Image.Image:
        """
        Paint ``scene`` into an RGBA image of size scene × supersample.

        Raises:
            CaptureError: any failure while painting
        """
        s = self.supersample
        size = (max(1, scene.width * s), max(1, scene.height * s))
        try:
            canvas = Image.new("RGBA", size, (0, 0, 0, 0))
            for command in scene.commands:
                canvas = self._paint(canvas, command, background)
            return canvas
        except CaptureError:
            raise
        except Exception as e:
            logger.error(f"[RASTERIZER] Render failed: {e}")
            raise CaptureError(str(e)) from e

    def _paint(self, canvas: Image.Image, command, background: Optional[Image.Image]) -> Image.Image:
        if isinstance(command, FillCommand):
            canvas.paste(_rgba(command.color), (0, 0, canvas.width, canvas.height))
        elif isinstance(command, ImageCommand):
            if background is not None:
                left, top, right, bottom = self._scaled(command.box)
                layer = background.convert("RGBA").resize((right - left, bottom - top), Image.LANCZOS)
                canvas.alpha_composite(layer, (left, top))
        elif isinstance(command, RectCommand):
            self._draw_rect(ImageDraw.Draw(canvas), command)
        elif isinstance(command, TextCommand):
            if command.shadow_color:
                canvas = self._paint_shadow(canvas, command)
            self._draw_text(ImageDraw.Draw(canvas), command)
        elif isinstance(command, SelectionBoxCommand):
            draw = ImageDraw.Draw(canvas)
            draw.rectangle(
                self._scaled(command.box),
                outline=_rgba(command.color),
                width=command.width * self.supersample,
            )
        elif isinstance(command, GroupCommand):
            canvas = self._paint_group(canvas, command)
        else:
            raise CaptureError(f"Unsupported draw command: {command!r}")
        return canvas

    def _paint_group(self, canvas: Image.Image, group: GroupCommand) -> Image.Image:
        layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)
        for child in group.children:
            if isinstance(child, RectCommand):
                self._draw_rect(draw, child)
            else:
                self._draw_text(draw, child)

        if group.opacity < 1.0:
            alpha = layer.getchannel("A").point(lambda a: int(round(a * group.opacity)))
            layer.putalpha(alpha)
        return Image.alpha_composite(canvas, layer)

    def _paint_shadow(self, canvas: Image.Image, command: TextCommand) -> Image.Image:
        layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        alpha = int(round(255 * command.shadow_alpha))
        self._draw_text(ImageDraw.Draw(layer), command, color=command.shadow_color, alpha=alpha)
        radius = command.shadow_blur * self.supersample
        if radius > 0:
            layer = layer.filter(ImageFilter.GaussianBlur(radius))
        return Image.alpha_composite(canvas, layer)

    def _draw_rect(self, draw: ImageDraw.ImageDraw, command: RectCommand) -> None:
        box = self._scaled(command.box)
        radius = int(round(command.radius * self.supersample))
        if radius:
            draw.rounded_rectangle(box, radius=radius, fill=_rgba(command.fill))
        else:
            draw.rectangle(box, fill=_rgba(command.fill))

    def _draw_text(
        self,
        draw: ImageDraw.ImageDraw,
        command: TextCommand,
        color: Optional[str] = None,
        alpha: int = 255
    ) -> None:
        s = self.supersample
        font, synthetic_bold = load_font(command.font_family, int(round(command.font_size * s)), command.bold)
        stroke = max(1, int(round(command.font_size * s / 40))) if synthetic_bold else 0
        fill = _rgba(color or command.color, alpha)
        line_step = command.font_size * command.line_height * s

        if command.align_box is not None:
            left, top, right, bottom = self._scaled(command.align_box)
            total = line_step * len(command.lines)
            y = top + (bottom - top - total) / 2 + line_step / 2
            for line in command.lines:
                draw.text(
                    ((left + right) / 2, y), line, font=font, fill=fill, anchor="mm",
                    stroke_width=stroke, stroke_fill=fill,
                )
                y += line_step
            return

        x = command.x * s
        y = command.y * s + line_step / 2
        for line in command.lines:
            # Left-aligned, vertically centred in its line box
            draw.text((x, y), line, font=font, fill=fill, anchor="lm", stroke_width=stroke, stroke_fill=fill)
            y += line_step

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------

    def encode(self, image: Image.Image, fmt: ExportFormat) -> bytes:
        """Encode as PNG or JPEG (quality 90)."""
        fmt = ExportFormat(fmt)
        buffer = io.BytesIO()
        try:
            if fmt is ExportFormat.PNG:
                image.convert("RGB").save(buffer, format="PNG")
            else:
                image.convert("RGB").save(buffer, format="JPEG", quality=JPEG_QUALITY)
        except Exception as e:
            logger.error(f"[RASTERIZER] Encoding {fmt.value} failed: {e}")
            raise CaptureError(str(e)) from e
        return buffer.getvalue()

    def rasterize(self, scene: Scene, background: Optional[Image.Image], fmt: ExportFormat) -> bytes:
        return self.encode(self.render(scene, background), fmt)
