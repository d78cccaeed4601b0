"""
Viewport Controller
===================

Zoom handling for the editor canvas.

Item positions are stored unscaled, so changing the zoom factor is enough
to re-project every item; nothing here touches item positions.
"""

import logging
from typing import TYPE_CHECKING

from ..models.editor_models import MAX_SCALE, MIN_SCALE, SetScaleAction

if TYPE_CHECKING:
    from .store import EditorStore

logger = logging.getLogger(__name__)

ZOOM_STEP = 0.1
DEFAULT_SCALE = 1.0
# Padding around the canvas inside the viewport (p-8 on both sides)
VIEWPORT_PADDING = 64


def clamp_scale(scale: float) -> float:
    """Keep a zoom factor inside [MIN_SCALE, MAX_SCALE]."""
    return max(MIN_SCALE, min(MAX_SCALE, scale))


def fit_scale(
    available_width: float,
    available_height: float,
    natural_width: int,
    natural_height: int
) -> float:
    """
    Scale that fits an image of the natural size into the available area.

    Returns DEFAULT_SCALE when any dimension is unknown.
    """
    if natural_width <= 0 or natural_height <= 0:
        return DEFAULT_SCALE
    if available_width <= 0 or available_height <= 0:
        return DEFAULT_SCALE
    return clamp_scale(min(available_width / natural_width, available_height / natural_height))


class ViewportController:
    """Zoom operations bound to an editor store."""

    def __init__(self, store: "EditorStore"):
        self.store = store

    @property
    def scale(self) -> float:
        return self.store.state.viewport.scale

    def set_scale(self, scale: float) -> float:
        self.store.dispatch(SetScaleAction(scale=scale))
        return self.scale

    def zoom_in(self) -> float:
        return self.set_scale(round(self.scale + ZOOM_STEP, 2))

    def zoom_out(self) -> float:
        return self.set_scale(round(self.scale - ZOOM_STEP, 2))

    def reset_zoom(self) -> float:
        return self.set_scale(DEFAULT_SCALE)

    def fit_to_viewport(self, viewport_width: float, viewport_height: float) -> float:
        """
        Fit the background into a viewport of the given client size.

        Args:
            viewport_width: Client width of the canvas area in pixels
            viewport_height: Client height of the canvas area in pixels

        Returns:
            The new scale
        """
        viewport = self.store.state.viewport
        scale = fit_scale(
            viewport_width - VIEWPORT_PADDING,
            viewport_height - VIEWPORT_PADDING,
            viewport.image_width,
            viewport.image_height,
        )
        logger.info(
            f"[VIEWPORT] Fit {viewport.image_width}x{viewport.image_height} "
            f"into {viewport_width}x{viewport_height} -> {scale:.3f}"
        )
        return self.set_scale(scale)
