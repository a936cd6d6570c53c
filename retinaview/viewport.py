"""
viewport.py
───────────
Zoom / pan state for the image + overlay pair, and the mapping between
screen space and image-intrinsic space:

    image = (screen − pan) / zoom
    screen = image · zoom + pan

States:
  Idle    zoom == zoom_min, pan == (0, 0)
  Zoomed  zoom  > zoom_min, pan is meaningful

All mutations go through the named transitions below.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .config import HeatmapConfig, get_config
from .errors import OutOfBoundsPointer
from .geometry import GridScale

Point = Tuple[float, float]


@dataclass
class ViewportState:
    zoom: float = 1.0
    pan: Point = (0.0, 0.0)
    panning: bool = False
    anchor: Optional[Point] = None


class Viewport:
    """Viewport over a width×height screen rectangle."""

    def __init__(self, width: float, height: float, config: Optional[HeatmapConfig] = None):
        self.config = config or get_config()
        self.width = width
        self.height = height
        self.state = ViewportState(zoom=self.config.zoom_min)

    # ── accessors ────────────────────────────────

    @property
    def zoom(self) -> float:
        return self.state.zoom

    @property
    def pan(self) -> Point:
        return self.state.pan

    @property
    def panning(self) -> bool:
        return self.state.panning

    @property
    def zoomed(self) -> bool:
        return self.state.zoom > self.config.zoom_min

    def resize(self, width: float, height: float) -> None:
        self.width = width
        self.height = height

    # ── transitions ──────────────────────────────

    def zoom_in(self) -> float:
        self.state.zoom = min(self.state.zoom + self.config.zoom_step, self.config.zoom_max)
        return self.state.zoom

    def zoom_out(self) -> float:
        zoom = max(self.state.zoom - self.config.zoom_step, self.config.zoom_min)
        if zoom <= self.config.zoom_min:
            self.reset()
        else:
            self.state.zoom = zoom
        return self.state.zoom

    def reset(self) -> None:
        self.state = ViewportState(zoom=self.config.zoom_min)

    def pan_start(self, pointer: Point) -> bool:
        """Begin a drag. Ignored unless zoomed in."""
        if not self.zoomed:
            return False
        px, py = self.state.pan
        self.state.anchor = (pointer[0] - px, pointer[1] - py)
        self.state.panning = True
        return True

    def pan_move(self, pointer: Point) -> bool:
        if not self.state.panning or self.state.anchor is None:
            return False
        ax, ay = self.state.anchor
        self.state.pan = (pointer[0] - ax, pointer[1] - ay)
        return True

    def pan_end(self) -> None:
        self.state.panning = False
        self.state.anchor = None

    # ── coordinate mapping ───────────────────────

    def to_image_space(self, screen_x: float, screen_y: float) -> Point:
        px, py = self.state.pan
        z = self.state.zoom
        return (screen_x - px) / z, (screen_y - py) / z

    def to_screen_space(self, image_x: float, image_y: float) -> Point:
        px, py = self.state.pan
        z = self.state.zoom
        return image_x * z + px, image_y * z + py

    def to_grid_cell(self, screen_x: float, screen_y: float, grid_width: int, grid_height: int):
        """
        Grid cell under a screen pointer.

        Raises OutOfBoundsPointer when the cell falls outside
        [0, grid_width) × [0, grid_height).
        """
        ix, iy = self.to_image_space(screen_x, screen_y)
        gx, gy = GridScale(self.width, self.height, grid_width, grid_height).map_cell(ix, iy)
        if not (0 <= gx < grid_width and 0 <= gy < grid_height):
            raise OutOfBoundsPointer(gx, gy)
        return gx, gy
