"""
geometry.py
───────────
Scale factors between the fixed analysis grid and arbitrary display rasters.

Every place that converts between the two resolutions goes through GridScale,
so compositing and hotspot lookup agree on which cell a display pixel falls in.
Coordinates are continuous: pixel i covers [i, i+1).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np


@dataclass(frozen=True)
class GridScale:
    """Maps continuous positions in a src raster onto a dst raster."""
    src_width: float
    src_height: float
    dst_width: float
    dst_height: float

    def __post_init__(self):
        if min(self.src_width, self.src_height, self.dst_width, self.dst_height) <= 0:
            raise ValueError(
                f"Cannot scale between {self.src_width}x{self.src_height} "
                f"and {self.dst_width}x{self.dst_height}"
            )

    @property
    def sx(self) -> float:
        return self.dst_width / self.src_width

    @property
    def sy(self) -> float:
        return self.dst_height / self.src_height

    def map_point(self, x: float, y: float) -> Tuple[float, float]:
        return x * self.sx, y * self.sy

    def map_cell(self, x: float, y: float) -> Tuple[int, int]:
        """Integer dst cell containing the src point (x, y)."""
        dx, dy = self.map_point(x, y)
        return math.floor(dx), math.floor(dy)

    def affine(self) -> np.ndarray:
        """2×3 src→dst matrix for cv2.warpAffine, aligned on pixel centres."""
        return np.float32([
            [self.sx, 0.0, 0.5 * self.sx - 0.5],
            [0.0, self.sy, 0.5 * self.sy - 0.5],
        ])


def viewport_affine(zoom: float, pan_x: float, pan_y: float) -> np.ndarray:
    """2×3 image→screen matrix for screen = image * zoom + pan, pixel-centre aligned."""
    return np.float32([
        [zoom, 0.0, 0.5 * zoom - 0.5 + pan_x],
        [0.0, zoom, 0.5 * zoom - 0.5 + pan_y],
    ])
