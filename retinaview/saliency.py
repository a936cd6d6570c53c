"""
saliency.py
───────────
Synthetic saliency field: a heuristic "attention" map built from colour
deviation alone. No model is involved, so this is a visual aid and not an
explainability map like Grad-CAM.

Steps:
  1. Resample the image to the analysis grid (64×64 by default).
  2. Mean R, G, B over all grid cells gives the baseline colour.
  3. Intensity = ‖cell − baseline‖₂ / intensity_scale, clamped to [0, 1].
  4. Heat image = jet(intensity) at a fixed partial alpha.

The output is deterministic: the same pixels always give the same grids.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import cv2
import numpy as np

from .colormap import map_intensity_array
from .config import HeatmapConfig, get_config
from .preprocessing import ImageSource, image_id_for, load_image

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SaliencyField:
    """Grids derived from one image. Arrays are read-only after construction."""
    image_id: str
    intensity_grid: np.ndarray      # (H, W) float64 in [0, 1]
    color_grid: np.ndarray          # (H, W, 3) uint8 sampled RGB
    heat_image: np.ndarray          # (H, W, 4) uint8 RGBA
    mean_color: Tuple[float, float, float]

    @property
    def width(self) -> int:
        return self.intensity_grid.shape[1]

    @property
    def height(self) -> int:
        return self.intensity_grid.shape[0]

    def intensity_at(self, grid_x: int, grid_y: int) -> float:
        return float(self.intensity_grid[grid_y, grid_x])

    def color_at(self, grid_x: int, grid_y: int) -> Tuple[int, int, int]:
        r, g, b = self.color_grid[grid_y, grid_x]
        return int(r), int(g), int(b)


def sample_grid(image: np.ndarray, width: int, height: int) -> np.ndarray:
    """Area-average the image down to width×height cells."""
    return cv2.resize(image, (width, height), interpolation=cv2.INTER_AREA)


def intensity_field(color_grid: np.ndarray, scale: float):
    """Per-cell distance from the mean colour, normalised and clamped."""
    cells = color_grid.astype(np.float64)
    mean = cells.reshape(-1, 3).mean(axis=0)
    dist = np.sqrt(((cells - mean) ** 2).sum(axis=-1))
    return np.clip(dist / scale, 0.0, 1.0), mean


def heat_from_intensity(intensity: np.ndarray, alpha: int) -> np.ndarray:
    rgb = map_intensity_array(intensity)
    a = np.full(intensity.shape + (1,), alpha, dtype=np.uint8)
    return np.concatenate([rgb, a], axis=-1)


def build_saliency(
    source: ImageSource,
    config: Optional[HeatmapConfig] = None,
    image_id: Optional[str] = None,
) -> SaliencyField:
    """
    Build the intensity grid, colour grid and heat image for *source*.

    Raises ImageDecodeError when the source cannot be decoded.
    """
    cfg = config or get_config()
    image = load_image(source)
    if image_id is None:
        image_id = image_id_for(image)

    color_grid = sample_grid(image, cfg.grid_width, cfg.grid_height)
    intensity, mean = intensity_field(color_grid, cfg.intensity_scale)
    heat = heat_from_intensity(intensity, cfg.heat_alpha)

    for arr in (intensity, color_grid, heat):
        arr.setflags(write=False)

    logger.info(
        "Saliency built for %s: %dx%d grid, mean RGB (%.1f, %.1f, %.1f), peak %.2f",
        image_id, cfg.grid_width, cfg.grid_height, *mean, float(intensity.max()),
    )
    return SaliencyField(
        image_id=image_id,
        intensity_grid=intensity,
        color_grid=color_grid,
        heat_image=heat,
        mean_color=(float(mean[0]), float(mean[1]), float(mean[2])),
    )
