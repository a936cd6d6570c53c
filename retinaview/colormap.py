"""
colormap.py
───────────
Piecewise-linear "jet" colormap, four bands of width 0.25:

    [0.00, 0.25)  blue  → cyan
    [0.25, 0.50)  cyan  → green
    [0.50, 0.75)  green → yellow
    [0.75, 1.00]  yellow→ red

Channels are rounded half-up and clamped to 0..255. Unlike cv2.COLORMAP_JET the
ramps here are exact, so band edges match from both sides.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np


def map_intensity_array(values) -> np.ndarray:
    """Map an array of intensities to a uint8 RGB array of shape values.shape + (3,)."""
    v = np.clip(np.asarray(values, dtype=np.float64), 0.0, 1.0)

    r = np.select(
        [v < 0.5, v < 0.75],
        [np.zeros_like(v), 4 * (v - 0.5) * 255],
        default=np.full_like(v, 255.0),
    )
    g = np.select(
        [v < 0.25, v < 0.75],
        [4 * v * 255, np.full_like(v, 255.0)],
        default=255 - 4 * (v - 0.75) * 255,
    )
    b = np.select(
        [v < 0.25, v < 0.5],
        [np.full_like(v, 255.0), 255 - 4 * (v - 0.25) * 255],
        default=np.zeros_like(v),
    )

    rgb = np.stack([r, g, b], axis=-1)
    return np.clip(np.floor(rgb + 0.5), 0, 255).astype(np.uint8)


def map_intensity(v: float) -> Tuple[int, int, int]:
    """Map a single intensity to an (r, g, b) tuple. Out-of-range input is clamped."""
    r, g, b = map_intensity_array(v)
    return int(r), int(g), int(b)


def jet_lut(n: int = 256) -> np.ndarray:
    """n×3 float lookup table in [0, 1], handy for matplotlib ListedColormap."""
    return map_intensity_array(np.linspace(0.0, 1.0, n)).astype(np.float64) / 255.0
