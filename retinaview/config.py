"""
config.py
─────────
Single source of truth for heatmap tuning constants.

Each preset declares:
  - grid size        : resolution of the saliency analysis grid
  - intensity_scale  : RGB distance that maps to intensity 1.0
  - heat_alpha       : fixed alpha of every heat image pixel (0-255)
  - blur_sigma       : Gaussian sigma (px) used when upscaling the heat image
  - overlay_opacity / blend_mode : live + export compositing
  - hot_threshold    : intensity above which a cell gets a tooltip
  - zoom_step / zoom_min / zoom_max : viewport bounds

The active preset is picked by name, or by the RETINAVIEW_PRESET env var.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Dict, Optional

BLEND_MODES = ("screen", "normal", "additive")


@dataclass(frozen=True)
class HeatmapConfig:
    """Declarative configuration for one heatmap analysis."""
    name: str = "reference"
    grid_width: int = 64
    grid_height: int = 64
    intensity_scale: float = 110.0
    heat_alpha: int = 180
    blur_sigma: float = 15.0
    overlay_opacity: float = 0.7
    blend_mode: str = "screen"
    hot_threshold: float = 0.6
    zoom_step: float = 0.5
    zoom_min: float = 1.0
    zoom_max: float = 5.0
    arena_size: int = 8
    history_path: str = os.path.join("~", ".retinaview", "history.json")
    history_limit: int = 50

    def __post_init__(self):
        if self.grid_width <= 0 or self.grid_height <= 0:
            raise ValueError(f"Grid size must be positive, got {self.grid_width}x{self.grid_height}")
        if self.intensity_scale <= 0:
            raise ValueError("intensity_scale must be positive")
        if not 0 <= self.heat_alpha <= 255:
            raise ValueError("heat_alpha must be within 0..255")
        if not 0 < self.overlay_opacity <= 1:
            raise ValueError("overlay_opacity must be within (0, 1]")
        if self.blend_mode not in BLEND_MODES:
            raise ValueError(f"Unknown blend mode {self.blend_mode!r}. Choose from {BLEND_MODES}")
        if not 1 <= self.zoom_min < self.zoom_max:
            raise ValueError("Zoom bounds must satisfy 1 <= zoom_min < zoom_max")
        if self.zoom_step <= 0:
            raise ValueError("zoom_step must be positive")
        if self.arena_size < 1:
            raise ValueError("arena_size must be at least 1")

    @property
    def grid_size(self):
        return self.grid_width, self.grid_height


# ── Registry ── edit here to add / change presets ─────────────────────────────

_REFERENCE = HeatmapConfig()

CONFIG_REGISTRY: Dict[str, HeatmapConfig] = {
    "reference": _REFERENCE,
    # Finer grid for large scans; less blur keeps small lesions visible
    "fine": replace(_REFERENCE, name="fine", grid_width=128, grid_height=128, blur_sigma=8.0),
}

ENV_PRESET = "RETINAVIEW_PRESET"


def get_config(name: Optional[str] = None) -> HeatmapConfig:
    """Return the preset called *name*, falling back to $RETINAVIEW_PRESET."""
    if name is None:
        name = os.environ.get(ENV_PRESET, "reference")
    cfg = CONFIG_REGISTRY.get(name)
    if cfg is None:
        raise ValueError(f"Unknown preset: {name!r}. Choose from {list(CONFIG_REGISTRY)}")
    return cfg
