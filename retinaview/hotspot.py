"""
hotspot.py
──────────
Hover labels for hot grid cells.

This is a wording heuristic, not a classifier. Local colour picks a lesion
family; the free-text findings of the external report only choose the more
specific wording (plain case-insensitive substring match). A label never
confirms that the finding is actually at that spot.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from .config import HeatmapConfig, get_config
from .saliency import SaliencyField

logger = logging.getLogger(__name__)

LABEL_EXUDATE = "Hard Exudate / CWS"
LABEL_BRIGHT = "Optic Disc / Bright Lesion"
LABEL_HEMORRHAGE = "Hemorrhage / Microaneurysm"
LABEL_VASCULAR = "Vascular Anomaly"
LABEL_DEFAULT = "High Attention Region"

BRIGHT_LEVEL = 180
DARK_LEVEL = 150
RED_DOMINANCE = 1.2


@dataclass
class Tooltip:
    position: Tuple[float, float]       # screen space
    label: str
    visible: bool = True
    intensity: float = 0.0
    cell: Tuple[int, int] = (0, 0)


def findings_mention(findings: Iterable[str], term: str) -> bool:
    term = term.lower()
    return any(term in (f or "").lower() for f in findings)


def label_for_color(rgb: Tuple[int, int, int], findings: Iterable[str] = ()) -> str:
    r, g, b = (float(c) for c in rgb)
    findings = list(findings)
    brightness = (r + g + b) / 3.0

    if brightness > BRIGHT_LEVEL:
        return LABEL_EXUDATE if findings_mention(findings, "exudate") else LABEL_BRIGHT
    if r > RED_DOMINANCE * g and r > RED_DOMINANCE * b and brightness < DARK_LEVEL:
        return LABEL_HEMORRHAGE if findings_mention(findings, "hemorrhage") else LABEL_VASCULAR
    return LABEL_DEFAULT


def inspect(
    grid_x: int,
    grid_y: int,
    field: SaliencyField,
    findings: Iterable[str] = (),
    position: Tuple[float, float] = (0.0, 0.0),
    config: Optional[HeatmapConfig] = None,
) -> Optional[Tooltip]:
    """Tooltip for cell (grid_x, grid_y), or None when the cell is not hot."""
    cfg = config or get_config()
    if not (0 <= grid_x < field.width and 0 <= grid_y < field.height):
        logger.debug("Cell (%d, %d) outside %dx%d grid", grid_x, grid_y, field.width, field.height)
        return None
    intensity = field.intensity_at(grid_x, grid_y)
    if intensity <= cfg.hot_threshold:
        return None

    label = label_for_color(field.color_at(grid_x, grid_y), findings)
    return Tooltip(
        position=position,
        label=label,
        intensity=intensity,
        cell=(grid_x, grid_y),
    )
