"""
overlay.py
──────────
Compositing of the low-resolution heat image onto the fundus photo.

    render_overlay(heat, w, h)              -> RGBA (h, w, 4) smooth overlay
    flatten_for_export(base, overlay, ...)  -> RGB  (h, w, 3) single raster
    render_viewport(image, zoom, pan)       -> zoomed/panned view of a raster
    encode_png(rgb)                         -> bytes

The live view and the exported file go through the same blend function, so a
download looks exactly like what was on screen.
"""

from __future__ import annotations

import io
import logging
from typing import Optional, Tuple

import cv2
import numpy as np
from PIL import Image

from .config import BLEND_MODES, HeatmapConfig, get_config
from .errors import CompositionUnavailable
from .geometry import GridScale, viewport_affine
from .preprocessing import ImageSource, load_image

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────
# Upscale + blur
# ──────────────────────────────────────────────

def render_overlay(
    heat_image: Optional[np.ndarray],
    width: int,
    height: int,
    config: Optional[HeatmapConfig] = None,
) -> np.ndarray:
    """Upscale the heat image to width×height and blur away the grid cells."""
    cfg = config or get_config()

    if heat_image is None or heat_image.size == 0:
        raise CompositionUnavailable("No heat image to composite")
    if width <= 0 or height <= 0:
        raise CompositionUnavailable(f"Invalid overlay size {width}x{height}")

    gh, gw = heat_image.shape[:2]
    scale = GridScale(gw, gh, width, height)

    overlay = cv2.warpAffine(
        np.ascontiguousarray(heat_image),
        scale.affine(),
        (width, height),
        flags=cv2.INTER_LINEAR,
        borderMode=cv2.BORDER_REPLICATE,
    )
    if cfg.blur_sigma > 0:
        overlay = cv2.GaussianBlur(
            overlay, (0, 0), sigmaX=cfg.blur_sigma, borderType=cv2.BORDER_REPLICATE
        )
    return overlay


# ──────────────────────────────────────────────
# Blend
# ──────────────────────────────────────────────

def _blend(base: np.ndarray, src: np.ndarray, mode: str) -> np.ndarray:
    if mode == "screen":
        return 1.0 - (1.0 - base) * (1.0 - src)
    if mode == "additive":
        return np.minimum(base + src, 1.0)
    return src                                          # normal / source-over


def flatten_for_export(
    base_image: ImageSource,
    overlay: Optional[np.ndarray],
    opacity: Optional[float] = None,
    blend_mode: Optional[str] = None,
    config: Optional[HeatmapConfig] = None,
) -> np.ndarray:
    """
    Draw *base_image*, then *overlay* on top at *opacity* with *blend_mode*.
    Per-pixel overlay alpha is multiplied into the opacity.
    """
    cfg = config or get_config()
    opacity = cfg.overlay_opacity if opacity is None else opacity
    blend_mode = blend_mode or cfg.blend_mode

    if blend_mode not in BLEND_MODES:
        raise ValueError(f"Unknown blend mode {blend_mode!r}. Choose from {BLEND_MODES}")
    if not 0 <= opacity <= 1:
        raise ValueError(f"Opacity must be within [0, 1], got {opacity}")
    if overlay is None or overlay.size == 0:
        raise CompositionUnavailable("No overlay to flatten")

    base = load_image(base_image)
    if overlay.shape[:2] != base.shape[:2]:
        raise CompositionUnavailable(
            f"Overlay {overlay.shape[1]}x{overlay.shape[0]} does not match "
            f"image {base.shape[1]}x{base.shape[0]}"
        )

    b = base.astype(np.float64) / 255.0
    s = overlay[:, :, :3].astype(np.float64) / 255.0
    if overlay.shape[2] == 4:
        a = opacity * overlay[:, :, 3:4].astype(np.float64) / 255.0
    else:
        a = np.full(b.shape[:2] + (1,), opacity)

    out = b * (1.0 - a) + _blend(b, s, blend_mode) * a
    return np.clip(np.floor(out * 255.0 + 0.5), 0, 255).astype(np.uint8)


# ──────────────────────────────────────────────
# Display helpers
# ──────────────────────────────────────────────

def render_viewport(
    image: np.ndarray,
    zoom: float,
    pan: Tuple[float, float],
    size: Optional[Tuple[int, int]] = None,
) -> np.ndarray:
    """Render *image* as seen through a viewport at *zoom* offset by *pan*."""
    h, w = image.shape[:2]
    out_w, out_h = size or (w, h)
    return cv2.warpAffine(
        np.ascontiguousarray(image),
        viewport_affine(zoom, pan[0], pan[1]),
        (out_w, out_h),
        flags=cv2.INTER_LINEAR,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=0,
    )


def encode_png(rgb: np.ndarray) -> bytes:
    buf = io.BytesIO()
    Image.fromarray(rgb).save(buf, format="PNG")
    return buf.getvalue()
