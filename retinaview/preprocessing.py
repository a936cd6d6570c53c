"""
preprocessing.py
────────────────
Image intake for the heatmap core.

The public API is:
    load_image(source)      -> np.ndarray uint8 (H, W, 3)
    enhance_fundus(image)   -> np.ndarray uint8 (H', W', 3)
    image_id_for(array)     -> str

File paths, raw bytes, file-like objects, PIL images and numpy arrays are all
accepted. Anything that cannot be decoded raises ImageDecodeError.
"""

from __future__ import annotations

import hashlib
import io
import logging
from typing import Union

import numpy as np
from PIL import Image, ImageEnhance, UnidentifiedImageError

from .errors import ImageDecodeError

logger = logging.getLogger(__name__)

ImageSource = Union[str, bytes, "io.IOBase", Image.Image, np.ndarray]

# Upload enhancement used before analysis
MAX_SIZE = 1600
CONTRAST = 1.25
BRIGHTNESS = 1.05
SATURATION = 1.1


# ──────────────────────────────────────────────
# Decoding
# ──────────────────────────────────────────────

def _open_pil(source) -> Image.Image:
    if isinstance(source, Image.Image):
        return source
    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(source)
    try:
        img = Image.open(source)
        img.load()
    except (OSError, UnidentifiedImageError, ValueError) as e:
        raise ImageDecodeError(f"Could not decode image: {e}") from e
    return img


def _array_to_rgb(arr: np.ndarray) -> np.ndarray:
    if arr.ndim == 2:                                   # grayscale → RGB
        arr = np.stack([arr] * 3, axis=-1)
    if arr.ndim != 3 or arr.shape[2] not in (3, 4):
        raise ImageDecodeError(f"Unsupported image array shape {arr.shape}")
    if arr.shape[2] == 4:                               # RGBA → RGB
        arr = arr[:, :, :3]
    if arr.shape[0] == 0 or arr.shape[1] == 0:
        raise ImageDecodeError("Image has zero width or height")
    if arr.dtype != np.uint8:
        if np.issubdtype(arr.dtype, np.floating) and arr.size and arr.max() <= 1.0:
            arr = arr * 255.0
        arr = np.clip(arr, 0, 255)
    return np.ascontiguousarray(arr, dtype=np.uint8)


def load_image(source: ImageSource) -> np.ndarray:
    """
    Accept a file path, bytes, file-like object, PIL Image, or numpy array.
    Returns a uint8 RGB numpy array of shape (H, W, 3).
    """
    if source is None:
        raise ImageDecodeError("No image supplied")

    if isinstance(source, np.ndarray):
        return _array_to_rgb(source)

    img = _open_pil(source)
    try:
        rgb = img.convert("RGB")
    except (OSError, ValueError) as e:
        raise ImageDecodeError(f"Could not convert image to RGB: {e}") from e
    return _array_to_rgb(np.array(rgb, dtype=np.uint8))


# ──────────────────────────────────────────────
# Enhancement
# ──────────────────────────────────────────────

def enhance_fundus(
    source: ImageSource,
    max_size: int = MAX_SIZE,
    contrast: float = CONTRAST,
    brightness: float = BRIGHTNESS,
    saturation: float = SATURATION,
) -> np.ndarray:
    """
    Downscale so the longer side is at most *max_size* (never upscales), then
    boost contrast, brightness and saturation.
    """
    img = Image.fromarray(load_image(source))
    w, h = img.size
    longest = max(w, h)
    if longest > max_size:
        scale = max_size / longest
        img = img.resize((max(1, round(w * scale)), max(1, round(h * scale))), Image.BILINEAR)

    img = ImageEnhance.Contrast(img).enhance(contrast)
    img = ImageEnhance.Brightness(img).enhance(brightness)
    img = ImageEnhance.Color(img).enhance(saturation)

    logger.debug("Enhanced image %dx%d -> %dx%d", w, h, *img.size)
    return np.array(img, dtype=np.uint8)


def image_id_for(image: np.ndarray) -> str:
    """Content hash of a decoded image; equal pixels give equal ids."""
    digest = hashlib.sha1()
    digest.update(str(image.shape).encode("ascii"))
    digest.update(np.ascontiguousarray(image).tobytes())
    return digest.hexdigest()[:12]
