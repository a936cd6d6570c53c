"""
session.py
──────────
One interactive heatmap viewer.

Rules:
  1. Every show_image() call starts a new generation; only the newest
     generation's build may be applied. Stale builds are dropped on arrival.
  2. Grids are kept in a small arena keyed by image id and never recomputed
     for an image that is already in it.
  3. The viewport and tooltip are reset whenever the displayed image changes.
  4. Decode / composition failures leave the session "unavailable" instead of
     raising; the base image stays usable.

Builds run inline unless an Executor is supplied, in which case the result is
applied from the worker's done-callback under a lock.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from concurrent.futures import Executor, Future
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np

from . import hotspot
from .config import HeatmapConfig, get_config
from .errors import CompositionUnavailable, ImageDecodeError, OutOfBoundsPointer
from .hotspot import Tooltip
from .overlay import encode_png, flatten_for_export, render_overlay
from .preprocessing import ImageSource, image_id_for, load_image
from .saliency import SaliencyField, build_saliency
from .viewport import Point, Viewport

logger = logging.getLogger(__name__)

STATUS_EMPTY = "empty"
STATUS_BUILDING = "building"
STATUS_READY = "ready"
STATUS_UNAVAILABLE = "unavailable"


class BuildHandle:
    """Ticket for one saliency build. Cancelling it discards the result."""

    def __init__(self, image_id: Optional[str], generation: int):
        self.image_id = image_id
        self.generation = generation
        self._future: Future = Future()
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True
        self._future.cancel()

    def done(self) -> bool:
        return self._future.done()

    def result(self, timeout: Optional[float] = None) -> Optional[SaliencyField]:
        """Built field, or None when cancelled / superseded / failed."""
        if self._cancelled:
            return None
        return self._future.result(timeout)

    def _resolve(self, field: Optional[SaliencyField]) -> None:
        if not self._future.done():
            self._future.set_result(field)


class ViewerSession:
    def __init__(
        self,
        config: Optional[HeatmapConfig] = None,
        executor: Optional[Executor] = None,
        width: float = 0,
        height: float = 0,
    ):
        self.config = config or get_config()
        self.executor = executor
        self.viewport = Viewport(width, height, self.config)
        self._fit_viewport = width <= 0 or height <= 0
        self.tooltip: Optional[Tooltip] = None
        self.findings: List[str] = []
        self.status = STATUS_EMPTY
        self.error: Optional[str] = None

        self._lock = threading.Lock()
        self._generation = 0
        self._handle: Optional[BuildHandle] = None
        self._image_id: Optional[str] = None
        self._image: Optional[np.ndarray] = None
        self._arena: "OrderedDict[str, SaliencyField]" = OrderedDict()
        self._overlays: Dict[Tuple[str, int, int], np.ndarray] = {}

    # ──────────────────────────────────────────
    # Image lifecycle
    # ──────────────────────────────────────────

    @property
    def image_id(self) -> Optional[str]:
        return self._image_id

    @property
    def image(self) -> Optional[np.ndarray]:
        return self._image

    @property
    def field(self) -> Optional[SaliencyField]:
        """Saliency field of the displayed image, once its build has landed."""
        if self.status != STATUS_READY or self._image_id is None:
            return None
        return self._arena.get(self._image_id)

    def show_image(
        self,
        source: ImageSource,
        image_id: Optional[str] = None,
        findings: Iterable[str] = (),
    ) -> BuildHandle:
        """Display a new image and (re)build its saliency field."""
        with self._lock:
            if self._handle is not None:
                self._handle.cancel()
            self._generation += 1
            generation = self._generation
            self._image_id = None
            self.status = STATUS_BUILDING
            self.findings = list(findings)
            self.viewport.reset()
            self.tooltip = None
            self.error = None

        try:
            image = load_image(source)
        except ImageDecodeError as e:
            logger.warning("Heatmap unavailable: %s", e)
            with self._lock:
                self._image = None
                self._image_id = image_id
                self.status = STATUS_UNAVAILABLE
                self.error = str(e)
                handle = self._handle = BuildHandle(image_id, generation)
            handle._resolve(None)
            return handle

        image_id = image_id or image_id_for(image)
        h, w = image.shape[:2]

        with self._lock:
            self._image = image
            self._image_id = image_id
            if self._fit_viewport:
                self.viewport.resize(w, h)
            handle = self._handle = BuildHandle(image_id, generation)
            cached = self._arena.get(image_id)
            if cached is not None:
                self._arena.move_to_end(image_id)
                self.status = STATUS_READY
            else:
                self.status = STATUS_BUILDING

        if cached is not None:
            logger.debug("Reusing saliency field for %s", image_id)
            handle._resolve(cached)
            return handle

        if self.executor is None:
            self._finish(handle, self._build(image, image_id))
        else:
            future = self.executor.submit(self._build, image, image_id)
            future.add_done_callback(lambda f: self._on_done(handle, f))
        return handle

    def _build(self, image: np.ndarray, image_id: str):
        try:
            return build_saliency(image, self.config, image_id=image_id), None
        except ImageDecodeError as e:
            return None, str(e)
        except Exception as e:
            logger.exception("Saliency build failed for %s", image_id)
            return None, f"Saliency build failed: {e}"

    def _on_done(self, handle: BuildHandle, future: Future) -> None:
        if future.cancelled():
            self._finish(handle, (None, "Saliency build was cancelled"))
        elif future.exception() is not None:
            self._finish(handle, (None, f"Saliency build failed: {future.exception()}"))
        else:
            self._finish(handle, future.result())

    def _finish(self, handle: BuildHandle, outcome) -> None:
        field, error = outcome
        with self._lock:
            if handle.cancelled or handle.generation != self._generation:
                logger.debug(
                    "Discarding stale build for %s (generation %d, current %d)",
                    handle.image_id, handle.generation, self._generation,
                )
                handle._resolve(None)
                return
            if field is None:
                logger.warning("Heatmap unavailable for %s: %s", handle.image_id, error)
                self.status = STATUS_UNAVAILABLE
                self.error = error
            else:
                self._arena[field.image_id] = field
                self._arena.move_to_end(field.image_id)
                while len(self._arena) > self.config.arena_size:
                    evicted, _ = self._arena.popitem(last=False)
                    for key in [k for k in self._overlays if k[0] == evicted]:
                        del self._overlays[key]
                self.status = STATUS_READY
        handle._resolve(field)

    def clear(self) -> None:
        with self._lock:
            if self._handle is not None:
                self._handle.cancel()
            self._generation += 1
            self._handle = None
            self._image = None
            self._image_id = None
            self.status = STATUS_EMPTY
            self.error = None
            self.tooltip = None
            self.viewport.reset()

    # ──────────────────────────────────────────
    # Overlay / export
    # ──────────────────────────────────────────

    def overlay(self, width: Optional[int] = None, height: Optional[int] = None) -> np.ndarray:
        """Cached overlay composite for the displayed image."""
        field = self.field
        if field is None:
            raise CompositionUnavailable(self.error or "Heatmap not available for this image")
        if width is None or height is None:
            height, width = self._image.shape[:2]

        key = (field.image_id, width, height)
        with self._lock:
            cached = self._overlays.get(key)
        if cached is not None:
            return cached

        rendered = render_overlay(field.heat_image, width, height, self.config)
        with self._lock:
            # the image may have been evicted or replaced while rendering
            if field.image_id in self._arena:
                rendered = self._overlays.setdefault(key, rendered)
        return rendered

    def flattened(self) -> np.ndarray:
        h, w = self._image.shape[:2] if self._image is not None else (0, 0)
        return flatten_for_export(self._image, self.overlay(w, h), config=self.config)

    def export_png(self) -> bytes:
        """PNG bytes of image + overlay, exactly as composited on screen."""
        return encode_png(self.flattened())

    # ──────────────────────────────────────────
    # Viewport transitions
    # ──────────────────────────────────────────

    def zoom_in(self) -> float:
        return self.viewport.zoom_in()

    def zoom_out(self) -> float:
        return self.viewport.zoom_out()

    def reset(self) -> None:
        self.viewport.reset()
        self.tooltip = None

    def pan_start(self, pointer: Point) -> bool:
        return self.viewport.pan_start(pointer)

    def pan_move(self, pointer: Point) -> bool:
        moved = self.viewport.pan_move(pointer)
        if moved:
            self.tooltip = None
        return moved

    def pan_end(self) -> None:
        self.viewport.pan_end()

    # ──────────────────────────────────────────
    # Hover
    # ──────────────────────────────────────────

    def inspect_hotspot(self, pointer: Point) -> Optional[Tooltip]:
        """Tooltip for a screen pointer, or None (not hot, out of bounds, panning…)."""
        self.tooltip = None
        field = self.field
        if field is None or self.viewport.panning:
            return None

        try:
            gx, gy = self.viewport.to_grid_cell(pointer[0], pointer[1], field.width, field.height)
        except OutOfBoundsPointer as e:
            logger.debug("%s", e)
            return None

        self.tooltip = hotspot.inspect(
            gx, gy, field, self.findings, position=pointer, config=self.config
        )
        return self.tooltip
