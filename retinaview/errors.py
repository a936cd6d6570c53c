"""
errors.py
─────────
Failure types raised by the heatmap core.

Decode and composition failures are recovered by ViewerSession; none of them
is fatal to the rest of the report view.
"""


class RetinaViewError(Exception):
    """Base class for every error raised by retinaview."""


class ImageDecodeError(RetinaViewError):
    """The source image could not be loaded or decoded."""


class CompositionUnavailable(RetinaViewError):
    """The overlay could not be composited (missing heat image, empty target…)."""


class OutOfBoundsPointer(RetinaViewError):
    """A pointer maps outside the intensity grid. Normal control flow, not a fault."""

    def __init__(self, grid_x: int, grid_y: int):
        super().__init__(f"Pointer maps outside the grid at cell ({grid_x}, {grid_y})")
        self.grid_x = grid_x
        self.grid_y = grid_y
