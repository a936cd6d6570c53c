"""
retinaview package public API
"""
from .config         import HeatmapConfig, CONFIG_REGISTRY, BLEND_MODES, get_config
from .errors         import RetinaViewError, ImageDecodeError, CompositionUnavailable, OutOfBoundsPointer
from .preprocessing  import load_image, enhance_fundus, image_id_for
from .colormap       import map_intensity, map_intensity_array, jet_lut
from .geometry       import GridScale, viewport_affine
from .saliency       import SaliencyField, build_saliency
from .overlay        import render_overlay, flatten_for_export, render_viewport, encode_png
from .viewport       import Viewport, ViewportState
from .hotspot        import Tooltip, inspect, label_for_color, findings_mention
from .session        import ViewerSession, BuildHandle
from .history        import HistoryEntry, HistoryStore

__version__ = "0.3.0"

__all__ = [
    # config
    "HeatmapConfig", "CONFIG_REGISTRY", "BLEND_MODES", "get_config",
    # errors
    "RetinaViewError", "ImageDecodeError", "CompositionUnavailable", "OutOfBoundsPointer",
    # preprocessing
    "load_image", "enhance_fundus", "image_id_for",
    # colormap
    "map_intensity", "map_intensity_array", "jet_lut",
    # geometry
    "GridScale", "viewport_affine",
    # saliency
    "SaliencyField", "build_saliency",
    # overlay
    "render_overlay", "flatten_for_export", "render_viewport", "encode_png",
    # viewport
    "Viewport", "ViewportState",
    # hotspot
    "Tooltip", "inspect", "label_for_color", "findings_mention",
    # session
    "ViewerSession", "BuildHandle",
    # history
    "HistoryEntry", "HistoryStore",
]
