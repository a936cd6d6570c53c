"""
app_controller.py
─────────────────
Centralised Streamlit session-state management.

Rules:
  1. The image is uploaded ONCE (sidebar) and stored in session_state.
  2. One ViewerSession lives in session_state and owns grids, viewport and tooltip.
  3. Changing the image or the enhance toggle re-submits the image; the
     ViewerSession reuses grids it has already built for the same pixels.
     Findings are pushed straight into the viewer, no rebuild needed.
  4. All pages read state from here — no local uploaders.

Public API:
    init_state()                       -> None   (call at top of app.py)
    set_image(pil_image, name)         -> None
    get_image() / get_image_name()     -> PIL.Image | None / str | None
    get_image_id()                     -> str | None (content hash of the upload)
    has_image()                        -> bool
    set_findings(list) / get_findings()
    set_enhance(bool) / get_enhance()
    get_viewer()                       -> ViewerSession
    ensure_heatmap()                   -> ViewerSession
    get_history()                      -> HistoryStore
"""

from __future__ import annotations

import logging
from typing import List, Optional

import streamlit as st
from PIL import Image

from .config import get_config
from .history import HistoryEntry, HistoryStore
from .preprocessing import enhance_fundus, image_id_for, load_image
from .session import ViewerSession

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────
# Keys
# ──────────────────────────────────────────────

_KEY_IMAGE       = "rv_image"          # PIL.Image
_KEY_IMAGE_NAME  = "rv_image_name"
_KEY_IMAGE_ID    = "rv_image_id"       # content hash of the upload
_KEY_FINDINGS    = "rv_findings"       # list[str]
_KEY_ENHANCE     = "rv_enhance"
_KEY_VIEWER      = "rv_viewer"         # ViewerSession
_KEY_SUBMITTED   = "rv_submitted"      # (image id, enhance) last pushed to the viewer
_KEY_RECORDED    = "rv_recorded"       # image id last written to history


# ──────────────────────────────────────────────
# Initialisation
# ──────────────────────────────────────────────

def init_state() -> None:
    defaults = {
        _KEY_IMAGE:      None,
        _KEY_IMAGE_NAME: None,
        _KEY_IMAGE_ID:   None,
        _KEY_FINDINGS:   [],
        _KEY_ENHANCE:    True,
        _KEY_VIEWER:     None,
        _KEY_SUBMITTED:  None,
        _KEY_RECORDED:   None,
    }
    for k, v in defaults.items():
        if k not in st.session_state:
            st.session_state[k] = v
    if st.session_state[_KEY_VIEWER] is None:
        st.session_state[_KEY_VIEWER] = ViewerSession(get_config())


# ──────────────────────────────────────────────
# Image
# ──────────────────────────────────────────────

def set_image(pil_image: Image.Image, name: str = "uploaded") -> None:
    """
    Store a PIL image. The viewer picks it up on the next ensure_heatmap().
    Uploads are identified by pixel content, so a new photo under a reused
    file name still replaces the old one.
    """
    rgb = pil_image.convert("RGB")
    image_id = image_id_for(load_image(rgb))
    if st.session_state.get(_KEY_IMAGE_ID) == image_id and has_image():
        st.session_state[_KEY_IMAGE_NAME] = name
        return
    st.session_state[_KEY_IMAGE]      = rgb
    st.session_state[_KEY_IMAGE_NAME] = name
    st.session_state[_KEY_IMAGE_ID]   = image_id
    st.session_state[_KEY_SUBMITTED]  = None


def get_image() -> Optional[Image.Image]:
    return st.session_state.get(_KEY_IMAGE)


def get_image_name() -> Optional[str]:
    return st.session_state.get(_KEY_IMAGE_NAME)


def get_image_id() -> Optional[str]:
    return st.session_state.get(_KEY_IMAGE_ID)


def has_image() -> bool:
    return st.session_state.get(_KEY_IMAGE) is not None


def clear_image() -> None:
    st.session_state[_KEY_IMAGE]      = None
    st.session_state[_KEY_IMAGE_NAME] = None
    st.session_state[_KEY_IMAGE_ID]   = None
    st.session_state[_KEY_SUBMITTED]  = None
    get_viewer().clear()


# ──────────────────────────────────────────────
# Report findings / options
# ──────────────────────────────────────────────

def set_findings(findings: List[str]) -> None:
    cleaned = [f.strip() for f in findings if f and f.strip()]
    st.session_state[_KEY_FINDINGS] = cleaned
    get_viewer().findings = list(cleaned)


def get_findings() -> List[str]:
    return st.session_state.get(_KEY_FINDINGS, [])


def set_enhance(enabled: bool) -> None:
    st.session_state[_KEY_ENHANCE] = bool(enabled)


def get_enhance() -> bool:
    return st.session_state.get(_KEY_ENHANCE, True)


# ──────────────────────────────────────────────
# Viewer
# ──────────────────────────────────────────────

def get_viewer() -> ViewerSession:
    if st.session_state.get(_KEY_VIEWER) is None:
        st.session_state[_KEY_VIEWER] = ViewerSession(get_config())
    return st.session_state[_KEY_VIEWER]


def ensure_heatmap() -> ViewerSession:
    """
    Push the current image into the viewer if it changed since the last call.
    No-op if the viewer is current.
    """
    viewer = get_viewer()
    if not has_image():
        return viewer

    marker = (get_image_id(), get_enhance())
    if st.session_state.get(_KEY_SUBMITTED) == marker:
        return viewer

    image = get_image()
    pixels = enhance_fundus(image) if get_enhance() else load_image(image)
    viewer.show_image(pixels, findings=get_findings())
    st.session_state[_KEY_SUBMITTED] = marker

    # one history entry per upload, not per enhance toggle
    if st.session_state.get(_KEY_RECORDED) != get_image_id():
        get_history().add(HistoryEntry(
            image_name=get_image_name() or "uploaded",
            image_id=get_image_id(),
            findings=get_findings(),
        ))
        st.session_state[_KEY_RECORDED] = get_image_id()
    return viewer


# ──────────────────────────────────────────────
# History
# ──────────────────────────────────────────────

def get_history() -> HistoryStore:
    cfg = get_config()
    return HistoryStore(cfg.history_path, cfg.history_limit)

