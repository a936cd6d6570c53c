"""
ui/page_heatmap.py
──────────────────
Heatmap viewer page.

  • Base image and saliency overlay side by side, sharing one viewport
  • Zoom / pan controls (pan nudges are issued as a short drag)
  • Probe pointer with hotspot tooltip
  • Intensity grid + colormap legend
  • PNG download of the flattened overlay
"""

import cv2
import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns
import streamlit as st
from matplotlib.colors import ListedColormap

from retinaview import CompositionUnavailable, flatten_for_export, jet_lut, render_viewport
from retinaview.app_controller import ensure_heatmap, get_findings, get_image_name, has_image
from retinaview.session import STATUS_UNAVAILABLE

PAN_FRACTION = 0.1


def render():
    st.title("🔥 Saliency Heatmap Viewer")

    if not has_image():
        st.info("👈 Upload a fundus image in the sidebar to begin.")
        return

    with st.spinner("Building saliency field…"):
        viewer = ensure_heatmap()

    base = viewer.image
    if base is None:
        st.error(f"Could not read the uploaded image. {viewer.error or ''}")
        return

    h, w = base.shape[:2]
    viewer.viewport.resize(w, h)

    _viewport_controls(viewer, w, h)
    probe = _probe_controls(w, h)
    tooltip = viewer.inspect_hotspot(probe)

    zoom, pan = viewer.viewport.zoom, viewer.viewport.pan
    col_img, col_heat = st.columns(2)

    with col_img:
        st.subheader("Fundus Image")
        st.image(_with_marker(render_viewport(base, zoom, pan), probe), use_container_width=True)

    with col_heat:
        st.subheader("Attention Overlay")
        if viewer.status == STATUS_UNAVAILABLE:
            st.warning(f"Heatmap unavailable for this image. {viewer.error or ''}")
        else:
            try:
                live = flatten_for_export(base, viewer.overlay(w, h), config=viewer.config)
                st.image(_with_marker(render_viewport(live, zoom, pan), probe), use_container_width=True)
                st.caption("Red = strong colour deviation | Blue = close to the image average")
            except CompositionUnavailable as e:
                st.warning(f"Heatmap unavailable: {e}")

    _tooltip_panel(tooltip)

    field = viewer.field
    if field is None:
        return

    with st.expander("🔬 Intensity grid"):
        _intensity_plot(field.intensity_grid, viewer.config.hot_threshold)

    try:
        png = viewer.export_png()
    except CompositionUnavailable as e:
        st.error(f"Export unavailable: {e}")
    else:
        st.download_button(
            "⬇️ Download heatmap (PNG)",
            data=png,
            file_name=f"heatmap_{get_image_name() or 'scan'}.png",
            mime="image/png",
        )

    st.caption(
        "The heatmap highlights colour deviation from the image average. "
        "It is a visual aid, not a model explanation or a diagnosis."
    )


# ──────────────────────────────────────────────
# Controls
# ──────────────────────────────────────────────

def _viewport_controls(viewer, w, h):
    c1, c2, c3, c4, c5, c6, c7 = st.columns(7)
    if c1.button("➕ Zoom"):
        viewer.zoom_in()
    if c2.button("➖ Zoom"):
        viewer.zoom_out()
    if c3.button("⟲ Reset"):
        viewer.reset()

    step_x, step_y = w * PAN_FRACTION, h * PAN_FRACTION
    nudges = [
        (c4, "⬅️", (step_x, 0)),
        (c5, "➡️", (-step_x, 0)),
        (c6, "⬆️", (0, step_y)),
        (c7, "⬇️", (0, -step_y)),
    ]
    for col, label, (dx, dy) in nudges:
        if col.button(label, disabled=not viewer.viewport.zoomed):
            if viewer.pan_start((0.0, 0.0)):
                viewer.pan_move((dx, dy))
                viewer.pan_end()

    st.caption(f"Zoom ×{viewer.viewport.zoom:.1f} | pan {viewer.viewport.pan[0]:.0f}, {viewer.viewport.pan[1]:.0f}")


def _probe_controls(w, h):
    c1, c2 = st.columns(2)
    x = c1.slider("Probe X", 0, w - 1, w // 2)
    y = c2.slider("Probe Y", 0, h - 1, h // 2)
    return float(x) + 0.5, float(y) + 0.5


def _with_marker(rgb, probe):
    out = rgb.copy()
    radius = max(4, min(out.shape[:2]) // 60)
    cv2.circle(out, (int(probe[0]), int(probe[1])), radius, (255, 255, 255), 2)
    return out


# ──────────────────────────────────────────────
# Panels
# ──────────────────────────────────────────────

def _tooltip_panel(tooltip):
    if tooltip is None:
        st.info("Probe is not over a hotspot.")
        return
    st.success(
        f"**{tooltip.label}** — cell {tooltip.cell}, intensity {tooltip.intensity:.2f}"
    )
    if not get_findings():
        st.caption("Add report findings in the sidebar for more specific labels.")


def _intensity_plot(grid, threshold):
    cmap = ListedColormap(jet_lut())

    fig, ax = plt.subplots(figsize=(6, 5))
    sns.heatmap(grid, cmap=cmap, vmin=0, vmax=1, square=True,
                xticklabels=False, yticklabels=False, ax=ax)
    ax.set_title("Saliency intensity per grid cell")
    st.pyplot(fig)
    plt.close(fig)

    hot = float(np.mean(grid > threshold))
    c1, c2, c3 = st.columns(3)
    c1.metric("Grid", f"{grid.shape[1]}×{grid.shape[0]}")
    c2.metric("Peak intensity", f"{grid.max():.2f}")
    c3.metric("Hot cells", f"{hot:.1%}")
