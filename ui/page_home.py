"""
ui/page_home.py
"""
import streamlit as st

from retinaview import get_config


def render():
    st.markdown("""
    <div style="background:rgba(30,79,163,0.15);padding:40px;border-radius:20px;
    border:1px solid rgba(78,168,255,0.3);">
    <h1 style="color:#4ea8ff;font-size:42px;">Retinal Scan Heatmap Viewer</h1>
    <p style="font-size:18px;color:#dbeafe;">
    Highlight visually unusual regions of a fundus photo and inspect them
    interactively, alongside the findings of your diagnostic report.
    </p>
    </div>
    """, unsafe_allow_html=True)

    st.markdown("## 🧠 System Overview")

    cfg = get_config()

    col1, col2 = st.columns(2)
    with col1:
        st.markdown("""
        ### 🔄 Pipeline
        - Image upload → contrast / brightness / saturation enhancement
        - Downsample to the analysis grid
        - Colour deviation from the mean → intensity field
        - Jet colormap → blurred overlay (screen blend)
        - Zoom, pan and hover labels over hot cells
        """)
    with col2:
        st.markdown(f"""
        ### ⚙ Current Configuration
        - **Preset**: `{cfg.name}`
        - **Grid**: `{cfg.grid_width}×{cfg.grid_height}`
        - **Intensity scale**: `{cfg.intensity_scale:g}`
        - **Overlay**: `{cfg.blend_mode}` at `{cfg.overlay_opacity:.0%}`, blur σ `{cfg.blur_sigma:g}px`
        - **Hot threshold**: `> {cfg.hot_threshold}`
        """)

    st.markdown("## 🏗 Architecture")
    st.graphviz_chart("""
    digraph G {
        rankdir=LR;
        node [shape=box, style=filled, fillcolor="#1e4fa3", fontcolor="white"];
        Image -> SaliencyGrid -> HeatImage -> Overlay -> Export;
        SaliencyGrid -> Hotspot;
        Viewport -> Hotspot;
    }
    """)

    st.info("""
    - **No model inference** — the heatmap is derived from colour statistics only
    - **Computed once per image** — grids are cached and reused across interactions
    - **What you see is what you export** — downloads use the on-screen blend
    - **Labels are wording hints** — they combine local colour with report text
    """)

    st.caption(
        "For research and educational purposes only. "
        "Not a substitute for professional medical diagnosis."
    )
