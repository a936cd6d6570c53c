import logging

import streamlit as st
from PIL import Image, UnidentifiedImageError

from retinaview.app_controller import (
    init_state, set_image, get_image, has_image, clear_image,
    set_findings, set_enhance,
)
from ui import page_heatmap, page_history, page_home

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

PAGES = {
    "Home": page_home,
    "Heatmap Viewer": page_heatmap,
    "History": page_history,
}

# Page Configuration
st.set_page_config(
    page_title="Retinal Heatmap Viewer",
    page_icon="👁️",
    layout="wide"
)

init_state()

# Sidebar Navigation
st.sidebar.title("Navigation")
names = list(PAGES)
page = st.sidebar.radio("Go to", names, key="rv_nav")

# Global Image Upload - Available on all pages
st.sidebar.markdown("---")
st.sidebar.subheader("Upload Fundus Image")
uploaded_image = st.sidebar.file_uploader(
    "Upload a retinal fundus photo to use throughout the app",
    type=["jpg", "jpeg", "png"],
    key="global_image_upload"
)

if uploaded_image is not None:
    try:
        set_image(Image.open(uploaded_image), uploaded_image.name)
    except (UnidentifiedImageError, OSError) as e:
        logger.warning("Upload rejected: %s", e)
        st.sidebar.error("Could not read this file as an image.")

set_enhance(st.sidebar.checkbox("Enhance contrast before analysis", value=True, key="rv_enhance_toggle"))

st.sidebar.markdown("---")
st.sidebar.subheader("Report Findings")
findings_text = st.sidebar.text_area(
    "One finding per line (from the diagnostic report)",
    key="rv_findings_text",
)
set_findings(findings_text.splitlines())

# Image Preview and Management
if has_image():
    st.sidebar.markdown("---")
    current_img = get_image()
    st.sidebar.image(current_img, caption="Current Image", use_container_width=True)
    st.sidebar.info(f"**Size:** {current_img.size[0]}x{current_img.size[1]}")
    if st.sidebar.button("🗑️ Clear Image"):
        clear_image()
        st.rerun()
else:
    st.sidebar.markdown("---")
    st.sidebar.info("📸 No image uploaded yet. Upload one to use throughout the app!")

PAGES[page].render()
