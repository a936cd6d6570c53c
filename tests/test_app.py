from pathlib import Path

import pytest

AppTest = pytest.importorskip("streamlit.testing.v1").AppTest

APP = str(Path(__file__).resolve().parents[1] / "app.py")


@pytest.fixture(autouse=True)
def isolated_history(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))


def test_home_page_renders():
    at = AppTest.from_file(APP, default_timeout=60).run()
    assert not at.exception
    assert at.sidebar.radio[0].value == "Home"


@pytest.mark.parametrize("page", ["Heatmap Viewer", "History"])
def test_pages_render_without_image(page):
    at = AppTest.from_file(APP, default_timeout=60).run()
    at.sidebar.radio[0].set_value(page).run()
    assert not at.exception
    assert at.info


def _same_name_uploads():
    import numpy as np
    import streamlit as st
    from PIL import Image

    from retinaview.app_controller import (
        ensure_heatmap, get_history, get_image, init_state, set_enhance, set_image,
    )

    init_state()
    set_enhance(False)
    built, stored = [], []
    for value in (30, 200):
        set_image(Image.fromarray(np.full((32, 32, 3), value, dtype=np.uint8)), "image.jpg")
        viewer = ensure_heatmap()
        built.append(viewer.image_id)
        stored.append(get_image().getpixel((0, 0))[0])
    st.session_state["built_ids"] = built
    st.session_state["stored_pixels"] = stored
    st.session_state["history_size"] = len(get_history().list())


def _enhance_toggle():
    import numpy as np
    import streamlit as st
    from PIL import Image

    from retinaview.app_controller import (
        ensure_heatmap, get_history, init_state, set_enhance, set_image,
    )

    init_state()
    img = np.zeros((32, 32, 3), dtype=np.uint8)
    img[8:24, 8:24] = (200, 80, 40)
    set_image(Image.fromarray(img), "scan.png")
    built = []
    for enhance in (True, False, True):
        set_enhance(enhance)
        built.append(ensure_heatmap().image_id)
    st.session_state["built_ids"] = built
    st.session_state["history_size"] = len(get_history().list())


def test_reused_file_name_still_replaces_image():
    at = AppTest.from_function(_same_name_uploads, default_timeout=60).run()
    assert not at.exception

    first, second = at.session_state["built_ids"]
    assert first != second
    assert at.session_state["stored_pixels"] == [30, 200]
    assert at.session_state["history_size"] == 2


def test_enhance_toggle_rebuilds_without_new_history():
    at = AppTest.from_function(_enhance_toggle, default_timeout=60).run()
    assert not at.exception

    enhanced, plain, enhanced_again = at.session_state["built_ids"]
    assert enhanced != plain
    assert enhanced_again == enhanced
    assert at.session_state["history_size"] == 1
