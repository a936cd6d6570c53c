import numpy as np
import pytest

from retinaview import (
    CompositionUnavailable, build_saliency, encode_png, flatten_for_export,
    load_image, render_overlay, render_viewport,
)


def _uniform_heat(rgb=(255, 0, 0), alpha=180, size=4):
    heat = np.zeros((size, size, 4), dtype=np.uint8)
    heat[:, :, :3] = rgb
    heat[:, :, 3] = alpha
    return heat


def test_overlay_matches_target_size(fundus, config):
    field = build_saliency(fundus, config)
    overlay = render_overlay(field.heat_image, 300, 200, config)
    assert overlay.shape == (200, 300, 4)
    assert overlay.dtype == np.uint8


def test_uniform_heat_stays_uniform(config):
    overlay = render_overlay(_uniform_heat(), 40, 30, config)
    assert (overlay == (255, 0, 0, 180)).all()


def test_overlay_is_smooth(fundus, config):
    field = build_saliency(fundus, config)
    overlay = render_overlay(field.heat_image, 256, 256, config).astype(int)
    # neighbouring pixels never jump by a whole grid cell's colour step
    assert np.abs(np.diff(overlay[:, :, :3], axis=1)).max() < 40


@pytest.mark.parametrize("heat, w, h", [
    (None, 10, 10),
    (np.zeros((0, 0, 4), dtype=np.uint8), 10, 10),
    (_uniform_heat(), 0, 10),
    (_uniform_heat(), 10, 0),
])
def test_composition_unavailable(config, heat, w, h):
    with pytest.raises(CompositionUnavailable):
        render_overlay(heat, w, h, config)


def test_screen_blend_at_reference_opacity(config):
    base = np.zeros((30, 40, 3), dtype=np.uint8)
    base[:] = (100, 50, 200)
    overlay = render_overlay(_uniform_heat((0, 255, 0)), 40, 30, config)

    out = flatten_for_export(base, overlay, config=config)

    b = np.array([100, 50, 200]) / 255.0
    s = np.array([0, 255, 0]) / 255.0
    a = 0.7 * 180 / 255.0
    expected = b * (1 - a) + (1 - (1 - b) * (1 - s)) * a
    expected = np.floor(expected * 255 + 0.5).astype(np.uint8)
    assert (out == expected).all()


def test_normal_blend_full_opacity_shows_overlay(config):
    base = np.full((8, 8, 3), 77, dtype=np.uint8)
    overlay = _uniform_heat((10, 20, 30), alpha=255, size=8)
    out = flatten_for_export(base, overlay, opacity=1.0, blend_mode="normal", config=config)
    assert (out == (10, 20, 30)).all()


def test_screen_never_darkens(fundus, config):
    field = build_saliency(fundus, config)
    overlay = render_overlay(field.heat_image, 256, 256, config)
    out = flatten_for_export(fundus, overlay, config=config)
    assert (out.astype(int) >= fundus.astype(int)).all()


def test_exported_png_matches_live_composite(fundus, config):
    field = build_saliency(fundus, config)
    overlay = render_overlay(field.heat_image, 256, 256, config)
    live = flatten_for_export(fundus, overlay, config=config)

    decoded = load_image(encode_png(live))
    np.testing.assert_array_equal(decoded, live)


def test_flatten_rejects_bad_arguments(fundus, config):
    overlay = render_overlay(_uniform_heat(), 256, 256, config)
    with pytest.raises(ValueError):
        flatten_for_export(fundus, overlay, blend_mode="multiply", config=config)
    with pytest.raises(ValueError):
        flatten_for_export(fundus, overlay, opacity=1.5, config=config)
    with pytest.raises(CompositionUnavailable):
        flatten_for_export(fundus, None, config=config)
    with pytest.raises(CompositionUnavailable):
        flatten_for_export(fundus, overlay[:100], config=config)


def test_viewport_render_identity_and_zoom():
    img = np.zeros((10, 10, 3), dtype=np.uint8)
    img[0:2, 0:2] = (255, 255, 255)

    np.testing.assert_array_equal(render_viewport(img, 1.0, (0, 0)), img)

    shifted = render_viewport(img, 1.0, (3, 0))
    assert shifted[0, 3].tolist() == [255, 255, 255]
    assert shifted[0, 0].tolist() == [0, 0, 0]

    zoomed = render_viewport(img, 2.0, (0, 0))
    assert zoomed.shape == img.shape
    assert zoomed[1, 1].tolist() == [255, 255, 255]
    assert zoomed[5, 5].tolist() == [0, 0, 0]
