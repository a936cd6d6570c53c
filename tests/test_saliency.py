import numpy as np
import pytest

from retinaview import CONFIG_REGISTRY, ImageDecodeError, build_saliency, map_intensity_array


def test_grid_shapes_and_ranges(fundus, config):
    field = build_saliency(fundus, config)

    assert field.intensity_grid.shape == (64, 64)
    assert field.color_grid.shape == (64, 64, 3)
    assert field.heat_image.shape == (64, 64, 4)
    assert field.color_grid.dtype == np.uint8
    assert field.intensity_grid.min() >= 0.0
    assert field.intensity_grid.max() <= 1.0
    assert (field.heat_image[:, :, 3] == 180).all()


def test_heat_image_is_colormapped_intensity(fundus, config):
    field = build_saliency(fundus, config)
    expected = map_intensity_array(field.intensity_grid)
    np.testing.assert_array_equal(field.heat_image[:, :, :3], expected)


def test_build_is_deterministic(fundus, config):
    a = build_saliency(fundus, config)
    b = build_saliency(fundus.copy(), config)

    assert a.image_id == b.image_id
    np.testing.assert_array_equal(a.intensity_grid, b.intensity_grid)
    np.testing.assert_array_equal(a.color_grid, b.color_grid)
    np.testing.assert_array_equal(a.heat_image, b.heat_image)


def test_uniform_image_has_no_saliency(config):
    flat = np.full((100, 80, 3), 120, dtype=np.uint8)
    field = build_saliency(flat, config)

    assert field.intensity_grid.max() == 0.0
    assert field.mean_color == (120.0, 120.0, 120.0)
    assert (field.heat_image[:, :, :3] == (0, 0, 255)).all()


def test_intensity_is_distance_over_scale(config):
    img = np.zeros((64, 64, 3), dtype=np.uint8)
    img[:, 32:] = (110, 0, 0)
    field = build_saliency(img, config)

    assert field.mean_color == pytest.approx((55.0, 0.0, 0.0))
    np.testing.assert_allclose(field.intensity_grid, 0.5)


def test_intensity_is_clamped(config):
    img = np.zeros((64, 64, 3), dtype=np.uint8)
    img[:, 32:] = (255, 255, 255)
    field = build_saliency(img, config)
    assert field.intensity_grid.max() == 1.0


def test_bright_spot_is_hotter_than_background(fundus, config):
    field = build_saliency(fundus, config)
    # optic disc centre at (180, 120) in a 256 image → cell (45, 30)
    assert field.intensity_at(45, 30) > field.intensity_at(32, 32)
    assert field.color_at(45, 30)[0] > 200


def test_grids_are_read_only(fundus, config):
    field = build_saliency(fundus, config)
    with pytest.raises(ValueError):
        field.intensity_grid[0, 0] = 1.0


def test_fine_preset_uses_larger_grid(fundus):
    field = build_saliency(fundus, CONFIG_REGISTRY["fine"])
    assert (field.width, field.height) == (128, 128)


def test_non_square_image(config):
    img = np.random.default_rng(0).integers(0, 255, (90, 300, 3), dtype=np.uint8)
    field = build_saliency(img, config)
    assert field.intensity_grid.shape == (64, 64)


def test_undecodable_source_raises(config):
    with pytest.raises(ImageDecodeError):
        build_saliency(b"definitely not an image", config)
