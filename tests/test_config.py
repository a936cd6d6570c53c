import pytest

from retinaview import CONFIG_REGISTRY, HeatmapConfig, get_config
from retinaview.config import ENV_PRESET


def test_reference_defaults():
    cfg = get_config("reference")
    assert cfg.grid_size == (64, 64)
    assert cfg.intensity_scale == 110.0
    assert cfg.heat_alpha == 180
    assert cfg.overlay_opacity == 0.7
    assert cfg.blend_mode == "screen"
    assert cfg.hot_threshold == 0.6
    assert (cfg.zoom_min, cfg.zoom_max, cfg.zoom_step) == (1.0, 5.0, 0.5)


def test_env_selects_preset(monkeypatch):
    monkeypatch.setenv(ENV_PRESET, "fine")
    assert get_config() is CONFIG_REGISTRY["fine"]
    monkeypatch.delenv(ENV_PRESET)
    assert get_config() is CONFIG_REGISTRY["reference"]


def test_unknown_preset():
    with pytest.raises(ValueError, match="Unknown preset"):
        get_config("nope")


@pytest.mark.parametrize("kwargs", [
    {"grid_width": 0},
    {"intensity_scale": -1},
    {"heat_alpha": 300},
    {"overlay_opacity": 0},
    {"blend_mode": "multiply"},
    {"zoom_min": 5, "zoom_max": 5},
    {"zoom_step": 0},
    {"arena_size": 0},
])
def test_invalid_config(kwargs):
    with pytest.raises(ValueError):
        HeatmapConfig(**kwargs)
