import cv2
import numpy as np
import pytest

from retinaview import HeatmapConfig, HistoryStore, SaliencyField
from retinaview.saliency import heat_from_intensity


@pytest.fixture
def fundus():
    """256×256 fundus-like RGB image: orange disc, bright optic disc, dark red spots."""
    img = np.zeros((256, 256, 3), dtype=np.uint8)
    cv2.circle(img, (128, 128), 120, (190, 90, 40), -1)
    cv2.circle(img, (180, 120), 18, (250, 240, 200), -1)
    cv2.circle(img, (80, 160), 6, (120, 20, 20), -1)
    cv2.circle(img, (100, 80), 5, (120, 20, 20), -1)
    return img


@pytest.fixture
def config():
    return HeatmapConfig()


def make_field(intensity, colors, image_id="test", alpha=180):
    intensity = np.asarray(intensity, dtype=np.float64)
    colors = np.asarray(colors, dtype=np.uint8)
    return SaliencyField(
        image_id=image_id,
        intensity_grid=intensity,
        color_grid=colors,
        heat_image=heat_from_intensity(intensity, alpha),
        mean_color=tuple(float(c) for c in colors.reshape(-1, 3).mean(axis=0)),
    )


@pytest.fixture
def field_factory():
    return make_field


@pytest.fixture
def history_store(tmp_path):
    return HistoryStore(str(tmp_path / "history.json"), limit=3)
