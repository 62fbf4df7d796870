import numpy as np
import pytest
from PIL import Image as PILImage

from image_editor.models.image import Image


def solid(height: int, width: int, color) -> np.ndarray:
    pixels = np.zeros((height, width, 3), dtype=np.uint8)
    pixels[:, :] = color
    return pixels


@pytest.fixture
def solid_red_image() -> Image:
    """A solid red 100x100 image."""
    return Image(solid(100, 100, (255, 0, 0)))


@pytest.fixture
def gradient_image() -> Image:
    """Horizontal black → white gradient with a little color so channels differ."""
    pixels = np.zeros((40, 64, 3), dtype=np.uint8)
    for x in range(64):
        pixels[:, x] = (x * 4, 255 - x * 4, (x * 7) % 256)
    return Image(pixels)


@pytest.fixture
def checkerboard_image() -> Image:
    """A 40x40 black/white checkerboard (5x5 squares)."""
    pixels = np.zeros((40, 40, 3), dtype=np.uint8)
    for y in range(40):
        for x in range(40):
            if (x // 5 + y // 5) % 2 == 0:
                pixels[y, x] = 255
    return Image(pixels)


@pytest.fixture
def random_image() -> Image:
    rng = np.random.default_rng(7)
    return Image(rng.integers(0, 256, size=(30, 45, 3), dtype=np.uint8))


@pytest.fixture
def write_png(tmp_path):
    """Factory: write RGB pixels to a PNG under tmp_path and return the path."""
    def _write(pixels: np.ndarray, name: str = "image.png"):
        path = tmp_path / name
        PILImage.fromarray(pixels).save(path)
        return path
    return _write
