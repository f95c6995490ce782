import numpy as np
import pytest
from PIL import Image

from ascii_motion import RenderConfig


@pytest.fixture
def solid_image():
    """Factory for single-color RGB images."""
    def make(color, size=(10, 10)):
        return Image.new('RGB', size, color=color)
    return make


@pytest.fixture
def gradient_image():
    """40x30 image with a horizontal ramp and a bright square in the middle."""
    ramp = np.tile(np.linspace(0, 255, 40, dtype=np.float64), (30, 1))
    ramp[10:20, 15:25] = 255
    arr = np.stack([ramp] * 3, axis=-1).astype(np.uint8)
    return Image.fromarray(arr)


@pytest.fixture
def plain_config():
    """Standard gradient, direct quantization, nothing ignored."""
    return RenderConfig(
        ascii_width=10,
        charset='standard',
        dithering=False,
        ignore_white=False,
    )


class FakeClock:
    """Manually advanced clock for debounce tests."""

    def __init__(self, start=100.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()
