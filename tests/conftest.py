import threading

import matplotlib
matplotlib.use("Agg")

import numpy as np
import pytest

from frame_upscaling.raster import Raster

RED = (255, 0, 0, 255)
GREEN = (0, 255, 0, 255)
BLUE = (0, 0, 255, 255)
WHITE = (255, 255, 255, 255)


def raster_from_rows(rows) -> Raster:
    return Raster.from_array(np.array(rows, dtype=np.uint8))


class BlockingKernel:
    """Kernel that waits for release() before resampling; records the scale it was given."""

    name = "blocking"

    def __init__(self, delegate=None):
        from frame_upscaling.resampling.nearest import NearestNeighborKernel
        self.delegate = delegate or NearestNeighborKernel()
        self.started = threading.Event()
        self.released = threading.Event()
        self.scales = []

    def resample(self, source, scale_factor):
        self.scales.append(scale_factor)
        self.started.set()
        assert self.released.wait(5), "kernel was never released"
        return self.delegate.resample(source, scale_factor)

    def factory(self, algorithm):
        return self


@pytest.fixture
def quad_raster():
    return raster_from_rows([[RED, GREEN], [BLUE, WHITE]])


@pytest.fixture
def random_raster():
    rng = np.random.default_rng(1234)
    rgba = rng.integers(0, 256, size=(7, 9, 4), dtype=np.uint8)
    return Raster.from_array(rgba)


@pytest.fixture
def opaque_raster(random_raster):
    rgba = random_raster.to_array()
    rgba[:, :, 3] = 255
    return Raster.from_array(rgba)


@pytest.fixture
def blocking_kernel():
    kernel = BlockingKernel()
    yield kernel
    kernel.released.set()
