import logging
import numpy as np

from .. import config
from ..raster import Raster
from .utils import output_dimensions, source_coordinates


class NearestNeighborKernel:
    """Block replication: every output pixel copies source (floor(x/s), floor(y/s))."""

    name = "nearest"

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def resample(self, source: Raster, scale_factor: float) -> Raster:
        src = source.to_array()
        height, width = src.shape[:2]
        target_w, target_h = output_dimensions(width, height, scale_factor)

        x_index = np.clip(source_coordinates(target_w, scale_factor)[0], 0, width - 1)
        y_index = np.clip(source_coordinates(target_h, scale_factor)[0], 0, height - 1)

        output = src[y_index][:, x_index]
        output[:, :, 3] = config.ALPHA_OPAQUE

        self.logger.debug(f"Nearest resample {width}x{height} -> {target_w}x{target_h}")
        return Raster.from_array(output)
