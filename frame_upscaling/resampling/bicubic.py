import logging
import numpy as np
from typing import Optional

from .. import config
from ..raster import Raster
from .utils import (color_channels, compose_rgba, output_dimensions, row_blocks,
                    source_coordinates, to_channel_bytes)

NEIGHBORHOOD_OFFSETS = (-1, 0, 1, 2)


def cubic_interpolate(p0, p1, p2, p3, t):
    # Catmull-Rom style cubic convolution through p1..p2, t in [0, 1)
    return p1 + 0.5 * t * (p2 - p0 + t * (2.0 * p0 - 5.0 * p1 + 4.0 * p2 - p3
                                          + t * (3.0 * (p1 - p2) + p3 - p0)))


class BicubicKernel:
    """Separable 4x4 cubic convolution with edge-replicated borders."""

    name = "bicubic"

    def __init__(self, block_rows: Optional[int] = None):
        self.logger = logging.getLogger(__name__)
        self.block_rows = block_rows or config.RESAMPLE_BLOCK_ROWS

    def resample(self, source: Raster, scale_factor: float) -> Raster:
        src = color_channels(source)
        height, width = src.shape[:2]
        target_w, target_h = output_dimensions(width, height, scale_factor)

        x_int, x_frac = source_coordinates(target_w, scale_factor)
        y_int, y_frac = source_coordinates(target_h, scale_factor)

        # Neighbourhood columns are the same for every target row
        columns = [np.clip(x_int + offset, 0, width - 1) for offset in NEIGHBORHOOD_OFFSETS]
        tx = x_frac[np.newaxis, :, np.newaxis]

        rgb = np.empty((target_h, target_w, 3), dtype=np.uint8)
        for start, stop in row_blocks(target_h, self.block_rows):
            ty = y_frac[start:stop, np.newaxis, np.newaxis]

            row_values = []
            for offset in NEIGHBORHOOD_OFFSETS:
                rows = np.clip(y_int[start:stop] + offset, 0, height - 1)
                band = src[rows]
                row_values.append(cubic_interpolate(*(band[:, c] for c in columns), tx))

            rgb[start:stop] = to_channel_bytes(cubic_interpolate(*row_values, ty))

        self.logger.debug(f"Bicubic resample {width}x{height} -> {target_w}x{target_h}")
        return compose_rgba(rgb)
