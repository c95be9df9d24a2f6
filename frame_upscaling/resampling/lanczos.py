import logging
import numpy as np
from typing import List, Optional, Tuple

from .. import config
from ..raster import Raster
from .utils import color_channels, compose_rgba, output_dimensions, row_blocks, to_channel_bytes


def lanczos_weight(distance, support: int = config.LANCZOS_SUPPORT) -> np.ndarray:
    """Windowed sinc: 1 at 0, 0 outside (-a, a), a*sin(pi d)*sin(pi d/a)/(pi^2 d^2) otherwise."""
    d = np.asarray(distance, dtype=np.float64)
    weights = np.zeros_like(d)
    inside = (d != 0) & (np.abs(d) < support)
    di = d[inside]
    weights[inside] = (support * np.sin(np.pi * di) * np.sin(np.pi * di / support)
                       / (np.pi * np.pi * di * di))
    weights[d == 0] = 1.0
    return weights


class LanczosKernel:
    """
    Windowed-sinc resampling.

    Samples that land outside the source are dropped rather than clamped, and
    each output value is normalised by the weight that was actually gathered.
    """

    name = "lanczos"

    def __init__(self, support: int = config.LANCZOS_SUPPORT, block_rows: Optional[int] = None):
        self.logger = logging.getLogger(__name__)
        self.support = support
        self.block_rows = block_rows or config.RESAMPLE_BLOCK_ROWS

    def _axis_taps(self, target_len: int, source_len: int,
                   scale_factor: float) -> List[Tuple[np.ndarray, np.ndarray]]:
        # One (index, weight) pair per window offset; out-of-range taps get weight 0
        coords = np.arange(target_len, dtype=np.float64) / scale_factor
        base = np.floor(coords).astype(np.int64)
        taps = []
        for offset in range(-self.support + 1, self.support):
            sample = base + offset
            valid = (sample >= 0) & (sample < source_len)
            weight = np.where(valid, lanczos_weight(coords - sample, self.support), 0.0)
            taps.append((np.clip(sample, 0, source_len - 1), weight))
        return taps

    def resample(self, source: Raster, scale_factor: float) -> Raster:
        src = color_channels(source)
        height, width = src.shape[:2]
        target_w, target_h = output_dimensions(width, height, scale_factor)

        x_taps = self._axis_taps(target_w, width, scale_factor)
        y_taps = self._axis_taps(target_h, height, scale_factor)

        rgb = np.empty((target_h, target_w, 3), dtype=np.uint8)
        for start, stop in row_blocks(target_h, self.block_rows):
            rows = stop - start
            value_sum = np.zeros((rows, target_w, 3), dtype=np.float64)
            weight_sum = np.zeros((rows, target_w), dtype=np.float64)

            for y_index, y_weight in y_taps:
                band = src[y_index[start:stop]]
                wy = y_weight[start:stop, np.newaxis]
                for x_index, x_weight in x_taps:
                    weight = wy * x_weight[np.newaxis, :]
                    weight_sum += weight
                    value_sum += band[:, x_index] * weight[:, :, np.newaxis]

            has_weight = weight_sum > 0
            values = np.zeros_like(value_sum)
            np.divide(value_sum, weight_sum[:, :, np.newaxis], out=values,
                      where=has_weight[:, :, np.newaxis])
            rgb[start:stop] = to_channel_bytes(values)

        self.logger.debug(f"Lanczos(a={self.support}) resample {width}x{height} -> {target_w}x{target_h}")
        return compose_rgba(rgb)
