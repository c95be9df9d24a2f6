import math
import numpy as np
from typing import Iterator, Tuple

from .. import config
from ..errors import KernelError
from ..raster import Raster


def output_dimensions(width: int, height: int, scale_factor: float) -> Tuple[int, int]:
    """floor(dim * scale) on both axes."""
    if not scale_factor > 0 or math.isinf(scale_factor):
        raise KernelError(f"Scale factor must be a positive number, got {scale_factor}")
    target_w = int(math.floor(width * scale_factor))
    target_h = int(math.floor(height * scale_factor))
    if target_w <= 0 or target_h <= 0:
        raise KernelError(f"Scale {scale_factor} collapses {width}x{height} to an empty raster")
    return target_w, target_h


def source_coordinates(target_len: int, scale_factor: float) -> Tuple[np.ndarray, np.ndarray]:
    # Continuous source positions for each target index, split into integer and fraction
    coords = np.arange(target_len, dtype=np.float64) / scale_factor
    integer = np.floor(coords)
    return integer.astype(np.int64), coords - integer


def to_channel_bytes(values: np.ndarray) -> np.ndarray:
    """Round half up and clamp in float space before narrowing to uint8."""
    rounded = np.floor(values + 0.5)
    return np.clip(rounded, 0, 255).astype(np.uint8)


def compose_rgba(rgb: np.ndarray) -> Raster:
    height, width = rgb.shape[:2]
    rgba = np.empty((height, width, 4), dtype=np.uint8)
    rgba[:, :, :3] = rgb
    rgba[:, :, 3] = config.ALPHA_OPAQUE
    return Raster.from_array(rgba)


def color_channels(source: Raster) -> np.ndarray:
    """R, G, B planes of the source as float64; alpha is never sampled."""
    return source.to_array()[:, :, :3].astype(np.float64)


def row_blocks(total_rows: int, block_rows: int = config.RESAMPLE_BLOCK_ROWS) -> Iterator[Tuple[int, int]]:
    """Yield (start, stop) ranges covering [0, total_rows)."""
    block_rows = max(1, int(block_rows))
    for start in range(0, total_rows, block_rows):
        yield start, min(start + block_rows, total_rows)
