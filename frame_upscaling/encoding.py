import base64
import logging
import time
from typing import Optional, Union

import cv2

from . import config
from .errors import KernelError
from .raster import Raster

logger = logging.getLogger(__name__)


def jpeg_quality(quality: Union[int, float]) -> int:
    """Accept canvas-style 0..1 or cv2-style 1..100 quality and return the cv2 value."""
    if 0 < quality <= 1:
        quality = quality * 100
    return int(max(1, min(100, round(quality))))


def encode_jpeg(raster: Raster, quality: Union[int, float] = config.DOWNLOAD_JPEG_QUALITY) -> bytes:
    bgr = raster.to_bgr()
    success, buffer = cv2.imencode('.jpg', bgr, [cv2.IMWRITE_JPEG_QUALITY, jpeg_quality(quality)])
    if not success:
        raise KernelError(f"JPEG encoding failed for {raster!r}")
    logger.debug(f"Encoded {raster!r} as JPEG ({len(buffer)} bytes, quality={jpeg_quality(quality)})")
    return buffer.tobytes()


def to_data_url(raster: Raster, quality: Union[int, float] = config.PREVIEW_JPEG_QUALITY) -> str:
    encoded = base64.b64encode(encode_jpeg(raster, quality)).decode('ascii')
    return f"data:image/jpeg;base64,{encoded}"


def download_filename(timestamp_ms: Optional[int] = None) -> str:
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return config.DOWNLOAD_FILENAME_TEMPLATE.format(timestamp=timestamp_ms)
