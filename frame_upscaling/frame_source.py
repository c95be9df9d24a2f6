import logging
import threading
from typing import Any, Optional, Union

import cv2

from .raster import Raster


class CaptureFrameSource:
    """Supplies the latest frame of a cv2.VideoCapture (or anything with read()) as a Raster."""

    def __init__(self, src: Union[int, str, Any] = 0, width: Optional[int] = None,
                 height: Optional[int] = None):
        self.logger = logging.getLogger(__name__)

        if isinstance(src, (int, str)):
            self.stream = cv2.VideoCapture(src)
            if width:
                self.stream.set(cv2.CAP_PROP_FRAME_WIDTH, width)
            if height:
                self.stream.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
        else:
            self.stream = src

        self.lock = threading.Lock()
        self.working = bool(self.stream.isOpened())
        if not self.working:
            self.logger.warning(f"Capture source {src!r} failed to open")

    def read(self) -> Optional[Raster]:
        if not self.working:
            return None

        with self.lock:
            grabbed, frame = self.stream.read()

        if not grabbed or frame is None:
            self.logger.debug("No frame available from capture source")
            return None
        return Raster.from_bgr(frame)

    def release(self):
        with self.lock:
            if self.stream is not None:
                self.stream.release()
        self.working = False

    def __call__(self) -> Optional[Raster]:
        return self.read()


class StaticFrameSource:
    """Always hands out the same raster (stills, tests)."""

    def __init__(self, raster: Optional[Raster] = None):
        self.raster = raster

    def read(self) -> Optional[Raster]:
        return self.raster

    def release(self):
        self.raster = None

    def __call__(self) -> Optional[Raster]:
        return self.read()
