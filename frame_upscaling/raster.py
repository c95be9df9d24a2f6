import cv2
import numpy as np
from dataclasses import dataclass
from typing import Tuple, Union

from .errors import KernelError

BYTES_PER_PIXEL = 4

Buffer = Union[bytes, bytearray, memoryview, np.ndarray]


@dataclass(frozen=True, eq=False)
class Raster:
    """Packed RGBA8 frame: row-major, stride = width * 4."""

    width: int
    height: int
    pixels: Buffer

    @property
    def dims(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def expected_length(self) -> int:
        return self.width * self.height * BYTES_PER_PIXEL

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0 or self.pixels is None or _buffer_length(self.pixels) == 0

    @property
    def is_valid(self) -> bool:
        if self.width <= 0 or self.height <= 0 or self.pixels is None:
            return False
        return _buffer_length(self.pixels) == self.expected_length

    def validate(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise KernelError(f"Invalid raster dimensions: {self.width}x{self.height}")
        if self.pixels is None:
            raise KernelError("Raster has no pixel buffer")
        actual = _buffer_length(self.pixels)
        if actual != self.expected_length:
            raise KernelError(
                f"Malformed pixel buffer for {self.width}x{self.height}: "
                f"expected {self.expected_length} bytes, got {actual}"
            )

    def to_array(self) -> np.ndarray:
        """Return a (height, width, 4) uint8 copy of the pixel buffer."""
        self.validate()
        if isinstance(self.pixels, np.ndarray):
            flat = np.ascontiguousarray(self.pixels, dtype=np.uint8).reshape(-1)
        else:
            flat = np.frombuffer(self.pixels, dtype=np.uint8)
        return flat.reshape(self.height, self.width, BYTES_PER_PIXEL).copy()

    def to_bgr(self) -> np.ndarray:
        return cv2.cvtColor(self.to_array(), cv2.COLOR_RGBA2BGR)

    def tobytes(self) -> bytes:
        return self.to_array().tobytes()

    @classmethod
    def from_array(cls, rgba: np.ndarray) -> "Raster":
        if rgba.ndim != 3 or rgba.shape[2] != BYTES_PER_PIXEL:
            raise KernelError(f"Expected an (h, w, 4) RGBA array, got shape {rgba.shape}")
        if rgba.dtype != np.uint8:
            raise KernelError(f"Expected a uint8 RGBA array, got dtype {rgba.dtype}")
        height, width = rgba.shape[:2]
        pixels = np.ascontiguousarray(rgba).tobytes()
        return cls(width=width, height=height, pixels=pixels)

    @classmethod
    def from_bgr(cls, frame: np.ndarray) -> "Raster":
        """Build a raster from a cv2 frame (BGR, BGRA or grayscale).

        16-bit frames are narrowed to their high byte; float frames are read
        as 0..1 intensities.
        """
        frame = _to_uint8(frame)
        if frame.ndim == 2:
            rgba = cv2.cvtColor(frame, cv2.COLOR_GRAY2RGBA)
        elif frame.shape[2] == 4:
            rgba = cv2.cvtColor(frame, cv2.COLOR_BGRA2RGBA)
        else:
            rgba = cv2.cvtColor(frame, cv2.COLOR_BGR2RGBA)
        return cls.from_array(rgba)

    @classmethod
    def filled(cls, width: int, height: int,
               rgba: Tuple[int, int, int, int] = (0, 0, 0, 255)) -> "Raster":
        pixels = bytes(rgba) * (width * height)
        return cls(width=width, height=height, pixels=pixels)

    def __repr__(self) -> str:
        return f"Raster({self.width}x{self.height}, {_buffer_length(self.pixels)} bytes)"


def _buffer_length(pixels: Buffer) -> int:
    if isinstance(pixels, np.ndarray):
        return int(pixels.size)
    return len(pixels)


def _to_uint8(frame: np.ndarray) -> np.ndarray:
    if frame.dtype == np.uint8:
        return frame
    if frame.dtype == np.uint16:
        return (frame >> 8).astype(np.uint8)
    if np.issubdtype(frame.dtype, np.floating):
        return np.clip(np.floor(frame * 255.0 + 0.5), 0, 255).astype(np.uint8)
    raise KernelError(f"Unsupported frame dtype {frame.dtype}")
