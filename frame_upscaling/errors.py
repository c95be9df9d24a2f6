from enum import Enum


class EngineError(str, Enum):
    """Reasons an enhancement run produced no new result."""

    MISSING_SOURCE = "MissingSource"
    BUSY = "Busy"
    KERNEL_FAILURE = "KernelFailure"


class KernelError(ValueError):
    """A raster could not be resampled (malformed or undersized buffer, bad scale)."""
