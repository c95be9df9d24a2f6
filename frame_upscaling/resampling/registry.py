import logging
from typing import Any, Dict, Protocol

from ..raster import Raster
from ..settings import Algorithm
from .bicubic import BicubicKernel
from .lanczos import LanczosKernel
from .nearest import NearestNeighborKernel

logger = logging.getLogger(__name__)


class ResamplingKernel(Protocol):
    name: str

    def resample(self, source: Raster, scale_factor: float) -> Raster:
        """Return a new raster scaled by scale_factor."""


KERNEL_TYPES = {
    Algorithm.BICUBIC: BicubicKernel,
    Algorithm.LANCZOS: LanczosKernel,
    Algorithm.NEAREST: NearestNeighborKernel,
}


def get_kernel(algorithm: Any) -> ResamplingKernel:
    """Instantiate the kernel for algorithm; unknown names get nearest neighbour."""
    return KERNEL_TYPES[Algorithm.parse(algorithm)]()


def resample(source: Raster, scale_factor: float, algorithm: Any = Algorithm.NEAREST) -> Raster:
    kernel = get_kernel(algorithm)
    logger.debug(f"Dispatching {source!r} to {kernel.name} at x{scale_factor}")
    return kernel.resample(source, scale_factor)


def available_algorithms() -> Dict[str, str]:
    return {algorithm.value: kernel_type.__name__ for algorithm, kernel_type in KERNEL_TYPES.items()}
