import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from . import config
from .encoding import download_filename, encode_jpeg, to_data_url
from .errors import EngineError
from .raster import Raster
from .resampling.registry import ResamplingKernel, get_kernel
from .settings import EnhancementSettings


class EngineState(str, Enum):
    IDLE = "idle"
    PROCESSING = "processing"


@dataclass(frozen=True)
class EnhancementResult:
    source: Raster
    output: Raster
    original_dims: Tuple[int, int]
    output_dims: Tuple[int, int]
    settings: Optional[EnhancementSettings] = None

    @property
    def pixel_ratio(self) -> float:
        """How many output pixels there are per source pixel."""
        original = self.original_dims[0] * self.original_dims[1]
        enhanced = self.output_dims[0] * self.output_dims[1]
        return enhanced / original if original else 0.0


@dataclass(frozen=True)
class EnhanceOutcome:
    """Either a result, or the EngineError explaining why there is none."""

    result: Optional[EnhancementResult] = None
    error: Optional[EngineError] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None and self.result is not None


OutputSink = Callable[[EnhancementResult], None]
KernelFactory = Callable[[Any], ResamplingKernel]


class ResamplingEngine:
    """
    Runs one resampling kernel over a source raster and keeps the last result.

    At most one enhancement is in flight per engine; a call that arrives while
    another is processing is dropped, not queued. All state belongs to the
    instance, so separate engines never share anything.
    """

    def __init__(self,
                 settings: Optional[Union[EnhancementSettings, Dict[str, Any]]] = None,
                 output_sinks: Optional[List[OutputSink]] = None,
                 kernel_factory: KernelFactory = get_kernel):
        self.logger = logging.getLogger(__name__)

        if isinstance(settings, EnhancementSettings):
            self._settings = settings.resolved()
        else:
            self._settings = EnhancementSettings.from_dict(settings).resolved()

        self._kernel_factory = kernel_factory
        self._output_sinks: List[OutputSink] = list(output_sinks or [])
        self._state = EngineState.IDLE
        self._state_lock = threading.Lock()
        self._settings_lock = threading.Lock()
        self._last_result: Optional[EnhancementResult] = None

        self.logger.info(f"ResamplingEngine initialized with settings: {self._settings.to_dict()}")

    @property
    def settings(self) -> EnhancementSettings:
        with self._settings_lock:
            return self._settings

    @settings.setter
    def settings(self, settings: EnhancementSettings):
        with self._settings_lock:
            self._settings = settings.resolved()

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def is_processing(self) -> bool:
        return self._state is EngineState.PROCESSING

    @property
    def last_result(self) -> Optional[EnhancementResult]:
        return self._last_result

    def update_settings(self, partial: Optional[Dict[str, Any]] = None, **changes) -> EnhancementSettings:
        # In-flight runs keep the snapshot they started with
        with self._settings_lock:
            self._settings = self._settings.merge(partial, **changes).resolved()
            updated = self._settings
        self.logger.info(f"Settings updated: {updated.to_dict()}")
        return updated

    def add_output_sink(self, sink: OutputSink):
        self._output_sinks.append(sink)

    def remove_output_sink(self, sink: OutputSink):
        if sink in self._output_sinks:
            self._output_sinks.remove(sink)

    def _try_begin(self) -> bool:
        with self._state_lock:
            if self._state is EngineState.PROCESSING:
                return False
            self._state = EngineState.PROCESSING
            return True

    def _finish(self):
        with self._state_lock:
            self._state = EngineState.IDLE

    def enhance(self, source: Optional[Raster],
                settings: Optional[Union[EnhancementSettings, Dict[str, Any]]] = None) -> EnhanceOutcome:
        if source is None or source.is_empty:
            self.logger.debug("No source raster available, skipping enhancement")
            return EnhanceOutcome(error=EngineError.MISSING_SOURCE, message="No source raster")

        if not self._try_begin():
            self.logger.debug("Enhancement already in progress, dropping request")
            return EnhanceOutcome(error=EngineError.BUSY, message="Enhancement already in progress")

        try:
            if settings is None:
                active = self.settings
            elif isinstance(settings, EnhancementSettings):
                active = settings.resolved()
            else:
                active = self.settings.merge(settings).resolved()

            kernel = self._kernel_factory(active.algorithm)
            output = kernel.resample(source, active.scale_factor)

            result = EnhancementResult(
                source=source,
                output=output,
                original_dims=source.dims,
                output_dims=output.dims,
                settings=active,
            )
            self._last_result = result
        except Exception as e:
            self.logger.error(f"Super resolution failed: {e}")
            return EnhanceOutcome(error=EngineError.KERNEL_FAILURE, message=str(e))
        finally:
            self._finish()

        self.logger.info(
            f"Enhanced {result.original_dims[0]}x{result.original_dims[1]} -> "
            f"{result.output_dims[0]}x{result.output_dims[1]} "
            f"({active.algorithm.value}, x{active.scale_factor})"
        )
        self._notify(result)
        return EnhanceOutcome(result=result)

    def _notify(self, result: EnhancementResult):
        for sink in list(self._output_sinks):
            try:
                sink(result)
            except Exception as e:
                self.logger.error(f"Output sink {sink!r} failed: {e}")

    def download_current(self, quality: Union[int, float] = config.DOWNLOAD_JPEG_QUALITY) -> Optional[bytes]:
        """JPEG bytes of the last enhanced frame, or None if nothing has been enhanced yet."""
        result = self._last_result
        if result is None:
            self.logger.warning("No enhanced frame available to download")
            return None

        try:
            return encode_jpeg(result.output, quality)
        except Exception as e:
            self.logger.error(f"Encoding enhanced frame failed: {e}")
            return None

    def preview_data_url(self, quality: Union[int, float] = config.PREVIEW_JPEG_QUALITY) -> Optional[str]:
        result = self._last_result
        if result is None:
            return None
        try:
            return to_data_url(result.output, quality)
        except Exception as e:
            self.logger.error(f"Preview encoding failed: {e}")
            return None

    def download_filename(self, timestamp_ms: Optional[int] = None) -> str:
        return download_filename(timestamp_ms)
