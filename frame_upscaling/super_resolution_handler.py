import logging
from typing import Any, Callable, Dict, Optional, Union

from . import config
from .engine import EnhanceOutcome, EnhancementResult, ResamplingEngine
from .frame_source import CaptureFrameSource, StaticFrameSource
from .raster import Raster
from .scheduler import RealtimeScheduler
from .settings import EnhancementSettings

FrameSource = Union[CaptureFrameSource, StaticFrameSource, Callable[[], Optional[Raster]]]


class SuperResolutionHandler:
    """Wires a frame source to the resampling engine and its real-time loop."""

    def __init__(self,
                 frame_source: FrameSource,
                 settings: Optional[Union[EnhancementSettings, Dict[str, Any]]] = None,
                 enabled: bool = True,
                 on_enhanced: Optional[Callable[[EnhancementResult], None]] = None,
                 interval: float = config.REALTIME_TICK_INTERVAL):
        self.logger = logging.getLogger(__name__)
        self.frame_source = frame_source
        self.engine = ResamplingEngine(settings, output_sinks=[on_enhanced] if on_enhanced else None)
        self.scheduler = RealtimeScheduler(self.engine, self._read_frame,
                                           enabled=enabled, interval=interval)
        self.scheduler.sync()

        self.logger.info("SuperResolutionHandler initialized successfully")

    def _read_frame(self) -> Optional[Raster]:
        reader = getattr(self.frame_source, 'read', self.frame_source)
        return reader()

    @property
    def settings(self) -> EnhancementSettings:
        return self.engine.settings

    @property
    def last_result(self) -> Optional[EnhancementResult]:
        return self.engine.last_result

    def enhance_current_frame(self) -> EnhanceOutcome:
        """Manual trigger: enhance whatever the frame source has right now."""
        return self.engine.enhance(self._read_frame())

    def upscale(self, raster: Raster) -> Optional[Raster]:
        outcome = self.engine.enhance(raster)
        return outcome.result.output if outcome.ok else None

    def update_settings(self, partial: Optional[Dict[str, Any]] = None, **changes) -> EnhancementSettings:
        updated = self.engine.update_settings(partial, **changes)
        self.scheduler.sync()
        return updated

    def set_enabled(self, enabled: bool):
        self.scheduler.set_enabled(enabled)

    def start_realtime(self) -> bool:
        self.engine.update_settings(real_time=True)
        self.scheduler.sync()
        return self.scheduler.is_scheduled

    def stop_realtime(self):
        self.engine.update_settings(real_time=False)
        self.scheduler.stop()

    def download_current(self) -> Optional[bytes]:
        return self.engine.download_current()

    def download_filename(self, timestamp_ms: Optional[int] = None) -> str:
        return self.engine.download_filename(timestamp_ms)

    def resolution_summary(self) -> Optional[Dict[str, Any]]:
        result = self.engine.last_result
        if result is None:
            return None
        return {
            'original': result.original_dims,
            'enhanced': result.output_dims,
            'pixel_ratio': round(result.pixel_ratio, 1),
        }

    def close(self):
        self.scheduler.close()
        release = getattr(self.frame_source, 'release', None)
        if release is not None:
            release()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()
