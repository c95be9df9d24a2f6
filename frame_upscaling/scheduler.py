import logging
import threading
import time
from enum import Enum
from typing import Callable, Optional

from . import config
from .engine import EnhanceOutcome, ResamplingEngine
from .errors import EngineError
from .raster import Raster

SourceProvider = Callable[[], Optional[Raster]]


class SchedulerState(str, Enum):
    STOPPED = "stopped"
    SCHEDULED = "scheduled"


class RealtimeScheduler:
    """
    Re-runs the engine on the current frame once per tick while real-time mode is on.

    Ticks run on one daemon worker thread. Overlapping work is dropped by the
    engine's own guard, so a slow kernel never builds a backlog. stop() joins
    the worker: once it returns, this scheduler makes no more enhance() calls.
    """

    def __init__(self,
                 engine: ResamplingEngine,
                 source_provider: SourceProvider,
                 enabled: bool = False,
                 interval: float = config.REALTIME_TICK_INTERVAL):
        self.logger = logging.getLogger(__name__)
        self.engine = engine
        self.source_provider = source_provider
        self.interval = interval

        self._enabled = enabled
        self._closed = False
        self._lock = threading.Lock()
        self._cancel: Optional[threading.Event] = None
        self._worker: Optional[threading.Thread] = None
        self._stopping: Optional[threading.Thread] = None

        self.tick_count = 0
        self.dropped_ticks = 0

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def should_run(self) -> bool:
        return self._enabled and not self._closed and bool(self.engine.settings.real_time)

    @property
    def state(self) -> SchedulerState:
        with self._lock:
            scheduled = self._worker is not None and not self._cancel.is_set()
        return SchedulerState.SCHEDULED if scheduled else SchedulerState.STOPPED

    @property
    def is_scheduled(self) -> bool:
        return self.state is SchedulerState.SCHEDULED

    def set_enabled(self, enabled: bool) -> SchedulerState:
        self._enabled = bool(enabled)
        return self.sync()

    def sync(self) -> SchedulerState:
        """Arm or cancel so the loop runs exactly when enabled and real-time are both on."""
        if self.should_run:
            self.start()
        else:
            self.stop()
        return self.state

    def start(self) -> bool:
        with self._lock:
            if self._worker is not None and not self._cancel.is_set():
                return False
            if not self.should_run:
                self.logger.info("Real-time processing not enabled, scheduler stays stopped")
                return False

            cancel = threading.Event()
            worker = threading.Thread(target=self._run, args=(cancel,),
                                      name="realtime-resampler", daemon=True)
            self._cancel = cancel
            self._worker = worker
            worker.start()

        self.logger.info(f"Real-time scheduler started (interval={self.interval:.4f}s)")
        return True

    def stop(self):
        with self._lock:
            cancel, worker = self._cancel, self._worker
            if cancel is not None:
                cancel.set()
                self._cancel = None
                self._worker = None
                self._stopping = worker
            else:
                # Another caller is already stopping this worker; wait for the same thread
                worker = self._stopping

        if worker is None:
            return

        # A tick that disables itself runs on the worker and cannot join itself
        if worker is not threading.current_thread():
            worker.join()

        if cancel is not None:
            with self._lock:
                if self._stopping is worker and not worker.is_alive():
                    self._stopping = None
            self.logger.info(f"Real-time scheduler stopped after {self.tick_count} ticks")

    def close(self):
        self._closed = True
        self.stop()

    def tick(self, cancel: Optional[threading.Event] = None) -> Optional[EnhanceOutcome]:
        """Run one scheduling tick; returns the engine outcome, or None if nothing ran."""
        if cancel is not None and cancel.is_set():
            return None

        if not self.should_run:
            self.logger.info("Real-time processing disabled, cancelling pending ticks")
            self.stop()
            return None

        try:
            source = self.source_provider()
        except Exception as e:
            self.logger.error(f"Frame source failed during real-time tick: {e}")
            return None

        if cancel is not None and cancel.is_set():
            return None

        self.tick_count += 1
        outcome = self.engine.enhance(source)
        if outcome.error is EngineError.BUSY:
            self.dropped_ticks += 1
        elif outcome.error is EngineError.KERNEL_FAILURE:
            self.logger.warning(f"Real-time tick produced no enhancement: {outcome.message}")
        return outcome

    def _run(self, cancel: threading.Event):
        while not cancel.is_set():
            started = time.monotonic()
            self.tick(cancel)
            elapsed = time.monotonic() - started
            cancel.wait(max(0.0, self.interval - elapsed))

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()
