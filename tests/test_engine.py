import logging
import threading

import cv2
import numpy as np
import pytest

from frame_upscaling.engine import EngineState, EnhancementResult, ResamplingEngine
from frame_upscaling.errors import EngineError
from frame_upscaling.raster import Raster
from frame_upscaling.settings import Algorithm, EnhancementSettings


def run_in_thread(engine, source, **kwargs):
    box = {}
    thread = threading.Thread(target=lambda: box.setdefault('outcome', engine.enhance(source, **kwargs)))
    thread.start()
    return thread, box


def test_enhance_produces_result_and_notifies_sink(quad_raster):
    received = []
    engine = ResamplingEngine({'algorithm': 'nearest', 'scale_factor': 2}, output_sinks=[received.append])

    outcome = engine.enhance(quad_raster)

    assert outcome.ok
    result = outcome.result
    assert result.original_dims == (2, 2)
    assert result.output_dims == (4, 4)
    assert result.output.dims == (4, 4)
    assert result.source is quad_raster
    assert result.pixel_ratio == 4.0
    assert result.settings.algorithm is Algorithm.NEAREST
    assert engine.last_result is result
    assert engine.state is EngineState.IDLE
    assert received == [result]


@pytest.mark.parametrize("source", [None, Raster(width=0, height=0, pixels=b"")])
def test_missing_source_is_a_silent_no_op(source):
    received = []
    engine = ResamplingEngine(output_sinks=[received.append])

    outcome = engine.enhance(source)

    assert not outcome.ok
    assert outcome.error is EngineError.MISSING_SOURCE
    assert engine.last_result is None
    assert engine.state is EngineState.IDLE
    assert received == []


def test_kernel_failure_resets_state_and_keeps_previous_result(quad_raster, caplog):
    engine = ResamplingEngine()
    first = engine.enhance(quad_raster).result

    with caplog.at_level(logging.ERROR):
        outcome = engine.enhance(Raster(width=8, height=8, pixels=bytes(12)))

    assert outcome.error is EngineError.KERNEL_FAILURE
    assert "Malformed pixel buffer" in outcome.message
    assert "Super resolution failed" in caplog.text
    assert engine.state is EngineState.IDLE
    assert engine.last_result is first


def test_unexpected_kernel_exception_is_contained(quad_raster):
    class ExplodingKernel:
        name = "exploding"

        def resample(self, source, scale_factor):
            raise RuntimeError("boom")

    engine = ResamplingEngine(kernel_factory=lambda algorithm: ExplodingKernel())
    outcome = engine.enhance(quad_raster)

    assert outcome.error is EngineError.KERNEL_FAILURE
    assert outcome.message == "boom"
    assert not engine.is_processing

    assert engine.state is EngineState.IDLE
    assert engine.enhance(quad_raster).error is EngineError.KERNEL_FAILURE

    missing_kernel = ResamplingEngine(kernel_factory=lambda algorithm: None)
    assert missing_kernel.enhance(quad_raster).error is EngineError.KERNEL_FAILURE
    assert missing_kernel.state is EngineState.IDLE


def test_second_call_while_processing_is_dropped(quad_raster, blocking_kernel):
    engine = ResamplingEngine(kernel_factory=blocking_kernel.factory)

    thread, box = run_in_thread(engine, quad_raster)
    assert blocking_kernel.started.wait(5)
    assert engine.is_processing

    second = engine.enhance(quad_raster)
    assert second.error is EngineError.BUSY
    assert engine.last_result is None
    assert len(blocking_kernel.scales) == 1

    blocking_kernel.released.set()
    thread.join(5)

    assert box['outcome'].ok
    assert engine.last_result is box['outcome'].result
    assert engine.state is EngineState.IDLE


def test_settings_update_does_not_affect_in_flight_call(quad_raster, blocking_kernel):
    engine = ResamplingEngine({'scale_factor': 2}, kernel_factory=blocking_kernel.factory)

    thread, box = run_in_thread(engine, quad_raster)
    assert blocking_kernel.started.wait(5)

    updated = engine.update_settings(scale_factor=3)
    assert updated.scale_factor == 3.0

    blocking_kernel.released.set()
    thread.join(5)

    assert box['outcome'].result.output_dims == (4, 4)
    assert box['outcome'].result.settings.scale_factor == 2.0

    following = engine.enhance(quad_raster)
    assert following.result.output_dims == (6, 6)
    assert blocking_kernel.scales == [2.0, 3.0]


def test_explicit_settings_take_precedence_for_one_call(quad_raster):
    engine = ResamplingEngine({'scale_factor': 2, 'algorithm': 'nearest'})

    outcome = engine.enhance(quad_raster, EnhancementSettings(scale_factor=4, algorithm=Algorithm.NEAREST))
    assert outcome.result.output_dims == (8, 8)

    outcome = engine.enhance(quad_raster, {'scale_factor': 3})
    assert outcome.result.output_dims == (6, 6)

    assert engine.settings.scale_factor == 2.0


def test_update_settings_merges_and_falls_back(caplog):
    engine = ResamplingEngine()
    before = engine.settings

    with caplog.at_level(logging.WARNING):
        after = engine.update_settings({'scaleFactor': 2.8}, algorithm='unknown')

    assert before.scale_factor == 2.0
    assert before.algorithm is Algorithm.BICUBIC
    assert after.scale_factor == 3.0
    assert after.algorithm is Algorithm.NEAREST
    assert engine.settings is after
    assert "Unsupported scale factor" in caplog.text


def test_invalid_scale_factor_still_enhances(quad_raster):
    engine = ResamplingEngine({'scale_factor': 7, 'algorithm': 'nearest'})
    outcome = engine.enhance(quad_raster)
    assert outcome.ok
    assert outcome.result.output_dims == (8, 8)


def test_failing_sink_does_not_fail_enhancement(quad_raster, caplog):
    def broken_sink(result):
        raise IOError("disk full")

    received = []
    engine = ResamplingEngine(output_sinks=[broken_sink, received.append])

    with caplog.at_level(logging.ERROR):
        outcome = engine.enhance(quad_raster)

    assert outcome.ok
    assert received == [outcome.result]
    assert "disk full" in caplog.text


def test_sinks_can_be_added_and_removed(quad_raster):
    received = []
    engine = ResamplingEngine()
    engine.add_output_sink(received.append)
    engine.enhance(quad_raster)
    engine.remove_output_sink(received.append)
    engine.enhance(quad_raster)
    assert len(received) == 1


def test_download_current_requires_a_result(quad_raster):
    engine = ResamplingEngine({'algorithm': 'nearest'})
    assert engine.download_current() is None
    assert engine.preview_data_url() is None

    engine.enhance(quad_raster)
    data = engine.download_current()

    assert data[:2] == b'\xff\xd8'
    decoded = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_COLOR)
    assert decoded.shape == (4, 4, 3)
    assert engine.preview_data_url().startswith("data:image/jpeg;base64,")


def test_download_filename():
    assert ResamplingEngine().download_filename(1700000000000) == "enhanced-resolution-1700000000000.jpg"


def test_engines_are_independent(quad_raster):
    first = ResamplingEngine({'scale_factor': 2})
    second = ResamplingEngine({'scale_factor': 4})

    first.enhance(quad_raster)
    second.update_settings(algorithm='lanczos')

    assert first.last_result.output_dims == (4, 4)
    assert second.last_result is None
    assert first.settings.algorithm is Algorithm.BICUBIC


def test_pixel_ratio_handles_empty_dims():
    raster = Raster.filled(1, 1)
    result = EnhancementResult(source=raster, output=raster, original_dims=(0, 0), output_dims=(2, 2))
    assert result.pixel_ratio == 0.0
