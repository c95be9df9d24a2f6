import logging

import cv2
import numpy as np

from frame_upscaling.raster import Raster
from frame_upscaling.resampling.nearest import NearestNeighborKernel
from frame_upscaling.upscale_frame import main
from frame_upscaling.utils import calculate_raster_statistics, create_comparison_plot, setup_logging


def test_raster_statistics():
    stats = calculate_raster_statistics(Raster.filled(3, 2, (10, 20, 30, 255)))
    assert stats['Red_mean'] == 10.0
    assert stats['Green_max'] == 20.0
    assert stats['Blue_std'] == 0.0
    assert stats['Alpha_min'] == 255.0
    assert stats['width'] == 3.0
    assert stats['height'] == 2.0


def test_raster_statistics_reports_errors():
    stats = calculate_raster_statistics(Raster(width=2, height=2, pixels=b""))
    assert 'error' in stats


def test_comparison_plot_is_saved(tmp_path, quad_raster):
    enhanced = NearestNeighborKernel().resample(quad_raster, 2)
    target = tmp_path / "plots" / "comparison.png"

    assert create_comparison_plot(quad_raster, enhanced, save_path=target)
    assert target.exists()


def test_setup_logging_returns_logger(tmp_path):
    logger = setup_logging("debug", log_file=tmp_path / "upscale.log")
    assert isinstance(logger, logging.Logger)


def test_cli_upscales_an_image(tmp_path):
    source = tmp_path / "frame.png"
    frame = Raster.filled(5, 3, (0, 128, 255, 255)).to_bgr()
    cv2.imwrite(str(source), frame)
    output = tmp_path / "out" / "frame.jpg"

    assert main([str(source), str(output), '--scale', '3', '--algorithm', 'lanczos',
                 '--compare', str(tmp_path / "cmp.png")]) == 0

    decoded = cv2.imread(str(output))
    assert decoded.shape == (9, 15, 3)
    assert (tmp_path / "cmp.png").exists()


def test_cli_reads_sixteen_bit_images(tmp_path):
    source = tmp_path / "deep.png"
    cv2.imwrite(str(source), np.full((4, 4, 3), 51200, dtype=np.uint16))
    output = tmp_path / "deep.jpg"

    assert main([str(source), str(output), "--algorithm", "nearest"]) == 0

    decoded = cv2.imread(str(output))
    assert decoded.shape == (8, 8, 3)
    assert abs(int(decoded[4, 4, 0]) - 200) <= 3


def test_cli_default_output_name(tmp_path):
    source = tmp_path / "still.png"
    cv2.imwrite(str(source), Raster.filled(2, 2).to_bgr())

    assert main([str(source)]) == 0
    assert len(list(tmp_path.glob("enhanced-resolution-*.jpg"))) == 1


def test_cli_reports_unreadable_input(tmp_path):
    assert main([str(tmp_path / "missing.png")]) == 1
