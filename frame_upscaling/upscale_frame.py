#!/usr/bin/env python3
"""
Upscale a single captured frame with the resampling engine.
Usage: python -m frame_upscaling.upscale_frame input.png [output.jpg] [--scale 1.5|2|3|4] [--algorithm NAME]
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import cv2

from . import config
from .engine import ResamplingEngine
from .errors import KernelError
from .raster import Raster
from .utils import create_comparison_plot, setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Upscale a frame with bicubic, Lanczos or nearest-neighbour resampling')
    parser.add_argument('input', help='Input image file')
    parser.add_argument('output', nargs='?', help='Output JPEG file (default: enhanced-resolution-<ms>.jpg)')
    parser.add_argument('--scale', type=float, choices=list(config.SUPPORTED_SCALE_FACTORS),
                        default=config.DEFAULT_SCALE_FACTOR,
                        help=f'Scale factor (default: {config.DEFAULT_SCALE_FACTOR})')
    parser.add_argument('--algorithm', choices=['bicubic', 'lanczos', 'nearest'],
                        default=config.DEFAULT_ALGORITHM,
                        help=f'Resampling algorithm (default: {config.DEFAULT_ALGORITHM})')
    parser.add_argument('--quality', type=int, default=config.DOWNLOAD_JPEG_QUALITY,
                        help=f'JPEG quality 1-100 (default: {config.DOWNLOAD_JPEG_QUALITY})')
    parser.add_argument('--compare', metavar='PLOT', help='Also save a side-by-side comparison plot')
    parser.add_argument('--log-level', default=config.DEFAULT_LOG_LEVEL)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    input_path = Path(args.input)
    frame = cv2.imread(str(input_path), cv2.IMREAD_UNCHANGED)
    if frame is None:
        logger.error(f"Could not read image from {input_path}")
        return 1

    try:
        source = Raster.from_bgr(frame)
    except KernelError as e:
        logger.error(f"Unsupported image {input_path}: {e}")
        return 1

    engine = ResamplingEngine({'scale_factor': args.scale, 'algorithm': args.algorithm})
    outcome = engine.enhance(source)
    if not outcome.ok:
        logger.error(f"Enhancement failed: {outcome.error.value} {outcome.message}")
        return 1

    data = engine.download_current(args.quality)
    if data is None:
        return 1

    output_path = Path(args.output) if args.output else input_path.parent / engine.download_filename()
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(data)

    result = outcome.result
    logger.info(f"Saved {result.output_dims[0]}x{result.output_dims[1]} "
                f"({result.pixel_ratio:.1f}x pixels) to {output_path}")

    if args.compare:
        create_comparison_plot(result.source, result.output, save_path=args.compare)

    return 0


if __name__ == '__main__':
    sys.exit(main())
