import logging
from pathlib import Path
from typing import Dict, Optional, Union

import matplotlib.pyplot as plt
import numpy as np

from . import config
from .raster import Raster


def setup_logging(log_level: str = config.DEFAULT_LOG_LEVEL,
                  log_file: Optional[Union[str, Path]] = None) -> logging.Logger:
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(str(log_file)))

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format=config.LOG_FORMAT,
        handlers=handlers
    )
    return logging.getLogger(__name__)


def calculate_raster_statistics(raster: Raster) -> Dict[str, float]:
    stats = {}

    try:
        rgba = raster.to_array()
        for i, channel in enumerate(['Red', 'Green', 'Blue', 'Alpha']):
            channel_data = rgba[:, :, i]
            stats[f'{channel}_mean'] = float(np.mean(channel_data))
            stats[f'{channel}_std'] = float(np.std(channel_data))
            stats[f'{channel}_min'] = float(np.min(channel_data))
            stats[f'{channel}_max'] = float(np.max(channel_data))

        stats['width'] = float(raster.width)
        stats['height'] = float(raster.height)

    except Exception as e:
        logging.error(f"Error calculating raster statistics: {e}")
        stats['error'] = str(e)

    return stats


def create_comparison_plot(original: Raster,
                           enhanced: Raster,
                           title: str = "Resolution Enhancement",
                           save_path: Optional[Union[str, Path]] = None,
                           show: bool = False) -> bool:
    #   Side-by-side view of the source frame and its upscaled output
    try:
        fig, axes = plt.subplots(1, 2, figsize=(12, 6))

        axes[0].imshow(original.to_array())
        axes[0].set_title(f'Original {original.width}x{original.height}')
        axes[0].axis('off')

        axes[1].imshow(enhanced.to_array())
        axes[1].set_title(f'Enhanced {enhanced.width}x{enhanced.height}')
        axes[1].axis('off')

        plt.suptitle(title)
        plt.tight_layout()

        if save_path:
            Path(save_path).parent.mkdir(parents=True, exist_ok=True)
            plt.savefig(str(save_path), dpi=150, bbox_inches='tight')
            logging.info(f"Comparison plot saved: {save_path}")

        if show:
            plt.show()

        plt.close(fig)
        return True

    except Exception as e:
        logging.error(f"Error creating comparison plot: {e}")
        return False
