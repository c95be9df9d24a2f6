import dataclasses
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from . import config

logger = logging.getLogger(__name__)


class Algorithm(str, Enum):
    """Resampling kernels the engine can dispatch to."""

    BICUBIC = "bicubic"
    LANCZOS = "lanczos"
    NEAREST = "nearest"

    @classmethod
    def parse(cls, value: Any) -> "Algorithm":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            logger.warning(f"Unknown algorithm: {value!r}, using {config.FALLBACK_ALGORITHM}")
            return cls(config.FALLBACK_ALGORITHM)


class Quality(str, Enum):
    # Advisory only. Kept for callers that surface it; kernels ignore it.
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def parse(cls, value: Any) -> "Quality":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            logger.warning(f"Unknown quality: {value!r}, using {config.DEFAULT_QUALITY}")
            return cls(config.DEFAULT_QUALITY)


# camelCase keys accepted from host-side configuration
_FIELD_ALIASES = {
    'scaleFactor': 'scale_factor',
    'realTime': 'real_time',
}


def normalize_scale_factor(value: Any) -> float:
    """Snap a scale factor to the closest supported one, warning when it had to move."""
    supported = config.SUPPORTED_SCALE_FACTORS
    try:
        factor = float(value)
    except (TypeError, ValueError):
        logger.warning(f"Invalid scale factor {value!r}, using {config.DEFAULT_SCALE_FACTOR}")
        return float(config.DEFAULT_SCALE_FACTOR)

    if factor in supported:
        return factor
    if factor != factor:  # NaN
        logger.warning(f"Invalid scale factor {value!r}, using {config.DEFAULT_SCALE_FACTOR}")
        return float(config.DEFAULT_SCALE_FACTOR)

    # min() keeps the first of equal distances, so ties go to the smaller factor
    clamped = min(max(factor, supported[0]), supported[-1])
    nearest = min(supported, key=lambda s: abs(s - clamped))
    logger.warning(f"Unsupported scale factor {factor}, falling back to {nearest}")
    return float(nearest)


@dataclass(frozen=True)
class EnhancementSettings:
    """Immutable settings for one enhancement run."""

    scale_factor: float = config.DEFAULT_SCALE_FACTOR
    algorithm: Algorithm = Algorithm(config.DEFAULT_ALGORITHM)
    quality: Quality = Quality(config.DEFAULT_QUALITY)
    real_time: bool = config.DEFAULT_REAL_TIME

    def merge(self, partial: Optional[Dict[str, Any]] = None, **changes) -> "EnhancementSettings":
        """Return a copy with only the given fields replaced."""
        updates = dict(partial or {})
        updates.update(changes)

        fields = {f.name for f in dataclasses.fields(self)}
        normalized = {}
        for key, value in updates.items():
            name = _FIELD_ALIASES.get(key, key)
            if name not in fields:
                logger.warning(f"Ignoring unknown setting: {key}")
                continue
            if value is None:
                continue
            normalized[name] = value

        return dataclasses.replace(self, **normalized)

    def resolved(self) -> "EnhancementSettings":
        """Settings with every field coerced to a supported value."""
        return EnhancementSettings(
            scale_factor=normalize_scale_factor(self.scale_factor),
            algorithm=Algorithm.parse(self.algorithm),
            quality=Quality.parse(self.quality),
            real_time=bool(self.real_time),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'scale_factor': self.scale_factor,
            'algorithm': Algorithm.parse(self.algorithm).value,
            'quality': Quality.parse(self.quality).value,
            'real_time': bool(self.real_time),
        }

    @classmethod
    def from_dict(cls, settings: Optional[Dict[str, Any]] = None) -> "EnhancementSettings":
        return cls().merge(settings)
