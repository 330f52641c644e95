import math
from dataclasses import dataclass

from specvis.constants import (
    FRAME_SIZE,
    MAX_DB,
    MAX_FRAME_SIZE,
    MIN_DB,
    MIN_FRAME_SIZE,
    SMOOTHING_FACTOR,
)


class ConfigError(Exception):
    """Raised when analyser settings validation fails."""
    pass


@dataclass(frozen=True)
class AnalyserSettings:
    """Settings pushed to the spectral analysis engine and the renderers.

    Attributes:
        frame_size: Analysis resolution, a power of two. Gives frame_size / 2 bins.
        smoothing:  Averaging constant between successive frames, 0..1.
        min_db:     Level drawn as silence.
        max_db:     Level drawn as full scale.
    """
    frame_size: int = FRAME_SIZE
    smoothing: float = SMOOTHING_FACTOR
    min_db: float = MIN_DB
    max_db: float = MAX_DB

    @property
    def bin_count(self):
        return self.frame_size // 2


def validate_settings(settings):
    """Return *settings* unchanged, or raise ConfigError describing the first problem."""
    size = settings.frame_size
    if not isinstance(size, int) or size < MIN_FRAME_SIZE or size > MAX_FRAME_SIZE:
        raise ConfigError(
            f"frame_size must be between {MIN_FRAME_SIZE} and {MAX_FRAME_SIZE}, got {size!r}"
        )
    if size & (size - 1):
        raise ConfigError(f"frame_size must be a power of two, got {size}")
    if not 0.0 <= settings.smoothing <= 1.0:
        raise ConfigError(f"smoothing must be within [0, 1], got {settings.smoothing}")
    if not (math.isfinite(settings.min_db) and math.isfinite(settings.max_db)):
        raise ConfigError("min_db and max_db must be finite")
    # Equal bounds are allowed and render as a saturated step.
    if settings.min_db > settings.max_db:
        raise ConfigError(
            f"min_db ({settings.min_db}) must not exceed max_db ({settings.max_db})"
        )
    return settings
