import cv2
import numpy as np

from specvis.constants import (
    HUE_QUIET,
    LIGHTNESS_LOUD,
    LIGHTNESS_QUIET,
    SATURATION,
    WATERFALL_EXPONENT,
)


def db_to_intensity(db, min_db, max_db, exponent=1.0):
    """
    Normalise a decibel level (scalar or array) into [0, 1] and apply a
    perceptual compression exponent.

    A zero-width range behaves as a saturated step: anything at or above
    ``max_db`` is full scale, everything else is silent.
    """
    db = np.asarray(db, dtype=np.float64)
    # NaN reads as silence
    db = np.where(np.isnan(db), -np.inf, db)

    span = max_db - min_db
    if span <= 0:
        norm = np.where(db >= max_db, 1.0, 0.0)
    else:
        norm = np.clip((db - min_db) / span, 0.0, 1.0)

    if exponent != 1.0:
        norm = np.power(norm, exponent)

    if norm.ndim == 0:
        return float(norm)
    return norm


def _hue_lightness(values):
    """Hue in degrees and lightness in percent along the ramp, for clipped intensities."""
    hue = (1 - values) * HUE_QUIET
    lightness = LIGHTNESS_QUIET + values * (LIGHTNESS_LOUD - LIGHTNESS_QUIET)
    return hue, lightness


def intensity_to_hsl(value):
    """Hue (degrees), saturation and lightness (percent) for an intensity in [0, 1]."""
    hue, lightness = _hue_lightness(min(1.0, max(0.0, float(value))))
    return hue, SATURATION, lightness


def intensities_to_colors(values):
    """
    Vectorised colour ramp. Returns an (n, 3) uint8 array of BGR colours.
    """
    values = np.clip(np.asarray(values, dtype=np.float32).reshape(-1), 0.0, 1.0)
    if values.size == 0:
        return np.empty((0, 3), dtype=np.uint8)

    # OpenCV float HLS: H in degrees, L and S in [0, 1]
    hls = np.empty((1, values.size, 3), dtype=np.float32)
    hue, lightness = _hue_lightness(values)
    hls[0, :, 0] = hue
    hls[0, :, 1] = lightness / 100.0
    hls[0, :, 2] = SATURATION / 100.0

    bgr = cv2.cvtColor(hls, cv2.COLOR_HLS2BGR)
    return np.clip(np.rint(bgr[0] * 255), 0, 255).astype(np.uint8)


def intensity_to_color(value):
    """Generate a BGR colour tuple for a single intensity."""
    return tuple(int(c) for c in intensities_to_colors([value])[0])


def db_to_color(db, min_db, max_db):
    """Colour for a decibel level using the waterfall's square-root curve."""
    intensity = db_to_intensity(db, min_db, max_db, WATERFALL_EXPONENT)
    if np.ndim(intensity) == 0:
        return intensity_to_color(intensity)
    return intensities_to_colors(intensity)
