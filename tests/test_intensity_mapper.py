import math

import cv2
import numpy as np
import pytest

from specvis.intensity_mapper import (
    db_to_color,
    db_to_intensity,
    intensities_to_colors,
    intensity_to_color,
    intensity_to_hsl,
)


def test_db_range_end_points():
    assert db_to_intensity(-100, -100, -30) == 0.0
    assert db_to_intensity(-30, -100, -30) == 1.0


def test_db_midpoint_before_compression():
    assert db_to_intensity(-65, -100, -30) == pytest.approx(0.5)


def test_compression_exponent_applied_after_normalisation():
    assert db_to_intensity(-65, -100, -30, 0.5) == pytest.approx(math.sqrt(0.5))
    assert db_to_intensity(-65, -100, -30, 0.8) == pytest.approx(0.5 ** 0.8)


def test_db_to_intensity_clamps_and_is_monotonic():
    db = np.linspace(-160, 20, 361)
    values = db_to_intensity(db, -100, -30)
    assert values.min() >= 0.0
    assert values.max() <= 1.0
    assert np.all(np.diff(values) >= 0)
    assert np.all(values[db <= -100] == 0.0)
    assert np.all(values[db >= -30] == 1.0)


def test_zero_width_range_is_a_saturated_step():
    assert db_to_intensity(-50, -50, -50) == 1.0
    assert db_to_intensity(-40, -50, -50) == 1.0
    assert db_to_intensity(-51, -50, -50) == 0.0
    assert not np.isnan(db_to_intensity(np.array([-60.0, -50.0]), -50, -50)).any()


def test_non_finite_levels():
    assert db_to_intensity(float("nan"), -100, -30) == 0.0
    assert db_to_intensity(float("-inf"), -100, -30) == 0.0
    assert db_to_intensity(float("inf"), -100, -30) == 1.0


def test_hsl_ramp_end_points():
    assert intensity_to_hsl(0.0) == (260.0, 100.0, 10.0)
    assert intensity_to_hsl(1.0) == (0.0, 100.0, 60.0)


def test_hsl_ramp_hue_falls_and_lightness_rises():
    ramp = [intensity_to_hsl(v) for v in np.linspace(0, 1, 21)]
    for (h0, _, l0), (h1, _, l1) in zip(ramp, ramp[1:]):
        assert h1 < h0
        assert l1 > l0


def test_color_end_points():
    quiet = intensity_to_color(0.0)
    loud = intensity_to_color(1.0)
    assert quiet != loud
    # hsl(260, 100%, 10%) -> dark violet-blue
    assert quiet == pytest.approx((51, 0, 17), abs=1)
    # hsl(0, 100%, 60%) -> light red
    assert loud == pytest.approx((51, 51, 255), abs=1)


def test_intensities_to_colors_shape():
    colors = intensities_to_colors(np.linspace(0, 1, 10))
    assert colors.shape == (10, 3)
    assert colors.dtype == np.uint8
    assert intensities_to_colors([]).shape == (0, 3)


def test_db_to_color_scalar_and_array_agree():
    levels = np.array([-100.0, -65.0, -30.0])
    colors = db_to_color(levels, -100, -30)
    for level, color in zip(levels, colors):
        assert db_to_color(level, -100, -30) == tuple(int(c) for c in color)


def test_painted_colors_follow_the_ramp():
    colors = intensities_to_colors(np.linspace(0, 1, 21))
    hls = cv2.cvtColor(colors.reshape(1, -1, 3).astype(np.float32) / 255.0, cv2.COLOR_BGR2HLS)[0]
    hue, lightness = hls[:, 0], hls[:, 1]

    assert hue[0] == pytest.approx(260, abs=2)
    assert hue[-1] == pytest.approx(0, abs=2)
    assert np.all(np.diff(hue) < 0)
    assert np.all(np.diff(lightness) > 0)
    assert lightness[0] == pytest.approx(0.10, abs=0.01)
    assert lightness[-1] == pytest.approx(0.60, abs=0.01)
