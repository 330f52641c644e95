import numpy as np
import pytest

from specvis.bar_renderer import BarRenderer, bar_heights, bucket_levels
from specvis.bucket_mapper import FrequencyBucket, bucketize
from specvis.intensity_mapper import db_to_color
from specvis.render_loop import RenderConfiguration, RenderMode, RenderSession, make_surface

WIDTH = 200
HEIGHT = 100
MARGIN = 18
USABLE = HEIGHT - MARGIN


@pytest.fixture
def session():
    s = RenderSession(
        sample_rate=8000,
        bin_count=64,
        surface=make_surface(WIDTH, HEIGHT),
        scale_surface=make_surface(10, HEIGHT),
    )
    s.rebuild_caches(64, 8)
    return s


@pytest.fixture
def config():
    return RenderConfiguration(min_db=-100, max_db=-30, mode=RenderMode.BARS, bucket_count=8)


def test_bucket_levels_average_and_empty_fallback():
    buckets = [FrequencyBucket(0, 2), FrequencyBucket(2, 4), FrequencyBucket(4, 4)]
    levels = bucket_levels([1.0, 3.0, 5.0, 7.0], buckets, -100.0)
    assert list(levels) == [2.0, 6.0, -100.0]


def test_bar_heights_range():
    heights = bar_heights(np.array([-100.0, -65.0, -30.0, 0.0]), -100, -30, USABLE)
    assert heights[0] == 1
    assert heights[1] == round(0.5 ** 0.8 * USABLE)
    assert heights[2] == USABLE
    assert heights[3] == USABLE


def test_full_scale_bars_reach_the_top(session, config):
    BarRenderer().render(np.full(64, -30.0), config, session)

    expected = db_to_color(-30.0, -100, -30)
    assert tuple(session.surface[0, 0]) == expected
    assert tuple(session.surface[USABLE - 1, 0]) == expected


def test_silent_bars_are_one_pixel(session, config):
    BarRenderer().render(np.full(64, -120.0), config, session)

    assert tuple(session.surface[USABLE - 1, 0]) == db_to_color(-100.0, -100, -30)
    assert not session.surface[USABLE - 2, 0].any()


def test_bars_are_separated_by_a_gap(session, config):
    BarRenderer().render(np.full(64, -30.0), config, session)

    bw = (WIDTH - 7) // 8
    assert session.surface[0, bw - 1].any()
    assert not session.surface[0, bw].any()
    assert session.surface[0, bw + 1].any()


def test_render_repaints_whole_surface(session, config):
    renderer = BarRenderer()
    renderer.render(np.full(64, -30.0), config, session)
    renderer.render(np.full(64, -100.0), config, session)

    assert not session.surface[0].any()


def test_render_draws_axis_labels(session, config):
    BarRenderer().render(np.full(64, -100.0), config, session)
    assert session.surface[USABLE + 1:].any()


def test_more_buckets_than_bins_still_renders(config):
    s = RenderSession(
        sample_rate=8000,
        bin_count=4,
        surface=make_surface(WIDTH, HEIGHT),
        scale_surface=make_surface(10, HEIGHT),
    )
    s.rebuild_caches(4, 8)
    assert s.buckets[-1] == (4, 4)
    BarRenderer().render(np.full(4, -30.0), config, s)
    assert s.surface.any()
