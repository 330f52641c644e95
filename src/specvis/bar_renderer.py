import cv2
import numpy as np

from specvis.axis_renderer import draw_bars_x_axis
from specvis.bucket_mapper import bar_width
from specvis.constants import BAR_EXPONENT, BAR_GAP, BAR_X_AXIS_MARGIN, BG_COLOR
from specvis.intensity_mapper import db_to_color, db_to_intensity


def bucket_levels(frame, buckets, min_db):
    """Mean dB per bucket; empty buckets read as ``min_db``."""
    frame = np.asarray(frame, dtype=np.float64)
    levels = np.empty(len(buckets), dtype=np.float64)
    for i, (start, end) in enumerate(buckets):
        values = frame[start:end]
        levels[i] = values.mean() if values.size else min_db
    return levels


def bar_heights(levels, min_db, max_db, usable_height):
    """Bar heights in pixels, never below 1 so silent bars stay visible."""
    amplitude = db_to_intensity(levels, min_db, max_db, BAR_EXPONENT)
    heights = np.floor(np.asarray(amplitude) * usable_height + 0.5).astype(int)
    return np.maximum(1, heights)


class BarRenderer:
    """
    Log-bucketed bar chart with a labelled frequency baseline.
    Every frame repaints the whole surface.
    """

    uses_scale = False

    def __init__(self, gap=BAR_GAP, axis_margin=BAR_X_AXIS_MARGIN):
        self.gap = gap
        self.axis_margin = axis_margin

    def reset(self, session):
        session.surface[:] = BG_COLOR

    def render(self, frame, config, session):
        surface = session.surface
        buckets = session.buckets
        h, w = surface.shape[:2]

        surface[:] = BG_COLOR
        if not buckets:
            return

        usable_height = max(1, h - self.axis_margin)
        bw = bar_width(w, len(buckets), self.gap)

        levels = bucket_levels(frame, buckets, config.min_db)
        heights = bar_heights(levels, config.min_db, config.max_db, usable_height)
        colors = db_to_color(levels, config.min_db, config.max_db)

        x = 0
        for height, color in zip(heights, colors):
            y = usable_height - height
            cv2.rectangle(
                surface,
                (x, y),
                (x + bw - 1, usable_height - 1),
                tuple(int(c) for c in color),
                -1,
            )
            x += bw + self.gap

        draw_bars_x_axis(surface, buckets, session.sample_rate, session.bin_count, self.axis_margin)
