"""
Frequency guides: the vertical legend next to the waterfall and the
labelled baseline under the bars.
"""

import math

import cv2

from specvis.bucket_mapper import bar_width, bin_to_position
from specvis.constants import (
    BAR_GAP,
    BG_COLOR,
    FONT_SCALE,
    GUIDE_COLOR,
    LABEL_COLOR,
    TICK_FREQUENCIES,
)

FONT = cv2.FONT_HERSHEY_SIMPLEX


def tick_bin(freq, sample_rate, bin_count):
    """Linear bin index closest to ``freq``."""
    nyquist = sample_rate / 2
    return math.floor(freq / nyquist * (bin_count - 1) + 0.5)


def format_tick_label(freq):
    """100 -> '100', 1000 -> '1k', 2500 -> '2.5k'."""
    if freq >= 1000:
        digits = 0 if freq % 1000 == 0 else 1
        return f"{freq / 1000:.{digits}f}k"
    return f"{freq}"


def _visible_ticks(sample_rate):
    return [f for f in TICK_FREQUENCIES if f <= sample_rate / 2]


def spectrogram_ticks(sample_rate, bin_count, height):
    """(frequency, row) pairs for the waterfall legend."""
    return [
        (f, bin_to_position(tick_bin(f, sample_rate, bin_count), bin_count, height))
        for f in _visible_ticks(sample_rate)
    ]


def bucket_index_for_bin(bin_index, buckets):
    """Index of the bucket containing ``bin_index``; the last bucket if none does."""
    for i, bucket in enumerate(buckets):
        if bucket.start <= bin_index < bucket.end:
            return i
    return max(0, len(buckets) - 1)


def bar_ticks(sample_rate, bin_count, buckets, width, gap=BAR_GAP):
    """(frequency, x centre) pairs for the bars baseline."""
    bw = bar_width(width, len(buckets), gap)
    ticks = []
    for f in _visible_ticks(sample_rate):
        index = bucket_index_for_bin(tick_bin(f, sample_rate, bin_count), buckets)
        ticks.append((f, index * (bw + gap) + bw // 2))
    return ticks


def clear_scale(surface):
    surface[:] = BG_COLOR


def draw_frequency_scale(surface, sample_rate, bin_count):
    """
    Repaint the legend surface: a guide line and an 'xHz' label per tick.
    """
    clear_scale(surface)
    h, w = surface.shape[:2]

    for f, y in spectrogram_ticks(sample_rate, bin_count, h):
        cv2.line(surface, (0, y), (w - 1, y), GUIDE_COLOR, 1)

        label = format_tick_label(f) + "Hz"
        (_, text_h), _ = cv2.getTextSize(label, FONT, FONT_SCALE, 1)
        # Vertically centred on the guide, kept inside the surface
        baseline = min(h - 1, max(text_h, y + text_h // 2))
        cv2.putText(surface, label, (6, baseline), FONT, FONT_SCALE, LABEL_COLOR, 1, cv2.LINE_AA)


def draw_bars_x_axis(surface, buckets, sample_rate, bin_count, margin):
    """
    Draw the baseline ``margin`` pixels above the bottom edge and centre a
    frequency label under the bar holding each tick.
    """
    h, w = surface.shape[:2]
    baseline_y = max(0, h - margin)

    cv2.line(surface, (0, baseline_y), (w - 1, baseline_y), GUIDE_COLOR, 1)

    for f, x in bar_ticks(sample_rate, bin_count, buckets, w):
        label = format_tick_label(f)
        (text_w, text_h), _ = cv2.getTextSize(label, FONT, FONT_SCALE, 1)
        org = (x - text_w // 2, min(h - 1, baseline_y + 2 + text_h))
        cv2.putText(surface, label, org, FONT, FONT_SCALE, LABEL_COLOR, 1, cv2.LINE_AA)
