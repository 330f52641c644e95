import numpy as np

from specvis.constants import BG_COLOR
from specvis.intensity_mapper import db_to_color


class WaterfallRenderer:
    """
    Scrolling spectrogram. Time runs right to left, one column per frame.
    The session surface is the scroll buffer and is only ever mutated here
    and in ``reset``.
    """

    uses_scale = True

    def reset(self, session):
        session.surface[:] = BG_COLOR

    def render(self, frame, config, session):
        surface = session.surface
        rows = session.positions
        n = min(len(frame), len(rows))

        # 1. Shift everything one column towards the old edge
        surface[:, :-1] = surface[:, 1:]

        # 2. Paint the new column. Rows no bin reaches keep the previous
        # column; where bins share a row the highest bin wins.
        colors = db_to_color(np.asarray(frame[:n]), config.min_db, config.max_db)
        top_down = rows[:n][::-1]
        painted, first = np.unique(top_down, return_index=True)
        surface[painted, -1] = colors[::-1][first]
