"""
Render loop: owns the render session and picks a renderer per tick.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from specvis.axis_renderer import clear_scale, draw_frequency_scale
from specvis.bar_renderer import BarRenderer
from specvis.bucket_mapper import bin_positions, bucketize
from specvis.constants import BAR_COUNT, BG_COLOR, DEFAULT_RESOLUTION, SCALE_WIDTH
from specvis.settings import AnalyserSettings, validate_settings
from specvis.waterfall_renderer import WaterfallRenderer

logger = logging.getLogger(__name__)


class RenderMode(Enum):
    SPECTROGRAM = "spectrogram"
    BARS = "bars"


class ControllerState(Enum):
    IDLE = "idle"
    RUNNING = "running"


@dataclass
class RenderConfiguration:
    min_db: float
    max_db: float
    mode: RenderMode = RenderMode.SPECTROGRAM
    bucket_count: int = BAR_COUNT


@dataclass
class RenderSession:
    """
    Everything a renderer needs for one capture run: source geometry,
    cached mappings and the two surfaces.
    """
    sample_rate: int
    bin_count: int
    surface: np.ndarray
    scale_surface: np.ndarray
    buckets: list = field(default_factory=list)
    positions: np.ndarray = None
    scale_visible: bool = True

    def rebuild_caches(self, bin_count, bucket_count):
        self.bin_count = bin_count
        self.buckets = bucketize(bin_count, bucket_count)
        self.positions = bin_positions(bin_count, self.surface.shape[0])
        logger.debug(f"Rebuilt caches: {bin_count} bins, {bucket_count} buckets")


def make_surface(width, height):
    if width < 1 or height < 1:
        raise ValueError(f"Surface size must be positive, got {width}x{height}")
    return np.full((height, width, 3), BG_COLOR, dtype=np.uint8)


class RenderLoopController:
    """
    Two states, IDLE and RUNNING. While running, each ``tick`` pulls the
    latest frame from the source and hands it to the current mode's renderer.
    The caller owns the clock; stopping just means not ticking again.
    """

    def __init__(
        self,
        settings=None,
        mode=RenderMode.SPECTROGRAM,
        width=DEFAULT_RESOLUTION[0],
        height=DEFAULT_RESOLUTION[1],
        scale_width=SCALE_WIDTH,
        bucket_count=BAR_COUNT,
    ):
        if bucket_count < 1:
            raise ValueError(f"bucket_count must be positive, got {bucket_count}")

        self.settings = validate_settings(settings or AnalyserSettings())
        self.config = RenderConfiguration(
            min_db=self.settings.min_db,
            max_db=self.settings.max_db,
            mode=RenderMode(mode),
            bucket_count=bucket_count,
        )
        self.renderers = {
            RenderMode.SPECTROGRAM: WaterfallRenderer(),
            RenderMode.BARS: BarRenderer(),
        }
        self.state = ControllerState.IDLE
        self.source = None
        self.frames_rendered = 0

        # Surfaces outlive sessions so the last image stays on screen after stop.
        self.surface = make_surface(width, height)
        self.scale_surface = make_surface(scale_width, height)
        self.session = None

    @property
    def renderer(self):
        return self.renderers[self.config.mode]

    @property
    def running(self):
        return self.state is ControllerState.RUNNING

    def start(self, source):
        """Begin rendering frames from ``source``."""
        self.stop()

        self.source = source
        source.configure(self.settings.frame_size, self.settings.smoothing)
        source.seek(0)

        self.session = RenderSession(
            sample_rate=source.sample_rate,
            bin_count=self.settings.bin_count,
            surface=self.surface,
            scale_surface=self.scale_surface,
        )
        self.session.rebuild_caches(self.settings.bin_count, self.config.bucket_count)

        self.renderer.reset(self.session)
        self._update_scale_visibility()

        self.state = ControllerState.RUNNING
        self.frames_rendered = 0
        logger.info(
            f"[+] Rendering {self.config.mode.value} at {source.sample_rate} Hz, "
            f"{self.settings.bin_count} bins"
        )

    def stop(self):
        if self.state is ControllerState.IDLE and self.source is None:
            return
        if self.source is not None:
            self.source.close()
        self.source = None
        self.state = ControllerState.IDLE
        logger.info("[+] Stopped.")

    def tick(self):
        """Render one frame. Returns False once there is nothing to render."""
        if not self.running:
            return False

        frame = self.source.read_frame()
        if frame is None:
            logger.info("[i] Frame source finished.")
            self.stop()
            return False

        self.renderer.render(frame, self.config, self.session)
        self.frames_rendered += 1
        return True

    def set_mode(self, mode):
        """Switch visualisation. The surface is cleared before the next tick."""
        mode = RenderMode(mode)
        if mode is self.config.mode:
            return
        self.config.mode = mode
        self.surface[:] = BG_COLOR
        self._update_scale_visibility()
        logger.info(f"[+] Mode: {mode.value}")

    def toggle_mode(self):
        if self.config.mode is RenderMode.SPECTROGRAM:
            self.set_mode(RenderMode.BARS)
        else:
            self.set_mode(RenderMode.SPECTROGRAM)

    def apply_settings(self, settings):
        """Push new analyser settings downstream and rebuild cached mappings."""
        self.settings = validate_settings(settings)
        self.config.min_db = settings.min_db
        self.config.max_db = settings.max_db

        if self.source is not None:
            self.source.configure(settings.frame_size, settings.smoothing)
        if self.session is not None:
            self.session.rebuild_caches(settings.bin_count, self.config.bucket_count)
            if self.session.scale_visible:
                self._draw_scale()

        logger.info(
            f"[+] Settings: frame size {settings.frame_size}, smoothing {settings.smoothing}, "
            f"range {settings.min_db}..{settings.max_db} dB"
        )

    def compose(self):
        """Legend and main surface side by side, legend on the left."""
        return np.hstack([self.scale_surface, self.surface])

    def _update_scale_visibility(self):
        visible = self.renderer.uses_scale
        if self.session is not None:
            self.session.scale_visible = visible
        if visible:
            self._draw_scale()
        else:
            clear_scale(self.scale_surface)

    def _draw_scale(self):
        if self.session is None:
            clear_scale(self.scale_surface)
            return
        draw_frequency_scale(self.scale_surface, self.session.sample_rate, self.session.bin_count)
