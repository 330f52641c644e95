import logging
import sys

import librosa
import numpy as np

from specvis.constants import DEFAULT_FPS

logger = logging.getLogger(__name__)


class FileFrameSource:
    """
    Plays an audio file (or an in-memory signal) through a short-time
    spectrum analyser and hands out one frame of per-bin dB values per read.
    Nothing is analysed until the first call to ``configure``.
    """

    def __init__(self, filepath=None, signal=None, sr=None, fps=DEFAULT_FPS):
        if filepath is not None:
            logger.info(f"[+] Loading audio: {filepath}...")
            try:
                # Load audio with original sampling rate
                self.y, self.sr = librosa.load(filepath, sr=None, mono=True)
            except Exception as e:
                sys.exit(f"[!] Error loading audio file: {e}")
        elif signal is not None and sr:
            self.y = np.asarray(signal, dtype=np.float32)
            self.sr = int(sr)
        else:
            raise ValueError("Either filepath or signal and sr are required")

        self.duration = librosa.get_duration(y=self.y, sr=self.sr)
        self.fps = fps
        self.hop_length = max(1, int(round(self.sr / fps)))
        self.frame_size = None
        self.smoothing = None
        self.S_dB = None
        self.position = 0

    @property
    def sample_rate(self):
        return self.sr

    @property
    def bin_count(self):
        return self.frame_size // 2 if self.frame_size else 0

    def configure(self, frame_size, smoothing):
        """
        Recompute the spectra for a new analysis size or smoothing constant.
        The playhead keeps its position in seconds.
        """
        if frame_size == self.frame_size and smoothing == self.smoothing:
            return
        self.frame_size = frame_size
        self.smoothing = smoothing

        logger.info(f"[+] Analyzing spectrum (frame size {frame_size}, smoothing {smoothing})...")
        self._calculate_spectrogram()

    def _calculate_spectrogram(self):
        """
        Blackman-windowed STFT, magnitudes averaged over time, then decibels.
        """
        spectrum = librosa.stft(
            self.y,
            n_fft=self.frame_size,
            hop_length=self.hop_length,
            window="blackman",
            center=True,
        )
        magnitude = np.abs(spectrum[: self.bin_count]) / self.frame_size

        # Exponential moving average between successive frames
        smoothed = np.empty_like(magnitude)
        previous = np.zeros(self.bin_count, dtype=magnitude.dtype)
        for i in range(magnitude.shape[1]):
            previous = self.smoothing * previous + (1 - self.smoothing) * magnitude[:, i]
            smoothed[:, i] = previous

        self.S_dB = librosa.amplitude_to_db(smoothed, ref=1.0, amin=1e-10, top_db=None)

    def seek(self, t):
        """Move the playhead to time ``t`` in seconds."""
        frame_index = librosa.time_to_frames(t, sr=self.sr, hop_length=self.hop_length)
        self.position = max(0, int(frame_index))

    def read_frame(self):
        """
        Returns the next frame of dB values, or None when the audio is exhausted.
        """
        if self.S_dB is None or self.position >= self.S_dB.shape[1]:
            return None
        frame = self.S_dB[:, self.position]
        self.position += 1
        return frame

    def close(self):
        self.position = self.S_dB.shape[1] if self.S_dB is not None else 0
