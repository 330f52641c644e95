#!/usr/bin/env python3
"""
Spectrum Visualiser CLI Tool
============================

Turns an audio file into a scrolling waterfall spectrogram or a
log-bucketed bar chart. Frames are rendered one tick at a time, either
into a video file or into a live preview window.

Features:
- Log-frequency waterfall with a frequency legend.
- 64 musically spaced bars with a labelled frequency baseline.
- Perceptual colour ramp and amplitude compression.

Usage:
    python -m specvis input.wav --output result.mp4
    python -m specvis input.wav --mode bars --preview
    python -m specvis -h (for help)

Dependencies:
    pip install numpy librosa moviepy opencv-python soundfile
"""

import argparse
import logging
import os
import sys

import cv2
from moviepy import AudioFileClip, VideoClip

from specvis.audio_analyser import FileFrameSource
from specvis.constants import (
    BAR_COUNT,
    DEFAULT_FPS,
    DEFAULT_RESOLUTION,
    FRAME_SIZE,
    MAX_DB,
    MIN_DB,
    SCALE_WIDTH,
    SMOOTHING_FACTOR,
)
from specvis.render_loop import RenderLoopController, RenderMode
from specvis.settings import AnalyserSettings, ConfigError

logger = logging.getLogger("specvis")

PREVIEW_WINDOW = "specvis"


def build_parser():
    parser = argparse.ArgumentParser(
        description="Render a spectrogram or bar visualisation from an audio file."
    )
    parser.add_argument("input", help="Path to input audio file (WAV/MP3/FLAC)")
    parser.add_argument(
        "--output", "-o", default="output.mp4", help="Path to output video file"
    )
    parser.add_argument(
        "--mode",
        choices=[m.value for m in RenderMode],
        default=RenderMode.SPECTROGRAM.value,
        help="Visualisation mode",
    )
    parser.add_argument(
        "--frame-size", type=int, default=FRAME_SIZE, help="Analysis size (power of two)"
    )
    parser.add_argument(
        "--smoothing", type=float, default=SMOOTHING_FACTOR, help="Smoothing between frames (0-1)"
    )
    parser.add_argument("--min-db", type=float, default=MIN_DB, help="Level drawn as silence")
    parser.add_argument("--max-db", type=float, default=MAX_DB, help="Level drawn as full scale")
    parser.add_argument("--bars", type=int, default=BAR_COUNT, help="Number of bars in bars mode")
    parser.add_argument(
        "--width", type=int, default=DEFAULT_RESOLUTION[0], help="Video width (legend included)"
    )
    parser.add_argument("--height", type=int, default=DEFAULT_RESOLUTION[1], help="Video height")
    parser.add_argument("--fps", type=int, default=DEFAULT_FPS, help="Frames per second")
    parser.add_argument(
        "--duration", type=int, help="Limit duration in seconds (optional)"
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Show a live window instead of writing a video (m: toggle mode, q: quit)",
    )
    return parser


def run_preview(controller, source, fps, duration=None):
    """
    Tick the controller from an OpenCV window until the audio ends, the
    duration limit is reached or the user quits.
    """
    delay_ms = max(1, int(1000 / fps))
    max_frames = int(round(duration * fps)) if duration else None
    controller.start(source)
    try:
        while controller.tick():
            if max_frames is not None and controller.frames_rendered >= max_frames:
                controller.stop()
            cv2.imshow(PREVIEW_WINDOW, controller.compose())
            key = cv2.waitKey(delay_ms) & 0xFF
            if key in (ord("q"), 27):
                controller.stop()
            elif key == ord("m"):
                controller.toggle_mode()
    finally:
        cv2.destroyAllWindows()


def run_export(controller, source, args, duration):
    controller.start(source)
    last = {"t": None, "frame": None}

    def make_frame_wrapper(t):
        # MoviePy may ask for the same timestamp twice; only tick on new ones.
        if t != last["t"]:
            source.seek(t)
            controller.tick()
            last["t"] = t
            last["frame"] = cv2.cvtColor(controller.compose(), cv2.COLOR_BGR2RGB)
        return last["frame"]

    video_clip = VideoClip(make_frame_wrapper, duration=duration)

    # Attach original audio
    audio_clip = AudioFileClip(args.input)
    audio_clip = audio_clip.subclipped(0, duration)
    video_clip = video_clip.with_audio(audio_clip)

    logger.info("[+] Rendering video... (This may take a while)")
    video_clip.write_videofile(
        args.output,
        fps=args.fps,
        codec="libx264",
        audio_codec="aac",
        threads=4,
        preset="medium",
        logger="bar",
    )
    controller.stop()
    logger.info(f"[+] Done! Saved to {args.output}")


def main(argv=None):
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    args = build_parser().parse_args(argv)

    # 1. Validation
    if not os.path.exists(args.input):
        sys.exit(f"[!] Input file not found: {args.input}")

    settings = AnalyserSettings(
        frame_size=args.frame_size,
        smoothing=args.smoothing,
        min_db=args.min_db,
        max_db=args.max_db,
    )
    try:
        controller = RenderLoopController(
            settings=settings,
            mode=args.mode,
            width=args.width - SCALE_WIDTH,
            height=args.height,
            bucket_count=args.bars,
        )
    except (ConfigError, ValueError) as e:
        sys.exit(f"[!] Invalid configuration: {e}")

    # 2. Analyze Audio
    source = FileFrameSource(args.input, fps=args.fps)

    duration = source.duration
    if args.duration and args.duration < duration:
        duration = args.duration
        logger.info(f"[i] Truncating duration to {duration} seconds.")

    logger.info(f"[+] Preparing render: {args.width}x{args.height} @ {args.fps}fps")
    logger.info(f"[+] Duration: {duration:.2f} seconds")

    # 3. Render
    if args.preview:
        run_preview(controller, source, args.fps, duration)
    else:
        run_export(controller, source, args, duration)


if __name__ == "__main__":
    main()
