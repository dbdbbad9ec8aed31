"""
Haloscope: real-time audio-reactive ring, particles and captions.
"""

from haloscope.captions import (
    CaptionCursor,
    CaptionRecord,
    InvalidTimecodeError,
    load_subtitles,
    parse_subtitles,
    parse_timecode,
)
from haloscope.config import VisualizerConfig
from haloscope.driver import CancelToken, FrameClock, FrameDriver, VisualizerSession, run_loop
from haloscope.visualizers.contour import contour_points, render_contour
from haloscope.visualizers.particles import Particle, ParticleField

__version__ = "0.1.0"
__all__ = [
    "CaptionCursor",
    "CaptionRecord",
    "InvalidTimecodeError",
    "load_subtitles",
    "parse_subtitles",
    "parse_timecode",
    "VisualizerConfig",
    "CancelToken",
    "FrameClock",
    "FrameDriver",
    "VisualizerSession",
    "run_loop",
    "contour_points",
    "render_contour",
    "Particle",
    "ParticleField",
]
