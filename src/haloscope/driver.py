"""
Per-frame orchestration.

A ``FrameDriver`` tick pulls one frequency sample, clears the surface,
strokes the ring, emits and advances particles, then updates the caption
overlay. ``run_loop`` repeats ticks until a ``CancelToken`` fires, and a
``VisualizerSession`` wires one independent set of components together.
"""

import sys
import threading
from typing import Any, Callable, Iterator, Protocol

import numpy as np
import pygame

from haloscope.captions import CaptionCursor, CaptionRecord
from haloscope.config import VisualizerConfig
from haloscope.surface import DrawingSurface, PygameSurface
from haloscope.visualizers.contour import MAX_MAGNITUDE, render_contour
from haloscope.visualizers.particles import ParticleField

MIN_SCALE = 0.1


class FrequencySource(Protocol):
    def get_current_magnitudes(self) -> np.ndarray: ...


class CancelToken:
    """Stops a ``run_loop`` at the top of its next tick."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


def run_loop(
    tick: Callable[[], Any],
    cancel_token: CancelToken,
    fps: int = 60,
    max_frames: int | None = None,
    clock: pygame.time.Clock | None = None,
) -> int:
    """
    Call ``tick`` once per frame until cancelled.

    Args:
        tick: Frame callback. Runs to completion before the next one starts.
        cancel_token: Checked before every tick.
        fps: Target refresh rate; 0 runs unpaced.
        max_frames: Optional upper bound on ticks.
        clock: pygame clock used for pacing (created when fps > 0).

    Returns:
        Number of ticks run.
    """
    if fps > 0 and clock is None:
        clock = pygame.time.Clock()

    frames = 0
    while not cancel_token.cancelled:
        if max_frames is not None and frames >= max_frames:
            break
        tick()
        frames += 1
        if fps > 0:
            clock.tick(fps)
    return frames


class FrameDriver:
    """
    Runs the visual pipeline for one frame.

    Draw order is ring first, then particles, then overlays. Failures in the
    frequency pull or caption lookup only drop that stage's output for the
    frame.
    """

    def __init__(
        self,
        surface: DrawingSurface,
        source: FrequencySource,
        particles: ParticleField,
        captions: CaptionCursor | None = None,
        playback_clock: Callable[[], float] | None = None,
        mirror: Callable[[], bool] | None = None,
        scale: Callable[[], float] | None = None,
        amplitude_gain: float = 120.0,
        radius_divisor: float = 4.0,
        bins: int = 1024,
    ):
        self.surface = surface
        self.source = source
        self.particles = particles
        self.captions = captions or CaptionCursor()
        self.playback_clock = playback_clock
        self.mirror = mirror or (lambda: True)
        self.scale = scale or (lambda: 1.0)
        self.amplitude_gain = amplitude_gain
        self.radius_divisor = radius_divisor

        self.frequency_data = np.zeros(bins, dtype=np.uint8)
        self.caption_text = ""
        self.frame_count = 0
        self.skipped_stages = 0
        self._reported: set[str] = set()

    def _report(self, stage: str, error: Exception):
        self.skipped_stages += 1
        if stage not in self._reported:
            self._reported.add(stage)
            print(f"Failed to {stage}: {error}. Skipping for this frame.", file=sys.stderr)

    def _pull_frequency_data(self) -> np.ndarray:
        try:
            self.frequency_data = np.asarray(self.source.get_current_magnitudes())
        except Exception as e:
            # Keep the previous sample
            self._report("read frequency data", e)
        return self.frequency_data

    def _update_caption(self) -> str:
        if self.playback_clock is None:
            return self.caption_text
        try:
            text = self.captions.active_text(self.playback_clock())
        except Exception as e:
            self._report("update captions", e)
            text = ""
        self.caption_text = text
        self.surface.set_caption(text)
        return text

    def tick(self) -> str:
        """
        Render one frame.

        Returns:
            The caption text shown this frame.
        """
        data = self._pull_frequency_data()

        self.surface.clear()

        width, height = self.surface.size
        center = (width / 2, height / 2)
        scale = float(self.scale())
        radius = min(width, height) / self.radius_divisor * scale

        render_contour(
            self.surface,
            center,
            radius,
            bool(self.mirror()),
            data,
            amplitude_gain=self.amplitude_gain * scale,
        )

        intensity = float(data[0]) / MAX_MAGNITUDE if len(data) else 0.0
        self.particles.spawn(center, intensity)
        self.particles.advance(self.surface)

        text = self._update_caption()
        self.surface.present()
        self.frame_count += 1
        return text


class FrameClock:
    """Playback clock for offline rendering: frame index / fps."""

    def __init__(self, fps: int):
        self.fps = fps
        self.frame = 0

    def __call__(self) -> float:
        return self.frame / self.fps

    def advance(self):
        self.frame += 1


class VisualizerSession:
    """
    One playback session: owns its analyzer, particles, caption cursor,
    surface and driver.
    """

    def __init__(
        self,
        config: VisualizerConfig,
        source: FrequencySource,
        captions: list[CaptionRecord] | None = None,
        surface: DrawingSurface | None = None,
        playback_clock: Callable[[], float] | None = None,
        seed: int | None = None,
    ):
        self.cfg = config
        self.source = source
        self.mirror_enabled = config.mirror
        self.scale = config.scale
        self.surface = surface or PygameSurface(config)
        self.particles = ParticleField(
            decay_rate=config.particle_decay,
            size=config.particle_size,
            spread=config.spawn_spread,
            max_particles=config.max_particles,
            seed=seed,
        )
        self.cursor = CaptionCursor(captions)
        self.driver = FrameDriver(
            surface=self.surface,
            source=source,
            particles=self.particles,
            captions=self.cursor,
            playback_clock=playback_clock,
            mirror=lambda: self.mirror_enabled,
            scale=lambda: self.scale,
            amplitude_gain=config.amplitude_gain,
            radius_divisor=config.radius_divisor,
            bins=config.bins,
        )

    def toggle_mirror(self) -> bool:
        self.mirror_enabled = not self.mirror_enabled
        return self.mirror_enabled

    def set_scale(self, scale: float) -> float:
        """Resize the ring from the next tick on. Clamped to MIN_SCALE."""
        self.scale = max(MIN_SCALE, float(scale))
        return self.scale

    def tick(self) -> str:
        return self.driver.tick()

    def run(self, cancel_token: CancelToken, max_frames: int | None = None, on_frame: Callable[[], Any] | None = None) -> int:
        """Tick at the configured fps until cancelled. ``on_frame`` runs before each tick."""

        def step():
            if on_frame is not None:
                on_frame()
            if not cancel_token.cancelled:
                self.tick()

        return run_loop(step, cancel_token, fps=self.cfg.fps, max_frames=max_frames)

    def render_frames(
        self,
        n_frames: int,
        frame_clock: FrameClock | None = None,
        progress_callback: callable = None,
    ) -> Iterator[np.ndarray]:
        """
        Render frames offline as a generator.

        Args:
            n_frames: Number of frames to render.
            frame_clock: Advanced after every frame. Pass the same clock the
                analyzer and captions read so they step one frame per tick.
            progress_callback: Optional callback(current, total).

        Yields:
            (H, W, 3) uint8 RGB arrays, one per frame.
        """
        if not hasattr(self.surface, "to_array"):
            raise TypeError("Offline rendering needs a surface with to_array()")

        for i in range(n_frames):
            self.tick()
            yield self.surface.to_array()
            if frame_clock is not None:
                frame_clock.advance()

            if progress_callback:
                progress_callback(i + 1, n_frames)

