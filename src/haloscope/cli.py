"""
CLI entry point for haloscope.

Usage:
    haloscope <audio_file> [options]              # live window
    haloscope <audio_file> -o out.mp4 [options]   # offline render
"""

import argparse
import sys
import time
from pathlib import Path

import pygame

from haloscope.captions import CaptionRecord, load_subtitles
from haloscope.config import PROFILES, VisualizerConfig
from haloscope.core.analyzer import SpectrumAnalyzer, load_audio
from haloscope.driver import CancelToken, FrameClock, VisualizerSession
from haloscope.encoder import encode_frames
from haloscope.surface import LogoOverlay, PygameSurface

LOGO_STEP = 10
SCALE_STEP = 0.1


def _progress_bar(current: int, total: int, width: int = 35):
    """Print a progress bar to stdout."""
    pct = current / max(total, 1) * 100
    filled = int(width * current / max(total, 1))
    bar = "#" * filled + "-" * (width - filled)
    if sys.stdout.isatty():
        sys.stdout.write(f"\r[{bar}] {pct:5.1f}%  frame {current}/{total}")
        sys.stdout.flush()
        if current >= total:
            sys.stdout.write("\n")
    else:
        if current % max(1, total // 20) == 0 or current >= total:
            print(f"{pct:5.1f}%  frame {current}/{total}", flush=True)


class MixerClock:
    """Playback position of ``pygame.mixer.music`` in seconds."""

    def __init__(self):
        self._last = 0.0

    def __call__(self) -> float:
        pos = pygame.mixer.music.get_pos()
        # -1 once playback has stopped
        if pos >= 0:
            self._last = pos / 1000.0
        return self._last


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="haloscope",
        description="Audio-reactive spectrum ring with particles and captions",
    )

    parser.add_argument("audio", type=Path, help="Input audio file (wav, mp3, flac, ogg)")
    parser.add_argument("-s", "--subtitles", type=Path, default=None, help="Caption file (.srt or .vtt)")
    parser.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Render offline to this MP4 instead of opening a window",
    )

    # Resolution & Profile
    parser.add_argument(
        "-p", "--profile", type=str, default="low",
        choices=list(PROFILES),
        help="Target profile (low: 720p 30fps, medium: 1080p 60fps, high: 4k 60fps)",
    )
    parser.add_argument("--width", type=int, default=None, help="Width (overrides profile)")
    parser.add_argument("--height", type=int, default=None, help="Height (overrides profile)")
    parser.add_argument("-f", "--fps", type=int, default=None, help="Frames per second (overrides profile)")

    # Visual
    parser.add_argument("--no-mirror", action="store_true", help="Start with mirroring off (toggle with 'm')")
    parser.add_argument("--gain", type=float, default=None, help="Ring amplitude gain in pixels (default: 120)")
    parser.add_argument(
        "--scale", type=float, default=None,
        help="Ring size multiplier (default: 1.0; +/- adjust it live)",
    )
    parser.add_argument(
        "--max-particles", type=int, default=None,
        help="Cap on live particles; oldest are dropped (default: unbounded)",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed for particle motion")

    # Logo
    parser.add_argument("--logo", type=Path, default=None, help="Logo image drawn over the visuals")
    parser.add_argument("--logo-scale", type=float, default=1.0, help="Logo scale factor")
    parser.add_argument(
        "--logo-offset", type=float, nargs=2, default=(0.0, 0.0), metavar=("X", "Y"),
        help="Logo offset from the center in pixels",
    )

    # Limits / quality
    parser.add_argument("--max-duration", type=float, default=None, help="Limit output to N seconds")
    parser.add_argument(
        "-q", "--quality", type=str, default=None,
        choices=["high", "medium", "fast"],
        help="Encoding quality (defaults to profile quality)",
    )
    return parser


def _load_captions(path: Path | None) -> list[CaptionRecord]:
    if path is None:
        return []
    captions = load_subtitles(path)
    print(f"  Captions: {len(captions)}")
    return captions


def _load_logo(args) -> LogoOverlay | None:
    if args.logo is None:
        return None
    logo = LogoOverlay.from_file(args.logo, scale=args.logo_scale)
    logo.move(*args.logo_offset)
    return logo


def render_offline(args, config: VisualizerConfig, quality: str) -> Path:
    """Render every frame with a frame-index clock and encode to MP4."""
    y, sr = load_audio(args.audio)
    duration = len(y) / sr
    if args.max_duration is not None:
        duration = min(duration, args.max_duration)
    total_frames = int(duration * config.fps)

    print(f"  Duration: {duration:.1f}s")
    print(f"  Frames: {total_frames}")

    frame_clock = FrameClock(config.fps)
    analyzer = SpectrumAnalyzer(y, sr, frame_clock, config)
    surface = PygameSurface(config, logo=_load_logo(args))
    session = VisualizerSession(
        config,
        analyzer,
        captions=_load_captions(args.subtitles),
        surface=surface,
        playback_clock=frame_clock,
        seed=args.seed,
    )

    print(f"\nRendering {total_frames} frames at {config.width}x{config.height} @ {config.fps}fps")
    t0 = time.time()
    frames = session.render_frames(total_frames, frame_clock=frame_clock, progress_callback=_progress_bar)
    encode_frames(
        frames,
        audio_path=args.audio,
        output_path=args.output,
        width=config.width,
        height=config.height,
        fps=config.fps,
        quality=quality,
        duration=duration,
        total_frames=total_frames,
    )

    elapsed = time.time() - t0
    file_size_mb = args.output.stat().st_size / 1024 / 1024
    print(f"\nDone! {file_size_mb:.1f} MB")
    print(f"  Render+encode took {elapsed:.1f}s ({total_frames / max(elapsed, 0.01):.1f} fps)")
    print(f"  Output: {args.output}")
    return args.output


def run_live(args, config: VisualizerConfig) -> int:
    """Open a window, play the audio and draw until it ends or the window closes."""
    y, sr = load_audio(args.audio)

    pygame.init()
    screen = pygame.display.set_mode((config.width, config.height))
    pygame.display.set_caption(f"haloscope - {args.audio.name}")
    pygame.mixer.init()
    pygame.mixer.music.load(str(args.audio))

    clock = MixerClock()
    analyzer = SpectrumAnalyzer(y, sr, clock, config)
    logo = _load_logo(args)
    session = VisualizerSession(
        config,
        analyzer,
        captions=_load_captions(args.subtitles),
        surface=PygameSurface(config, target=screen, logo=logo),
        playback_clock=clock,
        seed=args.seed,
    )

    token = CancelToken()

    def handle_events():
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                token.cancel()
            elif event.type == pygame.KEYDOWN:
                if event.key in (pygame.K_ESCAPE, pygame.K_q):
                    token.cancel()
                elif event.key == pygame.K_m:
                    state = session.toggle_mirror()
                    print(f"Mirroring {'on' if state else 'off'}")
                elif event.key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
                    session.set_scale(session.scale + SCALE_STEP)
                elif event.key in (pygame.K_MINUS, pygame.K_KP_MINUS):
                    session.set_scale(session.scale - SCALE_STEP)
                elif logo is not None and event.key == pygame.K_LEFT:
                    logo.nudge(-LOGO_STEP, 0)
                elif logo is not None and event.key == pygame.K_RIGHT:
                    logo.nudge(LOGO_STEP, 0)
                elif logo is not None and event.key == pygame.K_UP:
                    logo.nudge(0, -LOGO_STEP)
                elif logo is not None and event.key == pygame.K_DOWN:
                    logo.nudge(0, LOGO_STEP)
        if not pygame.mixer.music.get_busy():
            token.cancel()
        if args.max_duration is not None and clock() >= args.max_duration:
            token.cancel()

    pygame.mixer.music.play()
    try:
        frames = session.run(token, on_frame=handle_events)
    finally:
        pygame.mixer.music.stop()
        pygame.quit()

    print(f"Played {frames} frames")
    return frames


def main():
    parser = build_parser()
    args = parser.parse_args()

    if not args.audio.exists():
        print(f"Error: Audio file not found: {args.audio}", file=sys.stderr)
        sys.exit(1)
    if args.subtitles is not None and not args.subtitles.exists():
        print(f"Error: Subtitle file not found: {args.subtitles}", file=sys.stderr)
        sys.exit(1)
    if args.logo is not None and not args.logo.exists():
        print(f"Error: Logo image not found: {args.logo}", file=sys.stderr)
        sys.exit(1)

    config = VisualizerConfig.from_profile(
        args.profile,
        width=args.width,
        height=args.height,
        fps=args.fps,
        amplitude_gain=args.gain,
        scale=args.scale,
        max_particles=args.max_particles,
        mirror=False if args.no_mirror else None,
    )
    quality = args.quality or PROFILES[args.profile]["quality"]

    print(f"Loading audio: {args.audio}")
    if args.output is not None:
        render_offline(args, config, quality)
    else:
        run_live(args, config)


if __name__ == "__main__":
    main()
