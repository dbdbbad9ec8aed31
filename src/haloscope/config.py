"""
Configuration for the haloscope visualizer.
"""

from dataclasses import dataclass, replace


# Render profiles: resolution, frame rate and encode quality
PROFILES = {
    "low": {"width": 1280, "height": 720, "fps": 30, "quality": "fast"},
    "medium": {"width": 1920, "height": 1080, "fps": 60, "quality": "medium"},
    "high": {"width": 3840, "height": 2160, "fps": 60, "quality": "high"},
}


@dataclass
class VisualizerConfig:
    """Configuration for one visualizer session."""

    width: int = 1280
    height: int = 720
    fps: int = 60

    # Analysis (AnalyserNode-style byte spectrum)
    fft_size: int = 2048
    min_decibels: float = -100.0
    max_decibels: float = -30.0
    smoothing: float = 0.8

    # Ring
    amplitude_gain: float = 120.0
    radius_divisor: float = 4.0
    scale: float = 1.0  # multiplies ring radius and gain
    mirror: bool = True
    stroke_width: int = 1

    # Particles
    particle_decay: float = 0.01
    particle_size: int = 2
    spawn_spread: float = 3.0
    max_particles: int | None = None  # None = unbounded

    # Colors
    background_color: tuple[int, int, int] = (0, 0, 0)
    stroke_color: tuple[int, int, int] = (255, 255, 255)
    particle_color: tuple[int, int, int] = (255, 255, 255)
    caption_color: tuple[int, int, int] = (255, 255, 255)

    # Captions
    caption_font_size: int = 36
    caption_margin: int = 48

    @property
    def bins(self) -> int:
        """Number of frequency bins per sample."""
        return self.fft_size // 2

    @classmethod
    def from_profile(cls, name: str, **overrides) -> "VisualizerConfig":
        """
        Build a config from a named profile.

        Args:
            name: "low", "medium" or "high".
            **overrides: Field values that replace the profile defaults.
                None values are ignored so argparse results can be passed through.

        Returns:
            A new VisualizerConfig.
        """
        if name not in PROFILES:
            raise ValueError(f"Unknown profile: {name!r} (choose from {', '.join(PROFILES)})")
        profile = PROFILES[name]
        cfg = cls(width=profile["width"], height=profile["height"], fps=profile["fps"])
        values = {k: v for k, v in overrides.items() if v is not None}
        return replace(cfg, **values)
