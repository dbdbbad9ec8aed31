"""Pytest configuration and shared fixtures."""

import os

# Headless pygame
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import numpy as np
import pytest

from haloscope.surface import DrawingSurface

# Default sample rate for test audio
TEST_SR = 22050


class RecordingSurface(DrawingSurface):
    """Surface that records draw calls instead of drawing."""

    def __init__(self, width: int = 400, height: int = 300):
        self.width = width
        self.height = height
        self.calls: list[tuple] = []
        self.paths: list[tuple[np.ndarray, bool]] = []
        self.rects: list[tuple[float, float, float, float, float]] = []
        self.caption = ""

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    def clear(self):
        self.calls.append(("clear",))

    def stroke_path(self, points, closed: bool = True):
        self.calls.append(("stroke_path",))
        self.paths.append((np.array(points, dtype=np.float64), closed))

    def fill_rect(self, x, y, width, height, alpha=1.0):
        self.calls.append(("fill_rect",))
        self.rects.append((x, y, width, height, alpha))

    def set_caption(self, text: str):
        self.calls.append(("set_caption", text))
        self.caption = text

    def present(self):
        self.calls.append(("present",))


class StaticSource:
    """Frequency source returning a fixed sample."""

    def __init__(self, data):
        self.data = np.asarray(data, dtype=np.uint8)
        self.calls = 0

    def get_current_magnitudes(self) -> np.ndarray:
        self.calls += 1
        return self.data


@pytest.fixture
def recording_surface() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture
def sample_rate() -> int:
    """Default sample rate for tests."""
    return TEST_SR


@pytest.fixture
def pure_sine(sample_rate: int) -> tuple[np.ndarray, int]:
    """
    Generate a pure 440Hz sine wave (A4 note).

    Returns:
        Tuple of (audio_signal, sample_rate).
    """
    duration = 2.0
    t = np.linspace(0, duration, int(sample_rate * duration), endpoint=False)
    y = 0.5 * np.sin(2 * np.pi * 440.0 * t)
    return y.astype(np.float32), sample_rate


@pytest.fixture
def silence(sample_rate: int) -> tuple[np.ndarray, int]:
    return np.zeros(int(sample_rate * 2.0), dtype=np.float32), sample_rate


@pytest.fixture
def ramp_spectrum() -> np.ndarray:
    """1024 bins rising 0..255."""
    return np.linspace(0, 255, 1024).astype(np.uint8)


@pytest.fixture
def srt_text() -> str:
    return (
        "1\n"
        "00:00:00,000 --> 00:00:02,000\n"
        "A\n"
        "\n"
        "2\n"
        "00:00:03.000 --> 00:00:05.000\n"
        "B\n"
        "second line\n"
    )


@pytest.fixture
def temp_audio_file(tmp_path, pure_sine):
    """Create a temporary audio file for testing file I/O."""
    import soundfile as sf

    y, sr = pure_sine
    audio_path = tmp_path / "test_audio.wav"
    sf.write(audio_path, y, sr)
    return audio_path
