"""
Live spectrum analysis.

Produces one byte-scaled frequency sample per frame from a decoded audio
signal and a playback clock, the same way a browser AnalyserNode does:
Blackman window, FFT magnitude, exponential smoothing over time, then a
linear map from [min_decibels, max_decibels] onto 0-255.
"""

from pathlib import Path
from typing import Callable, Union

import librosa
import numpy as np

from haloscope.config import VisualizerConfig


def load_audio(
    audio_path: Union[str, Path],
    sr: int | None = None,
) -> tuple[np.ndarray, int]:
    """
    Load audio from file as mono float32.

    Args:
        audio_path: Path to audio file (wav, mp3, flac).
        sr: Target sample rate. None preserves original.

    Returns:
        Tuple of (audio_signal, sample_rate).
    """
    y, sr_out = librosa.load(audio_path, sr=sr, mono=True)
    return y.astype(np.float32), sr_out


class PassThroughFilter:
    """Hook for an audio filter stage. Returns the signal unchanged."""

    def apply(self, signal: np.ndarray) -> np.ndarray:
        return signal


class SpectrumAnalyzer:
    """
    Frequency-magnitude source for the frame driver.

    ``clock`` returns the current playback position in seconds; each call to
    ``get_current_magnitudes`` analyses the ``fft_size`` samples ending there.
    """

    def __init__(
        self,
        signal: np.ndarray,
        sample_rate: int,
        clock: Callable[[], float],
        config: VisualizerConfig | None = None,
        audio_filter: PassThroughFilter | None = None,
    ):
        self.cfg = config or VisualizerConfig()
        self.audio_filter = audio_filter or PassThroughFilter()
        self.signal = self.audio_filter.apply(np.asarray(signal, dtype=np.float32))
        self.sample_rate = sample_rate
        self.clock = clock

        n = self.cfg.fft_size
        self.window = np.blackman(n).astype(np.float32)
        self._smoothed = np.zeros(self.cfg.bins, dtype=np.float64)
        # Overwritten in place every frame
        self.buffer = np.zeros(self.cfg.bins, dtype=np.uint8)

    @property
    def duration(self) -> float:
        return len(self.signal) / self.sample_rate

    def _frame_at(self, time: float) -> np.ndarray:
        """``fft_size`` samples ending at ``time``, zero-padded outside the signal."""
        n = self.cfg.fft_size
        end = int(round(time * self.sample_rate))
        start = end - n

        frame = np.zeros(n, dtype=np.float32)
        src_start = max(start, 0)
        src_end = min(end, len(self.signal))
        if src_end > src_start:
            frame[src_start - start:src_end - start] = self.signal[src_start:src_end]
        return frame

    def analyze_frame(self, frame: np.ndarray) -> np.ndarray:
        """Smooth and byte-scale the spectrum of one ``fft_size`` frame."""
        cfg = self.cfg
        spectrum = np.fft.rfft(frame * self.window)[: cfg.bins]
        magnitude = np.abs(spectrum) / cfg.fft_size

        self._smoothed = cfg.smoothing * self._smoothed + (1.0 - cfg.smoothing) * magnitude

        with np.errstate(divide="ignore"):
            db = 20.0 * np.log10(self._smoothed)
        scaled = 255.0 * (db - cfg.min_decibels) / (cfg.max_decibels - cfg.min_decibels)
        self.buffer[:] = np.clip(np.nan_to_num(scaled, nan=0.0, neginf=0.0), 0, 255).astype(np.uint8)
        return self.buffer

    def get_current_magnitudes(self) -> np.ndarray:
        """Frequency sample for the clock's current position (N uint8 values)."""
        return self.analyze_frame(self._frame_at(self.clock()))

    def reset(self):
        self._smoothed[:] = 0.0
        self.buffer[:] = 0
