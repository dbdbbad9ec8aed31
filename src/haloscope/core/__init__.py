"""Audio analysis."""

from haloscope.core.analyzer import PassThroughFilter, SpectrumAnalyzer, load_audio
