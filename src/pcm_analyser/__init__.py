"""Streaming PCM spectral analyser - capture, time buffer, smoothed FFT, throttle, pass-through."""

from pcm_analyser.audio.config import AnalyserConfig, PcmFormat
from pcm_analyser.pipeline import Analyser, AnalyserStream

__all__ = ["Analyser", "AnalyserConfig", "AnalyserStream", "PcmFormat"]
