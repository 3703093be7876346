"""Forward transform and smoothed spectrum."""

from pcm_analyser.spectrum.estimator import SpectralEstimator
from pcm_analyser.spectrum.fft import forward_transform

__all__ = ["SpectralEstimator", "forward_transform"]
