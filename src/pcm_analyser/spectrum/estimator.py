"""Exponentially smoothed spectrum of the most recent analysis window.

Each update folds one forward transform into the persistent spectrum:

    spectrum[i] = k * spectrum[i] + (1 - k) * Re(X[i]) / N

The real part of each bin stands in for its magnitude, so the smoothed
values keep the sign of Re(X). Consumers expecting |X| must not assume
non-negative output.
"""

from __future__ import annotations

import logging

import numpy as np

from pcm_analyser.spectrum.fft import forward_transform

_LOG = logging.getLogger(__name__)


class SpectralEstimator:
    """Maintains a smoothed N-bin spectrum.

    Interface:
      estimator = SpectralEstimator(fft_size=1024, smoothing_time_constant=0.2)
      estimator.update(window)   # window: newest fft_size samples
      estimator.spectrum         # float32, shape (fft_size,)
    """

    def __init__(self, fft_size: int, smoothing_time_constant: float = 0.2):
        """
        Args:
            fft_size: Transform size N; also the spectrum length.
            smoothing_time_constant: Weight k kept from the previous spectrum.
        """
        self.fft_size = fft_size
        self.smoothing_time_constant = smoothing_time_constant
        self._spectrum = np.zeros(fft_size, dtype=np.float32)
        self._transforms = 0

    @property
    def spectrum(self) -> np.ndarray:
        """Smoothed spectrum (live view, do not mutate)."""
        return self._spectrum

    @property
    def transforms(self) -> int:
        """Number of updates applied since construction or reset."""
        return self._transforms

    def _prepare(self, window: np.ndarray) -> np.ndarray:
        window = np.asarray(window, dtype=np.float64)
        n = self.fft_size
        if len(window) >= n:
            return window[-n:].copy()
        # Short history: pad silence before the oldest sample
        padded = np.zeros(n, dtype=np.float64)
        if len(window):
            padded[n - len(window) :] = window
        return padded

    def update(self, window: np.ndarray) -> np.ndarray:
        """Transform the window and blend it into the smoothed spectrum.

        Returns:
            The updated spectrum.
        """
        real = self._prepare(window)
        imag = np.zeros(self.fft_size, dtype=np.float64)
        forward_transform(real, imag)

        k = self.smoothing_time_constant
        blended = k * self._spectrum.astype(np.float64) + (1.0 - k) * real / self.fft_size
        self._spectrum[:] = blended
        self._transforms += 1
        _LOG.debug("Spectrum update #%d (k=%.3f)", self._transforms, k)
        return self._spectrum

    def reset(self) -> None:
        """Zero the spectrum."""
        self._spectrum.fill(0.0)
        self._transforms = 0
