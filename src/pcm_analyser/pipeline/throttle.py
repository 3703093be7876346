"""Cooperative throttling by captured sample count.

After each chunk the controller decides whether the caller should give the
event loop a turn before signalling completion. Elapsed time is measured in
samples, not wall-clock time, so a tight producer loop is paced at roughly
one yield per `throttle_ms` of audio.
"""

from __future__ import annotations

import math


class ThrottleController:
    """Tracks samples since the last yield and decides when to yield again.

    The post-yield reduction is `samples % floor(sample_rate / throttle_ms)`,
    a sample-count modulus whose divisor mixes Hz with ms. It is kept as is
    so the yield cadence matches existing producers tuned against it.
    """

    def __init__(self, throttle_ms: float, sample_rate: int):
        self.throttle_ms = throttle_ms
        self.sample_rate = sample_rate
        self.samples_since_yield = 0
        self._modulus = math.floor(sample_rate / throttle_ms) if throttle_ms else 0

    @property
    def enabled(self) -> bool:
        return bool(self.throttle_ms) and self._modulus > 0

    def advance(self, n_samples: int) -> bool:
        """Count `n_samples` new samples; return True if a yield is due now."""
        self.samples_since_yield += n_samples
        if not self.enabled:
            return False
        if self.samples_since_yield / self.sample_rate > self.throttle_ms / 1000:
            self.samples_since_yield %= self._modulus
            return True
        return False

    def reset(self) -> None:
        self.samples_since_yield = 0
