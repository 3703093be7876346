"""Streaming analyser: capture raw PCM chunks, poll time/frequency data.

Capture: chunk -> decode channel -> time buffer -> (every fft_size samples)
smoothed spectrum -> throttle decision. Accessors are read-only snapshots
and mirror the Web Audio AnalyserNode getters.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Mapping, MutableSequence, Optional, TypeVar, Union

import numpy as np

from pcm_analyser.audio.buffer import TimeBuffer
from pcm_analyser.audio.config import FLOAT_FORMAT, UINT8_FORMAT, AnalyserConfig
from pcm_analyser.audio.pcm import Chunk, convert_samples, decode_channel
from pcm_analyser.pipeline.throttle import ThrottleController
from pcm_analyser.spectrum.estimator import SpectralEstimator

_LOG = logging.getLogger(__name__)

Dest = TypeVar("Dest", bound=Union[np.ndarray, MutableSequence])
Callback = Callable[[], None]

# Byte value of a silent sample (float 0.0 as unsigned 8-bit)
_BYTE_SILENCE = 128


def _fill(dest: Any, values: np.ndarray) -> None:
    """Write values into the head of dest (numpy array or list)."""
    n = len(values)
    if isinstance(dest, np.ndarray):
        dest[:n] = values
    else:
        dest[:n] = values.tolist()


def _to_bytes(values: np.ndarray) -> np.ndarray:
    return convert_samples(values, FLOAT_FORMAT, UINT8_FORMAT)


class Analyser:
    """Captures one channel of a PCM stream and keeps a smoothed spectrum.

    Interface:
      analyser = Analyser(AnalyserConfig(fft_size=2048))
      analyser.write(chunk, callback)        # capture + (maybe deferred) completion
      analyser.get_float_frequency_data(np.zeros(analyser.frequency_bin_count))
      analyser.get_time_data(512)

    Capture calls must arrive sequentially: each one completes (its callback
    has run) before the next starts.
    """

    def __init__(
        self,
        config: Optional[AnalyserConfig] = None,
        **options: Any,
    ):
        """
        Args:
            config: Full configuration. When omitted, keyword options are
                overlaid on the defaults (see AnalyserConfig.from_options).
        """
        if config is not None and options:
            raise TypeError("Pass either config or keyword options, not both")
        self.config = config or AnalyserConfig.from_options(options)

        self._buffer = TimeBuffer(self.config.buffer_size, dtype=np.float32)
        self._estimator = SpectralEstimator(self.config.fft_size, self.config.smoothing_time_constant)
        self._throttle = ThrottleController(self.config.throttle, self.config.sample_rate)
        self._samples_since_transform = 0

    @classmethod
    def from_options(cls, options: Optional[Mapping[str, Any]] = None, **overrides: Any) -> "Analyser":
        return cls(AnalyserConfig.from_options(options, **overrides))

    # ---------- Configuration views ----------

    @property
    def fft_size(self) -> int:
        return self.config.fft_size

    @property
    def frequency_bin_count(self) -> int:
        return self.config.frequency_bin_count

    @property
    def smoothing_time_constant(self) -> float:
        return self.config.smoothing_time_constant

    @property
    def min_decibels(self) -> float:
        return self.config.min_decibels

    @property
    def max_decibels(self) -> float:
        return self.config.max_decibels

    @property
    def sample_rate(self) -> int:
        return self.config.sample_rate

    @property
    def samples_since_transform(self) -> int:
        return self._samples_since_transform

    @property
    def samples_since_yield(self) -> int:
        return self._throttle.samples_since_yield

    @property
    def transforms(self) -> int:
        """Number of spectrum updates so far."""
        return self._estimator.transforms

    @property
    def buffered(self) -> int:
        """Samples currently held in the time buffer."""
        return len(self._buffer)

    # ---------- Capture ----------

    def capture(self, chunk: Chunk) -> bool:
        """Capture one raw chunk.

        Returns:
            True if the caller should yield to the event loop before
            signalling completion, False to complete synchronously.
        """
        samples = decode_channel(chunk, self.config.channel, self.config.format)
        self._buffer.append(samples)

        n = len(samples)
        self._samples_since_transform += n

        if self._samples_since_transform >= self.fft_size:
            self._samples_since_transform = 0
            self._estimator.update(self._buffer.window(self.fft_size))

        return self._throttle.advance(n)

    def write(self, chunk: Chunk, callback: Optional[Callback] = None) -> bool:
        """Capture a chunk and signal completion.

        The callback runs before this returns, unless the throttle asks for a
        yield: it is then scheduled on the next turn of the running asyncio
        loop. Outside a running loop there is nothing to yield to and the
        callback runs synchronously.

        Returns:
            True if completion was deferred.
        """
        defer = self.capture(chunk)
        if defer:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                _LOG.debug("Throttle yield requested without a running loop")
                defer = False
            else:
                if callback is not None:
                    loop.call_soon(callback)
                return True
        if callback is not None:
            callback()
        return defer

    def reset(self) -> None:
        """Drop captured history, spectrum and counters."""
        self._buffer.clear()
        self._estimator.reset()
        self._throttle.reset()
        self._samples_since_transform = 0

    # ---------- Frequency domain ----------

    def get_float_frequency_data(self, dest: Optional[Dest]) -> Optional[Dest]:
        """Copy up to frequency_bin_count spectrum values into dest."""
        if dest is None:
            return dest
        n = min(self.frequency_bin_count, len(dest))
        _fill(dest, self._estimator.spectrum[:n].copy())
        return dest

    def get_byte_frequency_data(self, dest: Optional[Dest]) -> Optional[Dest]:
        """Like get_float_frequency_data, quantized to unsigned 8-bit.

        Values are mapped as samples ([-1, 1] -> [0, 255]); the decibel range
        is not applied here (see get_decibel_frequency_data).
        """
        if dest is None:
            return dest
        n = min(self.frequency_bin_count, len(dest))
        _fill(dest, _to_bytes(self._estimator.spectrum[:n]))
        return dest

    def get_decibel_frequency_data(self, dest: Optional[Dest]) -> Optional[Dest]:
        """Spectrum magnitudes in dB, clipped to [min_decibels, max_decibels]."""
        if dest is None:
            return dest
        n = min(self.frequency_bin_count, len(dest))
        mag = np.abs(self._estimator.spectrum[:n].astype(np.float64))
        with np.errstate(divide="ignore"):
            db = 20.0 * np.log10(mag)
        _fill(dest, np.clip(db, self.min_decibels, self.max_decibels))
        return dest

    def get_frequency_data(self, size: Optional[int] = None) -> np.ndarray:
        """New array with the first min(size or fft_size, fft_size) bins."""
        size = size or self.fft_size
        spectrum = self._estimator.spectrum
        return spectrum[: min(size, len(spectrum))].copy()

    # ---------- Time domain ----------

    def _time_window(self, size: int) -> tuple[int, np.ndarray]:
        n = min(size, self.fft_size)
        return n, self._buffer.window(n)

    def get_float_time_domain_data(self, dest: Optional[Dest]) -> Optional[Dest]:
        """Copy the newest min(len(dest), fft_size) samples into dest.

        The newest sample lands at the highest filled index; positions
        without history yet are written as silence.
        """
        if dest is None:
            return dest
        n, window = self._time_window(len(dest))
        out = np.zeros(n, dtype=np.float32)
        if len(window):
            out[n - len(window) :] = window
        _fill(dest, out)
        return dest

    def get_byte_time_domain_data(self, dest: Optional[Dest]) -> Optional[Dest]:
        """Like get_float_time_domain_data, quantized to unsigned 8-bit."""
        if dest is None:
            return dest
        n, window = self._time_window(len(dest))
        out = np.full(n, _BYTE_SILENCE, dtype=np.int64)
        if len(window):
            out[n - len(window) :] = _to_bytes(window)
        _fill(dest, out)
        return dest

    def get_time_data(self, size: Optional[int] = None) -> np.ndarray:
        """New array with the last min(size or fft_size, buffered) samples."""
        size = size or self.fft_size
        return self._buffer.window(size)
