"""Centralized PCM format and analyser configuration.

Defaults:
- PCM: 44.1 kHz, stereo, 16-bit signed little-endian, interleaved
- Analysis: FFT 1024, smoothing 0.2, 1 s time buffer, channel 0
- Throttle: yield every 50 ms of captured audio
- Display range: -90 dB .. -30 dB
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields, replace
from typing import Any, Mapping, Optional

import numpy as np

_LOG = logging.getLogger(__name__)

_INT_DEPTHS = (8, 16, 32)
_FLOAT_DEPTHS = (32, 64)


@dataclass(frozen=True)
class PcmFormat:
    """Raw interleaved PCM sample format."""

    sample_rate: int = 44_100
    channels: int = 2
    bit_depth: int = 16
    signed: bool = True
    is_float: bool = False
    endianness: str = "LE"  # "LE" | "BE"

    def __post_init__(self) -> None:
        depths = _FLOAT_DEPTHS if self.is_float else _INT_DEPTHS
        if self.bit_depth not in depths:
            fallback = 32 if self.is_float else 16
            _LOG.warning(
                "Unsupported bit depth %s for %s samples; using %d",
                self.bit_depth, "float" if self.is_float else "integer", fallback,
            )
            object.__setattr__(self, "bit_depth", fallback)
        if self.endianness not in ("LE", "BE"):
            _LOG.warning("Unknown endianness %r; using LE", self.endianness)
            object.__setattr__(self, "endianness", "LE")
        if self.channels < 1:
            _LOG.warning("Channel count %s < 1; using 1", self.channels)
            object.__setattr__(self, "channels", 1)
        if self.sample_rate <= 0:
            _LOG.warning("Sample rate %s <= 0; using 44100", self.sample_rate)
            object.__setattr__(self, "sample_rate", 44_100)

    @property
    def sample_width(self) -> int:
        """Bytes per single sample."""
        return self.bit_depth // 8

    @property
    def frame_width(self) -> int:
        """Bytes per interleaved frame (one sample of every channel)."""
        return self.sample_width * self.channels

    @property
    def dtype(self) -> np.dtype:
        """numpy dtype of one sample, byte order included."""
        if self.is_float:
            kind = "f"
        else:
            kind = "i" if self.signed else "u"
        order = "<" if self.endianness == "LE" else ">"
        if self.sample_width == 1:
            order = "|"
        return np.dtype(f"{order}{kind}{self.sample_width}")


# Quantization targets used by the byte accessors
FLOAT_FORMAT = PcmFormat(channels=1, bit_depth=32, is_float=True)
UINT8_FORMAT = PcmFormat(channels=1, bit_depth=8, signed=False)


# Option names accepted by from_options(), mapped onto dataclass fields
_ANALYSER_KEYS = {
    "fft_size": "fft_size",
    "fftSize": "fft_size",
    "smoothing_time_constant": "smoothing_time_constant",
    "smoothingTimeConstant": "smoothing_time_constant",
    "throttle": "throttle",
    "buffer_size": "buffer_size",
    "bufferSize": "buffer_size",
    "channel": "channel",
    "min_decibels": "min_decibels",
    "minDecibels": "min_decibels",
    "max_decibels": "max_decibels",
    "maxDecibels": "max_decibels",
    "frequency_bin_count": "frequency_bin_count",
    "frequencyBinCount": "frequency_bin_count",
}

_FORMAT_KEYS = {
    "sample_rate": "sample_rate",
    "sampleRate": "sample_rate",
    "channels": "channels",
    "bit_depth": "bit_depth",
    "bitDepth": "bit_depth",
    "signed": "signed",
    "float": "is_float",
    "is_float": "is_float",
    "endianness": "endianness",
    "byteOrder": "endianness",
}


def _is_power_of_two(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0


def _next_power_of_two(n: int) -> int:
    p = 2
    while p < n:
        p <<= 1
    return p


def _as_number(value: Any, default: Any, cast: type, name: str) -> Any:
    """cast(value), or default (with a warning) when value is None or not numeric."""
    if isinstance(value, bool):
        value = None
    try:
        return cast(value)
    except (TypeError, ValueError):
        _LOG.warning("%s %r is not a number; using %s", name, value, default)
        return default


# (field, default, type) for AnalyserConfig numeric fields; throttle and
# frequency_bin_count accept None and are handled separately
_NUMERIC_DEFAULTS = (
    ("fft_size", 1024, int),
    ("smoothing_time_constant", 0.2, float),
    ("buffer_size", 44_100, int),
    ("channel", 0, int),
    ("min_decibels", -90.0, float),
    ("max_decibels", -30.0, float),
)


@dataclass(frozen=True)
class AnalyserConfig:
    """Streaming analyser configuration.

    Fixed once the analyser is constructed. Out-of-range values are coerced
    to usable ones (with a logged warning) instead of being rejected.
    """

    # Analysis window
    fft_size: int = 1024
    smoothing_time_constant: float = 0.2
    frequency_bin_count: Optional[int] = None  # None -> fft_size // 2

    # Cooperative yield interval in ms of captured audio (0 disables)
    throttle: float = 50

    # Time history, in samples (1 s at 44.1 kHz)
    buffer_size: int = 44_100

    # Channel to analyze
    channel: int = 0

    # Display range for the decibel view
    min_decibels: float = -90.0
    max_decibels: float = -30.0

    format: PcmFormat = field(default_factory=PcmFormat)

    def __post_init__(self) -> None:
        for name, default, cast in _NUMERIC_DEFAULTS:
            object.__setattr__(self, name, _as_number(getattr(self, name), default, cast, name))

        fft_size = self.fft_size
        if not _is_power_of_two(fft_size):
            coerced = _next_power_of_two(max(fft_size, 2))
            _LOG.warning("fft_size %s is not a power of two; using %d", self.fft_size, coerced)
            fft_size = coerced
        object.__setattr__(self, "fft_size", fft_size)

        k = self.smoothing_time_constant
        if k is None or not 0.0 <= k < 1.0:
            _LOG.warning("smoothing_time_constant %s outside [0, 1); using 0.2", k)
            object.__setattr__(self, "smoothing_time_constant", 0.2)

        if self.buffer_size < fft_size:
            _LOG.warning("buffer_size %s < fft_size; using %d", self.buffer_size, fft_size)
            object.__setattr__(self, "buffer_size", fft_size)

        if not 0 <= self.channel < self.format.channels:
            _LOG.warning(
                "channel %s outside [0, %d); using 0", self.channel, self.format.channels
            )
            object.__setattr__(self, "channel", 0)

        if self.throttle:
            object.__setattr__(self, "throttle", _as_number(self.throttle, 0, float, "throttle"))
        if self.throttle and self.throttle < 0:
            _LOG.warning("throttle %s < 0; throttling disabled", self.throttle)
            object.__setattr__(self, "throttle", 0)

        if self.min_decibels >= self.max_decibels:
            _LOG.warning(
                "min_decibels %s >= max_decibels %s; using -90..-30",
                self.min_decibels, self.max_decibels,
            )
            object.__setattr__(self, "min_decibels", -90.0)
            object.__setattr__(self, "max_decibels", -30.0)

        bins = self.frequency_bin_count
        if bins is not None:
            bins = _as_number(bins, None, int, "frequency_bin_count")
        if bins is None:
            object.__setattr__(self, "frequency_bin_count", fft_size // 2)
        else:
            object.__setattr__(
                self, "frequency_bin_count", min(max(bins, 0), fft_size)
            )

    @property
    def sample_rate(self) -> int:
        return self.format.sample_rate

    @property
    def buffer_seconds(self) -> float:
        """Time history length in seconds."""
        return self.buffer_size / self.format.sample_rate

    @classmethod
    def from_options(
        cls,
        options: Optional[Mapping[str, Any]] = None,
        **overrides: Any,
    ) -> "AnalyserConfig":
        """Overlay an options mapping (and keyword overrides) onto the defaults.

        Both snake_case and camelCase option names are recognised; PCM format
        keys (``sampleRate``, ``channels``, ``bitDepth``, ``signed``, ``float``,
        ``endianness``) go to the nested :class:`PcmFormat`. Unknown keys are
        ignored.
        """
        merged = dict(options or {})
        merged.update(overrides)

        analyser_kwargs: dict[str, Any] = {}
        format_kwargs: dict[str, Any] = {}
        base_format: Optional[PcmFormat] = None
        for key, value in merged.items():
            if key == "format" and isinstance(value, PcmFormat):
                base_format = value
            elif key in _ANALYSER_KEYS:
                analyser_kwargs[_ANALYSER_KEYS[key]] = value
            elif key in _FORMAT_KEYS:
                format_kwargs[_FORMAT_KEYS[key]] = value
            else:
                _LOG.debug("Ignoring unknown analyser option %r", key)

        fmt = base_format or PcmFormat()
        if format_kwargs:
            fmt = replace(fmt, **format_kwargs)
        return cls(format=fmt, **analyser_kwargs)

    def to_options(self) -> dict[str, Any]:
        """Flat snake_case view of every option, PCM fields included."""
        out = {f.name: getattr(self, f.name) for f in fields(self) if f.name != "format"}
        for f in fields(self.format):
            out[f.name] = getattr(self.format, f.name)
        return out
