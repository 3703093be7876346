"""PCM sample decoding and conversion.

Raw chunks are interleaved frames in a :class:`PcmFormat`. Samples are
normalized to float in [-1, 1] for analysis and quantized back to integer
ranges for the byte accessors.
"""

from __future__ import annotations

from typing import Union

import numpy as np

from pcm_analyser.audio.config import FLOAT_FORMAT, PcmFormat

Chunk = Union[bytes, bytearray, memoryview]


def _half_range(bit_depth: int) -> int:
    return 1 << (bit_depth - 1)


def convert_samples(
    values: np.ndarray,
    from_format: PcmFormat,
    to_format: PcmFormat,
) -> np.ndarray:
    """Convert an array of samples between formats.

    Integer sources are normalized by half their range (unsigned ones are
    re-centred first); the normalized value is clipped to [-1, 1] and then
    scaled into the target range. Integer targets are floored and clipped to
    the representable range, so float 0.0 maps to 128 for unsigned 8-bit.
    """
    v = np.asarray(values, dtype=np.float64)

    if not from_format.is_float:
        half = _half_range(from_format.bit_depth)
        if not from_format.signed:
            v = v - half
        v = v / half
    v = np.clip(v, -1.0, 1.0)

    if to_format.is_float:
        return v.astype(np.dtype(f"f{to_format.sample_width}"))

    half = _half_range(to_format.bit_depth)
    if to_format.signed:
        out = np.floor(v * (half - 1))
        lo, hi = -half, half - 1
    else:
        out = np.floor((v + 1.0) * half)
        lo, hi = 0, 2 * half - 1
    return np.clip(out, lo, hi).astype(np.int64)


def convert_sample(
    value: float,
    from_format: PcmFormat,
    to_format: PcmFormat,
) -> Union[int, float]:
    """Convert a single sample value; see :func:`convert_samples`."""
    out = convert_samples(np.array([value]), from_format, to_format)[0]
    return float(out) if to_format.is_float else int(out)


def decode_channel(chunk: Chunk, channel: int, fmt: PcmFormat) -> np.ndarray:
    """Extract one channel of an interleaved chunk as normalized float32.

    Args:
        chunk: Raw interleaved PCM bytes.
        channel: Channel index in [0, fmt.channels).
        fmt: Format of the chunk.

    Returns:
        float32 array, shape (n_frames,), values in [-1, 1]. A trailing
        partial frame is ignored.
    """
    buf = memoryview(chunk).cast("B")
    n_frames = len(buf) // fmt.frame_width
    if n_frames == 0:
        return np.zeros(0, dtype=np.float32)
    raw = np.frombuffer(buf[: n_frames * fmt.frame_width], dtype=fmt.dtype)
    samples = raw.reshape(n_frames, fmt.channels)[:, channel]
    return convert_samples(samples, fmt, FLOAT_FORMAT).astype(np.float32)


def encode_frames(samples: np.ndarray, fmt: PcmFormat) -> bytes:
    """Quantize normalized float samples into interleaved PCM bytes.

    Args:
        samples: Shape (n_frames,) for mono or (n_frames, fmt.channels).
        fmt: Target format.
    """
    data = np.asarray(samples, dtype=np.float64)
    if data.ndim == 1:
        data = data.reshape(-1, 1)
    if data.shape[1] != fmt.channels:
        raise ValueError(f"Expected {fmt.channels} channels, got {data.shape[1]}")
    converted = convert_samples(data, FLOAT_FORMAT, fmt)
    return converted.astype(fmt.dtype).tobytes()
