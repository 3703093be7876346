"""Unit tests for PCM decoding and sample conversion."""

from __future__ import annotations

import unittest

import numpy as np

from pcm_analyser.audio.config import FLOAT_FORMAT, UINT8_FORMAT, PcmFormat
from pcm_analyser.audio.pcm import (
    convert_sample,
    convert_samples,
    decode_channel,
    encode_frames,
)


class TestConvertSample(unittest.TestCase):
    """Tests for convert_sample / convert_samples."""

    def test_float_to_uint8(self) -> None:
        self.assertEqual(convert_sample(0.0, FLOAT_FORMAT, UINT8_FORMAT), 128)
        self.assertEqual(convert_sample(0.5, FLOAT_FORMAT, UINT8_FORMAT), 192)
        self.assertEqual(convert_sample(-1.0, FLOAT_FORMAT, UINT8_FORMAT), 0)
        self.assertEqual(convert_sample(1.0, FLOAT_FORMAT, UINT8_FORMAT), 255)

    def test_out_of_range_is_clipped(self) -> None:
        self.assertEqual(convert_sample(3.0, FLOAT_FORMAT, UINT8_FORMAT), 255)
        self.assertEqual(convert_sample(-3.0, FLOAT_FORMAT, UINT8_FORMAT), 0)
        self.assertEqual(convert_sample(2.5, FLOAT_FORMAT, FLOAT_FORMAT), 1.0)

    def test_int16_to_float(self) -> None:
        s16 = PcmFormat(channels=1)
        self.assertEqual(convert_sample(-32768, s16, FLOAT_FORMAT), -1.0)
        self.assertEqual(convert_sample(16384, s16, FLOAT_FORMAT), 0.5)
        self.assertEqual(convert_sample(0, s16, FLOAT_FORMAT), 0.0)

    def test_uint8_to_float(self) -> None:
        self.assertEqual(convert_sample(128, UINT8_FORMAT, FLOAT_FORMAT), 0.0)
        self.assertEqual(convert_sample(0, UINT8_FORMAT, FLOAT_FORMAT), -1.0)

    def test_float_to_int16(self) -> None:
        s16 = PcmFormat(channels=1)
        out = convert_samples(np.array([1.0, -1.0, 0.0]), FLOAT_FORMAT, s16)
        np.testing.assert_array_equal(out, [32767, -32767, 0])


class TestDecodeChannel(unittest.TestCase):
    """Tests for decode_channel."""

    def test_stereo_int16_picks_channel(self) -> None:
        fmt = PcmFormat(channels=2, bit_depth=16)
        frames = np.array([[16384, -16384], [0, 32767], [-32768, 0]], dtype="<i2")
        chunk = frames.tobytes()
        np.testing.assert_allclose(decode_channel(chunk, 0, fmt), [0.5, 0.0, -1.0])
        np.testing.assert_allclose(decode_channel(chunk, 1, fmt), [-0.5, 32767 / 32768, 0.0])

    def test_big_endian(self) -> None:
        fmt = PcmFormat(channels=1, bit_depth=16, endianness="BE")
        chunk = np.array([16384, -16384], dtype=">i2").tobytes()
        np.testing.assert_allclose(decode_channel(chunk, 0, fmt), [0.5, -0.5])

    def test_float32_roundtrip_is_exact(self) -> None:
        fmt = PcmFormat(channels=1, bit_depth=32, is_float=True)
        samples = np.array([1.0, 0.0, -1.0, 0.25], dtype=np.float32)
        decoded = decode_channel(encode_frames(samples, fmt), 0, fmt)
        self.assertEqual(decoded.dtype, np.float32)
        np.testing.assert_array_equal(decoded, samples)

    def test_trailing_partial_frame_ignored(self) -> None:
        fmt = PcmFormat(channels=2, bit_depth=16)
        chunk = np.array([1, 2, 3, 4], dtype="<i2").tobytes() + b"\x01\x02\x03"
        self.assertEqual(len(decode_channel(chunk, 0, fmt)), 2)

    def test_empty_chunk(self) -> None:
        out = decode_channel(b"", 0, PcmFormat())
        self.assertEqual(out.size, 0)

    def test_encode_channel_mismatch(self) -> None:
        with self.assertRaises(ValueError):
            encode_frames(np.zeros((4, 3)), PcmFormat(channels=2))


if __name__ == "__main__":
    unittest.main(verbosity=2)
