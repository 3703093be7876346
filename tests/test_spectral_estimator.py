"""Unit tests and toy example for the forward transform and smoothed spectrum."""

from __future__ import annotations

import unittest

import numpy as np

from pcm_analyser.spectrum import SpectralEstimator, forward_transform

WINDOW = np.array([1.0, 0.0, -1.0, 0.0])


class TestForwardTransform(unittest.TestCase):
    """Tests for forward_transform."""

    def test_in_place(self) -> None:
        real = WINDOW.copy()
        imag = np.zeros(4)
        forward_transform(real, imag)
        np.testing.assert_allclose(real, [0, 2, 0, 2], atol=1e-12)
        np.testing.assert_allclose(imag, [0, 0, 0, 0], atol=1e-12)

    def test_matches_numpy(self) -> None:
        rng = np.random.default_rng(1)
        x = rng.standard_normal(64)
        real, imag = x.copy(), np.zeros(64)
        forward_transform(real, imag)
        expected = np.fft.fft(x)
        np.testing.assert_allclose(real, expected.real, atol=1e-9)
        np.testing.assert_allclose(imag, expected.imag, atol=1e-9)

    def test_shape_mismatch(self) -> None:
        with self.assertRaises(ValueError):
            forward_transform(np.zeros(4), np.zeros(8))


class TestSpectralEstimator(unittest.TestCase):
    """Tests for SpectralEstimator."""

    def test_initial_spectrum_is_zero(self) -> None:
        est = SpectralEstimator(8)
        self.assertEqual(est.spectrum.shape, (8,))
        self.assertFalse(est.spectrum.any())
        self.assertEqual(est.transforms, 0)

    def test_first_update_from_zero(self) -> None:
        """From a zeroed spectrum, one update gives (1-k) * Re(X) / N."""
        est = SpectralEstimator(4, smoothing_time_constant=0.25)
        est.update(WINDOW)
        np.testing.assert_allclose(est.spectrum, 0.75 * np.array([0, 2, 0, 2]) / 4, atol=1e-7)
        self.assertEqual(est.transforms, 1)

    def test_no_memory_with_k_zero(self) -> None:
        est = SpectralEstimator(4, smoothing_time_constant=0.0)
        est.update(np.array([0.5, 0.5, 0.5, 0.5]))
        est.update(WINDOW)
        np.testing.assert_allclose(est.spectrum, [0, 0.5, 0, 0.5], atol=1e-7)

    def test_convex_blend(self) -> None:
        est = SpectralEstimator(4, smoothing_time_constant=0.5)
        est.update(WINDOW)
        est.update(WINDOW)
        np.testing.assert_allclose(est.spectrum, [0, 0.375, 0, 0.375], atol=1e-7)

    def test_k_near_one_keeps_initial_value(self) -> None:
        est = SpectralEstimator(4, smoothing_time_constant=0.999)
        for _ in range(5):
            est.update(WINDOW)
        self.assertLess(np.max(np.abs(est.spectrum)), 0.01)

    def test_uses_real_part_only(self) -> None:
        """A quarter-period shift moves energy to Im(X); the spectrum keeps Re(X)."""
        est = SpectralEstimator(4, smoothing_time_constant=0.0)
        est.update(np.array([0.0, 1.0, 0.0, -1.0]))
        np.testing.assert_allclose(est.spectrum, [0, 0, 0, 0], atol=1e-7)

    def test_short_window_is_left_padded(self) -> None:
        est = SpectralEstimator(4, smoothing_time_constant=0.0)
        est.update(np.array([1.0]))
        # padded to [0, 0, 0, 1]
        np.testing.assert_allclose(est.spectrum, [0.25, 0, -0.25, 0], atol=1e-7)

    def test_long_window_uses_newest_samples(self) -> None:
        est = SpectralEstimator(4, smoothing_time_constant=0.0)
        est.update(np.concatenate(([9.0, 9.0], WINDOW)))
        np.testing.assert_allclose(est.spectrum, [0, 0.5, 0, 0.5], atol=1e-7)

    def test_reset(self) -> None:
        est = SpectralEstimator(4, smoothing_time_constant=0.0)
        est.update(WINDOW)
        est.reset()
        self.assertFalse(est.spectrum.any())
        self.assertEqual(est.transforms, 0)


def run_toy_example() -> None:
    """Feed the same window repeatedly and watch the smoothed spectrum converge."""
    print("=== Toy example: smoothed spectrum (N=4, k=0.5) ===\n")
    est = SpectralEstimator(4, smoothing_time_constant=0.5)
    for i in range(5):
        est.update(WINDOW)
        print(f"  update {i + 1}: {np.round(est.spectrum, 4).tolist()}")
    print("\nDone.")


if __name__ == "__main__":
    run_toy_example()
    print("\n--- Running unit tests ---")
    unittest.main(argv=[""], exit=False, verbosity=2)
