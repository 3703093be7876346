"""Unit tests and toy example for the bounded time buffer."""

from __future__ import annotations

import unittest

import numpy as np

from pcm_analyser.audio import TimeBuffer


class TestTimeBuffer(unittest.TestCase):
    """Tests for TimeBuffer."""

    def test_size_invalid(self) -> None:
        """size must be >= 1."""
        with self.assertRaises(ValueError):
            TimeBuffer(0)

    def test_empty(self) -> None:
        buf = TimeBuffer(8)
        self.assertEqual(len(buf), 0)
        self.assertEqual(buf.window(4).size, 0)
        self.assertEqual(buf.get_all().size, 0)

    def test_append_below_capacity(self) -> None:
        buf = TimeBuffer(8)
        buf.append(np.array([1, 2, 3], dtype=np.float32))
        np.testing.assert_array_equal(buf.get_all(), [1, 2, 3])
        np.testing.assert_array_equal(buf.window(2), [2, 3])
        np.testing.assert_array_equal(buf.window(10), [1, 2, 3])

    def test_oldest_evicted_first(self) -> None:
        buf = TimeBuffer(4)
        buf.append(np.arange(3))
        buf.append(np.arange(3, 6))
        self.assertEqual(len(buf), 4)
        np.testing.assert_array_equal(buf.get_all(), [2, 3, 4, 5])
        np.testing.assert_array_equal(buf.window(3), [3, 4, 5])

    def test_chunk_larger_than_capacity(self) -> None:
        buf = TimeBuffer(4)
        buf.append(np.arange(10))
        np.testing.assert_array_equal(buf.get_all(), [6, 7, 8, 9])

    def test_window_does_not_mutate(self) -> None:
        buf = TimeBuffer(4)
        buf.append(np.arange(6))
        w = buf.window(4)
        w[:] = -1
        np.testing.assert_array_equal(buf.get_all(), [2, 3, 4, 5])

    def test_matches_reference_for_random_appends(self) -> None:
        """Content always equals the last min(total, size) appended samples."""
        rng = np.random.default_rng(7)
        buf = TimeBuffer(37)
        history: list[float] = []
        for _ in range(200):
            chunk = rng.random(int(rng.integers(0, 50)), dtype=np.float32)
            buf.append(chunk)
            history.extend(chunk.tolist())
            self.assertLessEqual(len(buf), 37)
            np.testing.assert_array_equal(buf.get_all(), np.array(history[-37:], dtype=np.float32))

    def test_storage_reused_across_appends(self) -> None:
        """Appends write into the preallocated ring instead of growing a copy."""
        buf = TimeBuffer(16)
        storage = buf._data
        for start in range(0, 100, 7):
            buf.append(np.arange(start, start + 7))
            self.assertIs(buf._data, storage)
        np.testing.assert_array_equal(buf.get_all(), np.arange(89, 105))

    def test_clear(self) -> None:
        buf = TimeBuffer(4)
        buf.append(np.arange(6))
        buf.clear()
        self.assertEqual(len(buf), 0)
        buf.append(np.array([9]))
        np.testing.assert_array_equal(buf.get_all(), [9])


def run_toy_example() -> None:
    """Append a few chunks to a 5-sample buffer and show its contents."""
    print("=== Toy example: time buffer (size=5) ===\n")
    buf = TimeBuffer(5)
    for chunk in ([1, 2], [3, 4, 5], [6], [7, 8, 9, 10]):
        buf.append(np.array(chunk, dtype=np.float32))
        print(f"  append {chunk!s:16} -> {buf.get_all().tolist()}")
    print("\nDone.")


if __name__ == "__main__":
    run_toy_example()
    print("\n--- Running unit tests ---")
    unittest.main(argv=[""], exit=False, verbosity=2)
