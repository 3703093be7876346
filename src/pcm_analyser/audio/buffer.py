"""Bounded time-domain sample history."""

import numpy as np


class TimeBuffer:
    """Fixed-capacity ring of the most recent samples.

    Appending past capacity drops the oldest samples first; readers always
    see samples in arrival order.

    Storage is preallocated once, so an append costs O(len(chunk)) no matter
    how much history is held. Concatenating and slicing instead would copy up
    to ``size`` samples on every chunk (44100 per chunk at the default size).
    """

    def __init__(self, size: int, dtype: type = np.float32):
        if size < 1:
            raise ValueError("size must be >= 1")
        self.size = size
        self.dtype = dtype
        self._data = np.zeros(size, dtype=dtype)
        self._write_idx = 0
        self._count = 0

    def __len__(self) -> int:
        return self._count

    @property
    def capacity(self) -> int:
        return self.size

    def append(self, chunk: np.ndarray) -> None:
        """Append samples; the oldest ones beyond capacity are overwritten."""
        chunk = np.asarray(chunk)
        n = len(chunk)
        if n == 0:
            return
        if n >= self.size:
            self._data[:] = chunk[-self.size :].astype(self.dtype)
            self._write_idx = 0
            self._count = self.size
            return
        start = self._write_idx
        end = start + n
        if end <= self.size:
            self._data[start:end] = chunk.astype(self.dtype)
        else:
            head = self.size - start
            self._data[start:] = chunk[:head].astype(self.dtype)
            self._data[: end - self.size] = chunk[head:].astype(self.dtype)
        self._write_idx = end % self.size
        self._count = min(self._count + n, self.size)

    def window(self, n: int) -> np.ndarray:
        """Return a copy of the last min(n, len) samples, oldest first."""
        n = min(max(n, 0), self._count)
        if n == 0:
            return np.array([], dtype=self.dtype)
        end = self._write_idx if self._count == self.size else self._count
        start = end - n
        if start >= 0:
            return self._data[start:end].copy()
        return np.concatenate((self._data[start:], self._data[:end]))

    def get_all(self) -> np.ndarray:
        """Return all buffered samples in chronological order."""
        return self.window(self._count)

    def clear(self) -> None:
        """Reset buffer."""
        self._write_idx = 0
        self._count = 0
