"""Raw PCM sources: live input device and WAV files."""

from __future__ import annotations

import asyncio
import queue
from pathlib import Path
from typing import AsyncIterator, Iterable, Iterator, Optional, Tuple

import numpy as np

try:
    import sounddevice as sd
except ImportError:
    sd = None  # type: ignore

from pcm_analyser.audio.config import PcmFormat

# sounddevice raw stream sample types by (bit depth, float, signed)
_SD_DTYPES = {
    (8, False, False): "uint8",
    (8, False, True): "int8",
    (16, False, True): "int16",
    (32, False, True): "int32",
    (32, True, True): "float32",
}


class AudioCollector:
    """Streams interleaved PCM bytes from an input device."""

    def __init__(self, fmt: Optional[PcmFormat] = None):
        self.format = fmt or PcmFormat()

    def _sd_dtype(self) -> str:
        fmt = self.format
        key = (fmt.bit_depth, fmt.is_float, fmt.signed or fmt.is_float)
        if key not in _SD_DTYPES:
            raise ValueError(f"Unsupported capture format: {self.format}")
        return _SD_DTYPES[key]

    def record_stream(
        self,
        chunk_duration_sec: float = 0.05,
        device: Optional[int] = None,
    ) -> Iterator[bytes]:
        """Stream raw chunks continuously.

        Args:
            chunk_duration_sec: Duration of each yielded chunk in seconds.
            device: Input device index (None = default).

        Yields:
            Interleaved native-endian PCM bytes, chunk_duration_sec long.
        """
        if sd is None:
            raise ImportError("sounddevice is required for recording. pip install sounddevice")

        chunk_frames = int(chunk_duration_sec * self.format.sample_rate)
        q: queue.Queue[bytes] = queue.Queue()

        def callback(indata: object, _frames: int, _time: object, _status: object) -> None:
            q.put(bytes(indata))

        with sd.RawInputStream(
            samplerate=self.format.sample_rate,
            channels=self.format.channels,
            dtype=self._sd_dtype(),
            blocksize=chunk_frames,
            device=device,
            callback=callback,
        ):
            while True:
                yield q.get()


async def aiter_chunks(chunks: Iterable[bytes]) -> AsyncIterator[bytes]:
    """Iterate a blocking chunk source without blocking the event loop.

    Each chunk is fetched in a worker thread (a live device blocks until
    the next block is captured), so other tasks keep running in between.
    """
    it = iter(chunks)
    while True:
        chunk = await asyncio.to_thread(next, it, None)
        if chunk is None:
            return
        yield chunk


def _wav_format(sample_rate: int, audio: np.ndarray) -> PcmFormat:
    channels = 1 if audio.ndim == 1 else audio.shape[1]
    kind = audio.dtype.kind
    return PcmFormat(
        sample_rate=sample_rate,
        channels=channels,
        bit_depth=audio.dtype.itemsize * 8,
        signed=kind != "u",
        is_float=kind == "f",
        endianness="BE" if audio.dtype.byteorder == ">" else "LE",
    )


def read_wav_chunks(
    path: str | Path,
    chunk_frames: int = 2048,
) -> Tuple[PcmFormat, Iterator[bytes]]:
    """Open a WAV file as a stream of raw interleaved chunks.

    Args:
        path: WAV file path.
        chunk_frames: Frames per yielded chunk (last one may be shorter).

    Returns:
        (format, chunks) where format describes the bytes in each chunk.
    """
    import scipy.io.wavfile as wavfile

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"WAV file not found: {path}")
    sr, audio = wavfile.read(str(path))
    if audio.dtype.itemsize == 3 or audio.dtype.kind not in "iuf":
        raise ValueError(f"Unsupported WAV sample type: {audio.dtype}")
    if audio.dtype.byteorder == ">":
        audio = audio.astype(audio.dtype.newbyteorder("<"))
    fmt = _wav_format(sr, audio)

    def chunks() -> Iterator[bytes]:
        for i in range(0, audio.shape[0], chunk_frames):
            block = audio[i : i + chunk_frames]
            if len(block) > 0:
                yield np.ascontiguousarray(block).tobytes()

    return fmt, chunks()
