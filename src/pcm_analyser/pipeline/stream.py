"""Pass-through stream: forward PCM chunks unchanged while analysing them.

Chunks written to the stream are handed to every piped sink as-is. With no
sink attached the stream does not buffer; it emits each chunk to its data
listeners instead so push-style observers still see the audio. In both
cases the chunk is captured by the analyser, whose throttle decides whether
completion is signalled now or on the next event-loop turn.
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterable, Callable, Iterable, List, Optional, Protocol, Union

from pcm_analyser.audio.pcm import Chunk
from pcm_analyser.pipeline.analyser import Analyser, Callback

_LOG = logging.getLogger(__name__)


class Writable(Protocol):
    def write(self, chunk: bytes) -> object: ...


Sink = Union[Callable[[bytes], object], Writable]
DataListener = Callable[[bytes], None]


def _deliver(sink: Sink, chunk: bytes) -> None:
    write = getattr(sink, "write", None)
    if callable(write):
        write(chunk)
    else:
        sink(chunk)


class AnalyserStream:
    """Inline analyser node for a byte-oriented audio pipeline.

    Interface:
      stream = AnalyserStream(Analyser(fft_size=2048))
      stream.pipe(speaker.write)          # downstream consumer (optional)
      stream.on_data(print_level)         # used only while nothing is piped
      await stream.send(chunk)            # forward + capture, honours throttle
      stream.analyser.get_frequency_data()
    """

    def __init__(self, analyser: Optional[Analyser] = None):
        self.analyser = analyser or Analyser()
        self._sinks: List[Sink] = []
        self._listeners: List[DataListener] = []
        self.chunks_written = 0

    # ---------- Wiring ----------

    def pipe(self, sink: Sink) -> Sink:
        """Attach a downstream consumer; returns it for chaining."""
        self._sinks.append(sink)
        return sink

    def unpipe(self, sink: Optional[Sink] = None) -> None:
        """Detach one consumer, or all of them when sink is None."""
        if sink is None:
            self._sinks.clear()
        elif sink in self._sinks:
            self._sinks.remove(sink)

    @property
    def pipes_count(self) -> int:
        return len(self._sinks)

    def on_data(self, listener: DataListener) -> None:
        self._listeners.append(listener)

    def off_data(self, listener: DataListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ---------- Writing ----------

    def write(self, chunk: Chunk, callback: Optional[Callback] = None) -> bool:
        """Forward a chunk and capture it.

        Returns:
            True if the completion callback was deferred to the next loop turn.
        """
        data = bytes(chunk)
        if self._sinks:
            for sink in self._sinks:
                _deliver(sink, data)
            deferred = self.analyser.write(data, callback)
        else:
            deferred = self.analyser.write(data, callback)
            for listener in self._listeners:
                listener(data)
        self.chunks_written += 1
        return deferred

    async def send(self, chunk: Chunk) -> None:
        """Write a chunk and wait until its completion has been signalled."""
        loop = asyncio.get_running_loop()
        done = loop.create_future()

        def complete() -> None:
            if not done.done():
                done.set_result(None)

        self.write(chunk, complete)
        await done

    async def consume(self, chunks: Union[AsyncIterable[Chunk], Iterable[Chunk]]) -> int:
        """Send every chunk of an (async) iterable in order; returns the count."""
        count = 0
        if hasattr(chunks, "__aiter__"):
            async for chunk in chunks:  # type: ignore[union-attr]
                await self.send(chunk)
                count += 1
        else:
            for chunk in chunks:  # type: ignore[union-attr]
                await self.send(chunk)
                count += 1
        _LOG.debug("Consumed %d chunks (%d transforms)", count, self.analyser.transforms)
        return count

    def feed(self, chunks: Iterable[Chunk]) -> int:
        """Synchronous driver for plain iterables (no event loop, no yields)."""
        count = 0
        for chunk in chunks:
            self.write(chunk)
            count += 1
        return count
