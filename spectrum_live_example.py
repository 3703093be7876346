"""Live spectrum from the microphone, polled at display rate.

The analyser sits inline on the raw microphone stream; a separate polling
task reads the smoothed spectrum ~20 times per second and prints the peak
frequency and level, the way a visualizer would.

Usage:
  python spectrum_live_example.py               # default mic
  python spectrum_live_example.py --device 1    # use input device 1
  python spectrum_live_example.py --file a.wav  # analyse a WAV file instead
"""

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent / "src"))

import numpy as np

from pcm_analyser.audio import AudioCollector, aiter_chunks, read_wav_chunks
from pcm_analyser.audio.config import AnalyserConfig, PcmFormat
from pcm_analyser.pipeline import Analyser, AnalyserStream

POLL_INTERVAL_SEC = 0.05


def describe_peak(analyser: Analyser) -> str:
    bins = analyser.get_float_frequency_data(np.zeros(analyser.frequency_bin_count))
    peak = int(np.argmax(np.abs(bins)))
    hz = peak * analyser.sample_rate / analyser.fft_size
    db = analyser.get_decibel_frequency_data(np.zeros(analyser.frequency_bin_count))[peak]
    return f"peak {hz:7.1f} Hz  {db:6.1f} dB"


async def poll(analyser: Analyser, stop: asyncio.Event) -> None:
    last = None
    while not stop.is_set():
        line = describe_peak(analyser)
        if line != last:
            print(line)
            last = line
        await asyncio.sleep(POLL_INTERVAL_SEC)


async def run(chunks, fmt: PcmFormat, pace_sec: float = 0.0) -> None:
    config = AnalyserConfig(fft_size=2048, smoothing_time_constant=0.8, format=fmt)
    stream = AnalyserStream(Analyser(config))
    stop = asyncio.Event()
    poller = asyncio.create_task(poll(stream.analyser, stop))
    try:
        async for chunk in aiter_chunks(chunks):
            await stream.send(chunk)
            # File input arrives faster than real time; pace it for the poller
            if pace_sec:
                await asyncio.sleep(pace_sec)
    finally:
        stop.set()
        await poller
    print(f"{stream.chunks_written} chunks, {stream.analyser.transforms} transforms.")


def main(device=None, file_path=None):
    if file_path:
        fmt, chunks = read_wav_chunks(file_path, chunk_frames=1024)
        pace = 1024 / fmt.sample_rate
        print(f"Analysing {file_path}...")
    else:
        fmt = PcmFormat(channels=1)
        chunks = AudioCollector(fmt).record_stream(chunk_duration_sec=0.02, device=device)
        pace = 0.0
        print("Listening. Press Ctrl+C to stop.\n")
    try:
        asyncio.run(run(chunks, fmt, pace))
    except KeyboardInterrupt:
        print("\nStopped.")
    print("Done.")


if __name__ == "__main__":
    args = sys.argv[1:]
    device = None
    file_path = None
    if "--device" in args:
        idx = args.index("--device")
        if idx + 1 < len(args):
            try:
                device = int(args[idx + 1])
            except ValueError:
                pass
    if "--file" in args:
        idx = args.index("--file")
        if idx + 1 < len(args):
            file_path = args[idx + 1]
    main(device=device, file_path=file_path)
