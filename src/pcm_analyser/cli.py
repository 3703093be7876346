"""CLI: run the analyser over a WAV file or a live input device."""

import argparse
import asyncio
import itertools
import logging
import sys
from pathlib import Path
from typing import Iterable, Optional

import numpy as np

from pcm_analyser.audio import AudioCollector, aiter_chunks, read_wav_chunks
from pcm_analyser.audio.config import AnalyserConfig, PcmFormat
from pcm_analyser.pipeline import Analyser, AnalyserStream

_LOG = logging.getLogger("pcm_analyser.cli")

BAR_WIDTH = 40


def render_bars(analyser: Analyser, bins: int) -> str:
    """Text view of the first bins, grouped into `bins` bars (dB scale)."""
    db = analyser.get_decibel_frequency_data(np.zeros(analyser.frequency_bin_count))
    groups = np.array_split(db, max(1, min(bins, len(db))))
    lo, hi = analyser.min_decibels, analyser.max_decibels
    lines = []
    for i, group in enumerate(groups):
        level = (float(group.max()) - lo) / (hi - lo) if len(group) else 0.0
        lines.append(f"{i:3d} |" + "#" * int(round(level * BAR_WIDTH)))
    return "\n".join(lines)


async def _run(stream: AnalyserStream, chunks: Iterable[bytes], bins: int) -> int:
    analyser = stream.analyser
    last_transforms = 0
    count = 0
    async for chunk in aiter_chunks(chunks):
        await stream.send(chunk)
        count += 1
        if analyser.transforms != last_transforms:
            last_transforms = analyser.transforms
            print(f"\n--- transform {last_transforms} ---")
            print(render_bars(analyser, bins))
    return count


def main(argv: Optional[list] = None) -> None:
    parser = argparse.ArgumentParser(description="Streaming PCM spectrum analyser")
    parser.add_argument(
        "--file",
        "-f",
        type=Path,
        default=None,
        help="WAV file to analyse (default: live input)",
    )
    parser.add_argument(
        "--device",
        type=int,
        default=None,
        help="Input device index (list with --list-devices)",
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=5.0,
        help="Live capture duration in seconds (default: 5)",
    )
    parser.add_argument("--fft-size", type=int, default=1024, help="FFT window (default: 1024)")
    parser.add_argument(
        "--smoothing",
        type=float,
        default=0.2,
        help="Smoothing time constant in [0, 1) (default: 0.2)",
    )
    parser.add_argument(
        "--throttle",
        type=float,
        default=50,
        help="Yield to the event loop every N ms of audio, 0 disables (default: 50)",
    )
    parser.add_argument("--channel", type=int, default=0, help="Channel to analyse (default: 0)")
    parser.add_argument("--bins", type=int, default=16, help="Bars to print (default: 16)")
    parser.add_argument(
        "--list-devices",
        action="store_true",
        help="List available audio input devices and exit",
    )
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.list_devices:
        try:
            import sounddevice as sd
            print(sd.query_devices())
        except ImportError:
            print("sounddevice not installed: pip install sounddevice", file=sys.stderr)
            sys.exit(1)
        return

    if args.file is not None:
        try:
            fmt, chunks = read_wav_chunks(args.file, chunk_frames=args.fft_size)
        except (FileNotFoundError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        source = str(args.file)
    else:
        fmt = PcmFormat(channels=1)
        collector = AudioCollector(fmt)
        chunk_sec = args.fft_size / fmt.sample_rate
        n_chunks = max(1, int(args.duration / chunk_sec))
        chunks = itertools.islice(collector.record_stream(chunk_sec, args.device), n_chunks)
        source = f"device {args.device if args.device is not None else 'default'}"

    config = AnalyserConfig(
        fft_size=args.fft_size,
        smoothing_time_constant=args.smoothing,
        throttle=args.throttle,
        channel=args.channel,
        format=fmt,
    )
    _LOG.info("Analyser options: %s", config.to_options())
    stream = AnalyserStream(Analyser(config))

    print(f"Analysing {source} ({fmt.channels} ch, {fmt.sample_rate} Hz, fft {config.fft_size})...")
    try:
        count = asyncio.run(_run(stream, chunks, args.bins))
    except ImportError as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nStopped.")
        return
    print(f"\nProcessed {count} chunks, {stream.analyser.transforms} transforms.")


if __name__ == "__main__":
    main()
