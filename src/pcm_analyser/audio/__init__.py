"""PCM formats, decoding, time buffer and audio sources."""

from pcm_analyser.audio.config import AnalyserConfig, PcmFormat
from pcm_analyser.audio.buffer import TimeBuffer
from pcm_analyser.audio.collector import AudioCollector, aiter_chunks, read_wav_chunks
from pcm_analyser.audio.pcm import convert_sample, decode_channel, encode_frames

__all__ = [
    "AnalyserConfig",
    "AudioCollector",
    "aiter_chunks",
    "PcmFormat",
    "TimeBuffer",
    "convert_sample",
    "decode_channel",
    "encode_frames",
    "read_wav_chunks",
]
