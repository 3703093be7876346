"""Streaming analyser and pass-through stream."""

from pcm_analyser.pipeline.analyser import Analyser
from pcm_analyser.pipeline.stream import AnalyserStream
from pcm_analyser.pipeline.throttle import ThrottleController

__all__ = ["Analyser", "AnalyserStream", "ThrottleController"]
