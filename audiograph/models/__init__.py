"""Data models for the AudioGraph application."""

from .analysis import AnalysisResult, AnalysisSettings
from .audio import CaptureState, CaptureStats
from .waveform import WaveformSource, WaveformSnapshot
from .commands import CommandResult

__all__ = [
    "AnalysisResult",
    "AnalysisSettings",
    "CaptureState",
    "CaptureStats",
    "WaveformSource",
    "WaveformSnapshot",
    "CommandResult",
]
