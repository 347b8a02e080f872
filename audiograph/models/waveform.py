"""Waveform snapshot models handed from producers to the display."""

import time
from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from .analysis import AnalysisResult


class WaveformSource(Enum):
    """Which waveform buffer a snapshot was taken from."""
    LIVE = "live"
    FILE = "file"


@dataclass(frozen=True)
class WaveformSnapshot:
    """Immutable copy of one completed processing pass."""
    source: WaveformSource
    samples: np.ndarray  # read-only copy of the valid range
    valid_length: int
    result: AnalysisResult
    sequence_number: int = 0
    timestamp: float = field(default_factory=time.time)

    @classmethod
    def empty(cls, source: WaveformSource, sequence_number: int = 0) -> "WaveformSnapshot":
        samples = np.zeros(0, dtype=np.float32)
        samples.flags.writeable = False
        return cls(
            source=source,
            samples=samples,
            valid_length=0,
            result=AnalysisResult.empty(),
            sequence_number=sequence_number,
        )
