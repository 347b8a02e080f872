"""Analysis-related data models."""

from dataclasses import dataclass
from typing import Tuple

from ..config import (
    SAMPLE_RATE,
    SILENCE_THRESHOLD,
    PEAK_THRESHOLD,
    MIN_PEAK_DISTANCE,
)


@dataclass(frozen=True)
class AnalysisResult:
    """Statistics computed from one processing pass over a waveform buffer."""
    average_amplitude: float
    peaks: Tuple[int, ...]
    estimated_bpm: float

    @classmethod
    def empty(cls) -> "AnalysisResult":
        return cls(average_amplitude=0.0, peaks=(), estimated_bpm=0.0)

    @property
    def peak_count(self) -> int:
        return len(self.peaks)


@dataclass(frozen=True)
class AnalysisSettings:
    """Thresholds used by the signal analyzer and the capture silence gate."""
    sample_rate: int = SAMPLE_RATE
    silence_threshold: float = SILENCE_THRESHOLD
    peak_threshold: float = PEAK_THRESHOLD
    min_peak_distance: int = MIN_PEAK_DISTANCE
    retain_previous_bpm: bool = False

    @classmethod
    def from_config(cls, config) -> "AnalysisSettings":
        """Build settings from an AudioGraphConfig."""
        return cls(
            sample_rate=int(config.get('audio.sample_rate', SAMPLE_RATE)),
            silence_threshold=float(config.get('analysis.silence_threshold', SILENCE_THRESHOLD)),
            peak_threshold=float(config.get('analysis.peak_threshold', PEAK_THRESHOLD)),
            min_peak_distance=int(config.get('analysis.min_peak_distance', MIN_PEAK_DISTANCE)),
            retain_previous_bpm=bool(config.get('analysis.retain_previous_bpm', False)),
        )
