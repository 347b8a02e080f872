"""Time-domain signal analysis: amplitude, peaks and tempo."""

import logging
from typing import List, Optional

import numpy as np

from ..models.analysis import AnalysisResult, AnalysisSettings

logger = logging.getLogger(__name__)


class SignalAnalyzer:
    """Computes an AnalysisResult from a waveform and its valid length.

    Every pass is recomputed from scratch. Numeric edge cases degrade to
    neutral values; analyze() never raises for any sample content.
    """

    def __init__(self, settings: Optional[AnalysisSettings] = None):
        self.settings = settings or AnalysisSettings()

    def analyze(self, samples: np.ndarray, valid_length: Optional[int] = None,
                previous: Optional[AnalysisResult] = None) -> AnalysisResult:
        """Run one analysis pass.

        Args:
            samples: Waveform samples (normalized units)
            valid_length: Number of leading samples holding real data
            previous: Result of the previous pass; only consulted when
                      retain_previous_bpm is enabled

        Returns:
            AnalysisResult for the valid range
        """
        retain = self.settings.retain_previous_bpm and previous is not None
        data = self._valid_range(samples, valid_length)
        if len(data) == 0:
            if retain:
                return AnalysisResult(0.0, (), previous.estimated_bpm)
            return AnalysisResult.empty()

        peaks = self.detect_peaks(data)
        bpm = self.estimate_bpm(peaks)
        if len(peaks) < 2 and retain:
            bpm = previous.estimated_bpm

        result = AnalysisResult(
            average_amplitude=self.average_amplitude(data),
            peaks=tuple(peaks),
            estimated_bpm=bpm,
        )
        logger.debug(f"Analyzed {len(data)} samples: amplitude={result.average_amplitude:.3f}, "
                     f"peaks={result.peak_count}, bpm={result.estimated_bpm:.1f}")
        return result

    @staticmethod
    def _valid_range(samples: np.ndarray, valid_length: Optional[int]) -> np.ndarray:
        data = np.asarray(samples, dtype=np.float32)
        if valid_length is None:
            valid_length = len(data)
        valid_length = max(0, min(int(valid_length), len(data)))
        data = data[:valid_length]
        if not np.all(np.isfinite(data)):
            data = np.nan_to_num(data, nan=0.0, posinf=0.0, neginf=0.0)
        return data

    @staticmethod
    def average_amplitude(data: np.ndarray) -> float:
        """Mean absolute sample value; 0.0 for an empty range."""
        if len(data) == 0:
            return 0.0
        return float(np.mean(np.abs(data), dtype=np.float64))

    def detect_peaks(self, data: np.ndarray) -> List[int]:
        """Find peaks scanning left to right.

        A peak is a strict local maximum above the peak threshold that lies
        more than min_peak_distance samples after the last accepted peak.
        A larger maximum inside that window is skipped.
        """
        n = len(data)
        if n < 3:
            return []

        threshold = np.float32(self.settings.peak_threshold)
        centre = data[1:n - 1]
        is_candidate = (centre > threshold) & (centre > data[:n - 2]) & (centre > data[2:])
        candidates = np.flatnonzero(is_candidate) + 1

        peaks: List[int] = []
        for index in candidates:
            index = int(index)
            if not peaks or index - peaks[-1] > self.settings.min_peak_distance:
                peaks.append(index)
        return peaks

    def estimate_bpm(self, peaks: List[int]) -> float:
        """Tempo from the mean spacing of consecutive peaks at the nominal sample rate."""
        if len(peaks) < 2:
            return 0.0

        average_interval = float(np.mean(np.diff(peaks)))
        if average_interval <= 0:
            return 0.0
        return 60.0 * self.settings.sample_rate / average_interval


def self_test_signal(length: int = 1000) -> np.ndarray:
    """Synthetic mix sin(0.1 i) + 0.5 sin(0.2 i) used by the self-test."""
    i = np.arange(length, dtype=np.float64)
    return (np.sin(0.1 * i) + 0.5 * np.sin(0.2 * i)).astype(np.float32)
