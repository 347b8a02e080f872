"""Fixed-capacity waveform buffer for analysis passes."""

import logging
import threading
from typing import Optional

import numpy as np

logger = logging.getLogger(__name__)


class WaveformBuffer:
    """Fixed-capacity sample store with a valid-length marker.

    Capacity never changes after construction; the storage is reused and
    zero-filled on clear.
    """

    def __init__(self, capacity: int, name: str = "waveform"):
        """Initialize waveform buffer.

        Args:
            capacity: Maximum number of samples held
            name: Label used in log messages
        """
        if capacity <= 0:
            raise ValueError(f"Buffer capacity must be positive, got {capacity}")

        self.name = name
        self.capacity = capacity
        self.samples = np.zeros(capacity, dtype=np.float32)
        self.valid_length = 0
        self.lock = threading.Lock()

        logger.info(f"WaveformBuffer '{name}' initialized: {capacity} samples capacity")

    def write(self, samples: np.ndarray, count: Optional[int] = None) -> int:
        """Copy samples into the buffer starting at index 0.

        Samples beyond capacity are dropped. valid_length is set only after
        the copy completes.

        Args:
            samples: Sample values
            count: Number of leading samples to use (default: all)

        Returns:
            The new valid length
        """
        if count is None:
            count = len(samples)
        count = max(0, min(count, len(samples)))
        written = min(count, self.capacity)

        with self.lock:
            self.samples[:written] = samples[:written]
            self.valid_length = written

        if count > written:
            logger.debug(f"'{self.name}' truncated write: {count} samples, kept {written}")
        return written

    def max_abs(self) -> float:
        """Largest absolute sample value in the valid range."""
        with self.lock:
            if self.valid_length == 0:
                return 0.0
            return float(np.max(np.abs(self.samples[:self.valid_length])))

    def normalize(self) -> None:
        """Rescale the valid range so its largest absolute value becomes 1.0."""
        with self.lock:
            if self.valid_length == 0:
                return
            valid = self.samples[:self.valid_length]
            peak = np.max(np.abs(valid))
            if peak == 0:
                return
            valid /= peak

    def clear(self) -> None:
        """Zero-fill the whole buffer."""
        with self.lock:
            self.samples.fill(0.0)
            self.valid_length = 0
        logger.debug(f"Waveform buffer '{self.name}' cleared")

    def snapshot(self) -> np.ndarray:
        """Return a read-only copy of the valid range."""
        with self.lock:
            copy = self.samples[:self.valid_length].copy()
        copy.flags.writeable = False
        return copy

    def get_buffer_stats(self) -> dict:
        """Get buffer statistics."""
        with self.lock:
            return {
                "name": self.name,
                "capacity": self.capacity,
                "valid_length": self.valid_length,
            }
