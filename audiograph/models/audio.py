"""Audio capture data models."""

from dataclasses import dataclass
from enum import Enum


class CaptureState(Enum):
    """Capture controller state."""
    IDLE = "idle"
    CAPTURING = "capturing"


@dataclass
class CaptureStats:
    """Live capture statistics."""
    state: CaptureState
    duration_seconds: float
    sample_rate: int
    chunk_bytes: int
    total_chunks: int
    silent_chunks: int
