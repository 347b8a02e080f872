"""Command result model returned by the AudioGraph service."""

from dataclasses import dataclass
from typing import Optional

from ..errors import AudioGraphError
from .waveform import WaveformSnapshot


@dataclass
class CommandResult:
    """Outcome of a user command. Failures carry the typed error instead of raising."""
    success: bool
    command: str
    error: Optional[AudioGraphError] = None
    snapshot: Optional[WaveformSnapshot] = None
    message: str = ""

    @classmethod
    def ok(cls, command: str, snapshot: Optional[WaveformSnapshot] = None,
           message: str = "") -> "CommandResult":
        return cls(success=True, command=command, snapshot=snapshot, message=message)

    @classmethod
    def failed(cls, command: str, error: AudioGraphError) -> "CommandResult":
        return cls(success=False, command=command, error=error, message=str(error))
