"""Error types surfaced by AudioGraph commands."""


class AudioGraphError(Exception):
    """Base class for errors reported to command callers."""


class DecodeError(AudioGraphError):
    """Raised when a file cannot be decoded as 16-bit PCM audio."""


class DeviceUnavailable(AudioGraphError):
    """Raised when the capture device cannot be opened."""
