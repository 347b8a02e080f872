"""Audio capture, decoding and buffering module."""

from .buffer import WaveformBuffer
from .capture import CaptureController
from .decoder import decode_pcm16, read_wav, DecodedAudio

__all__ = [
    'WaveformBuffer',
    'CaptureController',
    'decode_pcm16',
    'read_wav',
    'DecodedAudio'
]
