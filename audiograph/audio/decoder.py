"""16-bit PCM sample decoding for capture chunks and WAV files."""

import logging
import wave
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import numpy as np

from ..errors import DecodeError

logger = logging.getLogger(__name__)

PCM16_SCALE = 32768.0
SAMPLE_WIDTH_BYTES = 2


@dataclass
class DecodedAudio:
    """Samples decoded from a WAV file."""
    samples: np.ndarray
    sample_rate: int
    channels: int
    total_frames: int  # frames in the file, before truncation


def decode_pcm16(data: bytes, channels: int = 1) -> np.ndarray:
    """Convert interleaved little-endian 16-bit PCM bytes into float samples.

    Only the first channel of each frame is kept. A trailing partial frame
    is dropped.

    Args:
        data: Raw PCM bytes
        channels: Interleaved channel count

    Returns:
        float32 array with values in [-1.0, 1.0)
    """
    frame_bytes = SAMPLE_WIDTH_BYTES * channels
    usable = len(data) - (len(data) % frame_bytes)
    if usable <= 0:
        return np.zeros(0, dtype=np.float32)

    pcm = np.frombuffer(data[:usable], dtype='<i2')
    if channels > 1:
        pcm = pcm.reshape(-1, channels)[:, 0]
    return pcm.astype(np.float32) / np.float32(PCM16_SCALE)


def read_wav(path: Union[str, Path], max_samples: Optional[int] = None,
             nominal_rate: Optional[int] = None) -> DecodedAudio:
    """Decode a 16-bit PCM WAV file.

    Args:
        path: Path to the WAV file
        max_samples: Stop decoding after this many frames
        nominal_rate: Rate the analysis assumes; a mismatch is only logged

    Returns:
        DecodedAudio holding at most max_samples samples

    Raises:
        DecodeError: If the file is missing or is not 16-bit PCM
    """
    try:
        with wave.open(str(path), 'rb') as wf:
            channels = wf.getnchannels()
            sample_width = wf.getsampwidth()
            sample_rate = wf.getframerate()
            total_frames = wf.getnframes()

            if sample_width != SAMPLE_WIDTH_BYTES:
                raise DecodeError(
                    f"Unsupported sample width in {path}: {sample_width * 8}-bit "
                    f"(only 16-bit PCM is supported)")

            frames_to_read = total_frames if max_samples is None else min(total_frames, max_samples)
            raw = wf.readframes(frames_to_read)
    except DecodeError:
        raise
    except (wave.Error, EOFError, OSError) as e:
        raise DecodeError(f"Failed to read WAV file {path}: {e}") from e

    if nominal_rate is not None and sample_rate != nominal_rate:
        logger.warning(f"{path} is {sample_rate}Hz; analysis assumes {nominal_rate}Hz")

    samples = decode_pcm16(raw, channels)
    if max_samples is not None and total_frames > max_samples:
        logger.debug(f"Truncated {path}: kept {len(samples)} of {total_frames} frames")

    logger.info(f"Decoded {path}: {len(samples)} samples, {sample_rate}Hz, {channels} channel(s)")
    return DecodedAudio(
        samples=samples,
        sample_rate=sample_rate,
        channels=channels,
        total_frames=total_frames,
    )
