"""PyAudio input device used by the capture controller."""

import logging
import threading
from typing import Optional

import pyaudio

from ..errors import DeviceUnavailable

logger = logging.getLogger(__name__)


class PyAudioInputDevice:
    """Blocking 16-bit mono input stream at a fixed sample rate."""

    def __init__(self, sample_rate: int, frames_per_chunk: int,
                 device_index: Optional[int] = None):
        """Initialize input device.

        Args:
            sample_rate: Capture rate in Hz
            frames_per_chunk: Samples delivered per read
            device_index: PyAudio input device index (None for the default device)
        """
        self.sample_rate = sample_rate
        self.frames_per_chunk = frames_per_chunk
        self.device_index = device_index
        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None
        self.stream = None
        self.lock = threading.Lock()

    def open(self) -> "PyAudioInputDevice":
        """Open the input stream.

        Raises:
            DeviceUnavailable: If PortAudio cannot open the device
        """
        self.pyaudio_instance = pyaudio.PyAudio()
        try:
            self.stream = self.pyaudio_instance.open(
                format=pyaudio.paInt16,
                channels=1,
                rate=self.sample_rate,
                input=True,
                input_device_index=self.device_index,
                frames_per_buffer=self.frames_per_chunk,
                stream_callback=None
            )
        except (OSError, ValueError) as e:
            self.pyaudio_instance.terminate()
            self.pyaudio_instance = None
            raise DeviceUnavailable(f"Microphone not available: {e}") from e

        logger.info(f"Audio stream opened: {self.sample_rate}Hz, "
                    f"{self.frames_per_chunk} samples/chunk")
        return self

    def read(self, frames: int) -> bytes:
        """Block until `frames` samples are available."""
        stream = self.stream
        if stream is None:
            raise OSError("Input stream is closed")
        return stream.read(frames, exception_on_overflow=False)

    def abort(self) -> None:
        """Stop the stream so a pending read returns."""
        with self.lock:
            if self.stream is not None and self.stream.is_active():
                self.stream.stop_stream()

    def close(self) -> None:
        """Close the stream and release PortAudio. Safe to call more than once."""
        with self.lock:
            stream, self.stream = self.stream, None
            if stream is not None:
                if stream.is_active():
                    stream.stop_stream()
                stream.close()
            if self.pyaudio_instance is not None:
                self.pyaudio_instance.terminate()
                self.pyaudio_instance = None
        logger.info("Audio stream closed")


def open_input_device(sample_rate: int, frames_per_chunk: int,
                      device_index: Optional[int] = None) -> PyAudioInputDevice:
    """Open the default capture device at the given format."""
    return PyAudioInputDevice(sample_rate, frames_per_chunk, device_index).open()


def list_input_devices() -> list:
    """Describe every PyAudio device with input channels."""
    p = pyaudio.PyAudio()
    devices = []
    try:
        for i in range(p.get_device_count()):
            info = p.get_device_info_by_index(i)
            if info.get('maxInputChannels', 0) > 0:
                devices.append({
                    'id': i,
                    'name': info.get('name'),
                    'defaultSampleRate': int(info.get('defaultSampleRate') or 0),
                })
    finally:
        p.terminate()
    return devices
