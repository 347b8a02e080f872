"""Pytest configuration and fixtures for AudioGraph tests."""

import os
import threading
import time
import wave
import logging
import tempfile
from pathlib import Path

import numpy as np
import pytest
from pubsub import pub

from audiograph.errors import DeviceUnavailable


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast isolated tests")
    config.addinivalue_line("markers", "integration: multi-component tests")
    config.addinivalue_line("markers", "hardware: tests that need a real microphone")


def pytest_collection_modifyitems(config, items):
    if os.environ.get("AUDIOGRAPH_HARDWARE_TESTS") == "1":
        return
    skip_hardware = pytest.mark.skip(reason="set AUDIOGRAPH_HARDWARE_TESTS=1 to run")
    for item in items:
        if "hardware" in item.keywords:
            item.add_marker(skip_hardware)


@pytest.fixture(autouse=True)
def clean_pubsub():
    """Drop pubsub listeners left behind by a test."""
    yield
    pub.unsubAll()


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


def to_pcm16(samples, channels: int = 1) -> bytes:
    """Float samples in [-1, 1] to little-endian 16-bit PCM bytes."""
    pcm = (np.clip(np.asarray(samples, dtype=np.float64), -1.0, 1.0) * 32767).astype('<i2')
    if channels > 1:
        pcm = np.repeat(pcm, channels)
    return pcm.tobytes()


@pytest.fixture
def make_wav(temp_data_dir):
    """Factory writing a WAV file from float samples."""
    def _make_wav(samples, name="test_audio.wav", sample_rate=44100, channels=1, sample_width=2):
        file_path = Path(temp_data_dir) / name
        with wave.open(str(file_path), 'wb') as wf:
            wf.setnchannels(channels)
            wf.setsampwidth(sample_width)
            wf.setframerate(sample_rate)
            if sample_width == 2:
                wf.writeframes(to_pcm16(samples, channels))
            else:
                pcm = (np.asarray(samples) * 127 + 128).astype(np.uint8)
                wf.writeframes(pcm.tobytes())
        return str(file_path)
    return _make_wav


@pytest.fixture
def sine_samples():
    """Generate one second of a 440 Hz sine at 44.1 kHz, half scale."""
    def _sine(duration_seconds=1.0, freq=440.0, amplitude=0.5, sample_rate=44100):
        t = np.arange(int(duration_seconds * sample_rate)) / sample_rate
        return amplitude * np.sin(2 * np.pi * freq * t)
    return _sine


def click_track(length: int, positions, height: float = 1.0) -> np.ndarray:
    """Silent signal with single-sample spikes at the given positions."""
    data = np.zeros(length, dtype=np.float32)
    for p in positions:
        data[p] = height
    return data


class FakeInputDevice:
    """Stands in for the PyAudio input stream.

    Returns the given chunks in order and then repeats the last one. With
    hang=True every read blocks until abort() or close() is called.
    """

    def __init__(self, chunks=None, hang=False, read_delay=0.005):
        self.chunks = list(chunks or [b'\x00' * 4096])
        self.hang = hang
        self.read_delay = read_delay
        self.read_count = 0
        self.aborted = False
        self.closed = False
        self.released = threading.Event()

    def read(self, frames):
        if self.hang:
            self.released.wait()
        if self.aborted or self.closed:
            raise OSError("Stream closed")
        time.sleep(self.read_delay)
        chunk = self.chunks.pop(0) if len(self.chunks) > 1 else self.chunks[0]
        self.read_count += 1
        return chunk

    def abort(self):
        self.aborted = True
        self.released.set()

    def close(self):
        self.closed = True
        self.released.set()


class FakeDeviceFactory:
    """Device factory recording every device it opens."""

    def __init__(self, chunks=None, hang=False, fail=False):
        self.chunks = chunks
        self.hang = hang
        self.fail = fail
        self.devices = []
        self.calls = []

    def __call__(self, sample_rate, frames_per_chunk, device_index=None):
        self.calls.append((sample_rate, frames_per_chunk, device_index))
        if self.fail:
            raise DeviceUnavailable("Microphone not available: no default input device")
        device = FakeInputDevice(self.chunks, hang=self.hang)
        self.devices.append(device)
        return device


@pytest.fixture
def device_factory():
    """Factory producing fake devices that return silence."""
    return FakeDeviceFactory()


@pytest.fixture
def wait_for():
    """Poll a condition until it holds or the timeout expires."""
    def _wait_for(condition, timeout=2.0, interval=0.01):
        deadline = time.time() + timeout
        while time.time() < deadline:
            if condition():
                return True
            time.sleep(interval)
        return condition()
    return _wait_for


@pytest.fixture
def make_device_factory():
    """Build a FakeDeviceFactory with custom chunks or failure modes."""
    return FakeDeviceFactory


@pytest.fixture
def pcm16():
    """Float samples to 16-bit PCM bytes."""
    return to_pcm16


@pytest.fixture
def clicks():
    """Spike-train signal builder."""
    return click_track
