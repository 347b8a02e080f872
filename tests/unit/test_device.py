"""Unit tests for the PyAudio input device wrapper."""

from unittest.mock import Mock, patch

import pytest

pyaudio = pytest.importorskip("pyaudio")

from audiograph.audio.device import PyAudioInputDevice, list_input_devices, open_input_device  # noqa: E402
from audiograph.errors import DeviceUnavailable  # noqa: E402


@pytest.fixture
def mock_pyaudio():
    """Mock PyAudio for testing without actual audio hardware."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        mock_stream.read.return_value = b'\x00' * 4096
        mock_stream.is_active.return_value = True

        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }


@pytest.mark.unit
class TestPyAudioInputDevice:

    def test_open_uses_fixed_format(self, mock_pyaudio):
        device = open_input_device(44100, 2048, device_index=1)

        kwargs = mock_pyaudio['instance'].open.call_args.kwargs
        assert kwargs['format'] == pyaudio.paInt16
        assert kwargs['channels'] == 1
        assert kwargs['rate'] == 44100
        assert kwargs['input'] is True
        assert kwargs['input_device_index'] == 1
        assert kwargs['frames_per_buffer'] == 2048
        assert device.stream is mock_pyaudio['stream']

    def test_open_failure_raises_device_unavailable(self, mock_pyaudio):
        mock_pyaudio['instance'].open.side_effect = OSError(-9996, "Invalid input device")

        with pytest.raises(DeviceUnavailable):
            open_input_device(44100, 2048)

        mock_pyaudio['instance'].terminate.assert_called_once()

    def test_read(self, mock_pyaudio):
        device = open_input_device(44100, 2048)

        assert device.read(2048) == b'\x00' * 4096
        mock_pyaudio['stream'].read.assert_called_once_with(2048, exception_on_overflow=False)

    def test_read_after_close_raises(self, mock_pyaudio):
        device = open_input_device(44100, 2048)
        device.close()

        with pytest.raises(OSError):
            device.read(2048)

    def test_abort_stops_stream(self, mock_pyaudio):
        device = open_input_device(44100, 2048)

        device.abort()

        mock_pyaudio['stream'].stop_stream.assert_called_once()
        mock_pyaudio['stream'].close.assert_not_called()

    def test_close_is_idempotent(self, mock_pyaudio):
        device = open_input_device(44100, 2048)

        device.close()
        device.close()

        mock_pyaudio['stream'].close.assert_called_once()
        mock_pyaudio['instance'].terminate.assert_called_once()
        assert device.stream is None
        assert device.pyaudio_instance is None

    def test_not_opened_until_open(self, mock_pyaudio):
        device = PyAudioInputDevice(44100, 2048)

        assert device.stream is None
        mock_pyaudio['class'].assert_not_called()


@pytest.mark.unit
def test_list_input_devices(mock_pyaudio):
    infos = [
        {'name': 'Built-in Microphone', 'maxInputChannels': 1, 'defaultSampleRate': 44100.0},
        {'name': 'Speakers', 'maxInputChannels': 0, 'defaultSampleRate': 48000.0},
    ]
    mock_pyaudio['instance'].get_device_count.return_value = len(infos)
    mock_pyaudio['instance'].get_device_info_by_index.side_effect = lambda i: infos[i]

    devices = list_input_devices()

    assert devices == [{'id': 0, 'name': 'Built-in Microphone', 'defaultSampleRate': 44100}]
    mock_pyaudio['instance'].terminate.assert_called_once()
