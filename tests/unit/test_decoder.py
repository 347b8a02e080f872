"""Unit tests for PCM decoding and WAV reading."""

import logging
from pathlib import Path

import numpy as np
import pytest

from audiograph.audio.decoder import decode_pcm16, read_wav
from audiograph.errors import DecodeError


@pytest.mark.unit
class TestDecodePcm16:

    def test_scales_by_32768(self):
        data = np.array([0, 16384, -32768, 32767], dtype='<i2').tobytes()

        samples = decode_pcm16(data)

        assert samples.dtype == np.float32
        assert list(samples) == pytest.approx([0.0, 0.5, -1.0, 32767 / 32768])

    def test_little_endian(self):
        assert decode_pcm16(b'\x00\x01')[0] == pytest.approx(256 / 32768)

    def test_drops_trailing_odd_byte(self):
        assert len(decode_pcm16(b'\x00\x40\x7f')) == 1

    def test_empty(self):
        assert len(decode_pcm16(b'')) == 0

    def test_first_channel_of_stereo(self):
        data = np.array([1000, -5000, 2000, -6000], dtype='<i2').tobytes()

        samples = decode_pcm16(data, channels=2)

        assert list(samples) == pytest.approx([1000 / 32768, 2000 / 32768])


@pytest.mark.unit
class TestReadWav:

    def test_reads_all_samples(self, make_wav, sine_samples):
        path = make_wav(sine_samples(duration_seconds=1.0))

        decoded = read_wav(path)

        assert len(decoded.samples) == 44100
        assert decoded.sample_rate == 44100
        assert decoded.channels == 1
        assert decoded.total_frames == 44100
        assert np.max(np.abs(decoded.samples)) == pytest.approx(0.5, abs=1e-3)

    def test_truncates_to_max_samples(self, make_wav, sine_samples):
        path = make_wav(sine_samples(duration_seconds=1.0))

        decoded = read_wav(path, max_samples=1000)

        assert len(decoded.samples) == 1000
        assert decoded.total_frames == 44100

    def test_stereo_uses_first_channel(self, make_wav):
        path = make_wav(np.full(100, 0.25), channels=2)

        decoded = read_wav(path)

        assert decoded.channels == 2
        assert len(decoded.samples) == 100
        assert np.allclose(decoded.samples, 0.25, atol=1e-3)

    def test_rate_mismatch_is_logged_not_rejected(self, make_wav, caplog):
        path = make_wav(np.zeros(160), sample_rate=16000)

        with caplog.at_level(logging.WARNING):
            decoded = read_wav(path, nominal_rate=44100)

        assert decoded.sample_rate == 16000
        assert "assumes 44100Hz" in caplog.text

    def test_empty_file(self, make_wav):
        decoded = read_wav(make_wav(np.zeros(0)))

        assert len(decoded.samples) == 0

    def test_missing_file(self, temp_data_dir):
        with pytest.raises(DecodeError):
            read_wav(Path(temp_data_dir) / "missing.wav")

    def test_not_a_wav_file(self, temp_data_dir):
        path = Path(temp_data_dir) / "noise.wav"
        path.write_bytes(b"this is not audio")

        with pytest.raises(DecodeError):
            read_wav(path)

    def test_8bit_pcm_rejected(self, make_wav):
        path = make_wav(np.zeros(100), sample_width=1)

        with pytest.raises(DecodeError, match="16-bit"):
            read_wav(path)
