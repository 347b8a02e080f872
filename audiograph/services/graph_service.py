"""Command surface that owns the waveform sources and routes results to the display."""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Optional, Union

from ..analysis.analyzer import SignalAnalyzer
from ..audio.buffer import WaveformBuffer
from ..audio.capture import CaptureController
from ..audio.decoder import read_wav
from ..audio.snapshot_pub import SnapshotPublisher
from ..config import AudioGraphConfig
from ..errors import DecodeError, DeviceUnavailable
from ..models.analysis import AnalysisSettings
from ..models.audio import CaptureStats
from ..models.commands import CommandResult
from ..models.waveform import WaveformSource, WaveformSnapshot

logger = logging.getLogger(__name__)


class AudioGraphService:
    """Handles load/start/stop/reset commands.

    Failures are returned as CommandResult values; none of the command
    methods raise for DecodeError or DeviceUnavailable.
    """

    def __init__(self, config: AudioGraphConfig,
                 device_factory: Optional[Callable] = None,
                 publisher: Optional[SnapshotPublisher] = None):
        """Initialize the service.

        Args:
            config: Application configuration
            device_factory: Capture device factory passed to the CaptureController
            publisher: Snapshot publisher (default: pubsub topics per source)
        """
        self.config = config
        self.settings = AnalysisSettings.from_config(config)
        self.analyzer = SignalAnalyzer(self.settings)
        self.publisher = publisher or SnapshotPublisher()

        self.file_buffer = WaveformBuffer(config.get_file_capacity(), name="file")
        self.capture = CaptureController(
            self.analyzer,
            on_snapshot=self.publisher.publish_snapshot,
            sample_rate=self.settings.sample_rate,
            chunk_bytes=int(config.get('audio.chunk_bytes')),
            device_index=config.get('audio.device_index'),
            stop_timeout=float(config.get('capture.stop_timeout_seconds')),
            device_factory=device_factory,
        )

        self.active_source = WaveformSource.FILE
        self._file_lock = threading.Lock()
        self._file_sequence = 0
        self._file_snapshot = WaveformSnapshot.empty(WaveformSource.FILE)
        self._loader = ThreadPoolExecutor(max_workers=1, thread_name_prefix="FileLoader")

        logger.info(f"AudioGraphService ready: {self.settings.sample_rate}Hz nominal, "
                    f"file buffer {self.file_buffer.capacity} samples, "
                    f"live buffer {self.capture.live_buffer.capacity} samples")

    def load_file(self, path: Union[str, Path]) -> CommandResult:
        """Decode a WAV file into the file buffer and analyze it.

        On DecodeError the file buffer and its last analysis are left as they were.
        """
        logger.info(f"Loading {path}")
        try:
            decoded = read_wav(path, max_samples=self.file_buffer.capacity,
                               nominal_rate=self.settings.sample_rate)
        except DecodeError as e:
            logger.error(f"Failed to load WAV: {e}")
            return CommandResult.failed("load_file", e)

        with self._file_lock:
            self.file_buffer.clear()
            self.file_buffer.write(decoded.samples)
            self.file_buffer.normalize()

            data = self.file_buffer.snapshot()
            result = self.analyzer.analyze(data, len(data), previous=self._file_snapshot.result)
            self._file_sequence += 1
            snapshot = WaveformSnapshot(
                source=WaveformSource.FILE,
                samples=data,
                valid_length=len(data),
                result=result,
                sequence_number=self._file_sequence,
            )
            self._file_snapshot = snapshot
            self.active_source = WaveformSource.FILE

        self.publisher.publish_snapshot(snapshot)
        return CommandResult.ok("load_file", snapshot,
                                message=f"Loaded {snapshot.valid_length} samples from {path}")

    def load_file_async(self, path: Union[str, Path]) -> "Future[CommandResult]":
        """Run load_file on the background loader thread."""
        return self._loader.submit(self.load_file, path)

    def start_capture(self) -> CommandResult:
        """Start live capture and show the live buffer."""
        try:
            started = self.capture.start()
        except DeviceUnavailable as e:
            return CommandResult.failed("start_capture", e)

        self.active_source = WaveformSource.LIVE
        message = "Capture started" if started else "Capture already active"
        return CommandResult.ok("start_capture", self.capture.latest_snapshot, message=message)

    def stop_capture(self) -> CommandResult:
        """Stop live capture and republish its final analysis."""
        was_capturing = self.capture.is_capturing
        self.capture.stop()

        snapshot = self.capture.latest_snapshot
        if was_capturing:
            self.publisher.publish_snapshot(snapshot)
        message = "Capture stopped" if was_capturing else "Capture was not active"
        return CommandResult.ok("stop_capture", snapshot, message=message)

    def reset(self) -> CommandResult:
        """Clear both buffers and their analysis results."""
        self.capture.reset()

        with self._file_lock:
            self.file_buffer.clear()
            self._file_sequence += 1
            self._file_snapshot = WaveformSnapshot.empty(WaveformSource.FILE, self._file_sequence)
            snapshot = self._file_snapshot

        self.publisher.publish_snapshot(snapshot)
        logger.info("Waveforms and statistics reset")
        return CommandResult.ok("reset", self.display_snapshot())

    def display_snapshot(self) -> WaveformSnapshot:
        """Snapshot of whichever source is currently shown."""
        if self.active_source is WaveformSource.LIVE:
            return self.capture.latest_snapshot
        return self._file_snapshot

    def get_capture_stats(self) -> CaptureStats:
        return self.capture.get_capture_stats()

    def shutdown(self) -> None:
        """Stop capture and the loader thread."""
        self.capture.stop()
        self._loader.shutdown(wait=True)
        logger.info("AudioGraphService shut down")
