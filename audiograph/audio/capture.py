"""Live capture controller: device lifecycle and per-chunk analysis."""

import logging
import threading
from threading import Thread, Event
from typing import Optional, Callable
from datetime import datetime

from ..analysis.analyzer import SignalAnalyzer
from ..config import SAMPLE_RATE, CHUNK_BYTES, STOP_TIMEOUT_SECONDS
from ..errors import DeviceUnavailable
from ..models.audio import CaptureState, CaptureStats
from ..models.waveform import WaveformSource, WaveformSnapshot
from .buffer import WaveformBuffer
from .decoder import decode_pcm16


logger = logging.getLogger(__name__)


def _default_device_factory(sample_rate: int, frames_per_chunk: int,
                            device_index: Optional[int] = None):
    from .device import open_input_device
    return open_input_device(sample_rate, frames_per_chunk, device_index)


class CaptureController:
    """Owns the capture device, the live waveform buffer and the acquisition thread.

    The worker holds the pass lock for one full chunk (write, gate or
    normalize, analyze) and then replaces the published snapshot. Readers
    only see complete snapshots.
    """

    def __init__(
        self,
        analyzer: SignalAnalyzer,
        on_snapshot: Optional[Callable[[WaveformSnapshot], None]] = None,
        sample_rate: int = SAMPLE_RATE,
        chunk_bytes: int = CHUNK_BYTES,
        device_index: Optional[int] = None,
        stop_timeout: float = STOP_TIMEOUT_SECONDS,
        device_factory: Optional[Callable] = None,
    ):
        """Initialize capture controller.

        Args:
            analyzer: Analyzer run on every chunk
            on_snapshot: Called from the capture thread with each new snapshot
            sample_rate: Nominal capture rate in Hz
            chunk_bytes: Bytes read from the device per acquisition cycle
            device_index: Input device index (None for the default device)
            stop_timeout: Seconds stop() waits for the thread before aborting the device
            device_factory: Callable(sample_rate, frames_per_chunk, device_index)
                returning an opened device; defaults to PyAudio
        """
        self.analyzer = analyzer
        self.on_snapshot = on_snapshot
        self.sample_rate = sample_rate
        self.chunk_bytes = chunk_bytes
        self.device_index = device_index
        self.stop_timeout = stop_timeout
        self.device_factory = device_factory or _default_device_factory

        self.live_buffer = WaveformBuffer(chunk_bytes // 2, name="live")

        # Session state
        self.state = CaptureState.IDLE
        self.device = None
        self.capture_thread: Optional[Thread] = None
        self.stop_event = Event()
        self.last_error: Optional[Exception] = None
        self._state_lock = threading.Lock()
        self._pass_lock = threading.Lock()
        self._publish_lock = threading.RLock()

        # Published analysis
        self._sequence = 0
        self._latest = WaveformSnapshot.empty(WaveformSource.LIVE)
        self._published_sequence = 0

        # Statistics tracking
        self.start_time: Optional[datetime] = None
        self.total_chunks = 0
        self.silent_chunks = 0

    @property
    def is_capturing(self) -> bool:
        return self.state is CaptureState.CAPTURING

    @property
    def latest_snapshot(self) -> WaveformSnapshot:
        """Most recent completed live snapshot."""
        return self._latest

    def start(self) -> bool:
        """Open the device and start the acquisition thread.

        Returns:
            True if a session was started, False if one was already running

        Raises:
            DeviceUnavailable: If the device cannot be opened
        """
        with self._state_lock:
            if self.state is CaptureState.CAPTURING:
                if self.capture_thread is not None and self.capture_thread.is_alive():
                    logger.warning("Capture already in progress")
                    return False
                # Worker died on a device error; drop the stale session
                logger.warning(f"Capture thread ended unexpectedly ({self.last_error}), reopening device")
                self._release_device()
                self.capture_thread = None
                self.state = CaptureState.IDLE

            logger.info("Starting live capture")
            try:
                device = self.device_factory(self.sample_rate, self.live_buffer.capacity,
                                             self.device_index)
            except DeviceUnavailable:
                self.state = CaptureState.IDLE
                logger.error("Capture device unavailable", exc_info=True)
                raise

            self.device = device
            self.stop_event.clear()
            self.last_error = None
            self.start_time = datetime.now()
            self.total_chunks = 0
            self.silent_chunks = 0

            self.capture_thread = Thread(target=self._capture_continuously, args=(device,),
                                         daemon=True)
            self.capture_thread.name = "AudioCaptureThread"
            self.state = CaptureState.CAPTURING
            self.capture_thread.start()
            return True

    def stop(self) -> None:
        """Stop the acquisition thread and release the device. No-op when idle."""
        with self._state_lock:
            if self.state is CaptureState.IDLE:
                logger.debug("No capture in progress")
                return

            logger.info("Stopping live capture")
            self.stop_event.set()

            thread = self.capture_thread
            if thread and thread.is_alive():
                thread.join(timeout=self.stop_timeout)
                if thread.is_alive():
                    logger.warning("Capture thread blocked in device read, aborting stream")
                    self._abort_device()
                    thread.join(timeout=self.stop_timeout)
                    if thread.is_alive():
                        logger.warning("Capture thread did not stop cleanly")

            self._release_device()
            self.capture_thread = None
            self.state = CaptureState.IDLE
            logger.info(f"Capture stopped. Total chunks: {self.total_chunks}")

    def _abort_device(self) -> None:
        device = self.device
        if device is None:
            return
        try:
            device.abort()
        except OSError as e:
            logger.warning(f"Failed to abort capture device: {e}")

    def _release_device(self) -> None:
        device, self.device = self.device, None
        if device is None:
            return
        try:
            device.close()
        except OSError as e:
            logger.warning(f"Error closing capture device: {e}")

    def _capture_continuously(self, device) -> None:
        """Internal method: acquisition loop in background thread."""
        frames = self.live_buffer.capacity
        while not self.stop_event.is_set():
            try:
                chunk = device.read(frames)
            except OSError as e:
                if self.stop_event.is_set():
                    logger.debug(f"Device read interrupted by stop: {e}")
                else:
                    logger.error(f"Capture device read failed: {e}")
                    self.last_error = e
                break
            if self.stop_event.is_set():
                break
            self.process_chunk(chunk)

    def process_chunk(self, chunk: bytes) -> WaveformSnapshot:
        """Decode one chunk into the live buffer, analyze it and publish the snapshot."""
        samples = decode_pcm16(chunk)

        with self._pass_lock:
            self.live_buffer.write(samples)
            chunk_peak = self.live_buffer.max_abs()
            if chunk_peak < self.analyzer.settings.silence_threshold:
                # Sub-threshold hiss is dropped rather than amplified
                self.live_buffer.clear()
                self.silent_chunks += 1
            else:
                self.live_buffer.normalize()

            data = self.live_buffer.snapshot()
            result = self.analyzer.analyze(data, len(data), previous=self._latest.result)

            self.total_chunks += 1
            self._sequence += 1
            snapshot = WaveformSnapshot(
                source=WaveformSource.LIVE,
                samples=data,
                valid_length=len(data),
                result=result,
                sequence_number=self._sequence,
            )
            self._latest = snapshot

        self._publish(snapshot)
        return snapshot

    def reset(self) -> WaveformSnapshot:
        """Clear the live buffer and publish an empty snapshot."""
        with self._pass_lock:
            self.live_buffer.clear()
            self._sequence += 1
            snapshot = WaveformSnapshot.empty(WaveformSource.LIVE, self._sequence)
            self._latest = snapshot

        self._publish(snapshot)
        return snapshot

    def _publish(self, snapshot: WaveformSnapshot) -> None:
        """Hand a snapshot to on_snapshot, dropping any older than the last one sent."""
        if not self.on_snapshot:
            return
        with self._publish_lock:
            if snapshot.sequence_number <= self._published_sequence:
                logger.debug(f"Dropping stale snapshot {snapshot.sequence_number} "
                             f"(already published {self._published_sequence})")
                return
            self._published_sequence = snapshot.sequence_number
            self.on_snapshot(snapshot)

    def get_capture_stats(self) -> CaptureStats:
        """Get current capture statistics."""
        duration = 0.0
        if self.start_time:
            duration = (datetime.now() - self.start_time).total_seconds()

        return CaptureStats(
            state=self.state,
            duration_seconds=duration,
            sample_rate=self.sample_rate,
            chunk_bytes=self.chunk_bytes,
            total_chunks=self.total_chunks,
            silent_chunks=self.silent_chunks,
        )

    def __del__(self):
        """Ensure the device is released on deletion."""
        if getattr(self, 'state', None) is CaptureState.CAPTURING:
            self.stop()
