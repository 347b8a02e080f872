"""Snapshot publisher for pub/sub display updates."""

import logging
from pubsub import pub
from ..models.waveform import WaveformSource, WaveformSnapshot

logger = logging.getLogger(__name__)

LIVE_TOPIC = "waveform.live"
FILE_TOPIC = "waveform.file"

TOPICS = {
    WaveformSource.LIVE: LIVE_TOPIC,
    WaveformSource.FILE: FILE_TOPIC,
}


class SnapshotPublisher:
    """Publishes waveform snapshots using pubsub.pub, one topic per source."""

    def __init__(self, topics: dict = None):
        """Initialize snapshot publisher.

        Args:
            topics: Mapping of WaveformSource to topic name
        """
        self.topics = dict(topics or TOPICS)
        logger.info(f"SnapshotPublisher initialized with topics: {list(self.topics.values())}")

    def publish_snapshot(self, snapshot: WaveformSnapshot) -> None:
        """Publish a snapshot to the topic of its source.

        Args:
            snapshot: Completed waveform snapshot
        """
        pub.sendMessage(self.topics[snapshot.source], snapshot=snapshot)
