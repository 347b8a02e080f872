"""Terminal display for the active waveform and its statistics."""

import logging
from typing import Callable, Optional

import numpy as np
from pubsub import pub
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from ..audio.snapshot_pub import TOPICS
from ..models.analysis import AnalysisResult
from ..models.waveform import WaveformSnapshot

logger = logging.getLogger(__name__)

LEVELS = " ▁▂▃▄▅▆▇█"


def format_stats(result: AnalysisResult) -> str:
    """One-line statistics summary."""
    return (f"Avg Amplitude: {result.average_amplitude:.3f} | "
            f"Peaks: {result.peak_count} | "
            f"Est. BPM: {result.estimated_bpm:.1f}")


def waveform_strip(snapshot: WaveformSnapshot, width: int = 64) -> Text:
    """Downsample a snapshot into one row of level glyphs, peaks in red."""
    text = Text()
    if snapshot.valid_length < 2:
        return text.append(" " * width)

    samples = np.abs(snapshot.samples[:snapshot.valid_length])
    edges = np.linspace(0, len(samples), width + 1).astype(int)
    peak_columns = set(
        min(width - 1, int(p * width / len(samples))) for p in snapshot.result.peaks
    )

    for column in range(width):
        start, end = edges[column], max(edges[column] + 1, edges[column + 1])
        level = float(np.max(samples[start:end])) if start < len(samples) else 0.0
        glyph = LEVELS[min(len(LEVELS) - 1, int(round(level * (len(LEVELS) - 1))))]
        text.append(glyph, style="red" if column in peak_columns else "green")
    return text


class StatsScreen:
    """Renders whichever snapshot the service currently shows.

    Subscribes to the waveform topics and redraws on every published
    snapshot while a rich Live display is attached.
    """

    def __init__(self, snapshot_provider: Callable[[], WaveformSnapshot],
                 console: Optional[Console] = None, width: int = 64):
        self.snapshot_provider = snapshot_provider
        self.console = console or Console()
        self.width = width
        self.live: Optional[Live] = None
        self.redraws = 0

    def subscribe(self) -> None:
        for topic in TOPICS.values():
            pub.subscribe(self._on_snapshot, topic)
        logger.debug(f"StatsScreen subscribed to {list(TOPICS.values())}")

    def unsubscribe(self) -> None:
        for topic in TOPICS.values():
            pub.unsubscribe(self._on_snapshot, topic)

    def _on_snapshot(self, snapshot: WaveformSnapshot) -> None:
        self.redraws += 1
        if self.live is not None:
            self.live.update(self.render())

    def render(self, snapshot: Optional[WaveformSnapshot] = None) -> Panel:
        """Build the stats panel for a snapshot (default: the active one)."""
        snapshot = snapshot or self.snapshot_provider()
        body = Text()
        body.append(format_stats(snapshot.result), style="bold")
        body.append("\n")
        body.append_text(waveform_strip(snapshot, self.width))
        title = f"{snapshot.source.value} · {snapshot.valid_length} samples"
        return Panel(body, title=title, expand=False)

    def show(self, snapshot: Optional[WaveformSnapshot] = None) -> None:
        """Print the panel once."""
        self.console.print(self.render(snapshot))

    def attach(self, live: Live) -> None:
        self.live = live

    def detach(self) -> None:
        self.live = None
