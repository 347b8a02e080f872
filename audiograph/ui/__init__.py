"""Terminal display for AudioGraph."""

from .stats_screen import StatsScreen, format_stats, waveform_strip

__all__ = [
    'StatsScreen',
    'format_stats',
    'waveform_strip',
]
