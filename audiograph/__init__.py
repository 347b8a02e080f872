"""AudioGraph - waveform, peak and tempo analysis for live and recorded audio."""

__version__ = "0.1.0"
