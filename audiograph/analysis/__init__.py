"""Signal analysis module."""

from .analyzer import SignalAnalyzer, self_test_signal

__all__ = [
    'SignalAnalyzer',
    'self_test_signal'
]
