"""Service layer for AudioGraph commands."""

from .graph_service import AudioGraphService

__all__ = [
    'AudioGraphService',
]
