# rowramp/core/errors.py
from __future__ import annotations


class PlaybackError(Exception):
    """Base class for everything the player reports to its caller."""


class EmptyDatasetError(PlaybackError):
    pass


class MalformedRowError(PlaybackError, ValueError):
    def __init__(self, message: str, row_number: int | None = None):
        super().__init__(message)
        self.row_number = row_number


class EmitterError(PlaybackError):
    """The sink raised while a record was emitted; playback state advanced anyway."""
