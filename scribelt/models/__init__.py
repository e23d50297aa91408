"""Data models for the Scribelt application."""

from .audio import AudioStats
from .events import AudioEvent
from .permission import PermissionStatus
from .session import Session
from .transcription import TranscriptUpdate
from .ui import Dialog, DisplayState

__all__ = [
    "AudioStats",
    "AudioEvent",
    "PermissionStatus",
    "Session",
    "TranscriptUpdate",
    "Dialog",
    "DisplayState",
]
