"""Speech recognition module for Scribelt."""

from .base import AbstractRecognitionService, RecognitionChannel
from .google_backend import GoogleSpeechService, GoogleRecognitionChannel

__all__ = [
    "AbstractRecognitionService",
    "RecognitionChannel",
    "GoogleSpeechService",
    "GoogleRecognitionChannel",
]
