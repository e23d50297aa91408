"""Transcription-related data models."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class TranscriptUpdate:
    """One delivery from a recognition channel: a transcript or an error."""
    text: Optional[str] = None
    is_final: bool = False
    error: Optional[Exception] = None

    @property
    def is_error(self) -> bool:
        return self.error is not None
