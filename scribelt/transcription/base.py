"""Abstract base classes for speech recognition services."""

from abc import ABC, abstractmethod
from typing import Callable
import logging

from ..models.events import AudioEvent
from ..models.transcription import TranscriptUpdate

logger = logging.getLogger(__name__)

UpdateCallback = Callable[[TranscriptUpdate], None]


class RecognitionChannel(ABC):
    """An open conduit that accepts streamed audio and reports transcripts.

    Updates are delivered through the callback given to
    ``AbstractRecognitionService.open_channel``, possibly from a background
    thread, until the channel is finished.
    """

    @abstractmethod
    def push_audio(self, event: AudioEvent) -> None:
        """Append one captured buffer. Must not block."""
        pass

    @abstractmethod
    def end_audio(self) -> None:
        """Signal that no more audio will be pushed."""
        pass

    @abstractmethod
    def finish(self) -> None:
        """Finish recognition and release the channel."""
        pass


class AbstractRecognitionService(ABC):
    """Abstract base class for recognition backends."""

    def __init__(self, language: str = "en-US"):
        """Initialize backend with language preference."""
        self.language = language

    @abstractmethod
    def open_channel(self, on_update: UpdateCallback,
                     partial_results: bool = True) -> RecognitionChannel:
        """Open a recognition channel.

        Args:
            on_update: Called with each transcript or error
            partial_results: Report intermediate hypotheses as well as final ones

        Returns:
            The open channel

        Raises:
            RecognizerUnavailable: no recognizer could be created
        """
        pass

    def cleanup(self) -> None:
        """Clean up backend resources."""
        pass
