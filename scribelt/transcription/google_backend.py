"""Google Speech-to-Text streaming recognition backend."""

import logging
import queue
import threading
from pathlib import Path
from typing import Iterator, List, Optional

from .base import AbstractRecognitionService, RecognitionChannel, UpdateCallback
from ..exceptions import RecognitionChannelError, RecognizerUnavailable
from ..models.events import AudioEvent
from ..models.transcription import TranscriptUpdate

from google.auth import exceptions as auth_exceptions
from google.cloud import speech
from google.api_core import exceptions as gax_exceptions
from google.oauth2 import service_account

logger = logging.getLogger(__name__)


class GoogleRecognitionChannel(RecognitionChannel):
    """One ``streaming_recognize`` call fed from an in-memory audio queue.

    The response loop runs on its own thread and reports the full formatted
    transcript on every response: finalized segments so far followed by the
    current interim hypotheses.
    """

    def __init__(self, client: speech.SpeechClient,
                 streaming_config: speech.StreamingRecognitionConfig,
                 on_update: UpdateCallback):
        self.client = client
        self.streaming_config = streaming_config
        self.on_update = on_update

        self._audio_queue: "queue.Queue[Optional[bytes]]" = queue.Queue()
        self._final_segments: List[str] = []
        self._audio_ended = threading.Event()
        self._finished = threading.Event()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.name = "RecognitionThread"

    @property
    def is_finished(self) -> bool:
        return self._finished.is_set()

    def start(self) -> None:
        self._thread.start()

    def push_audio(self, event: AudioEvent) -> None:
        if self._audio_ended.is_set():
            return
        self._audio_queue.put(event.audio_data)

    def end_audio(self) -> None:
        if self._audio_ended.is_set():
            return
        self._audio_ended.set()
        # Sentinel closes the request generator, which half-closes the stream
        self._audio_queue.put(None)

    def finish(self) -> None:
        self.end_audio()
        self._finished.set()
        logger.debug("Recognition channel finished")

    def _requests(self) -> Iterator[speech.StreamingRecognizeRequest]:
        while True:
            chunk = self._audio_queue.get()
            if chunk is None:
                return
            yield speech.StreamingRecognizeRequest(audio_content=chunk)

    def _run(self) -> None:
        try:
            responses = self.client.streaming_recognize(
                config=self.streaming_config,
                requests=self._requests(),
            )
            for response in responses:
                self._handle_response(response)
        except (gax_exceptions.GoogleAPICallError, auth_exceptions.GoogleAuthError) as e:
            logger.warning(f"Google streaming recognition failed: {e}")
            self.on_update(TranscriptUpdate(error=RecognitionChannelError(str(e))))
        except Exception as e:
            logger.error(f"Unexpected recognition failure: {e}", exc_info=True)
            self.on_update(TranscriptUpdate(error=RecognitionChannelError(str(e))))
        logger.debug("Recognition response loop ended")

    def _handle_response(self, response) -> None:
        if not response.results:
            return

        interim = []
        saw_final = False
        for result in response.results:
            if not result.alternatives:
                continue
            transcript = result.alternatives[0].transcript.strip()
            if result.is_final:
                self._final_segments.append(transcript)
                saw_final = True
            else:
                interim.append(transcript)

        text = " ".join(segment for segment in self._final_segments + interim if segment)
        logger.debug(f"Transcript update (final={saw_final and not interim}): '{text}'")
        self.on_update(TranscriptUpdate(text=text, is_final=saw_final and not interim))


class GoogleSpeechService(AbstractRecognitionService):
    """Google Speech-to-Text streaming API backend."""

    def __init__(self,
                 credentials_path: Optional[str] = None,
                 sample_rate: int = 16000,
                 language: str = "en-US",
                 enable_automatic_punctuation: bool = True,
                 model: str = "latest_long"):
        """Initialize Google Speech backend.

        Args:
            credentials_path: Path to a service account JSON file; None uses
                application default credentials
            sample_rate: Sample rate of the streamed LINEAR16 audio
            language: Language code (e.g., 'en-US', 'es-ES')
            enable_automatic_punctuation: Enable automatic punctuation
            model: Recognition model name
        """
        super().__init__(language)
        self.credentials_path = credentials_path
        self.enable_automatic_punctuation = enable_automatic_punctuation
        self.client: Optional[speech.SpeechClient] = None
        self.service_name = "Google Speech-to-Text"
        self.recognition_config = speech.RecognitionConfig(
            encoding=speech.RecognitionConfig.AudioEncoding.LINEAR16,
            sample_rate_hertz=sample_rate,
            language_code=self.language,
            enable_automatic_punctuation=self.enable_automatic_punctuation,
            model=model,
        )

    def initialize(self) -> None:
        """Create the Speech client.

        Raises:
            RecognizerUnavailable: credentials are missing or invalid
        """
        try:
            if self.credentials_path:
                if not Path(self.credentials_path).exists():
                    raise RecognizerUnavailable(
                        f"Google credentials file not found: {self.credentials_path}")
                logger.info(f"Loading Google credentials from: {self.credentials_path}")
                credentials = service_account.Credentials.from_service_account_file(
                    self.credentials_path)
                self.client = speech.SpeechClient(credentials=credentials)
                logger.info(f"Using Google Cloud project: {credentials.project_id}")
            else:
                logger.info("Using Google application default credentials")
                self.client = speech.SpeechClient()
        except (ValueError, OSError, auth_exceptions.GoogleAuthError) as e:
            raise RecognizerUnavailable(f"Google Speech client unavailable: {e}") from e

        logger.info("Google Speech-to-Text backend initialized successfully")

    def open_channel(self, on_update: UpdateCallback,
                     partial_results: bool = True) -> GoogleRecognitionChannel:
        if self.client is None:
            self.initialize()

        streaming_config = speech.StreamingRecognitionConfig(
            config=self.recognition_config,
            interim_results=partial_results,
        )
        channel = GoogleRecognitionChannel(self.client, streaming_config, on_update)
        channel.start()
        logger.info(f"Opened {self.service_name} channel (language={self.language}, "
                    f"partial_results={partial_results})")
        return channel

    def cleanup(self) -> None:
        self.client = None
