"""Session controller: owns the recording lifecycle and the displayed transcript."""

import logging
from typing import Optional

from ..audio.capture import AudioCapture
from ..exceptions import (
    AudioEngineStartFailure,
    EmptyExportAttempt,
    ExportWriteFailure,
    RecognizerUnavailable,
)
from ..models.events import AudioEvent
from ..models.permission import PermissionStatus
from ..models.session import Session
from ..models.transcription import TranscriptUpdate
from ..models.ui import Dialog, DisplayState
from ..storage.export import ExportService
from ..transcription.base import AbstractRecognitionService, RecognitionChannel
from ..ui.share import ShareSheet
from .dispatcher import MainThreadDispatcher
from .display_publisher import DisplayPublisher
from .permission_service import PermissionService

logger = logging.getLogger(__name__)

APP_TITLE = "Scribelt"
START_LABEL = "Start"
STOP_LABEL = "Stop"

LISTENING_MESSAGE = "Listening..."
RECOGNIZER_UNAVAILABLE_MESSAGE = "Speech recognizer not available."
AUDIO_ENGINE_MESSAGE = "Audio engine could not start."

PERMISSION_MESSAGES = {
    PermissionStatus.DENIED: "Speech recognition access denied.",
    PermissionStatus.RESTRICTED: "Speech recognition restricted on this device.",
    PermissionStatus.NOT_DETERMINED: "Speech recognition not determined.",
}
UNKNOWN_PERMISSION_MESSAGE = "An unknown error occurred."

EMPTY_EXPORT_DIALOG = Dialog(title="Error", message="No text to export.")
EXPORT_FAILED_DIALOG = Dialog(title="Export Failed", message="Could not create the file.")

DEFAULT_FONT_SIZE = 17
MIN_FONT_SIZE = 12
FONT_SIZE_STEP = 2


class SessionController:
    """Mediates between the permission, audio and recognition services and the screen.

    All public methods and all state changes run on the dispatcher's thread.
    Permission and recognition callbacks arrive on background threads and are
    posted to the dispatcher before touching any state. The audio tap runs on
    the capture thread and only forwards buffers to the open channel.
    """

    def __init__(self,
                 dispatcher: MainThreadDispatcher,
                 permission_service: PermissionService,
                 audio_capture: AudioCapture,
                 recognizer: AbstractRecognitionService,
                 export_service: ExportService,
                 share_sheet: ShareSheet,
                 publisher: Optional[DisplayPublisher] = None,
                 session_mode: str = "measurement",
                 default_font_size: float = DEFAULT_FONT_SIZE,
                 min_font_size: float = MIN_FONT_SIZE,
                 font_size_step: float = FONT_SIZE_STEP):
        self.dispatcher = dispatcher
        self.permission_service = permission_service
        self.audio_capture = audio_capture
        self.recognizer = recognizer
        self.export_service = export_service
        self.share_sheet = share_sheet
        self.publisher = publisher or DisplayPublisher()
        self.session_mode = session_mode
        self.default_font_size = default_font_size
        self.min_font_size = min_font_size
        self.font_size_step = font_size_step

        self.session = Session()
        self.display = DisplayState()
        self.permission: Optional[PermissionStatus] = None

        # Only the latest channel may update the display; its transcripts are
        # still applied after stop so final results land.
        self._channel: Optional[RecognitionChannel] = None
        self._generation = 0
        self._permission_requested = False

    @property
    def font_size(self) -> float:
        if self.session.display_font_size is None:
            return self.default_font_size
        return self.session.display_font_size

    def initialize(self) -> None:
        """Style the display, disable the toggle and request permission once."""
        self.display.title = APP_TITLE
        self.display.toggle_label = START_LABEL
        self.display.toggle_enabled = False
        self._publish()

        if self._permission_requested:
            logger.warning("Permission already requested for this session")
            return
        self._permission_requested = True
        logger.info("Requesting speech recognition permission")
        self.permission_service.request_permission(
            lambda status: self.dispatcher.post(self._apply_permission, status))

    def _apply_permission(self, status: PermissionStatus) -> None:
        self.permission = status
        if status is PermissionStatus.AUTHORIZED:
            self.display.toggle_enabled = True
        else:
            self.display.toggle_enabled = False
            self.display.text = PERMISSION_MESSAGES.get(status, UNKNOWN_PERMISSION_MESSAGE)
        logger.info(f"Permission resolved: {status.value}, toggle enabled={self.display.toggle_enabled}")
        self._publish()

    def toggle_recording(self) -> None:
        """Start or stop recording; the button label follows the requested action."""
        if not self.display.toggle_enabled:
            logger.warning("Toggle ignored: recording is not permitted")
            return

        if self.session.is_active:
            self.stop_recording()
            self.display.toggle_label = START_LABEL
        else:
            self.start_recording()
            self.display.toggle_label = STOP_LABEL
        self._publish()

    def start_recording(self) -> None:
        """Open a recognition channel and route captured audio into it.

        Failures are reported on the display and leave the session idle.
        """
        self._teardown_audio_path()

        try:
            self.audio_capture.configure_session(self.session_mode)
        except AudioEngineStartFailure as e:
            logger.error(f"Audio session configuration failed: {e}")
            self._show_text(AUDIO_ENGINE_MESSAGE)
            return

        self._generation += 1
        generation = self._generation
        try:
            channel = self.recognizer.open_channel(
                lambda update: self.dispatcher.post(self._apply_update, generation, update),
                partial_results=True)
        except RecognizerUnavailable as e:
            logger.error(f"Recognizer unavailable: {e}")
            self.audio_capture.stop()
            self._show_text(RECOGNIZER_UNAVAILABLE_MESSAGE)
            return

        self._channel = channel
        self.audio_capture.remove_buffer_callback()
        self.audio_capture.install_buffer_callback(self._forward_audio)

        self.session.is_active = True
        self.session.current_transcript = ""
        try:
            self.audio_capture.start()
        except AudioEngineStartFailure as e:
            logger.error(f"Audio engine start failed: {e}")
            self.stop_recording()
            self._show_text(AUDIO_ENGINE_MESSAGE)
            return

        logger.info("Recording started")
        self._show_text(LISTENING_MESSAGE)

    def stop_recording(self) -> None:
        """Stop capture and end the channel. Does nothing when already idle."""
        was_active = self.session.is_active or self._channel is not None
        self._teardown_audio_path()
        self.session.is_active = False
        if was_active:
            logger.info("Recording stopped")
            self._publish()

    def _teardown_audio_path(self) -> None:
        self.audio_capture.stop()
        self.audio_capture.remove_buffer_callback()
        channel, self._channel = self._channel, None
        if channel is not None:
            channel.end_audio()
            channel.finish()

    def _forward_audio(self, event: AudioEvent) -> None:
        # Runs on the capture thread
        channel = self._channel
        if self.session.is_active and channel is not None:
            channel.push_audio(event)

    def _apply_update(self, generation: int, update: TranscriptUpdate) -> None:
        if generation != self._generation:
            logger.debug("Ignoring update from a superseded recognition channel")
            return

        if update.is_error:
            if self._channel is None:
                logger.debug(f"Ignoring error from finished channel: {update.error}")
                return
            logger.warning(f"Recognition error, stopping: {update.error}")
            self.stop_recording()
            self.display.toggle_label = START_LABEL
            self._publish()
            return

        if update.text is not None:
            self.session.current_transcript = update.text
            self._show_text(update.text)

    def export_transcript(self) -> None:
        """Export the displayed text and present it, or explain why not."""
        try:
            path = self.export_service.export_text(self.display.text)
        except EmptyExportAttempt:
            logger.info("Export requested with no text")
            self._show_dialog(EMPTY_EXPORT_DIALOG)
            return
        except ExportWriteFailure as e:
            logger.error(f"Export failed: {e}")
            self._show_dialog(EXPORT_FAILED_DIALOG)
            return

        self.share_sheet.present(path)

    def acknowledge_dialog(self) -> None:
        if self.display.dialog is None:
            return
        self.display.dialog = None
        self._publish()

    def increase_text_size(self) -> None:
        self.adjust_text_size(self.font_size_step)

    def decrease_text_size(self) -> None:
        self.adjust_text_size(-self.font_size_step)

    def adjust_text_size(self, increment: float) -> None:
        self.session.display_font_size = max(self.font_size + increment, self.min_font_size)
        logger.debug(f"Text size set to {self.session.display_font_size}")
        self._publish()

    def teardown(self) -> None:
        """Return to idle on application exit."""
        self.stop_recording()
        self.recognizer.cleanup()

    def _show_text(self, text: str) -> None:
        self.display.text = text
        self._publish()

    def _show_dialog(self, dialog: Dialog) -> None:
        self.display.dialog = dialog
        self._publish()

    def _publish(self) -> None:
        self.publisher.publish(self.display, self.session)
