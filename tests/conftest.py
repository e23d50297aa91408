"""Pytest configuration and fixtures for Scribelt tests."""

import pytest
import logging
from typing import Callable, List, Optional
from unittest.mock import Mock, patch

import numpy as np
from pubsub import pub

from scribelt.exceptions import RecognizerUnavailable
from scribelt.models.audio import AudioStats
from scribelt.models.events import AudioEvent
from scribelt.models.permission import PermissionStatus
from scribelt.models.transcription import TranscriptUpdate
from scribelt.services.dispatcher import MainThreadDispatcher
from scribelt.services.display_publisher import DisplayPublisher
from scribelt.services.permission_service import PermissionService
from scribelt.services.session_controller import SessionController
from scribelt.storage.export import ExportService
from scribelt.transcription.base import AbstractRecognitionService, RecognitionChannel
from scribelt.ui.share import ShareSheet


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests with all collaborators faked")
    config.addinivalue_line("markers", "integration: tests wiring real components together")


@pytest.fixture(autouse=True)
def reset_pubsub():
    """Drop listeners registered by a test so topics do not leak between tests."""
    yield
    pub.unsubAll()


@pytest.fixture
def sample_audio_chunk():
    """Generate a sample audio chunk for testing."""
    # 1024 samples of 16-bit audio (A4 sine wave)
    sample_rate = 16000
    duration = 1024 / sample_rate
    t = np.linspace(0, duration, 1024, False)
    wave_data = np.sin(2 * np.pi * 440 * t)
    return (wave_data * 32767).astype(np.int16).tobytes()


@pytest.fixture
def mock_pyaudio():
    """Mock PyAudio for testing without actual audio hardware."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        mock_stream.read.return_value = b'\x00' * 2048  # Silent audio
        mock_stream.stop_stream.return_value = None
        mock_stream.close.return_value = None

        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.terminate.return_value = None
        mock_pyaudio_instance.get_default_input_device_info.return_value = {"name": "Test Mic"}

        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }


class FakeAudioCapture:
    """Stands in for AudioCapture; the test drives the tap by hand."""

    def __init__(self):
        self.config_error: Optional[Exception] = None
        self.start_error: Optional[Exception] = None
        self.is_running = False
        self.tap: Optional[Callable[[AudioEvent], None]] = None
        self.taps_installed = 0
        self.configured_modes: List[str] = []
        self.stop_calls = 0

    def configure_session(self, mode: str = "measurement") -> None:
        if self.config_error:
            raise self.config_error
        self.configured_modes.append(mode)

    def start(self) -> None:
        if self.start_error:
            raise self.start_error
        self.is_running = True

    def stop(self) -> None:
        self.stop_calls += 1
        self.is_running = False

    def install_buffer_callback(self, callback) -> None:
        assert self.tap is None, "a second audio tap was installed"
        self.tap = callback
        self.taps_installed += 1

    def remove_buffer_callback(self) -> None:
        self.tap = None

    def emit(self, data: bytes = b'\x00' * 2048) -> None:
        if self.tap is not None:
            self.tap(AudioEvent(chunk_id="chunk_test", audio_data=data,
                                timestamp=0.0, sequence_number=0))

    def get_recording_stats(self) -> AudioStats:
        return AudioStats(is_recording=self.is_running, duration_seconds=1.5,
                          sample_rate=16000, chunk_size=1024, total_chunks=10,
                          peak_level=0.5)


class FakeChannel(RecognitionChannel):
    """Records pushed audio; the test delivers transcripts and errors."""

    def __init__(self, on_update):
        self.on_update = on_update
        self.pushed: List[AudioEvent] = []
        self.audio_ended = False
        self.finished = False

    @property
    def is_open(self) -> bool:
        return not self.finished

    def push_audio(self, event: AudioEvent) -> None:
        self.pushed.append(event)

    def end_audio(self) -> None:
        self.audio_ended = True

    def finish(self) -> None:
        self.finished = True

    def deliver(self, text: str, is_final: bool = False) -> None:
        self.on_update(TranscriptUpdate(text=text, is_final=is_final))

    def fail(self, error: Exception) -> None:
        self.on_update(TranscriptUpdate(error=error))


class FakeRecognizer(AbstractRecognitionService):
    """Opens FakeChannels, optionally replaying a script of transcripts on open."""

    def __init__(self, script: Optional[List[str]] = None):
        super().__init__()
        self.available = True
        self.script = script or []
        self.channels: List[FakeChannel] = []
        self.partial_results_requested: List[bool] = []
        self.cleaned_up = False

    def open_channel(self, on_update, partial_results: bool = True) -> FakeChannel:
        if not self.available:
            raise RecognizerUnavailable("no recognizer for test")
        channel = FakeChannel(on_update)
        self.channels.append(channel)
        self.partial_results_requested.append(partial_results)
        for text in self.script:
            channel.deliver(text)
        return channel

    @property
    def open_channels(self) -> List[FakeChannel]:
        return [channel for channel in self.channels if channel.is_open]

    @property
    def last_channel(self) -> FakeChannel:
        return self.channels[-1]

    def cleanup(self) -> None:
        self.cleaned_up = True


class FakePermissionService(PermissionService):
    """Holds the callback until the test answers, or answers at once if told to."""

    def __init__(self, auto_status: Optional[PermissionStatus] = None):
        self.auto_status = auto_status
        self.requests = 0
        self.callback = None

    def request_permission(self, callback) -> None:
        self.requests += 1
        self.callback = callback
        if self.auto_status is not None:
            callback(self.auto_status)

    def answer(self, status: PermissionStatus) -> None:
        self.callback(status)


class FakeShareSheet(ShareSheet):

    def __init__(self):
        self.presented = []

    def present(self, file_path) -> None:
        self.presented.append(file_path)


@pytest.fixture
def dispatcher():
    return MainThreadDispatcher()


@pytest.fixture
def fake_audio():
    return FakeAudioCapture()


@pytest.fixture
def fake_recognizer():
    return FakeRecognizer()


@pytest.fixture
def fake_permissions():
    return FakePermissionService()


@pytest.fixture
def share_sheet():
    return FakeShareSheet()


@pytest.fixture
def export_service(tmp_path):
    return ExportService(export_dir=str(tmp_path))


@pytest.fixture
def controller(dispatcher, fake_permissions, fake_audio, fake_recognizer,
               export_service, share_sheet):
    """A SessionController wired to fakes, not yet initialized."""
    return SessionController(
        dispatcher=dispatcher,
        permission_service=fake_permissions,
        audio_capture=fake_audio,
        recognizer=fake_recognizer,
        export_service=export_service,
        share_sheet=share_sheet,
        publisher=DisplayPublisher(),
    )


@pytest.fixture
def authorized_controller(controller, dispatcher, fake_permissions):
    """A SessionController whose permission request came back authorized."""
    controller.initialize()
    fake_permissions.answer(PermissionStatus.AUTHORIZED)
    dispatcher.run_pending()
    return controller
