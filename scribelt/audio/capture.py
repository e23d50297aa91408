"""Audio capture service: one pyaudio input stream feeding a single buffer tap."""

import pyaudio
import time
import logging
from threading import Thread, Event
from typing import Optional, Callable
from datetime import datetime
import numpy as np

from ..exceptions import AudioConfigError, AudioStartError
from ..models.audio import AudioStats
from ..models.events import AudioEvent


logger = logging.getLogger(__name__)

SESSION_MODES = ("measurement", "default")

BufferCallback = Callable[[AudioEvent], None]


def probe_input_device() -> bool:
    """Return True if the host exposes a default audio input device."""
    instance = pyaudio.PyAudio()
    try:
        instance.get_default_input_device_info()
        return True
    except (IOError, OSError):
        return False
    finally:
        instance.terminate()


class AudioCapture:
    """Continuous audio capture delivering every buffer to an installed tap."""

    def __init__(
        self,
        sample_rate: int = 16000,
        chunk_size: int = 1024,
        channels: int = 1,
        format: int = pyaudio.paInt16,
    ):
        """Initialize audio capture with specified parameters.

        Args:
            sample_rate: Audio sample rate (16kHz suits speech recognition)
            chunk_size: Size of each audio chunk in samples
            channels: Number of audio channels (1 for mono)
            format: Audio format (16-bit signed int)
        """
        self.sample_rate = sample_rate
        self.chunk_size = chunk_size
        self.channels = channels
        self.format = format
        self.session_mode: Optional[str] = None

        # Recording thread management
        self.recording_thread: Optional[Thread] = None
        self.stop_event = Event()
        self.is_recording = False

        # Statistics tracking
        self.start_time: Optional[datetime] = None
        self.total_chunks = 0
        self.peak_level = 0.0

        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None
        self.stream = None
        self._tap: Optional[BufferCallback] = None

    @property
    def is_running(self) -> bool:
        return self.is_recording

    def configure_session(self, mode: str = "measurement") -> None:
        """Prepare the audio session for capture.

        Raises:
            AudioConfigError: unknown mode or no input device available
        """
        if mode not in SESSION_MODES:
            raise AudioConfigError(f"Unsupported audio session mode: {mode}")

        if self.pyaudio_instance is None:
            try:
                self.pyaudio_instance = pyaudio.PyAudio()
            except OSError as e:
                raise AudioConfigError(f"Audio system unavailable: {e}") from e

        try:
            device = self.pyaudio_instance.get_default_input_device_info()
        except (IOError, OSError) as e:
            raise AudioConfigError(f"No audio input device: {e}") from e

        self.session_mode = mode
        logger.info(f"Audio session configured: mode={mode}, device={device.get('name')}")

    def install_buffer_callback(self, callback: BufferCallback) -> None:
        """Install the audio tap, replacing any previous one."""
        if self._tap is not None:
            logger.debug("Replacing existing audio tap")
        self._tap = callback

    def remove_buffer_callback(self) -> None:
        self._tap = None

    def start(self) -> None:
        """Open the input stream and start the capture thread.

        Raises:
            AudioStartError: the stream could not be opened
        """
        if self.is_recording:
            logger.warning("Recording already in progress")
            return
        if self.session_mode is None:
            raise AudioStartError("Audio session has not been configured")

        try:
            self.stream = self.__open_audio_stream()
        except (IOError, OSError) as e:
            raise AudioStartError(f"Could not open audio stream: {e}") from e

        logger.info("Starting audio recording")
        self.stop_event.clear()
        self.start_time = datetime.now()
        self.total_chunks = 0
        self.peak_level = 0.0

        self.recording_thread = Thread(target=self._record_continuously, daemon=True)
        self.recording_thread.name = "AudioCaptureThread"
        self.is_recording = True
        self.recording_thread.start()

    def stop(self) -> None:
        """Stop recording and release the stream. Safe to call when stopped."""
        if not self.is_recording:
            # a configured but never started session still holds pyaudio
            self.__close_audio_stream()
            return

        logger.info("Stopping audio recording")
        self.stop_event.set()

        if self.recording_thread and self.recording_thread.is_alive():
            self.recording_thread.join(timeout=2.0)
            if self.recording_thread.is_alive():
                logger.warning("Recording thread did not stop cleanly")

        self.__close_audio_stream()
        self.is_recording = False
        logger.info(f"Recording stopped. Total chunks: {self.total_chunks}")

    def __open_audio_stream(self):
        if self.pyaudio_instance is None:
            self.pyaudio_instance = pyaudio.PyAudio()
        stream = self.pyaudio_instance.open(
            format=self.format,
            channels=self.channels,
            rate=self.sample_rate,
            input=True,
            frames_per_buffer=self.chunk_size,
            stream_callback=None
        )
        logger.info(f"Audio stream opened: {self.sample_rate}Hz, "
                    f"{self.chunk_size} samples/chunk")
        return stream

    def __close_audio_stream(self) -> None:
        if self.stream is not None:
            try:
                self.stream.stop_stream()
                self.stream.close()
            except OSError as e:
                logger.warning(f"Error closing audio stream: {e}")
            self.stream = None
        if self.pyaudio_instance is not None:
            self.pyaudio_instance.terminate()
            self.pyaudio_instance = None
        self.session_mode = None

    def __read_audio_chunk(self) -> bytes:
        audio_chunk = self.stream.read(self.chunk_size, exception_on_overflow=False)
        self.total_chunks += 1
        samples = np.frombuffer(audio_chunk, dtype=np.int16)
        if samples.size:
            self.peak_level = float(np.abs(samples.astype(np.int32)).max()) / 32768.0
        return audio_chunk

    def __deliver(self, audio_chunk: bytes) -> None:
        tap = self._tap
        if tap is None:
            return
        tap(AudioEvent(
            chunk_id=f"chunk_{self.total_chunks}",
            audio_data=audio_chunk,
            timestamp=time.time(),
            sequence_number=self.total_chunks,
            sample_rate=self.sample_rate,
            channels=self.channels,
        ))

    def _record_continuously(self) -> None:
        """Internal method: continuous recording loop in background thread."""
        try:
            while not self.stop_event.is_set():
                audio_chunk = self.__read_audio_chunk()
                self.__deliver(audio_chunk)
        except (IOError, OSError) as e:
            logger.error(f"Audio capture failed: {e}")

    def get_recording_stats(self) -> AudioStats:
        """Get current recording statistics."""
        duration = 0.0
        if self.start_time:
            duration = (datetime.now() - self.start_time).total_seconds()

        return AudioStats(
            is_recording=self.is_recording,
            duration_seconds=duration,
            sample_rate=self.sample_rate,
            chunk_size=self.chunk_size,
            total_chunks=self.total_chunks,
            peak_level=self.peak_level,
        )
