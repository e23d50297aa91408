"""Main application entry point for Scribelt."""

import os
import sys
import argparse
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console

from . import __version__
from .audio.capture import AudioCapture
from .auto_mode import run_auto_mode
from .config import ScribeltConfig
from .models.permission import PermissionStatus
from .services.dispatcher import MainThreadDispatcher
from .services.permission_service import (
    DevicePermissionService,
    PermissionService,
    StaticPermissionService,
)
from .services.session_controller import SessionController
from .storage.export import ExportService
from .transcription.google_backend import GoogleSpeechService
from .ui.share import ConsoleShareSheet, LaunchShareSheet, ShareSheet
from .ui.transcription_screen import TranscriptionScreen

logger = logging.getLogger(__name__)


class ScribeltApp:
    """Builds the collaborators and the one session controller for this process."""

    def __init__(self, config_path: Optional[str] = None, log_level: Optional[str] = None):
        self.config = ScribeltConfig(config_path)
        setup_logging(self.config, log_level or self.config.get('logging.level', 'INFO'))
        self.console = Console()
        self.dispatcher = MainThreadDispatcher()
        self.controller: Optional[SessionController] = None

    def init(self, headless: bool = False) -> SessionController:
        logger.info("Initializing services...")

        sample_rate = self.config.get('audio.sample_rate', 16000)
        chunk_size = self.config.get('audio.chunk_size', 1024)
        channels = self.config.get('audio.channels', 1)
        logger.info(f"Audio settings: {sample_rate}Hz, {chunk_size} samples/chunk, {channels} channels")

        audio_capture = AudioCapture(sample_rate=sample_rate, chunk_size=chunk_size, channels=channels)
        recognizer = GoogleSpeechService(
            credentials_path=self.config.get_google_credentials_path(),
            sample_rate=sample_rate,
            language=self.config.get('google_cloud.language', 'en-US'),
            enable_automatic_punctuation=self.config.get('google_cloud.enable_automatic_punctuation', True),
            model=self.config.get('google_cloud.model', 'latest_long'),
        )
        export_service = ExportService(
            export_dir=self.config.get_export_directory(),
            file_name=self.config.get('export.file_name', 'SpeechTranscription.txt'),
        )

        self.controller = SessionController(
            dispatcher=self.dispatcher,
            permission_service=self._create_permission_service(),
            audio_capture=audio_capture,
            recognizer=recognizer,
            export_service=export_service,
            share_sheet=self._create_share_sheet(headless),
            session_mode=self.config.get('audio.session_mode', 'measurement'),
            default_font_size=self.config.get('display.default_font_size', 17),
            min_font_size=self.config.get('display.min_font_size', 12),
            font_size_step=self.config.get('display.font_size_step', 2),
        )
        return self.controller

    def _create_permission_service(self) -> PermissionService:
        override = self.config.get('permissions.override')
        if override:
            return StaticPermissionService(PermissionStatus.parse(override))
        return DevicePermissionService(credentials_path=self.config.get_google_credentials_path())

    def _create_share_sheet(self, headless: bool) -> ShareSheet:
        has_desktop = sys.platform in ("win32", "darwin") or bool(
            os.environ.get("DISPLAY") or os.environ.get("WAYLAND_DISPLAY"))
        if headless or not has_desktop:
            return ConsoleShareSheet(self.console)
        return LaunchShareSheet(self.console)

    def run_interactive(self) -> None:
        TranscriptionScreen(self.controller, self.dispatcher, console=self.console).run()

    def run_auto(self, duration: int, export: bool) -> str:
        return run_auto_mode(self.controller, self.dispatcher, duration_seconds=duration,
                             export=export, console=self.console)


def setup_logging(config: ScribeltConfig, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'data/logs/scribelt.log')
    console_output = config.get('logging.console_output', False)

    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path, encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(threadName)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    # Console handler - off by default, it would tear through the live screen
    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("=" * 50)
    logger.info("Scribelt application starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def main() -> None:
    """Main entry point for Scribelt application."""
    parser = argparse.ArgumentParser(
        description="Scribelt - Live speech transcription",
        epilog="Keys: SPACE=Start/Stop, e=Export, +/-=Text size, ENTER=Dismiss dialog, q=Quit"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: scribelt.yaml if present)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (overrides config)"
    )

    parser.add_argument(
        "--auto",
        action="store_true",
        help="Run in automatic mode: record for the given duration, print the transcript and exit"
    )

    parser.add_argument(
        "--duration",
        type=int,
        default=10,
        help="Duration in seconds for auto mode recording (default: 10)"
    )

    parser.add_argument(
        "--export",
        action="store_true",
        help="In auto mode, export the transcript when recording ends"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Scribelt v{__version__}"
    )

    args = parser.parse_args()

    try:
        app = ScribeltApp(args.config, args.log_level)
        app.init(headless=args.auto)
        if args.auto:
            app.run_auto(args.duration, args.export)
        else:
            app.run_interactive()
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
    except Exception as e:
        print(f"❌ Error: {e}")
        logger.error(f"Application error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
