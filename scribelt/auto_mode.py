"""Auto mode: record for a fixed duration without the interactive screen."""

import time
import logging
from typing import Optional

from pubsub import pub
from rich.console import Console

from .models.permission import PermissionStatus
from .models.session import Session
from .models.ui import DisplayState
from .services.dispatcher import MainThreadDispatcher
from .services.display_publisher import DISPLAY_TOPIC
from .services.session_controller import SessionController

logger = logging.getLogger(__name__)

PERMISSION_TIMEOUT_SECONDS = 10.0
FINAL_RESULT_GRACE_SECONDS = 2.0


class TranscriptPrinter:
    """Prints each new transcript snapshot to the console."""

    def __init__(self, console: Console, topic: str = DISPLAY_TOPIC):
        self.console = console
        self.topic = topic
        self.last_text: Optional[str] = None
        pub.subscribe(self._on_display_changed, topic)

    def _on_display_changed(self, display: DisplayState, session: Session) -> None:
        if display.text and display.text != self.last_text:
            self.last_text = display.text
            self.console.print(f"… {display.text}", style="dim", markup=False)

    def close(self) -> None:
        pub.unsubscribe(self._on_display_changed, self.topic)


def _pump(dispatcher: MainThreadDispatcher, seconds: float) -> None:
    deadline = time.monotonic() + seconds
    while time.monotonic() < deadline:
        dispatcher.run_pending(timeout=min(0.1, max(deadline - time.monotonic(), 0.0)))


def run_auto_mode(controller: SessionController, dispatcher: MainThreadDispatcher,
                  duration_seconds: int = 10, export: bool = False,
                  console: Optional[Console] = None) -> str:
    """Run Scribelt without the interactive screen.

    This mode:
    1. Requests permission and waits for the answer
    2. Starts recording
    3. Records for the specified duration
    4. Stops recording, waits briefly for final results
    5. Prints the transcript and optionally exports it

    Returns:
        The final transcript
    """
    console = console or Console()
    printer = TranscriptPrinter(console)
    logger.info(f"🤖 Starting auto mode: {duration_seconds}s recording")

    try:
        controller.initialize()
        deadline = time.monotonic() + PERMISSION_TIMEOUT_SECONDS
        while controller.permission is None and time.monotonic() < deadline:
            dispatcher.run_pending(timeout=0.1)

        if controller.permission is not PermissionStatus.AUTHORIZED:
            console.print(f"❌ {controller.display.text or 'Permission request timed out.'}",
                          style="bold red")
            return ""

        console.print(f"🎙️  Recording for {duration_seconds}s...", style="bold green")
        controller.toggle_recording()
        if not controller.session.is_active:
            console.print(f"❌ {controller.display.text}", style="bold red")
            return ""

        _pump(dispatcher, duration_seconds)
        if controller.session.is_active:
            controller.toggle_recording()
        _pump(dispatcher, FINAL_RESULT_GRACE_SECONDS)

        transcript = controller.session.current_transcript
        console.print("📄 FULL TRANSCRIPTION:", style="bold")
        console.print(transcript or "(no speech detected)", markup=False)

        if export:
            controller.export_transcript()
            dialog = controller.display.dialog
            if dialog is not None:
                console.print(f"❌ {dialog.title}: {dialog.message}", style="bold red")
                controller.acknowledge_dialog()

        logger.info(f"Auto mode completed: {len(transcript)} characters transcribed")
        return transcript
    finally:
        printer.close()
        controller.teardown()
