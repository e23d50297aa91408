"""Terminal-based transcription screen with live transcript display."""

import logging
from typing import Optional

from pubsub import pub
from rich.align import Align
from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from ..models.session import Session
from ..models.ui import DisplayState
from ..services.dispatcher import MainThreadDispatcher
from ..services.display_publisher import DISPLAY_TOPIC
from ..services.session_controller import SessionController
from .keyboard_input import KeyboardInputHandler


logger = logging.getLogger(__name__)

QUIT_KEYS = ("q", "\x03")


class TranscriptionScreen:
    """Single-screen interface: transcript view, record toggle and toolbar keys.

    Keys arrive on the keyboard thread and are posted to the dispatcher, so the
    controller only ever runs on the thread that calls ``run``.
    """

    def __init__(self, controller: SessionController, dispatcher: MainThreadDispatcher,
                 console: Optional[Console] = None, topic: str = DISPLAY_TOPIC):
        self.controller = controller
        self.dispatcher = dispatcher
        self.console = console or Console()
        self.topic = topic
        self.running = False
        self.dirty = True
        self.input_handler: Optional[KeyboardInputHandler] = None

        pub.subscribe(self._on_display_changed, topic)
        logger.info("TranscriptionScreen initialized")

    def _on_display_changed(self, display: DisplayState, session: Session) -> None:
        self.dirty = True

    def create_layout(self) -> Layout:
        """Create the main UI layout."""
        layout = Layout()
        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="main", ratio=1),
            Layout(name="footer", size=3)
        )
        return layout

    def update_header(self, layout: Layout) -> None:
        display = self.controller.display
        if self.controller.session.is_active:
            stats = self.controller.audio_capture.get_recording_stats()
            level_bar = "█" * int(stats.peak_level * 20)
            status = Text.assemble(("🔴 RECORDING ", "bold red"),
                                   f"{stats.duration_seconds:5.1f}s ",
                                   (f"{level_bar:<20}", "green"))
        else:
            status = Text("⏹️  IDLE", style="bold yellow")

        header_text = Text.assemble((f"🎙️  {display.title}", "bold blue"), "  |  ", status)
        layout["header"].update(Panel(Align.center(header_text), style="bright_blue"))

    def update_main(self, layout: Layout) -> None:
        display = self.controller.display
        if display.dialog is not None:
            body = Text.assemble((display.dialog.message, "bold"), "\n\n",
                                 ("[ENTER] ", "bold green"), " / ".join(display.dialog.actions))
            layout["main"].update(Panel(Align.center(body, vertical="middle"),
                                        title=display.dialog.title, border_style="red"))
            return

        if display.text:
            body = Text(display.text, style="white")
        else:
            body = Text("Press SPACE to start recording", style="dim white italic")
        layout["main"].update(Panel(body, title="📝 Transcript", border_style="grey50"))

    def update_footer(self, layout: Layout) -> None:
        display = self.controller.display
        toggle_style = "bold green" if display.toggle_enabled else "dim"
        controls = Text.assemble(
            ("SPACE", toggle_style), f" {display.toggle_label}  ",
            ("E", "bold cyan"), " Export  ",
            ("+", "bold cyan"), " Larger  ",
            ("-", "bold cyan"), " Smaller  ",
            ("Q", "bold red"), " Quit  ",
            f"| Text size: {self.controller.font_size:g}"
        )
        layout["footer"].update(Panel(Align.center(controls), style="bright_black"))

    def update_display(self, layout: Layout) -> None:
        self.update_header(layout)
        self.update_main(layout)
        self.update_footer(layout)

    def handle_key_input(self, key: str) -> None:
        """Dispatch one key to the controller. Runs on the dispatcher thread."""
        if key in QUIT_KEYS:
            logger.info("Quit key pressed")
            self.running = False
            return

        if self.controller.display.dialog is not None:
            # Dialogs block everything except their acknowledgement
            if key == "\n":
                self.controller.acknowledge_dialog()
            return

        if key == " ":
            self.controller.toggle_recording()
        elif key == "e":
            self.controller.export_transcript()
        elif key in ("+", "="):
            self.controller.increase_text_size()
        elif key in ("-", "_"):
            self.controller.decrease_text_size()
        else:
            logger.debug(f"Unhandled key: {key!r}")

    def _on_key(self, key: str) -> None:
        # Runs on the keyboard thread
        self.dispatcher.post(self.handle_key_input, key)

    def run(self) -> None:
        """Run the screen until the user quits."""
        self.running = True
        layout = self.create_layout()
        self.controller.initialize()

        self.input_handler = KeyboardInputHandler(self._on_key)
        self.input_handler.start()

        try:
            with Live(layout, console=self.console, screen=True, auto_refresh=False) as live:
                while self.running:
                    self.dispatcher.run_pending(timeout=0.1)
                    # The level meter changes every frame while recording
                    if self.dirty or self.controller.session.is_active:
                        self.update_display(layout)
                        live.refresh()
                        self.dirty = False
        except KeyboardInterrupt:
            logger.info("Keyboard interrupt received")
        finally:
            self.cleanup()

    def cleanup(self) -> None:
        """Stop input handling and return the session to idle."""
        self.running = False
        if self.input_handler:
            self.input_handler.stop()
        self.controller.teardown()
        pub.unsubscribe(self._on_display_changed, self.topic)
        self.console.print("👋 Scribelt session ended", style="bold blue")
        logger.info("TranscriptionScreen cleanup completed")
