"""Cross-platform keyboard input handling for the terminal UI."""

import os
import sys
import threading
import time
from typing import Optional, Callable
import logging

logger = logging.getLogger(__name__)


class KeyboardInputHandler:
    """Reads single keypresses on a background thread and hands them to a callback.

    On Unix the terminal is put in cbreak mode for the whole time the handler
    runs, so every key is readable as soon as it is pressed.
    """

    def __init__(self, callback: Callable[[str], None], input_fd: Optional[int] = None):
        """Initialize keyboard handler.

        Args:
            callback: Receives each key; runs on the input thread
            input_fd: Terminal file descriptor to read (defaults to stdin)
        """
        self.callback = callback
        self.input_fd = input_fd
        self.running = False
        self.thread: Optional[threading.Thread] = None
        self._saved_settings = None

    def start(self) -> None:
        """Start the keyboard input handler."""
        if self.running:
            return

        if sys.platform != "win32":
            self._enter_cbreak()

        self.running = True
        self.thread = threading.Thread(target=self._input_loop, daemon=True)
        self.thread.name = "KeyboardInputThread"
        self.thread.start()
        logger.info("Keyboard input handler started")

    def stop(self) -> None:
        """Stop the keyboard input handler and restore the terminal."""
        self.running = False
        try:
            if self.thread:
                self.thread.join(timeout=1.0)
        finally:
            self._restore_terminal()
        logger.info("Keyboard input handler stopped")

    def _fd(self) -> int:
        return sys.stdin.fileno() if self.input_fd is None else self.input_fd

    def _enter_cbreak(self) -> None:
        import termios
        import tty

        fd = self._fd()
        if not os.isatty(fd):
            logger.info("Input is not a terminal, keyboard handling disabled")
            return
        self._saved_settings = termios.tcgetattr(fd)
        tty.setcbreak(fd)

    def _restore_terminal(self) -> None:
        if self._saved_settings is None:
            return
        import termios

        termios.tcsetattr(self._fd(), termios.TCSADRAIN, self._saved_settings)
        self._saved_settings = None

    def _input_loop(self) -> None:
        logger.info("Starting keyboard input loop")
        while self.running:
            key = self._get_key()
            if key:
                logger.debug(f"Key detected: {key!r}")
                self.callback(key)
            # Small delay to prevent busy waiting
            time.sleep(0.02)
        logger.info("Keyboard input loop ended")

    def _get_key(self) -> Optional[str]:
        if sys.platform == "win32":
            return self._get_key_windows()
        return self._get_key_unix()

    def _get_key_windows(self) -> Optional[str]:
        import msvcrt
        if msvcrt.kbhit():
            key = msvcrt.getwch()
            return "\n" if key == "\r" else key.lower()
        return None

    def _get_key_unix(self) -> Optional[str]:
        import select

        if self._saved_settings is None:
            time.sleep(0.1)
            return None

        fd = self._fd()
        if not select.select([fd], [], [], 0.1)[0]:
            return None
        data = os.read(fd, 1)
        if not data:
            return None
        key = data.decode("utf-8", errors="replace")
        return "\n" if key == "\r" else key.lower()
