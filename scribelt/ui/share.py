"""Share surfaces presented after a successful export."""

import logging
from abc import ABC, abstractmethod
from pathlib import Path

import click
from rich.console import Console

logger = logging.getLogger(__name__)


class ShareSheet(ABC):
    """Hands an exported file to the user."""

    @abstractmethod
    def present(self, file_path: Path) -> None:
        pass


class LaunchShareSheet(ShareSheet):
    """Reveals the exported file in the desktop file manager."""

    def __init__(self, console: Console):
        self.console = console

    def present(self, file_path: Path) -> None:
        self.console.print(f"📤 Exported to {file_path}", style="bold green")
        status = click.launch(str(file_path), locate=True)
        if status != 0:
            logger.warning(f"File manager launch returned {status} for {file_path}")


class ConsoleShareSheet(ShareSheet):
    """Prints the exported file path; used when no desktop is available."""

    def __init__(self, console: Console):
        self.console = console

    def present(self, file_path: Path) -> None:
        self.console.print(f"📤 Exported to {file_path}", style="bold green")
        logger.info(f"Export presented on console: {file_path}")
