"""UI-related data models."""

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Dialog:
    """A blocking informational dialog with acknowledgement actions."""
    title: str
    message: str
    actions: Tuple[str, ...] = ("OK",)


@dataclass
class DisplayState:
    """What the screen shows: title, text view, toggle button and any dialog."""
    title: str = "Scribelt"
    text: str = ""
    toggle_label: str = "Start"
    toggle_enabled: bool = False
    dialog: Optional[Dialog] = None
