"""Terminal user interface for Scribelt."""

from .share import ShareSheet, LaunchShareSheet, ConsoleShareSheet

__all__ = [
    "ShareSheet",
    "LaunchShareSheet",
    "ConsoleShareSheet",
]
