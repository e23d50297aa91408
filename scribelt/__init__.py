"""Scribelt: live speech transcription with export."""

__version__ = "0.1.0"
