"""Audio capture module."""

from .capture import AudioCapture, probe_input_device

__all__ = [
    'AudioCapture',
    'probe_input_device',
]
