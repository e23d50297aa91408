"""Error taxonomy for Scribelt.

Every error here is terminal to the operation that raised it. The session
controller catches them, returns to idle and shows a message or a dialog.
"""


class ScribeltError(Exception):
    """Base class for all Scribelt errors."""


class PermissionDenied(ScribeltError):
    """Microphone or recognition access was refused."""


class PermissionRestricted(ScribeltError):
    """Recognition is not allowed on this device."""


class PermissionUnknown(ScribeltError):
    """The permission probe could not reach a verdict."""


class RecognizerUnavailable(ScribeltError):
    """No speech recognizer could be created."""


class AudioEngineStartFailure(ScribeltError):
    """Audio capture could not be configured or started."""


class AudioConfigError(AudioEngineStartFailure):
    """The audio session could not be configured for capture."""


class AudioStartError(AudioEngineStartFailure):
    """The audio input stream could not be opened."""


class RecognitionChannelError(ScribeltError):
    """The recognition channel reported an error."""


class ExportWriteFailure(ScribeltError):
    """The transcript file could not be written."""


class EmptyExportAttempt(ScribeltError):
    """Export was requested with no text on display."""
