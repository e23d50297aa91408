"""Permission service: decides once at startup whether recording is allowed."""

import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Optional

from ..audio.capture import probe_input_device
from ..exceptions import PermissionDenied, PermissionRestricted, PermissionUnknown
from ..models.permission import PermissionStatus

logger = logging.getLogger(__name__)

PermissionCallback = Callable[[PermissionStatus], None]


class PermissionService(ABC):
    """Reports a PermissionStatus asynchronously through a single-shot callback."""

    @abstractmethod
    def request_permission(self, callback: PermissionCallback) -> None:
        pass


class StaticPermissionService(PermissionService):
    """Answers with a fixed status, e.g. from ``permissions.override``."""

    def __init__(self, status: PermissionStatus):
        self.status = status

    def request_permission(self, callback: PermissionCallback) -> None:
        logger.info(f"Permission fixed by configuration: {self.status.value}")
        thread = threading.Thread(target=callback, args=(self.status,), daemon=True)
        thread.name = "PermissionThread"
        thread.start()


class DevicePermissionService(PermissionService):
    """Probes the microphone and the recognizer credentials on a background thread."""

    def __init__(self, credentials_path: Optional[str] = None,
                 input_probe: Callable[[], bool] = probe_input_device):
        """Initialize device permission service.

        Args:
            credentials_path: Configured recognizer credentials file, if any
            input_probe: Returns True when an input device is available
        """
        self.credentials_path = credentials_path
        self.input_probe = input_probe

    def request_permission(self, callback: PermissionCallback) -> None:
        thread = threading.Thread(target=self._run, args=(callback,), daemon=True)
        thread.name = "PermissionThread"
        thread.start()

    def _run(self, callback: PermissionCallback) -> None:
        try:
            self._check()
            status = PermissionStatus.AUTHORIZED
        except PermissionDenied as e:
            logger.warning(f"Permission denied: {e}")
            status = PermissionStatus.DENIED
        except PermissionRestricted as e:
            logger.warning(f"Permission restricted: {e}")
            status = PermissionStatus.RESTRICTED
        except PermissionUnknown as e:
            logger.warning(f"Permission unknown: {e}")
            status = PermissionStatus.UNKNOWN

        logger.info(f"Permission status: {status.value}")
        callback(status)

    def _check(self) -> None:
        try:
            has_input = self.input_probe()
        except Exception as e:
            raise PermissionUnknown(f"Audio system probe failed: {e}") from e

        if not has_input:
            raise PermissionDenied("No microphone input device is available")

        if self.credentials_path and not Path(self.credentials_path).exists():
            raise PermissionRestricted(
                f"Recognizer credentials not found: {self.credentials_path}")
