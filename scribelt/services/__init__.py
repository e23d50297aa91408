"""Services layer for Scribelt application logic."""

from .dispatcher import MainThreadDispatcher
from .display_publisher import DisplayPublisher
from .permission_service import (
    PermissionService,
    DevicePermissionService,
    StaticPermissionService,
)
from .session_controller import SessionController

__all__ = [
    "MainThreadDispatcher",
    "DisplayPublisher",
    "PermissionService",
    "DevicePermissionService",
    "StaticPermissionService",
    "SessionController",
]
