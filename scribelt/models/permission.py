"""Permission state reported by the permission service."""

from enum import Enum


class PermissionStatus(Enum):
    """Outcome of the startup permission request."""
    NOT_DETERMINED = "not_determined"
    AUTHORIZED = "authorized"
    DENIED = "denied"
    RESTRICTED = "restricted"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: str) -> "PermissionStatus":
        """Parse a config value such as 'authorized' or 'not-determined'."""
        normalized = str(value).strip().lower().replace("-", "_")
        for status in cls:
            if status.value == normalized:
                return status
        raise ValueError(f"Unknown permission status: {value}")
