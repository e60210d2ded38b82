"""Connection validation and write-permission probing."""
from .state import ProbeResult, ValidationState
from .connection import ConnectionValidator
from .probe import MARKER_PREFIX, PermissionProbe

__all__ = [
    "ConnectionValidator",
    "MARKER_PREFIX",
    "PermissionProbe",
    "ProbeResult",
    "ValidationState",
]
