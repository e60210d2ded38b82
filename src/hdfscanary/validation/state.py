"""Immutable results produced by the validation phases."""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from hdfscanary.fs.client import FileSystemClient
from hdfscanary.issues import Issue
from hdfscanary.security.identity import Identity


@dataclass(frozen=True)
class ValidationState:
    """
    Everything the connection phase established.

    ``connection`` is only set when ``valid`` is True. The validator never closes it;
    whoever owns the state closes it at teardown.
    """

    valid: bool
    issues: Tuple[Issue, ...] = ()
    target_uri: str = ""
    config: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    login_identity: Optional[Identity] = None
    acting_identity: Optional[Identity] = None
    connection: Optional[FileSystemClient] = None

    def __bool__(self) -> bool:
        return self.valid


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of one permission probe."""

    ok: bool
    issues: Tuple[Issue, ...] = ()
    path: str = ""
    marker: Optional[str] = None

    def __bool__(self) -> bool:
        return self.ok


__all__ = ["ProbeResult", "ValidationState"]
