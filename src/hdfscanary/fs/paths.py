"""Pure helpers for absolute filesystem paths (always ``/``-separated)."""
import posixpath
from typing import Iterator, Optional

ROOT = "/"


def normalize(path: str) -> str:
    """Normalise an absolute path; the empty path is the root."""
    if not path:
        return ROOT
    normalized = posixpath.normpath(path)
    # normpath keeps a leading '//' as POSIX allows it to be special
    if normalized.startswith("//"):
        normalized = "/" + normalized.lstrip("/")
    return normalized


def parent(path: str) -> Optional[str]:
    """Parent of ``path``, None for the root."""
    path = normalize(path)
    if path == ROOT:
        return None
    return posixpath.dirname(path) or ROOT


def ancestors(path: str) -> Iterator[str]:
    """Yield ``path`` and then each parent up to and including the root."""
    current: Optional[str] = normalize(path)
    while current is not None:
        yield current
        current = parent(current)


def join(directory: str, name: str) -> str:
    return posixpath.join(normalize(directory), name)


__all__ = ["ROOT", "ancestors", "join", "normalize", "parent"]
