"""Filesystem capability interfaces and the pyarrow-backed implementation."""
from .client import (
    ArrowFileSystemClient,
    ArrowFileSystemFactory,
    FileSystemClient,
    FileSystemFactory,
)
from . import paths

__all__ = [
    "ArrowFileSystemClient",
    "ArrowFileSystemFactory",
    "FileSystemClient",
    "FileSystemFactory",
    "paths",
]
