"""
Filesystem capability and its pyarrow-backed implementation.

``hdfs://`` and ``viewfs://`` URIs open a :class:`pyarrow.fs.HadoopFileSystem` (libhdfs
must be loadable, see the pyarrow documentation for ``HADOOP_HOME``, ``JAVA_HOME`` and
``CLASSPATH``); ``file://`` URIs open a :class:`pyarrow.fs.LocalFileSystem`. The handle
is opened as the identity active in the current :func:`~hdfscanary.security.run_as`
scope.
"""
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Protocol
from urllib.parse import urlsplit

from pyarrow import fs as pafs

from hdfscanary import logger
from hdfscanary.exceptions import FileSystemError
from hdfscanary.security.identity import Identity, current_identity

from . import paths

HADOOP_SCHEMES = frozenset({"hdfs", "viewfs"})
LOCAL_SCHEMES = frozenset({"file"})


class FileSystemClient(Protocol):
    """Protocol for the filesystem primitives the permission probe needs."""

    uri: str

    def exists(self, path: str) -> bool:
        ...

    def mkdirs(self, path: str) -> bool:
        ...

    def create(self, path: str) -> None:
        ...

    def delete(self, path: str, recursive: bool = False) -> bool:
        ...

    def close(self) -> None:
        ...


class FileSystemFactory(Protocol):
    """Protocol for opening a filesystem handle for a URI and configuration."""

    def open(self, uri: str, config: Mapping[str, str]) -> FileSystemClient:
        ...


class ArrowFileSystemClient:
    """:class:`FileSystemClient` over any :class:`pyarrow.fs.FileSystem`."""

    def __init__(self, filesystem: pafs.FileSystem, uri: str, identity: Optional[Identity] = None):
        self._fs = filesystem
        self.uri = uri
        self.identity = identity
        self._closed = False

    @property
    def filesystem(self) -> pafs.FileSystem:
        self._check_open()
        return self._fs

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise FileSystemError(
                "Filesystem handle is closed",
                error_code="FS_003",
                context={"uri": self.uri},
            )

    def exists(self, path: str) -> bool:
        info = self.filesystem.get_file_info(paths.normalize(path))
        return info.type != pafs.FileType.NotFound

    def mkdirs(self, path: str) -> bool:
        path = paths.normalize(path)
        self.filesystem.create_dir(path, recursive=True)
        return self.filesystem.get_file_info(path).type == pafs.FileType.Directory

    def create(self, path: str) -> None:
        with self.filesystem.open_output_stream(paths.normalize(path)):
            pass

    def delete(self, path: str, recursive: bool = False) -> bool:
        path = paths.normalize(path)
        info = self.filesystem.get_file_info(path)
        if info.type == pafs.FileType.NotFound:
            return False
        if info.type == pafs.FileType.Directory:
            if not recursive:
                children = self.filesystem.get_file_info(pafs.FileSelector(path))
                if children:
                    raise FileSystemError(
                        f"Directory {path} is not empty",
                        error_code="FS_003",
                        context={"uri": self.uri, "path": path},
                    )
            self.filesystem.delete_dir(path)
        else:
            self.filesystem.delete_file(path)
        return True

    def close(self) -> None:
        # pyarrow filesystems release their connection when garbage collected
        self._closed = True

    def __repr__(self) -> str:
        return f"ArrowFileSystemClient(uri={self.uri!r}, identity={self.identity!s})"


class ArrowFileSystemFactory:
    """Opens pyarrow filesystems for Hadoop and local URIs."""

    def __init__(self, replication: int = 3, buffer_size: int = 0):
        self.replication = replication
        self.buffer_size = buffer_size

    def _hadoop_kwargs(self, uri: str, config: Mapping[str, str], identity: Optional[Identity]) -> Dict[str, Any]:
        parsed = urlsplit(uri)
        if parsed.scheme == "hdfs":
            host = parsed.hostname or "default"
        else:
            host = f"{parsed.scheme}://{parsed.netloc}"
        kwargs: Dict[str, Any] = {
            "host": host,
            # 0 lets the client resolve the port, required for HA nameservices
            "port": parsed.port or 0,
            "replication": self.replication,
            "buffer_size": self.buffer_size,
            "extra_conf": {str(k): str(v) for k, v in config.items()},
        }
        if identity is not None:
            kwargs["user"] = identity.user_name
            if identity.effective_ticket_cache:
                kwargs["kerb_ticket"] = identity.effective_ticket_cache
        return kwargs

    def open(self, uri: str, config: Mapping[str, str]) -> ArrowFileSystemClient:
        identity = current_identity()
        scheme = urlsplit(uri).scheme.lower()

        if scheme in LOCAL_SCHEMES:
            logger.debug(f"Opening local filesystem for {uri}")
            return ArrowFileSystemClient(pafs.LocalFileSystem(), uri, identity)

        if scheme in HADOOP_SCHEMES:
            kwargs = self._hadoop_kwargs(uri, config, identity)
            logger.debug(
                f"Opening Hadoop filesystem host={kwargs['host']} port={kwargs['port']} "
                f"user={kwargs.get('user')}"
            )
            return ArrowFileSystemClient(pafs.HadoopFileSystem(**kwargs), uri, identity)

        raise FileSystemError(
            f"Unsupported filesystem scheme '{scheme}'",
            error_code="FS_002",
            context={"uri": uri},
        )


__all__ = [
    "ArrowFileSystemClient",
    "ArrowFileSystemFactory",
    "FileSystemClient",
    "FileSystemFactory",
    "HADOOP_SCHEMES",
    "LOCAL_SCHEMES",
]
