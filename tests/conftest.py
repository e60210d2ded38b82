"""
Pytest configuration for the hdfscanary test suite.

Provides:
- a Loguru-to-standard-logging bridge so ``caplog`` sees package log output
- an in-memory filesystem and factory standing in for the remote filesystem
- stage contexts and settings builders shared by the module tests
"""

import contextlib
import logging
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional, Set, Tuple

import pytest

# Add the src directory to the Python path
src_path = str(Path(__file__).parent.parent / "src")
sys.path.insert(0, src_path)

from loguru import logger  # noqa: E402

from hdfscanary.config.merger import ConfigMerger  # noqa: E402
from hdfscanary.config.models import HadoopFSSettings  # noqa: E402
from hdfscanary.context import DefaultStageContext, ExecutionMode  # noqa: E402
from hdfscanary.fs import paths  # noqa: E402
from hdfscanary.security.identity import Identity, current_identity  # noqa: E402
from hdfscanary.security.provider import HadoopSecurityProvider  # noqa: E402
from hdfscanary.security.resolver import SecurityContextResolver  # noqa: E402
from hdfscanary.validation.connection import ConnectionValidator  # noqa: E402


# ============================================================================
# LOGURU INTEGRATION
# ============================================================================

@pytest.fixture(autouse=True, scope="function")
def capture_loguru_logs_globally(caplog):
    """Forward Loguru records into the standard logging tree captured by caplog."""

    class PropagateHandler(logging.Handler):
        def emit(self, record):
            logging.getLogger(record.name or "hdfscanary").handle(record)

    caplog.set_level(logging.DEBUG)
    handler_id = logger.add(
        PropagateHandler(),
        format="{message}",
        level="DEBUG",
        catch=True,
        enqueue=False,
    )

    yield

    with contextlib.suppress(ValueError, KeyError):
        logger.remove(handler_id)


# ============================================================================
# IN-MEMORY FILESYSTEM
# ============================================================================

class FakeFileSystem:
    """
    In-memory stand-in for the remote filesystem.

    Records every call together with the identity active while it ran, and can be told
    to fail individual primitives.
    """

    def __init__(self, uri: str = "hdfs://namenode:8020", directories=("/",), files=()):
        self.uri = uri
        self.directories: Set[str] = {paths.normalize(d) for d in directories} | {"/"}
        self.files: Set[str] = {paths.normalize(f) for f in files}
        self.calls: List[Tuple[str, str, Optional[Identity]]] = []
        self.closed = False
        self.mkdirs_result = True
        self.failures: Dict[str, Exception] = {}

    def _record(self, op: str, path: str) -> None:
        self.calls.append((op, path, current_identity()))
        if op in self.failures:
            raise self.failures[op]

    def fail(self, op: str, error: Exception) -> "FakeFileSystem":
        self.failures[op] = error
        return self

    def ops(self, name: Optional[str] = None) -> List[Tuple[str, str]]:
        return [(op, path) for op, path, _ in self.calls if name is None or op == name]

    def exists(self, path: str) -> bool:
        path = paths.normalize(path)
        self._record("exists", path)
        return path in self.directories or path in self.files

    def mkdirs(self, path: str) -> bool:
        path = paths.normalize(path)
        self._record("mkdirs", path)
        if not self.mkdirs_result:
            return False
        for ancestor in paths.ancestors(path):
            self.directories.add(ancestor)
        return True

    def create(self, path: str) -> None:
        path = paths.normalize(path)
        self._record("create", path)
        if paths.parent(path) not in self.directories:
            raise FileNotFoundError(path)
        self.files.add(path)

    def delete(self, path: str, recursive: bool = False) -> bool:
        path = paths.normalize(path)
        self._record("delete", path)
        if path in self.files:
            self.files.discard(path)
            return True
        if path in self.directories:
            nested = {p for p in self.directories | self.files if p.startswith(path + "/")}
            if nested and not recursive:
                raise OSError(f"Directory {path} is not empty")
            self.directories -= nested | {path}
            self.files -= nested
            return True
        return False

    def close(self) -> None:
        self.closed = True


class FakeFileSystemFactory:
    """Factory handing out one :class:`FakeFileSystem`, or raising a configured error."""

    def __init__(self, filesystem: Optional[FakeFileSystem] = None, error: Optional[Exception] = None):
        self.filesystem = filesystem or FakeFileSystem()
        self.error = error
        self.opened: List[Tuple[str, Dict[str, str], Optional[Identity]]] = []

    def open(self, uri, config):
        self.opened.append((uri, dict(config), current_identity()))
        if self.error is not None:
            raise self.error
        self.filesystem.uri = uri
        return self.filesystem


# ============================================================================
# SHARED FIXTURES
# ============================================================================

@pytest.fixture
def fake_fs() -> FakeFileSystem:
    return FakeFileSystem(directories=["/", "/existing", "/a"])


@pytest.fixture
def fs_factory(fake_fs) -> FakeFileSystemFactory:
    return FakeFileSystemFactory(fake_fs)


@pytest.fixture
def resources_dir(tmp_path) -> Path:
    resources = tmp_path / "resources"
    resources.mkdir()
    return resources


@pytest.fixture
def stage_context(resources_dir) -> DefaultStageContext:
    return DefaultStageContext(
        execution_mode=ExecutionMode.STANDALONE,
        resources_directory=resources_dir,
        current_user="pipeline-owner",
    )


@pytest.fixture
def cluster_context(resources_dir) -> DefaultStageContext:
    return DefaultStageContext(
        execution_mode=ExecutionMode.CLUSTER_YARN_STREAMING,
        resources_directory=resources_dir,
    )


@pytest.fixture
def simple_environ() -> Dict[str, str]:
    return {"HADOOP_USER_NAME": "sdc"}


@pytest.fixture
def kerberos_environ(tmp_path) -> Dict[str, str]:
    ticket_cache = tmp_path / "krb5cc_test"
    ticket_cache.write_bytes(b"\x05\x04")
    return {"HADOOP_USER_NAME": "sdc", "KRB5CCNAME": f"FILE:{ticket_cache}"}


@pytest.fixture
def realm_resolver() -> Callable[[], str]:
    return lambda: "EXAMPLE.COM"


@pytest.fixture
def make_settings() -> Callable[..., HadoopFSSettings]:
    def _make(**overrides) -> HadoopFSSettings:
        return HadoopFSSettings(**overrides)

    return _make


@pytest.fixture
def make_validator(stage_context, fs_factory, simple_environ, realm_resolver):
    """Build a ConnectionValidator wired to fakes; keyword arguments replace the defaults."""

    def _make(context=None, factory=None, environ=None, realm=None) -> ConnectionValidator:
        context = context or stage_context
        return ConnectionValidator(
            context,
            merger=ConfigMerger(context, realm_resolver=realm or realm_resolver),
            resolver=SecurityContextResolver(HadoopSecurityProvider(environ or simple_environ)),
            fs_factory=factory or fs_factory,
        )

    return _make


@pytest.fixture
def write_site_file() -> Callable[[Path, Dict[str, str]], Path]:
    """Writer for Hadoop site files with the given properties."""

    def _write(path: Path, properties: Dict[str, str]) -> Path:
        body = "".join(
            f"  <property>\n    <name>{name}</name>\n    <value>{value}</value>\n  </property>\n"
            for name, value in properties.items()
        )
        path.write_text(f'<?xml version="1.0"?>\n<configuration>\n{body}</configuration>\n', encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_fs() -> Callable[..., FakeFileSystem]:
    return FakeFileSystem


@pytest.fixture
def make_factory() -> Callable[..., FakeFileSystemFactory]:
    return FakeFileSystemFactory
