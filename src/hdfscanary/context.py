"""Stage context capability consumed by the validators."""
from __future__ import annotations

import getpass
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Protocol, Union

from hdfscanary.issues import Errors, Groups, Issue


class ExecutionMode(str, Enum):
    """Deployment topology the surrounding stage runs under."""

    STANDALONE = "STANDALONE"
    CLUSTER_BATCH = "CLUSTER_BATCH"
    CLUSTER_YARN_STREAMING = "CLUSTER_YARN_STREAMING"
    CLUSTER_MESOS_STREAMING = "CLUSTER_MESOS_STREAMING"
    EDGE = "EDGE"

    @property
    def is_cluster(self) -> bool:
        return self in _CLUSTER_MODES


_CLUSTER_MODES = frozenset(
    {
        ExecutionMode.CLUSTER_BATCH,
        ExecutionMode.CLUSTER_YARN_STREAMING,
        ExecutionMode.CLUSTER_MESOS_STREAMING,
    }
)


class StageContext(Protocol):
    """Protocol for the host stage context the validators report through."""

    def create_config_issue(
        self,
        group: Union[str, Groups],
        field: Optional[str],
        error_code: Errors,
        *args: Any,
    ) -> Issue:
        ...

    def get_execution_mode(self) -> ExecutionMode:
        ...

    def get_resources_directory(self) -> Path:
        ...

    def get_current_user(self) -> str:
        ...


class DefaultStageContext:
    """Standalone context used when no host pipeline engine is present."""

    def __init__(
        self,
        execution_mode: ExecutionMode = ExecutionMode.STANDALONE,
        resources_directory: Union[str, Path, None] = None,
        current_user: Optional[str] = None,
    ):
        self._execution_mode = ExecutionMode(execution_mode)
        self._resources_directory = Path(resources_directory) if resources_directory else Path.cwd()
        self._current_user = current_user

    def create_config_issue(
        self,
        group: Union[str, Groups],
        field: Optional[str],
        error_code: Errors,
        *args: Any,
    ) -> Issue:
        return Issue(group=group, field=field, error_code=error_code, args=args)

    def get_execution_mode(self) -> ExecutionMode:
        return self._execution_mode

    def get_resources_directory(self) -> Path:
        return self._resources_directory

    def get_current_user(self) -> str:
        return self._current_user or getpass.getuser()

    def __repr__(self) -> str:
        return (
            f"DefaultStageContext(execution_mode={self._execution_mode.value!r}, "
            f"resources_directory={str(self._resources_directory)!r})"
        )


__all__ = ["DefaultStageContext", "ExecutionMode", "StageContext"]
