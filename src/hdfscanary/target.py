"""
Stage-facing facade.

A stage creates one :class:`HdfsTarget` per instance, calls :meth:`validate_hadoop_fs`
and :meth:`validate_hadoop_dir` from its init hook, uses :attr:`connection` while
running, and calls :meth:`close` from its destroy hook::

    issues = []
    target = HdfsTarget(settings, context)
    if target.validate_hadoop_fs(issues):
        target.validate_hadoop_dir("dirPathTemplate", Groups.OUTPUT_FILES, "/data/out", issues)
    ...
    target.close()
"""
from __future__ import annotations

from typing import List, Optional, Union

from hdfscanary import logger
from hdfscanary.config.models import HadoopFSSettings
from hdfscanary.context import DefaultStageContext, StageContext
from hdfscanary.fs.client import FileSystemClient
from hdfscanary.issues import Errors, Groups, Issue, log_validation_failure
from hdfscanary.validation.connection import ConnectionValidator
from hdfscanary.validation.probe import PermissionProbe
from hdfscanary.validation.state import ProbeResult, ValidationState


class HdfsTarget:
    """Owns the validated connection of one stage instance."""

    def __init__(
        self,
        settings: HadoopFSSettings,
        context: Optional[StageContext] = None,
        validator: Optional[ConnectionValidator] = None,
        probe: Optional[PermissionProbe] = None,
    ):
        self.settings = settings
        self.context = context or DefaultStageContext()
        self.validator = validator or ConnectionValidator(self.context)
        self.probe = probe or PermissionProbe(self.context)
        self.state: Optional[ValidationState] = None

    @property
    def connection(self) -> Optional[FileSystemClient]:
        return self.state.connection if self.state else None

    def validate(self) -> ValidationState:
        """Run connection validation, replacing (and closing) any earlier connection."""
        self.close()
        self.state = self.validator.validate(self.settings)
        return self.state

    def validate_hadoop_fs(self, issues: List[Issue]) -> bool:
        """Validate the connection, appending issues; True when the filesystem is usable."""
        state = self.validate()
        issues.extend(state.issues)
        return state.valid

    def probe_dir(
        self,
        dir_path_template: str,
        group: Union[str, Groups] = Groups.OUTPUT_FILES,
        field: Optional[str] = None,
    ) -> ProbeResult:
        """Probe a directory with the validated connection and acting identity."""
        group_name = group.value if isinstance(group, Groups) else group
        if self.state is None or not self.state.valid:
            issue = self.context.create_config_issue(
                group_name, field, Errors.HADOOPFS_44, "the Hadoop FS connection has not been validated"
            )
            log_validation_failure("target.probe_dir", issue)
            return ProbeResult(ok=False, issues=(issue,), path=dir_path_template)
        return self.probe.probe(
            dir_path_template,
            self.state.acting_identity,
            self.state.connection,
            group_name,
            field,
        )

    def validate_hadoop_dir(
        self,
        config_name: Optional[str],
        config_group: Union[str, Groups],
        dir_path_template: str,
        issues: List[Issue],
    ) -> bool:
        """Probe a directory, appending issues; True when it is writable."""
        result = self.probe_dir(dir_path_template, config_group, config_name)
        issues.extend(result.issues)
        return result.ok

    def close(self) -> None:
        """Close the connection opened by validation, if any."""
        connection = self.connection
        if connection is None:
            return
        try:
            connection.close()
            logger.debug(f"Closed filesystem connection to {self.state.target_uri}")
        except Exception as ex:
            logger.warning(f"Error closing filesystem connection to {self.state.target_uri}: {ex}")
        self.state = None

    def __enter__(self) -> "HdfsTarget":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["HdfsTarget"]
