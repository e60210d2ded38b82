"""Configuration issues reported back to the host pipeline's validation UI."""
from __future__ import annotations

from enum import Enum
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from hdfscanary import logger


class Groups(str, Enum):
    """Configuration groups an issue can be attached to."""

    HADOOP_FS = "HADOOP_FS"
    OUTPUT_FILES = "OUTPUT_FILES"
    LATE_RECORDS = "LATE_RECORDS"


class Errors(Enum):
    """Error codes with their ``{}``-placeholder message templates."""

    HADOOPFS_00 = "Hadoop login reports '{}' authentication, it should be '{}'"
    HADOOPFS_01 = "Failed to configure or connect to the '{}' Hadoop file system: {}"
    HADOOPFS_18 = "Invalid Hadoop FS URI '{}', it must include the scheme separator '://'"
    HADOOPFS_22 = "Invalid Hadoop FS URI '{}': {}"
    HADOOPFS_25 = "Hadoop configuration directory '{}' does not exist"
    HADOOPFS_26 = "Hadoop configuration directory '{}' path is not a directory"
    HADOOPFS_27 = "Hadoop configuration file '{}' is not a readable file"
    HADOOPFS_28 = (
        "Could not resolve the Kerberos default realm, you must set the "
        "'dfs.namenode.kerberos.principal' property to the HDFS principal name: {}"
    )
    HADOOPFS_40 = "Directory template path must be absolute"
    HADOOPFS_41 = "Could not create a directory to verify write permissions"
    HADOOPFS_42 = "Could not create a directory to verify write permissions: {}"
    HADOOPFS_43 = "Could not create and delete a file to verify write permissions: {}"
    HADOOPFS_44 = "Could not verify the directory permissions: {}"
    HADOOPFS_45 = "Hadoop configuration directory '{}' must be relative to the resources directory in cluster mode"
    HADOOPFS_49 = "The Hadoop FS URI is not set, it must be set in the stage or in the 'fs.defaultFS' property"
    HADOOPFS_61 = (
        "No Hadoop FS URI, Hadoop configuration directory or 'fs.defaultFS' property configured, "
        "refusing to fall back to the local filesystem"
    )
    HADOOPFS_62 = "Could not evaluate the Hadoop configuration property value: {}"
    HADOOPFS_63 = "HDFS user '{}' cannot be set while impersonating the current user is enforced"
    HADOOPFS_64 = "Invalid HDFS user name '{}': {}"

    @property
    def code(self) -> str:
        return self.name

    @property
    def template(self) -> str:
        return self.value

    def format(self, *args: Any) -> str:
        """Render the template, tolerating a mismatched argument count."""
        placeholders = self.value.count("{}")
        values = [str(arg) for arg in args[:placeholders]]
        values.extend("" for _ in range(placeholders - len(values)))
        return self.value.format(*values)


class Issue(BaseModel):
    """One validation failure: ``(group, field, error_code, args)``."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    group: str
    field: Optional[str] = None
    error_code: Errors
    args: Tuple[Any, ...] = Field(default_factory=tuple)

    @field_validator("group", mode="before")
    @classmethod
    def _coerce_group(cls, value: Any) -> str:
        if isinstance(value, Groups):
            return value.value
        return value

    @field_validator("args", mode="before")
    @classmethod
    def _coerce_args(cls, value: Any) -> Tuple[Any, ...]:
        if value is None:
            return ()
        return tuple(value)

    @property
    def code(self) -> str:
        return self.error_code.code

    @property
    def message(self) -> str:
        return self.error_code.format(*self.args)

    def __str__(self) -> str:
        location = f"{self.group}.{self.field}" if self.field else self.group
        return f"{self.code} [{location}]: {self.message}"


def log_validation_failure(
    validator: str,
    issue: Issue,
    *,
    level: str = "warning",
    **context: Any,
) -> None:
    """Emit a structured log message for a recorded issue."""
    context_parts = ", ".join(f"{key}={value}" for key, value in context.items())
    log_message = (
        f"Validation failure in {validator}: {issue} | "
        f"validator={validator} | code={issue.code}"
    )
    if context_parts:
        log_message = f"{log_message} | {context_parts}"

    log_method = getattr(logger, level.lower(), logger.warning)
    log_method(log_message)


__all__ = ["Errors", "Groups", "Issue", "log_validation_failure"]
