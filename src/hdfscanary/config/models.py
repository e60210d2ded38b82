"""
Pydantic models for the HDFS stage settings.

``HadoopFSSettings`` carries everything the connection validator reads: the explicit
filesystem URI, the impersonation user, the Kerberos flag, the Hadoop configuration
directory and the per-key overrides. Override values stay deferred until merge time.
"""

from typing import Any, Callable, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .keys import FS_DEFAULT_NAME_KEY
from .values import evaluate

DEFAULT_CONFIG_PREFIX = "hdfsTargetConfigBean."


class HadoopConfigEntry(BaseModel):
    """
    One explicit Hadoop configuration override.

    Attributes:
        key: Hadoop property name, e.g. ``dfs.replication``
        value: Literal string, zero-argument callable, or ``${env:..}``/``${file:..}`` expression
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    key: str = Field(min_length=1, description="Hadoop property name")
    value: Union[str, Callable[[], Any], None] = Field(
        default="",
        description="Deferred property value, evaluated when configuration is merged",
    )

    @field_validator("key")
    @classmethod
    def _strip_key(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Hadoop configuration key cannot be blank")
        return v

    @field_validator("value", mode="before")
    @classmethod
    def _coerce_scalar(cls, v: Any) -> Any:
        # YAML hands over ints and bools for values like dfs.replication: 2
        if isinstance(v, bool):
            return str(v).lower()
        if isinstance(v, (int, float)):
            return str(v)
        return v

    def get(self) -> str:
        """Evaluate the deferred value. Raises ``ConfigValueError`` on failure."""
        return evaluate(self.value)


class ImpersonationPolicy(BaseModel):
    """Host-wide rules for choosing the user operations are performed as."""

    model_config = ConfigDict(frozen=True)

    always_impersonate_current_user: bool = Field(
        default=False,
        description="Impersonate the user running the pipeline; an explicit HDFS user is then an error",
    )
    lowercase_user: bool = Field(
        default=False,
        description="Lower-case the impersonated user name before use",
    )


class HadoopFSSettings(BaseModel):
    """
    HDFS connection settings of one pipeline stage.

    Attributes:
        hdfs_uri: Explicit filesystem URI; empty means read ``fs.defaultFS`` from configuration
        hdfs_user: User to impersonate; empty means act as the login user
        hdfs_kerberos: Request Kerberos authentication
        hdfs_conf_dir: Directory holding core-site.xml and hdfs-site.xml
        hdfs_configs: Explicit overrides, applied with the highest precedence
        config_prefix: Prefix of field names referenced by reported issues
    """

    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True,
        validate_default=True,
    )

    hdfs_uri: str = Field(default="", description="Hadoop FS URI")
    hdfs_user: str = Field(default="", description="HDFS user to impersonate")
    hdfs_kerberos: bool = Field(default=False, description="Use Kerberos authentication")
    hdfs_conf_dir: str = Field(default="", description="Hadoop FS configuration directory")
    hdfs_configs: List[HadoopConfigEntry] = Field(default_factory=list)
    impersonation: ImpersonationPolicy = Field(default_factory=ImpersonationPolicy)
    config_prefix: str = Field(default=DEFAULT_CONFIG_PREFIX)

    @field_validator("hdfs_uri", "hdfs_user", "hdfs_conf_dir", mode="before")
    @classmethod
    def _none_as_empty(cls, v: Optional[str]) -> str:
        return "" if v is None else v

    @field_validator("hdfs_configs", mode="before")
    @classmethod
    def _accept_mapping(cls, v: Any) -> Any:
        # Allow the compact YAML form {key: value, ...}
        if v is None:
            return []
        if isinstance(v, dict):
            return [{"key": key, "value": value} for key, value in v.items()]
        return v

    def field_name(self, name: str) -> str:
        """Issue field reference for one of this model's settings."""
        return f"{self.config_prefix}{name}"

    def has_override(self, key: str) -> bool:
        return any(entry.key == key for entry in self.hdfs_configs)

    @property
    def has_default_fs_override(self) -> bool:
        return self.has_override(FS_DEFAULT_NAME_KEY)


__all__ = [
    "DEFAULT_CONFIG_PREFIX",
    "HadoopConfigEntry",
    "HadoopFSSettings",
    "ImpersonationPolicy",
]
