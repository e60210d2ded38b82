"""
Effective Hadoop configuration assembly.

Sources are applied in increasing precedence:

1. fixed client defaults (no automatic close, raw local filesystem, external subject)
2. Kerberos settings when Kerberos is requested
3. ``core-site.xml`` and ``hdfs-site.xml`` from the configuration directory
4. the stage's explicit overrides

Every expected misconfiguration becomes an issue; the merge itself always completes.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional

from hdfscanary import logger
from hdfscanary.context import StageContext
from hdfscanary.exceptions import ConfigError, ConfigValueError
from hdfscanary.issues import Errors, Groups, Issue, log_validation_failure
from hdfscanary.security.identity import AuthenticationMethod
from hdfscanary.security.realm import get_default_realm

from . import keys
from .models import HadoopFSSettings
from .site import read_site_file

_VALIDATOR = "config.merge"


@dataclass(frozen=True)
class MergeResult:
    """Merged configuration plus the issues found while building it."""

    config: Mapping[str, str]
    issues: List[Issue] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.issues


def base_defaults() -> Dict[str, str]:
    """Client settings forced on every connection."""
    return {
        keys.FS_FILE_IMPL_KEY: keys.RAW_LOCAL_FILE_SYSTEM,
        # Only HdfsTarget.close() closes the filesystem
        keys.FS_AUTOMATIC_CLOSE_KEY: "false",
        keys.HADOOP_TREAT_SUBJECT_EXTERNAL_KEY: "true",
    }


class ConfigMerger:
    """Builds the effective configuration for one validation run."""

    def __init__(
        self,
        context: StageContext,
        realm_resolver: Callable[[], str] = get_default_realm,
    ):
        self.context = context
        self.realm_resolver = realm_resolver

    def build(self, settings: HadoopFSSettings) -> MergeResult:
        conf: Dict[str, str] = base_defaults()
        issues: List[Issue] = []

        if settings.hdfs_kerberos:
            self._apply_kerberos(conf, settings, issues)

        if settings.hdfs_conf_dir:
            self._apply_conf_dir(conf, settings, issues)
        elif not settings.hdfs_uri and not settings.has_default_fs_override:
            # Without a URI, a configuration directory or fs.defaultFS the client
            # would silently write to file:///
            self._add_issue(issues, Groups.HADOOP_FS, settings.field_name("hdfsUri"), Errors.HADOOPFS_61)

        self._apply_overrides(conf, settings, issues)

        logger.debug(
            f"Merged Hadoop configuration with {len(conf)} properties and {len(issues)} issue(s)"
        )
        return MergeResult(config=MappingProxyType(conf), issues=issues)

    def _add_issue(
        self,
        issues: List[Issue],
        group: Groups,
        field_name: Optional[str],
        error: Errors,
        *args,
        **context,
    ) -> None:
        issue = self.context.create_config_issue(group.value, field_name, error, *args)
        issues.append(issue)
        log_validation_failure(_VALIDATOR, issue, **context)

    def _apply_kerberos(self, conf: Dict[str, str], settings: HadoopFSSettings, issues: List[Issue]) -> None:
        conf[keys.HADOOP_SECURITY_AUTHENTICATION] = AuthenticationMethod.KERBEROS.value
        try:
            realm = self.realm_resolver()
            conf[keys.DFS_NAMENODE_USER_NAME_KEY] = keys.NAMENODE_PRINCIPAL_TEMPLATE.format(realm=realm)
        except Exception as ex:
            if settings.has_override(keys.DFS_NAMENODE_USER_NAME_KEY):
                logger.debug(f"Default realm unavailable ({ex}), principal comes from overrides")
                return
            self._add_issue(issues, Groups.HADOOP_FS, None, Errors.HADOOPFS_28, str(ex))

    def _apply_conf_dir(self, conf: Dict[str, str], settings: HadoopFSSettings, issues: List[Issue]) -> None:
        field_name = settings.field_name("hdfsConfDir")
        conf_dir = Path(settings.hdfs_conf_dir)

        if self.context.get_execution_mode().is_cluster and conf_dir.is_absolute():
            # Only paths shipped with the pipeline resources exist on cluster workers
            self._add_issue(issues, Groups.HADOOP_FS, field_name, Errors.HADOOPFS_45, settings.hdfs_conf_dir)
            return

        if not conf_dir.is_absolute():
            conf_dir = (Path(self.context.get_resources_directory()) / conf_dir).absolute()

        try:
            exists = conf_dir.exists()
            is_dir = exists and conf_dir.is_dir()
        except OSError as e:
            # e.g. ENAMETOOLONG, or EACCES on a parent directory
            cause = e.strerror or str(e)
            self._add_issue(
                issues, Groups.HADOOP_FS, field_name, Errors.HADOOPFS_25, str(conf_dir), cause, cause=cause
            )
            return
        if not exists:
            self._add_issue(issues, Groups.HADOOP_FS, field_name, Errors.HADOOPFS_25, str(conf_dir))
            return
        if not is_dir:
            self._add_issue(issues, Groups.HADOOP_FS, field_name, Errors.HADOOPFS_26, str(conf_dir))
            return

        for name in keys.SITE_FILES:
            site_file = conf_dir / name
            try:
                if not site_file.exists():
                    continue
                is_file = site_file.is_file()
            except OSError as e:
                cause = e.strerror or str(e)
                self._add_issue(
                    issues, Groups.HADOOP_FS, field_name, Errors.HADOOPFS_27, str(site_file), cause, cause=cause
                )
                continue
            reported = False
            if not is_file:
                self._add_issue(issues, Groups.HADOOP_FS, field_name, Errors.HADOOPFS_27, str(site_file))
                reported = True
            try:
                conf.update(read_site_file(site_file))
                logger.info(f"Loaded Hadoop configuration from {site_file}")
            except ConfigError as e:
                logger.debug(f"Skipping unreadable Hadoop configuration file: {e}")
                if not reported:
                    self._add_issue(issues, Groups.HADOOP_FS, field_name, Errors.HADOOPFS_27, str(site_file))

    def _apply_overrides(self, conf: Dict[str, str], settings: HadoopFSSettings, issues: List[Issue]) -> None:
        field_name = settings.field_name("hdfsConfigs")
        for entry in settings.hdfs_configs:
            try:
                conf[entry.key] = entry.get()
            except ConfigValueError as e:
                self._add_issue(issues, Groups.HADOOP_FS, field_name, Errors.HADOOPFS_62, e.message)


__all__ = ["ConfigMerger", "MergeResult", "base_defaults"]
