"""
Connection validation.

Runs the configuration merge, resolves the target URI, resolves the security context
and finally opens the filesystem as the acting identity. Merge and URI problems are all
collected before stopping; identity problems and connection failures end the run.
Nothing raised by a collaborator escapes :meth:`ConnectionValidator.validate`.
"""
from __future__ import annotations

import re
from types import MappingProxyType
from typing import Dict, List, Optional, Tuple
from urllib.parse import urlsplit

from hdfscanary import logger
from hdfscanary.config.keys import FS_DEFAULT_NAME_KEY, SCHEME_SEPARATOR
from hdfscanary.config.merger import ConfigMerger
from hdfscanary.config.models import HadoopFSSettings
from hdfscanary.context import StageContext
from hdfscanary.fs.client import ArrowFileSystemFactory, FileSystemFactory
from hdfscanary.issues import Errors, Groups, Issue, log_validation_failure
from hdfscanary.security.identity import AuthenticationMethod, run_as
from hdfscanary.security.resolver import SecurityContextResolver

from .state import ValidationState

_VALIDATOR = "validation.connection"

_SCHEME = re.compile(r"[A-Za-z][A-Za-z0-9+.\-]*")
# Anything outside the RFC 3986 unreserved, reserved and percent characters
_ILLEGAL_URI_CHAR = re.compile(r"[^A-Za-z0-9\-._~:/?#\[\]@!$&'()*+,;=%]")
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def check_uri(uri: str) -> None:
    """
    Reject a filesystem URI the Hadoop client could not parse.

    Raises:
        ValueError: Describing the first problem found
    """
    illegal = _ILLEGAL_URI_CHAR.search(uri)
    if illegal:
        raise ValueError(f"illegal character {illegal.group()!r} at index {illegal.start()}")
    if _BAD_ESCAPE.search(uri):
        raise ValueError("malformed percent-escape")
    parsed = urlsplit(uri)
    if not _SCHEME.fullmatch(parsed.scheme):
        raise ValueError("missing or invalid scheme")
    port = parsed.port  # ValueError for a non-numeric or out-of-range port
    if port is not None and not parsed.hostname:
        raise ValueError("port given without a host")


class ConnectionValidator:
    """Validates HDFS settings and opens the connection they describe."""

    def __init__(
        self,
        context: StageContext,
        merger: Optional[ConfigMerger] = None,
        resolver: Optional[SecurityContextResolver] = None,
        fs_factory: Optional[FileSystemFactory] = None,
    ):
        self.context = context
        self.resolver = resolver or SecurityContextResolver()
        self.merger = merger or ConfigMerger(context, realm_resolver=self.resolver.provider.get_default_realm)
        self.fs_factory = fs_factory or ArrowFileSystemFactory()

    def _issue(self, issues: List[Issue], field_name: Optional[str], error: Errors, *args) -> None:
        issue = self.context.create_config_issue(Groups.HADOOP_FS.value, field_name, error, *args)
        issues.append(issue)
        log_validation_failure(_VALIDATOR, issue)

    def resolve_target_uri(
        self,
        settings: HadoopFSSettings,
        conf: Dict[str, str],
        issues: List[Issue],
    ) -> Tuple[str, bool]:
        """
        Work out the filesystem URI, updating ``conf`` when the explicit URI wins.

        Returns:
            The resolved URI (possibly empty) and whether it may be used to connect
        """
        valid = True
        uri = settings.hdfs_uri

        if uri:
            if SCHEME_SEPARATOR in uri:
                try:
                    check_uri(uri)
                except ValueError as ex:
                    self._issue(issues, None, Errors.HADOOPFS_22, uri, str(ex))
                    valid = False
                # Configured URI has precedence over fs.defaultFS
                conf[FS_DEFAULT_NAME_KEY] = uri
            else:
                self._issue(issues, settings.field_name("hdfsUri"), Errors.HADOOPFS_18, uri)
                valid = False
        else:
            uri = conf.get(FS_DEFAULT_NAME_KEY, "")

        if not uri:
            # The merge step reports a missing URI when nothing could supply one
            if not any(issue.error_code == Errors.HADOOPFS_61 for issue in issues):
                self._issue(issues, None, Errors.HADOOPFS_49)
            valid = False

        return uri, valid

    def validate(self, settings: HadoopFSSettings) -> ValidationState:
        """Validate ``settings``; the returned state carries every issue found."""
        issues: List[Issue] = []
        try:
            merge = self.merger.build(settings)
        except Exception as ex:
            logger.info(f"Validation Error: {Errors.HADOOPFS_01.format(settings.hdfs_uri, ex)}")
            self._issue(issues, None, Errors.HADOOPFS_01, settings.hdfs_uri, str(ex))
            return self._state(False, issues, settings.hdfs_uri, {})
        issues.extend(merge.issues)
        conf: Dict[str, str] = dict(merge.config)

        target_uri, valid = self.resolve_target_uri(settings, conf, issues)

        auth_mode = AuthenticationMethod.KERBEROS if settings.hdfs_kerberos else AuthenticationMethod.SIMPLE
        login = acting = None
        connection = None
        try:
            resolution = self.resolver.resolve(
                conf,
                auth_mode,
                settings.hdfs_user,
                self.context,
                group=Groups.HADOOP_FS.value,
                user_field=settings.field_name("hdfsUser"),
                kerberos_field=settings.field_name("hdfsKerberos"),
                policy=settings.impersonation,
            )
            if resolution.issues:
                issues.extend(resolution.issues)
                return self._state(False, issues, target_uri, conf)

            conf = dict(resolution.config)
            login = resolution.login_identity
            acting = resolution.acting_identity

            if valid and not issues:
                with run_as(acting):
                    connection = self.fs_factory.open(target_uri, MappingProxyType(dict(conf)))
                logger.info(f"Connected to {target_uri} as {acting}")
        except Exception as ex:
            logger.info(
                f"Validation Error: {Errors.HADOOPFS_01.format(target_uri, ex)}"
            )
            self._issue(issues, None, Errors.HADOOPFS_01, target_uri, str(ex))
            # Could not connect to the cluster
            valid = False

        valid = valid and not issues and connection is not None
        return self._state(valid, issues, target_uri, conf, login, acting, connection)

    @staticmethod
    def _state(valid, issues, target_uri, conf, login=None, acting=None, connection=None) -> ValidationState:
        return ValidationState(
            valid=valid,
            issues=tuple(issues),
            target_uri=target_uri or "",
            config=MappingProxyType(dict(conf)),
            login_identity=login,
            acting_identity=acting,
            connection=connection,
        )


__all__ = ["ConnectionValidator", "check_uri"]
