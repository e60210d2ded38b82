"""
Canary write probe.

Checks that the acting identity can write under a directory by creating and removing a
uniquely named marker:

* the directory exists: a marker file inside it;
* it does not exist: a marker directory inside the nearest existing ancestor, so a
  template like ``/a/b/c/d`` with only ``/a`` present never leaves ``/a/b`` behind.
"""
from __future__ import annotations

import uuid
from typing import List, Optional, Tuple

from hdfscanary import logger
from hdfscanary.context import StageContext
from hdfscanary.fs import paths
from hdfscanary.fs.client import FileSystemClient
from hdfscanary.issues import Errors, Issue, log_validation_failure
from hdfscanary.security.identity import Identity, run_as

from .state import ProbeResult

MARKER_PREFIX = "_sdc-dummy-"

_VALIDATOR = "validation.probe"


def marker_name() -> str:
    return f"{MARKER_PREFIX}{uuid.uuid4()}"


class PermissionProbe:
    """Verifies write access to directories as a given identity."""

    def __init__(self, context: StageContext):
        self.context = context

    def _issue(self, issues: List[Issue], group: str, field: Optional[str], error: Errors, *args) -> None:
        issue = self.context.create_config_issue(group, field, error, *args)
        issues.append(issue)
        log_validation_failure(_VALIDATOR, issue)

    def probe(
        self,
        dir_path_template: str,
        identity: Identity,
        connection: FileSystemClient,
        group: str,
        field: Optional[str],
    ) -> ProbeResult:
        """
        Probe ``dir_path_template`` as ``identity`` through ``connection``.

        Never raises; every failure is returned as an issue on a non-ok result.
        """
        issues: List[Issue] = []
        if not dir_path_template.startswith(paths.ROOT):
            self._issue(issues, group, field, Errors.HADOOPFS_40)
            return ProbeResult(ok=False, issues=tuple(issues), path=dir_path_template)

        directory = paths.normalize(dir_path_template)
        marker = None
        try:
            with run_as(identity):
                ok, marker = self._probe(directory, connection, issues, group, field)
        except Exception as ex:
            self._issue(issues, group, field, Errors.HADOOPFS_44, str(ex))
            ok = False

        return ProbeResult(ok=ok, issues=tuple(issues), path=directory, marker=marker)

    def _probe(
        self,
        directory: str,
        connection: FileSystemClient,
        issues: List[Issue],
        group: str,
        field: Optional[str],
    ) -> Tuple[bool, str]:
        if connection.exists(directory):
            marker = paths.join(directory, marker_name())
            try:
                connection.create(marker)
                connection.delete(marker, False)
            except Exception as ex:
                self._issue(issues, group, field, Errors.HADOOPFS_43, str(ex))
                return False, marker
            logger.debug(f"Created and removed probe file {marker}")
            return True, marker

        # Create exactly one directory, under the nearest ancestor that exists
        existing = next(
            (ancestor for ancestor in paths.ancestors(paths.parent(directory) or paths.ROOT)
             if connection.exists(ancestor)),
            paths.ROOT,
        )
        marker = paths.join(existing, marker_name())
        try:
            if not connection.mkdirs(marker):
                self._issue(issues, group, field, Errors.HADOOPFS_41)
                return False, marker
            logger.info(f"Creating probe directory to validate permissions {marker}")
            connection.delete(marker, True)
        except Exception as ex:
            self._issue(issues, group, field, Errors.HADOOPFS_42, str(ex))
            return False, marker
        return True, marker


__all__ = ["MARKER_PREFIX", "PermissionProbe", "marker_name"]
