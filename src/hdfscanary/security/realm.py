"""Kerberos default realm discovery from ``krb5.conf``."""
import os
import re
from pathlib import Path
from typing import Mapping, Optional, Union

from loguru import logger

from hdfscanary.exceptions import SecurityError

DEFAULT_KRB5_CONFIG = Path("/etc/krb5.conf")

_SECTION = re.compile(r"^\s*\[(?P<name>[^\]]+)\]\s*$")
_DEFAULT_REALM = re.compile(r"^\s*default_realm\s*=\s*(?P<realm>\S+)\s*$")


def krb5_config_path(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Location of krb5.conf, honouring ``KRB5_CONFIG``."""
    source = os.environ if environ is None else environ
    configured = source.get("KRB5_CONFIG")
    if configured:
        # KRB5_CONFIG may list several files; the first one carries libdefaults
        return Path(configured.split(os.pathsep)[0])
    return DEFAULT_KRB5_CONFIG


def get_default_realm(
    krb5_config: Union[str, Path, None] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> str:
    """
    Return ``default_realm`` from the ``[libdefaults]`` section of krb5.conf.

    Raises:
        SecurityError: SECURITY_002 if the file is missing or declares no default realm
    """
    path = Path(krb5_config) if krb5_config else krb5_config_path(environ)
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError as e:
        raise SecurityError(
            f"Cannot read Kerberos configuration: {e}",
            error_code="SECURITY_002",
            context={"krb5_config": path},
        ) from e

    section = None
    for line in lines:
        stripped = line.split("#", 1)[0].split(";", 1)[0]
        header = _SECTION.match(stripped)
        if header:
            section = header.group("name").strip()
            continue
        if section != "libdefaults":
            continue
        match = _DEFAULT_REALM.match(stripped)
        if match:
            realm = match.group("realm")
            logger.debug(f"Kerberos default realm {realm} read from {path}")
            return realm

    raise SecurityError(
        "No default_realm declared in [libdefaults]",
        error_code="SECURITY_002",
        context={"krb5_config": path},
    )


__all__ = ["DEFAULT_KRB5_CONFIG", "get_default_realm", "krb5_config_path"]
