"""Security capability: login identity, proxy identities and realm discovery."""
from __future__ import annotations

import getpass
import os
import re
from pathlib import Path
from typing import List, Mapping, Optional, Protocol

from hdfscanary import logger
from hdfscanary.config.keys import HADOOP_SECURITY_AUTHENTICATION
from hdfscanary.config.models import ImpersonationPolicy
from hdfscanary.context import StageContext
from hdfscanary.exceptions import SecurityError
from hdfscanary.issues import Errors, Issue, log_validation_failure

from .identity import AuthenticationMethod, Identity
from .realm import get_default_realm

_INVALID_USER_CHARS = re.compile(r"[\s/@]")


class SecurityProvider(Protocol):
    """Protocol for the security capability the resolver calls into."""

    def get_login_identity(self, config: Mapping[str, str]) -> Identity:
        ...

    def get_proxy_identity(
        self,
        user: str,
        context: StageContext,
        login: Identity,
        issues: List[Issue],
        group: str,
        field: Optional[str],
        policy: Optional[ImpersonationPolicy] = None,
    ) -> Identity:
        ...

    def get_default_realm(self) -> str:
        ...


class HadoopSecurityProvider:
    """
    Resolves identities from the process environment.

    The login user is ``HADOOP_USER_NAME`` when set, the OS user otherwise. In Kerberos
    mode the ticket cache comes from ``KRB5CCNAME`` or ``/tmp/krb5cc_<uid>``; without a
    ticket cache the login falls back to SIMPLE authentication, which the resolver then
    reports as a mismatch.
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self._environ = environ

    @property
    def environ(self) -> Mapping[str, str]:
        return os.environ if self._environ is None else self._environ

    def get_default_realm(self) -> str:
        return get_default_realm(environ=self.environ)

    def _login_user_name(self) -> str:
        user = self.environ.get("HADOOP_USER_NAME")
        if user:
            return user
        try:
            return getpass.getuser()
        except (KeyError, OSError) as e:
            raise SecurityError(
                f"Cannot determine the login user: {e}",
                error_code="SECURITY_001",
            ) from e

    def find_ticket_cache(self) -> Optional[str]:
        """Path of an existing Kerberos ticket cache, None if there is none."""
        configured = self.environ.get("KRB5CCNAME")
        if configured:
            if ":" in configured and not configured.startswith("FILE:"):
                # DIR:, KEYRING: and KCM: caches cannot be checked from here
                return configured
            candidate = Path(configured[len("FILE:"):] if configured.startswith("FILE:") else configured)
        elif hasattr(os, "getuid"):
            candidate = Path(f"/tmp/krb5cc_{os.getuid()}")
        else:
            return None
        return str(candidate) if candidate.is_file() else None

    def get_login_identity(self, config: Mapping[str, str]) -> Identity:
        requested = AuthenticationMethod.from_config(config.get(HADOOP_SECURITY_AUTHENTICATION))
        user = self._login_user_name()

        if requested == AuthenticationMethod.KERBEROS:
            ticket_cache = self.find_ticket_cache()
            if ticket_cache:
                logger.debug(f"Kerberos login for {user} using ticket cache {ticket_cache}")
                return Identity(
                    user_name=user,
                    authentication_method=AuthenticationMethod.KERBEROS,
                    ticket_cache=ticket_cache,
                )
            logger.warning(f"No Kerberos ticket cache found for {user}, login falls back to SIMPLE")

        return Identity(user_name=user, authentication_method=AuthenticationMethod.SIMPLE)

    def get_proxy_identity(
        self,
        user: str,
        context: StageContext,
        login: Identity,
        issues: List[Issue],
        group: str,
        field: Optional[str],
        policy: Optional[ImpersonationPolicy] = None,
    ) -> Identity:
        """
        Identity to act as for ``user``.

        Problems are appended to ``issues`` and the login identity is returned in
        their place, so callers must check ``issues`` before using the result.
        """
        policy = policy or ImpersonationPolicy()
        user = (user or "").strip()

        if policy.always_impersonate_current_user:
            if user:
                issue = context.create_config_issue(group, field, Errors.HADOOPFS_63, user)
                issues.append(issue)
                log_validation_failure("security.proxy_identity", issue)
                return login
            user = context.get_current_user()

        if not user:
            return login

        if policy.lowercase_user:
            user = user.lower()

        if _INVALID_USER_CHARS.search(user):
            issue = context.create_config_issue(
                group, field, Errors.HADOOPFS_64, user, "user names cannot contain whitespace, '/' or '@'"
            )
            issues.append(issue)
            log_validation_failure("security.proxy_identity", issue)
            return login

        if user == login.user_name:
            return login

        logger.debug(f"Impersonating {user} as proxy of {login.user_name}")
        return Identity(
            user_name=user,
            authentication_method=AuthenticationMethod.PROXY,
            real_user=login,
        )


__all__ = ["HadoopSecurityProvider", "SecurityProvider"]
