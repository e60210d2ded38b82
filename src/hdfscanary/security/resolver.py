"""
Security context resolution.

Establishes the login identity from the effective configuration, derives the acting
identity (the login identity or a proxy user behind it) and checks that the
environment delivered the authentication mode the stage asked for.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

from hdfscanary import logger
from hdfscanary.config.keys import HADOOP_SECURITY_AUTHENTICATION
from hdfscanary.config.models import ImpersonationPolicy
from hdfscanary.context import StageContext
from hdfscanary.issues import Errors, Groups, Issue, log_validation_failure

from .identity import AuthenticationMethod, Identity
from .provider import HadoopSecurityProvider, SecurityProvider


@dataclass(frozen=True)
class SecurityResolution:
    """Outcome of resolving the security context."""

    config: Mapping[str, str]
    login_identity: Optional[Identity] = None
    acting_identity: Optional[Identity] = None
    issues: List[Issue] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.issues and self.acting_identity is not None


class SecurityContextResolver:
    """Resolves login and acting identities for one validation run."""

    def __init__(self, provider: Optional[SecurityProvider] = None):
        self.provider = provider or HadoopSecurityProvider()

    def resolve(
        self,
        config: Mapping[str, str],
        auth_mode: AuthenticationMethod,
        impersonation_user: str,
        context: StageContext,
        group: str = Groups.HADOOP_FS.value,
        user_field: Optional[str] = None,
        kerberos_field: Optional[str] = None,
        policy: Optional[ImpersonationPolicy] = None,
    ) -> SecurityResolution:
        """
        Resolve identities; exceptions from the security capability propagate to the caller.

        Args:
            config: Effective configuration; it is not modified
            auth_mode: Requested mode, SIMPLE or KERBEROS
            impersonation_user: User to act as, empty for the login user
            context: Stage context used to create issues
            group: Issue group
            user_field: Field reference for impersonation issues
            kerberos_field: Field reference for the authentication mismatch issue
            policy: Impersonation policy of the host
        """
        resolved: Dict[str, str] = dict(config)
        issues: List[Issue] = []

        # The login has to come first: it is where the security settings are read
        login = self.provider.get_login_identity(resolved)
        acting = self.provider.get_proxy_identity(
            impersonation_user, context, login, issues, group, user_field, policy
        )
        if issues:
            return SecurityResolution(config=MappingProxyType(resolved), issues=issues)

        if auth_mode == AuthenticationMethod.KERBEROS:
            logger.info("Authentication Config: Using Kerberos")
            if login.authentication_method != AuthenticationMethod.KERBEROS:
                issue = context.create_config_issue(
                    group,
                    kerberos_field,
                    Errors.HADOOPFS_00,
                    login.authentication_method.value,
                    AuthenticationMethod.KERBEROS.value,
                )
                issues.append(issue)
                log_validation_failure("security.resolve", issue)
        else:
            logger.info("Authentication Config: Using Simple")
            resolved[HADOOP_SECURITY_AUTHENTICATION] = AuthenticationMethod.SIMPLE.value

        return SecurityResolution(
            config=MappingProxyType(resolved),
            login_identity=login,
            acting_identity=acting,
            issues=issues,
        )


__all__ = ["SecurityContextResolver", "SecurityResolution"]
