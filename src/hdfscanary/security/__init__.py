"""Identities, impersonation and security context resolution."""
from .identity import AuthenticationMethod, Identity, current_identity, run_as
from .realm import get_default_realm
from .provider import HadoopSecurityProvider, SecurityProvider
from .resolver import SecurityContextResolver, SecurityResolution

__all__ = [
    "AuthenticationMethod",
    "HadoopSecurityProvider",
    "Identity",
    "SecurityContextResolver",
    "SecurityProvider",
    "SecurityResolution",
    "current_identity",
    "get_default_realm",
    "run_as",
]
