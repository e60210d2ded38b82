"""
Security identities and the scoped identity switch.

An :class:`Identity` is immutable. Code that must act as another principal enters
:func:`run_as`; the previous identity is restored when the block exits, whether it
returned or raised::

    with run_as(acting):
        fs.mkdirs("/data/_probe")
"""
from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from enum import Enum
from typing import Callable, Iterator, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from hdfscanary import logger

T = TypeVar("T")


class AuthenticationMethod(str, Enum):
    """How an identity authenticated. SIMPLE and KERBEROS are the requestable modes."""

    SIMPLE = "SIMPLE"
    KERBEROS = "KERBEROS"
    PROXY = "PROXY"
    TOKEN = "TOKEN"

    @classmethod
    def from_config(cls, value: Optional[str]) -> "AuthenticationMethod":
        """Parse ``hadoop.security.authentication``; unset means SIMPLE."""
        if not value:
            return cls.SIMPLE
        try:
            return cls(value.strip().upper())
        except ValueError:
            logger.warning(f"Unknown authentication method '{value}', assuming SIMPLE")
            return cls.SIMPLE


class Identity(BaseModel):
    """
    A principal operations can be performed as.

    Attributes:
        user_name: Short user name the filesystem sees
        authentication_method: How this identity authenticated
        real_user: The login identity behind a proxy identity, None otherwise
        ticket_cache: Kerberos ticket cache backing this identity, if any
    """

    model_config = ConfigDict(frozen=True)

    user_name: str = Field(min_length=1)
    authentication_method: AuthenticationMethod = AuthenticationMethod.SIMPLE
    real_user: Optional["Identity"] = None
    ticket_cache: Optional[str] = None

    @property
    def is_proxy(self) -> bool:
        return self.real_user is not None

    @property
    def login_identity(self) -> "Identity":
        """The identity that actually holds credentials."""
        return self.real_user.login_identity if self.real_user is not None else self

    @property
    def effective_ticket_cache(self) -> Optional[str]:
        return self.ticket_cache or (self.real_user.effective_ticket_cache if self.real_user else None)

    def do_as(self, action: Callable[[], T]) -> T:
        """Run ``action`` with this identity active and return its result."""
        with run_as(self):
            return action()

    def __str__(self) -> str:
        if self.real_user is not None:
            return f"{self.user_name} (auth:{self.authentication_method.value}) via {self.real_user}"
        return f"{self.user_name} (auth:{self.authentication_method.value})"


Identity.model_rebuild()


_current_identity: ContextVar[Optional[Identity]] = ContextVar(
    "hdfscanary_current_identity", default=None
)


def current_identity() -> Optional[Identity]:
    """The identity active in this context, None outside any :func:`run_as` block."""
    return _current_identity.get()


@contextmanager
def run_as(identity: Identity) -> Iterator[Identity]:
    """Make ``identity`` the active identity for the duration of the block."""
    token = _current_identity.set(identity)
    logger.trace(f"Entering identity scope of {identity}")
    try:
        yield identity
    finally:
        _current_identity.reset(token)
        logger.trace(f"Left identity scope of {identity}")


__all__ = ["AuthenticationMethod", "Identity", "current_identity", "run_as"]
