"""
Deferred configuration values.

Override values are evaluated only when the configuration is merged. A value is either a
literal string, a zero-argument callable, or a string with ``${env:NAME}`` and
``${file:PATH}`` expressions, which are resolved from the environment and from files
(trailing newline stripped) respectively. Anything that cannot be resolved raises
:class:`~hdfscanary.exceptions.ConfigValueError`.
"""

import os
import re
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Union

from loguru import logger

from hdfscanary.exceptions import ConfigValueError

DeferredValue = Union[str, Callable[[], Any], None]

_EXPRESSION = re.compile(r"\$\{(?P<kind>[a-z]+):(?P<arg>[^}]*)\}")


def get_env_var(
    name: str,
    default: Optional[str] = None,
    required: bool = False,
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[str]:
    """
    Get an environment variable with consistent error handling.

    Args:
        name: Name of the environment variable
        default: Default value to return if not found
        required: If True, raise an error if not found
        environ: Mapping to read from instead of ``os.environ``

    Returns:
        Value of the environment variable or default

    Raises:
        ValueError: If required is True and the variable is not set
    """
    source = os.environ if environ is None else environ
    value = source.get(name)

    if value is None:
        if required:
            raise ValueError(f"Required environment variable {name} is not set")
        return default

    return value


def _resolve_expression(kind: str, arg: str, environ: Optional[Mapping[str, str]]) -> str:
    if kind == "env":
        try:
            return get_env_var(arg, required=True, environ=environ)
        except ValueError as e:
            raise ConfigValueError(str(e), context={"expression": f"${{env:{arg}}}"}) from e
    if kind == "file":
        path = Path(arg).expanduser()
        try:
            return path.read_text(encoding="utf-8").rstrip("\n")
        except OSError as e:
            raise ConfigValueError(
                f"Cannot read value file '{path}': {e}",
                context={"expression": f"${{file:{arg}}}"},
            ) from e
    raise ConfigValueError(
        f"Unknown expression kind '{kind}'",
        context={"expression": f"${{{kind}:{arg}}}"},
    )


def evaluate(value: DeferredValue, environ: Optional[Mapping[str, str]] = None) -> str:
    """
    Evaluate a deferred configuration value to its final string.

    Example:
        >>> evaluate("${env:HOME}/keytab", {"HOME": "/home/etl"})
        '/home/etl/keytab'

    Raises:
        ConfigValueError: If a callable fails or an expression cannot be resolved
    """
    if value is None:
        return ""

    if callable(value):
        try:
            resolved = value()
        except ConfigValueError:
            raise
        except Exception as e:
            raise ConfigValueError(f"Value provider failed: {e}") from e
        if resolved is None:
            return ""
        return evaluate(resolved, environ) if isinstance(resolved, str) else str(resolved)

    if not isinstance(value, str):
        return str(value)

    if "${" not in value:
        return value

    if "${" in _EXPRESSION.sub("", value):
        logger.debug(f"Malformed expression in configuration value: {value}")
        raise ConfigValueError(f"Unresolved expression in value '{value}'")

    return _EXPRESSION.sub(
        lambda match: _resolve_expression(match.group("kind"), match.group("arg"), environ),
        value,
    )


__all__ = ["DeferredValue", "evaluate", "get_env_var"]
