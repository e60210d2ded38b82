"""
hdfscanary Exception Hierarchy

Internal, domain-specific exceptions raised by configuration loading, security
resolution and filesystem capabilities. The public validation entry points never let
these escape: they are caught at the boundary and turned into :class:`~hdfscanary.issues.Issue`
values carrying the exception text.

- HdfsCanaryError: Base exception for all hdfscanary-specific errors
- ConfigError: Settings loading and configuration value failures
- ConfigValueError: A deferred configuration value could not be evaluated
- SecurityError: Login, realm discovery and impersonation failures
- FileSystemError: Filesystem handle creation and operation failures

Usage Examples:
    >>> try:
    ...     settings = load_settings("stage.yaml")
    ... except ConfigError as e:
    ...     if e.error_code == "CONFIG_002":
    ...         logger.error(f"Settings file is not valid YAML: {e}")
"""

import sys
from typing import Any, Dict, Optional
from pathlib import Path


class HdfsCanaryError(Exception):
    """
    Base exception class for all hdfscanary-specific errors.

    Attributes:
        error_code (str): Unique identifier for programmatic error handling
        context (Dict[str, Any]): Additional context information for debugging

    Error Codes:
        HDFSCANARY_001: Generic hdfscanary error
        HDFSCANARY_002: Unexpected internal error
    """

    def __init__(
        self,
        message: str,
        error_code: str = "HDFSCANARY_001",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Initialize the error with message, error code, and context.

        Args:
            message: Human-readable error description
            error_code: Unique identifier for programmatic error handling
            context: Additional context information for debugging
        """
        super().__init__(message)
        self.error_code = error_code
        self.context = context or {}

        if hasattr(sys, '_getframe'):
            frame = sys._getframe(1)
            if frame:
                self.context.setdefault('source_file', frame.f_code.co_filename)
                self.context.setdefault('source_line', frame.f_lineno)
                self.context.setdefault('source_function', frame.f_code.co_name)

    def with_context(self, context: Dict[str, Any]) -> 'HdfsCanaryError':
        """
        Add additional context to the exception and return self for chaining.

        Example:
            >>> raise SecurityError("Login failed").with_context({
            ...     "user": "etl",
            ...     "ticket_cache": "/tmp/krb5cc_1000",
            ... })
        """
        self.context.update(context)
        return self

    def __str__(self) -> str:
        message = super().__str__()
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{message} [Error Code: {self.error_code}, Context: {context_str}]"
        return f"{message} [Error Code: {self.error_code}]"

    def __repr__(self) -> str:
        """Return a detailed representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={super().__str__()!r}, "
            f"error_code={self.error_code!r}, "
            f"context={self.context!r})"
        )

    @property
    def message(self) -> str:
        """The bare message without code and context decorations."""
        return super().__str__()


class ConfigError(HdfsCanaryError):
    """
    Settings loading and configuration errors.

    Error Codes:
        CONFIG_001: Settings file not found
        CONFIG_002: YAML parsing error
        CONFIG_003: Pydantic validation failure
        CONFIG_004: Hadoop site file could not be parsed
        CONFIG_005: Deferred configuration value could not be evaluated
    """

    def __init__(
        self,
        message: str,
        error_code: str = "CONFIG_001",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, error_code, context)

        if context:
            if 'config_path' in context and isinstance(context['config_path'], (str, Path)):
                self.context['config_path'] = str(context['config_path'])
            if 'validation_errors' in context:
                self.context['validation_errors'] = context['validation_errors']


class ConfigValueError(ConfigError):
    """A deferred configuration value (callable or expression) failed to evaluate."""

    def __init__(
        self,
        message: str,
        error_code: str = "CONFIG_005",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, error_code, context)


class SecurityError(HdfsCanaryError):
    """
    Authentication and impersonation errors.

    Error Codes:
        SECURITY_001: Login identity could not be established
        SECURITY_002: Kerberos default realm could not be resolved
    """

    def __init__(
        self,
        message: str,
        error_code: str = "SECURITY_001",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, error_code, context)

        if context:
            if 'krb5_config' in context and isinstance(context['krb5_config'], (str, Path)):
                self.context['krb5_config'] = str(context['krb5_config'])
            if 'user' in context:
                self.context['user'] = context['user']


class FileSystemError(HdfsCanaryError):
    """
    Filesystem handle and operation errors.

    Error Codes:
        FS_001: Generic filesystem error
        FS_002: Unsupported URI scheme
        FS_003: Filesystem operation failed
    """

    def __init__(
        self,
        message: str,
        error_code: str = "FS_001",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, error_code, context)

        if context:
            if 'uri' in context:
                self.context['uri'] = str(context['uri'])
            if 'path' in context:
                self.context['path'] = str(context['path'])


def log_and_raise(
    exception: HdfsCanaryError,
    logger: Optional[Any] = None,
    level: str = "error"
) -> None:
    """
    Log an exception with its context and then raise it.

    Args:
        exception: The exception to log and raise
        logger: Logger instance to use (optional)
        level: Log level ("error", "warning", "critical")

    Raises:
        The provided exception after logging
    """
    if logger is not None:
        log_method = getattr(logger, level, logger.error)
        log_method(f"{exception.__class__.__name__}: {exception}")

        if exception.context:
            for key, value in exception.context.items():
                log_method(f"  {key}: {value}")

    raise exception


__all__ = [
    'HdfsCanaryError',
    'ConfigError',
    'ConfigValueError',
    'SecurityError',
    'FileSystemError',
    'log_and_raise',
]
