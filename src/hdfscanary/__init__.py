"""
hdfscanary - Validate and establish Hadoop filesystem connections for pipeline stages.

Importing the package configures Loguru the same way for every consumer: a console
sink plus a rotating file sink under ``~/.hdfscanary/logs``. Test runs skip the
automatic setup so fixtures can install their own sinks.
"""

__version__ = "0.1.0"

import os
import sys
import warnings
from pathlib import Path
from typing import Dict, Optional, TextIO, Union

from loguru import logger

_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}

_CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{module}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"

# Sink ids installed by configure_logging, empty until logging is configured
_sink_ids: Dict[str, int] = {}


class LoggingConfigError(Exception):
    """Raised when a logging level or log directory is unusable."""


def validate_log_level(level: str) -> str:
    """Return ``level`` upper-cased, raising LoggingConfigError for unknown names."""
    level_upper = level.upper()
    if level_upper not in _LEVELS:
        raise LoggingConfigError(
            f"Invalid log level '{level}'. Must be one of: {', '.join(sorted(_LEVELS))}"
        )
    return level_upper


def default_log_directory() -> Path:
    """Return the per-user log directory."""
    return Path.home() / ".hdfscanary" / "logs"


def configure_logging(
    console_level: str = "INFO",
    file_level: Optional[str] = "DEBUG",
    log_dir: Optional[Union[str, Path]] = None,
    console: TextIO = sys.stderr,
    colorize: bool = True,
) -> Dict[str, int]:
    """
    Replace every Loguru sink with a console sink and, unless ``file_level`` is None,
    a daily rotating file ``hdfscanary_<date>.log`` in ``log_dir``.

    Returns:
        Sink ids keyed by ``"console"`` and ``"file"``

    Raises:
        LoggingConfigError: If a level is unknown or the log directory cannot be created
    """
    console_level = validate_log_level(console_level)
    file_level = validate_log_level(file_level) if file_level is not None else None

    reset_logging()
    _sink_ids["console"] = logger.add(console, level=console_level, format=_CONSOLE_FORMAT, colorize=colorize)

    if file_level is not None:
        log_dir = default_log_directory() if log_dir is None else Path(log_dir)
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            reset_logging()
            raise LoggingConfigError(f"Cannot create log directory '{log_dir}': {e}") from e
        _sink_ids["file"] = logger.add(
            str(log_dir / "hdfscanary_{time:YYYYMMDD}.log"),
            level=file_level,
            format=_FILE_FORMAT,
            rotation="10 MB",
            retention="7 days",
            compression="zip",
            encoding="utf-8",
        )

    return dict(_sink_ids)


def reset_logging() -> None:
    """Remove every Loguru sink."""
    logger.remove()
    _sink_ids.clear()


def is_logging_initialized() -> bool:
    return bool(_sink_ids)


def _is_pytest_running() -> bool:
    """Detect if code is running under pytest."""
    return "pytest" in sys.modules or "PYTEST_CURRENT_TEST" in os.environ


def _auto_initialize_logging():
    if is_logging_initialized() or _is_pytest_running():
        return
    try:
        configure_logging()
        logger.debug("--- hdfscanary Logger Initialized ---")
    except LoggingConfigError as e:
        # Unusable log directory: console only
        warnings.warn(f"Failed to initialize file logging: {e}. Using stderr logging only.")
        configure_logging(file_level=None)


_auto_initialize_logging()

from hdfscanary.issues import Errors, Groups, Issue  # noqa: E402
from hdfscanary.context import DefaultStageContext, ExecutionMode, StageContext  # noqa: E402
from hdfscanary.config.models import HadoopConfigEntry, HadoopFSSettings, ImpersonationPolicy  # noqa: E402
from hdfscanary.config.loader import load_settings  # noqa: E402
from hdfscanary.security.identity import AuthenticationMethod, Identity, current_identity, run_as  # noqa: E402
from hdfscanary.validation.state import ProbeResult, ValidationState  # noqa: E402
from hdfscanary.validation.connection import ConnectionValidator  # noqa: E402
from hdfscanary.validation.probe import PermissionProbe  # noqa: E402
from hdfscanary.target import HdfsTarget  # noqa: E402

__all__ = [
    "__version__",
    "logger",
    "AuthenticationMethod",
    "ConnectionValidator",
    "DefaultStageContext",
    "Errors",
    "ExecutionMode",
    "Groups",
    "HadoopConfigEntry",
    "HadoopFSSettings",
    "HdfsTarget",
    "Identity",
    "ImpersonationPolicy",
    "Issue",
    "PermissionProbe",
    "ProbeResult",
    "StageContext",
    "ValidationState",
    "configure_logging",
    "current_identity",
    "load_settings",
    "reset_logging",
    "run_as",
]
