"""
YAML settings loading.

A stage settings file looks like::

    hdfs_uri: hdfs://namenode:8020
    hdfs_user: etl
    hdfs_kerberos: false
    hdfs_conf_dir: hadoop-conf
    hdfs_configs:
      dfs.replication: 2
      dfs.client.use.datanode.hostname: "${env:USE_DN_HOSTNAME}"
"""
from pathlib import Path
from typing import Any, Dict, Union

import yaml
from loguru import logger
from pydantic import ValidationError

from hdfscanary.exceptions import ConfigError, log_and_raise

from .models import HadoopFSSettings


def settings_from_dict(raw: Dict[str, Any], source: str = "<dict>") -> HadoopFSSettings:
    """
    Validate a settings dictionary into :class:`HadoopFSSettings`.

    Raises:
        ConfigError: CONFIG_003 with per-field messages when validation fails
    """
    try:
        settings = HadoopFSSettings.model_validate(raw)
    except ValidationError as e:
        error_details = []
        for error in e.errors():
            field_path = " -> ".join(str(loc) for loc in error['loc'])
            error_details.append(f"Field '{field_path}': {error['msg']}")

        detailed_error = f"Settings validation failed for {source}:\n" + "\n".join(error_details)
        logger.error(detailed_error)
        raise ConfigError(
            detailed_error,
            error_code="CONFIG_003",
            context={"config_path": source, "validation_errors": error_details},
        ) from e

    logger.debug(f"Settings loaded from {source}")
    return settings


def load_settings(config_path_or_dict: Union[str, Path, Dict[str, Any]]) -> HadoopFSSettings:
    """
    Load HDFS stage settings from a YAML file or an already parsed dictionary.

    Raises:
        ConfigError: CONFIG_001 if the file is missing, CONFIG_002 on YAML errors,
            CONFIG_003 on validation errors
    """
    if isinstance(config_path_or_dict, dict):
        return settings_from_dict(config_path_or_dict)

    if not isinstance(config_path_or_dict, (str, Path)):
        raise ValueError(
            f"Invalid input type: {type(config_path_or_dict)}. Expected a string, Path, or dictionary."
        )

    config_path = Path(config_path_or_dict).expanduser()
    if not config_path.is_file():
        log_and_raise(
            ConfigError(
                f"Settings file not found: {config_path}",
                error_code="CONFIG_001",
                context={"config_path": config_path},
            ),
            logger,
        )

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Error parsing YAML settings: {e}",
            error_code="CONFIG_002",
            context={"config_path": config_path},
        ) from e

    if not isinstance(raw, dict):
        raise ConfigError(
            f"Settings file must contain a mapping, got {type(raw).__name__}",
            error_code="CONFIG_003",
            context={"config_path": config_path},
        )

    return settings_from_dict(raw, source=str(config_path))


__all__ = ["load_settings", "settings_from_dict"]
