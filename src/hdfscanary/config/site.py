"""Reader for Hadoop ``*-site.xml`` configuration resources."""
from pathlib import Path
from typing import Dict, Union
import xml.etree.ElementTree as ET

from loguru import logger

from hdfscanary.exceptions import ConfigError


def read_site_file(path: Union[str, Path]) -> Dict[str, str]:
    """
    Parse the ``<property><name/><value/></property>`` entries of a site file.

    Properties without a name are skipped and a missing ``<value>`` reads as the
    empty string. Later duplicates win, as they do in Hadoop itself.

    Raises:
        ConfigError: CONFIG_004 if the file cannot be read or is not well-formed XML
    """
    path = Path(path)
    try:
        root = ET.parse(path).getroot()
    except (ET.ParseError, OSError) as e:
        raise ConfigError(
            f"Cannot parse Hadoop configuration file {path}: {e}",
            error_code="CONFIG_004",
            context={"config_path": path},
        ) from e

    properties: Dict[str, str] = {}
    for prop in root.iter("property"):
        name = (prop.findtext("name") or "").strip()
        if not name:
            continue
        properties[name] = (prop.findtext("value") or "").strip()

    logger.debug(f"Read {len(properties)} properties from {path}")
    return properties


__all__ = ["read_site_file"]
