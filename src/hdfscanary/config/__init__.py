"""Stage settings and effective Hadoop configuration assembly."""
from .models import DEFAULT_CONFIG_PREFIX, HadoopConfigEntry, HadoopFSSettings, ImpersonationPolicy
from .loader import load_settings, settings_from_dict
from .merger import ConfigMerger, MergeResult, base_defaults

__all__ = [
    "DEFAULT_CONFIG_PREFIX",
    "ConfigMerger",
    "HadoopConfigEntry",
    "HadoopFSSettings",
    "ImpersonationPolicy",
    "MergeResult",
    "base_defaults",
    "load_settings",
    "settings_from_dict",
]
