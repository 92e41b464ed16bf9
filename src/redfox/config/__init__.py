"""
Configuration management for RedFox.

Supports multiple configuration sources in order of priority:
1. Environment variables (highest priority)
2. Config file (--config, $REDFOX_CONFIG or ~/.redfox/config.yml)
3. Default values (lowest priority)
"""

from .loader import ENV_OVERRIDES, default_config_path, load_config, load_config_file
from .models import (
    GeneralSettings,
    OutputSettings,
    RedFoxConfig,
    ScanningSettings,
    WordlistSettings,
)
from .template import config_as_dict, create_global_config

__all__ = [
    # loader
    "ENV_OVERRIDES",
    "default_config_path",
    "load_config",
    "load_config_file",
    # models
    "GeneralSettings",
    "OutputSettings",
    "RedFoxConfig",
    "ScanningSettings",
    "WordlistSettings",
    # template
    "config_as_dict",
    "create_global_config",
]
