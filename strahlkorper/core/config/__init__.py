"""
Configuration management for Strahlkorper.

This module provides centralized configuration management with validation,
environment variable support and JSON/YAML file loading.
"""

from .settings import (
    SurfaceConfig,
    get_config,
    set_config,
    reset_config,
    update_config,
    load_config_from_env,
)
from .loader import (
    ConfigLoader,
    JSONConfigLoader,
    YAMLConfigLoader,
    get_config_loader,
    load_config_file,
    save_config_file,
)

__all__ = [
    # Configuration classes
    "SurfaceConfig",
    # Global config functions
    "get_config",
    "set_config",
    "reset_config",
    "update_config",
    "load_config_from_env",
    # Loaders
    "ConfigLoader",
    "JSONConfigLoader",
    "YAMLConfigLoader",
    "get_config_loader",
    "load_config_file",
    "save_config_file",
]
