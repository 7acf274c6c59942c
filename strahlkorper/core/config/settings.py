"""
Configuration settings and management for Strahlkorper.

This module provides centralized configuration with validation, type
checking, and environment variable support. Configuration uses a dataclass
for clean, type-safe handling.
"""

import os
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional
from pathlib import Path
import logging

from ..base.exceptions import ConfigurationError, ValidationError
from ..base.frames import Frame


# Global configuration instance
_global_config: Optional["SurfaceConfig"] = None


@dataclass
class SurfaceConfig:
    """Package-wide defaults for surfaces and logging.

    Parameters
    ----------
    default_l_max, default_m_max : int
        Resolution used when a caller does not give one explicitly
    default_frame : str
        Frame assigned to new surfaces unless one is given
    containment_tolerance : float
        Non-negative slack added to the surface radius in containment tests
    cache_collocation : bool
        Whether surfaces memoize their radius on the collocation grid
    log_level : str
        Level passed to ``setup_logging``
    log_file : Path, optional
        Extra log destination
    """

    default_l_max: int = 8
    default_m_max: int = 8
    default_frame: str = Frame.INERTIAL.value
    containment_tolerance: float = 0.0
    cache_collocation: bool = True

    # Logging
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    def __post_init__(self):
        """Post-initialization validation and setup."""
        if self.log_file is not None:
            self.log_file = Path(self.log_file)
        self.validate()

    def validate(self) -> None:
        """Validate configuration parameters.

        Raises
        ------
        ConfigurationError
            If any configuration parameter is invalid
        """
        errors = []

        if not isinstance(self.default_l_max, int) or self.default_l_max < 0:
            errors.append("default_l_max must be a non-negative integer")

        if not isinstance(self.default_m_max, int) or self.default_m_max < 0:
            errors.append("default_m_max must be a non-negative integer")
        elif isinstance(self.default_l_max, int) and self.default_m_max > self.default_l_max:
            errors.append("default_m_max must not exceed default_l_max")

        try:
            Frame.coerce(self.default_frame)
        except ValidationError:
            errors.append(f"default_frame must be one of {[f.value for f in Frame]}")

        if not isinstance(self.containment_tolerance, (int, float)) or self.containment_tolerance < 0:
            errors.append("containment_tolerance must be a non-negative number")

        if not isinstance(self.cache_collocation, bool):
            errors.append("cache_collocation must be a boolean")

        valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if not isinstance(self.log_level, str) or self.log_level.upper() not in valid_log_levels:
            errors.append(f"log_level must be one of {valid_log_levels}")

        if errors:
            raise ConfigurationError(f"Configuration validation failed: {'; '.join(errors)}")

    @property
    def frame(self) -> Frame:
        """``default_frame`` as a Frame member."""
        return Frame.coerce(self.default_frame)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary.

        Returns
        -------
        dict
            Dictionary representation of configuration
        """
        result = {}
        for key, value in self.__dict__.items():
            if isinstance(value, Path):
                result[key] = str(value)
            else:
                result[key] = value
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SurfaceConfig":
        """Create configuration from dictionary.

        Raises
        ------
        ConfigurationError
            If the dictionary holds unknown keys
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown configuration parameters: {unknown}")
        return cls(**data)

    def update(self, **kwargs) -> None:
        """Update configuration parameters.

        The new values are validated together before any is applied, so a
        rejected update leaves the configuration unchanged.

        Raises
        ------
        ConfigurationError
            If unknown parameter or validation fails
        """
        known = {f.name for f in fields(self)}
        for key in kwargs:
            if key not in known:
                raise ConfigurationError(f"Unknown configuration parameter: {key}", parameter=key)

        candidate = replace(self, **kwargs)
        for f in fields(self):
            setattr(self, f.name, getattr(candidate, f.name))


def get_config() -> SurfaceConfig:
    """Get the global configuration instance."""
    global _global_config
    if _global_config is None:
        _global_config = SurfaceConfig()
    return _global_config


def set_config(config: SurfaceConfig) -> None:
    """Set the global configuration instance.

    Raises
    ------
    TypeError
        If config is not a SurfaceConfig instance
    """
    global _global_config
    if not isinstance(config, SurfaceConfig):
        raise TypeError("config must be a SurfaceConfig instance")
    config.validate()
    _global_config = config


def reset_config() -> None:
    """Reset configuration to defaults."""
    global _global_config
    _global_config = SurfaceConfig()


def update_config(**kwargs) -> None:
    """Update global configuration parameters."""
    config = get_config()
    config.update(**kwargs)


def load_config_from_env() -> SurfaceConfig:
    """Load configuration from environment variables.

    Returns
    -------
    SurfaceConfig
        Defaults overridden by any ``STRAHLKORPER_*`` variables present

    Raises
    ------
    ConfigurationError
        If a variable cannot be converted to its parameter's type
    """
    config = SurfaceConfig()

    env_mapping = {
        'STRAHLKORPER_L_MAX': 'default_l_max',
        'STRAHLKORPER_M_MAX': 'default_m_max',
        'STRAHLKORPER_FRAME': 'default_frame',
        'STRAHLKORPER_CONTAINMENT_TOLERANCE': 'containment_tolerance',
        'STRAHLKORPER_CACHE_COLLOCATION': 'cache_collocation',
        'STRAHLKORPER_LOG_LEVEL': 'log_level',
        'STRAHLKORPER_LOG_FILE': 'log_file',
    }

    updates = {}
    for env_var, attr_name in env_mapping.items():
        if env_var not in os.environ:
            continue
        value = os.environ[env_var]
        try:
            if attr_name in ['default_l_max', 'default_m_max']:
                updates[attr_name] = int(value)
            elif attr_name == 'containment_tolerance':
                updates[attr_name] = float(value)
            elif attr_name == 'cache_collocation':
                updates[attr_name] = value.lower() in ('true', '1', 'yes', 'on')
            elif attr_name == 'log_file':
                if value:
                    updates[attr_name] = Path(value)
            else:
                updates[attr_name] = value
        except ValueError as e:
            raise ConfigurationError(f"Invalid value for {env_var}: {value!r}",
                                     parameter=attr_name, cause=e)

    if updates:
        config.update(**updates)
        logging.info(f"Updated configuration from environment variables: {list(updates.keys())}")

    return config
