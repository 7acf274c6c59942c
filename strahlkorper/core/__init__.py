"""
Core functionality for Strahlkorper with minimal dependencies.

This module provides the foundational components that other modules build upon,
including base classes, the spectral codec and transforms, configuration and
the surface type itself.
"""

from strahlkorper.core.base import (
    StrahlkorperError,
    ValidationError,
    ConfigurationError,
    FrameMismatchError,
    DataStructure,
    Frame,
)
from strahlkorper.core.config import (
    get_config,
    set_config,
    SurfaceConfig,
)
from strahlkorper.core.math import YlmPacking, YlmSpherepack, physical_size
from strahlkorper.core.surface import Strahlkorper

__all__ = [
    # Exceptions
    "StrahlkorperError",
    "ValidationError",
    "ConfigurationError",
    "FrameMismatchError",
    # Base classes
    "DataStructure",
    "Frame",
    # Configuration
    "get_config",
    "set_config",
    "SurfaceConfig",
    # Spectral
    "YlmPacking",
    "YlmSpherepack",
    "physical_size",
    "Strahlkorper",
]
