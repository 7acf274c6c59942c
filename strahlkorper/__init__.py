"""
Strahlkorper: star-shaped surfaces expanded in spherical harmonics.
"""

__version__ = "0.1.0"

from strahlkorper.core.base.exceptions import StrahlkorperError
from strahlkorper.core.base.frames import Frame
from strahlkorper.core.config import get_config, SurfaceConfig
from strahlkorper.core.math import YlmPacking, YlmSpherepack
from strahlkorper.core.surface import Strahlkorper

# Public API
__all__ = [
    "__version__",
    "StrahlkorperError",
    "Frame",
    "get_config",
    "SurfaceConfig",
    "YlmPacking",
    "YlmSpherepack",
    "Strahlkorper",
]


def get_version():
    """Get the version string."""
    return __version__


def get_info():
    """Get package information."""
    from strahlkorper.core.providers import list_available_providers

    return {
        "version": __version__,
        "providers": list_available_providers(),
    }
