"""
Base classes and data structures with minimal dependencies.

This module provides the foundational components that other modules build upon,
including the exception hierarchy, frame tags, coordinate conversions and the
serialization interface.
"""

from .exceptions import (
    StrahlkorperError,
    ValidationError,
    InvalidResolutionError,
    SampleCountMismatchError,
    SizeMismatchError,
    IndexOutOfRangeError,
    ConfigurationError,
    ProviderError,
    GeometryError,
    FrameMismatchError,
    StrahlkorperIOError,
)
from .frames import Frame, require_same_frame
from .data_structures import DataStructure
from .coordinates import (
    SphericalCoordinates,
    CartesianCoordinates,
    as_point,
    unit_vectors,
    displacement_angles,
)

__all__ = [
    # Exceptions
    "StrahlkorperError",
    "ValidationError",
    "InvalidResolutionError",
    "SampleCountMismatchError",
    "SizeMismatchError",
    "IndexOutOfRangeError",
    "ConfigurationError",
    "ProviderError",
    "GeometryError",
    "FrameMismatchError",
    "StrahlkorperIOError",
    # Frames
    "Frame",
    "require_same_frame",
    # Data structures
    "DataStructure",
    # Coordinates
    "SphericalCoordinates",
    "CartesianCoordinates",
    "as_point",
    "unit_vectors",
    "displacement_angles",
]
