"""
Spectral mathematics for Strahlkorper.

This module provides the packed real coefficient codec and the spherical
harmonic transform engine using only numpy and scipy.
"""

from .packing import (
    SQRT_2_OVER_PI,
    YlmPacking,
    check_resolution,
    physical_size,
)
from .transforms import YlmSpherepack

__all__ = [
    # Packing
    "SQRT_2_OVER_PI",
    "YlmPacking",
    "check_resolution",
    "physical_size",
    # Transforms
    "YlmSpherepack",
]
