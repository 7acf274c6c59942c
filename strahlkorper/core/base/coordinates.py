"""
Coordinate system utilities.

Conversions between the Cartesian frame a surface lives in and the
angular coordinates its spectral expansion is parameterized by. All
operations use only numpy and the standard library.
"""

from dataclasses import dataclass
from typing import Sequence, Tuple, Union
import math

import numpy as np

from .exceptions import GeometryError, ValidationError


@dataclass
class SphericalCoordinates:
    """Spherical coordinates (r, theta, phi) about some basepoint.

    Parameters
    ----------
    r : float
        Radial distance
    theta : float
        Polar angle in radians [0, π]
    phi : float
        Azimuthal angle in radians, normalized to [0, 2π)
    """

    r: float = 1.0
    theta: float = 0.0
    phi: float = 0.0

    def __post_init__(self):
        if self.r < 0:
            raise GeometryError("Radial coordinate must be non-negative")

        if not (0 <= self.theta <= np.pi):
            raise GeometryError(f"Theta must be in range [0, π], got {self.theta}")

        self.phi = self.phi % (2 * np.pi)

    def to_cartesian(self) -> "CartesianCoordinates":
        """Convert to Cartesian coordinates."""
        sin_theta = math.sin(self.theta)
        x = self.r * sin_theta * math.cos(self.phi)
        y = self.r * sin_theta * math.sin(self.phi)
        z = self.r * math.cos(self.theta)
        return CartesianCoordinates(x, y, z)

    def __str__(self) -> str:
        return f"SphericalCoordinates(r={self.r:.3f}, θ={self.theta:.3f}, φ={self.phi:.3f})"


@dataclass
class CartesianCoordinates:
    """Cartesian coordinates (x, y, z)."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def from_array(cls, values: Union[Sequence[float], np.ndarray]) -> "CartesianCoordinates":
        """Build from any length-3 sequence.

        Raises
        ------
        ValidationError
            If ``values`` is not three finite numbers
        """
        arr = as_point(values, name="point")
        return cls(float(arr[0]), float(arr[1]), float(arr[2]))

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    @property
    def magnitude(self) -> float:
        """Euclidean length of the vector."""
        return math.sqrt(self.x*self.x + self.y*self.y + self.z*self.z)

    def __sub__(self, other: "CartesianCoordinates") -> "CartesianCoordinates":
        return CartesianCoordinates(self.x - other.x, self.y - other.y, self.z - other.z)

    def distance_to(self, other: "CartesianCoordinates") -> float:
        """Euclidean distance to another point."""
        return (self - other).magnitude

    def to_spherical(self) -> SphericalCoordinates:
        """Convert to spherical coordinates about the origin.

        The origin itself maps to ``(0, 0, 0)``.
        """
        r = self.magnitude

        if r == 0:
            return SphericalCoordinates(0.0, 0.0, 0.0)

        theta = math.acos(np.clip(self.z / r, -1, 1))  # Clamp to avoid numerical issues
        phi = math.atan2(self.y, self.x)

        return SphericalCoordinates(r, theta, phi)


def as_point(values: Union[Sequence[float], np.ndarray], name: str = "center") -> np.ndarray:
    """Return ``values`` as a float64 array of shape (3,).

    Raises
    ------
    ValidationError
        If the input is not three finite real numbers
    """
    try:
        arr = np.array(values, dtype=np.float64).reshape(-1)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{name} must be a sequence of 3 real numbers",
                              field=name, value=values, cause=e)
    if arr.shape != (3,):
        raise ValidationError(f"{name} must have exactly 3 components, got {arr.size}",
                              field=name, value=values)
    if not np.all(np.isfinite(arr)):
        raise ValidationError(f"{name} must be finite", field=name, value=values)
    return arr


def unit_vectors(theta: np.ndarray, phi: np.ndarray) -> np.ndarray:
    """Radial unit vectors for arrays of angles, shape ``(n, 3)``."""
    theta = np.asarray(theta, dtype=np.float64)
    phi = np.asarray(phi, dtype=np.float64)
    sin_theta = np.sin(theta)
    return np.stack([sin_theta * np.cos(phi),
                     sin_theta * np.sin(phi),
                     np.cos(theta)], axis=-1)


def displacement_angles(point: np.ndarray, origin: np.ndarray) -> Tuple[float, float, float]:
    """Distance and angles of ``point`` as seen from ``origin``.

    Returns
    -------
    tuple
        (r, theta, phi) with theta = acos(d_z / r) and phi = atan2(d_y, d_x);
        ``(0, 0, 0)`` when the two points coincide.
    """
    d = CartesianCoordinates.from_array(point) - CartesianCoordinates.from_array(origin)
    spherical = d.to_spherical()
    return spherical.r, spherical.theta, spherical.phi
