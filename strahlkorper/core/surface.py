"""
Star-shaped surfaces expanded in spherical harmonics.

A :class:`Strahlkorper` describes a closed surface by its radius as a
function of angle about a basepoint (``center``). The radius is stored as a
packed real coefficient vector (see :mod:`strahlkorper.core.math.packing`)
at a fixed resolution ``(l_max, m_max)``.
"""

from typing import Any, Dict, Optional, Sequence, Tuple, Union
import logging
import math

import numpy as np

from .base.coordinates import as_point, displacement_angles, unit_vectors
from .base.data_structures import DataStructure
from .base.exceptions import SizeMismatchError, ValidationError, validate_positive
from .base.frames import Frame, require_same_frame
from .config.settings import get_config
from .math.packing import check_resolution
from .math.transforms import YlmSpherepack

logger = logging.getLogger(__name__)

SQRT_FOUR_PI = math.sqrt(4.0 * math.pi)
_DIPOLE_XY = math.sqrt(3.0 / (2.0 * math.pi))
_DIPOLE_Z = math.sqrt(3.0 / (4.0 * math.pi))
# Relative rounding allowance when comparing a distance against the radius
_BOUNDARY_SLACK = 32.0 * np.finfo(np.float64).eps

PointLike = Union[Sequence[float], np.ndarray]


class Strahlkorper(DataStructure):
    """A star-shaped surface expanded in spherical harmonics.

    The default constructor builds a round sphere; see :meth:`from_samples`,
    :meth:`from_surface` and :meth:`from_coefficients` for the other ways of
    creating a surface.

    Resolution, center and frame are fixed after construction. The
    coefficient vector can be overwritten in place through
    :attr:`coefficients`, e.g. by an iterative solver reusing one surface.
    A surface is safe to read from several threads; in-place mutation must
    be serialized by the caller.

    Parameters
    ----------
    l_max, m_max : int
        Spectral resolution, ``m_max <= l_max``
    radius : float
        Radius of the sphere
    center : sequence of float
        Basepoint of the expansion, in the surface's frame
    frame : Frame or str, optional
        Frame the surface is defined in (configured default if omitted)

    Raises
    ------
    InvalidResolutionError
        If ``m_max > l_max`` or either is negative
    ValidationError
        If ``radius`` is not positive or ``center`` is malformed
    """

    def __init__(self, l_max: int, m_max: int, radius: float,
                 center: PointLike, frame: Optional[Union[Frame, str]] = None):
        l_max, m_max = check_resolution(l_max, m_max)
        validate_positive(radius, "radius")
        ylm = YlmSpherepack(l_max, m_max)
        coefficients = np.zeros(ylm.spectral_size, dtype=np.float64)
        coefficients[ylm.packing.index(0, 0)] = radius * SQRT_FOUR_PI
        self._setup(ylm, center, coefficients, frame)
        logger.debug(f"Constructed sphere of radius {radius} at (l_max={l_max}, m_max={m_max})")

    def _setup(self, ylm: YlmSpherepack, center: PointLike, coefficients: np.ndarray,
               frame: Optional[Union[Frame, str]]) -> None:
        self._ylm = ylm
        self._center = as_point(center, name="center")
        self._center.setflags(write=False)
        self._frame = get_config().frame if frame is None else Frame.coerce(frame)
        self._coefficients = coefficients
        self._grid_cache: Optional[Tuple[bytes, np.ndarray]] = None

    @classmethod
    def _build(cls, ylm: YlmSpherepack, center: PointLike, coefficients: np.ndarray,
               frame: Optional[Union[Frame, str]]) -> "Strahlkorper":
        surface = cls.__new__(cls)
        surface._setup(ylm, center, coefficients, frame)
        return surface

    # ------------------------------------------------------------------
    # Alternate constructors
    # ------------------------------------------------------------------

    @classmethod
    def sphere(cls, radius: float, center: PointLike, l_max: Optional[int] = None,
               m_max: Optional[int] = None, frame: Optional[Union[Frame, str]] = None) -> "Strahlkorper":
        """Sphere at the configured default resolution unless one is given."""
        config = get_config()
        l_max = config.default_l_max if l_max is None else l_max
        m_max = min(config.default_m_max, l_max) if m_max is None else m_max
        return cls(l_max, m_max, radius, center, frame=frame)

    @classmethod
    def from_samples(cls, l_max: int, m_max: int, radius_samples: np.ndarray,
                     center: PointLike, frame: Optional[Union[Frame, str]] = None) -> "Strahlkorper":
        """Surface whose radius takes the given values at the collocation points.

        Parameters
        ----------
        radius_samples : np.ndarray
            Radius at every point of ``YlmSpherepack(l_max, m_max)``'s grid,
            flat in grid order or shaped ``(n_theta, n_phi)``

        Raises
        ------
        SampleCountMismatchError
            If the number of samples differs from the grid size
        """
        ylm = YlmSpherepack(l_max, m_max)
        coefficients = ylm.phys_to_spec(radius_samples)
        logger.debug(f"Constructed surface from {ylm.physical_size} collocation samples")
        return cls._build(ylm, center, coefficients, frame)

    @classmethod
    def from_surface(cls, l_max: int, m_max: int, source: "Strahlkorper") -> "Strahlkorper":
        """Prolong or restrict ``source`` to a new resolution.

        Lossless when neither ``l_max`` nor ``m_max`` decreases; otherwise
        the higher modes of ``source`` are dropped. Center and frame are
        copied.
        """
        l_max, m_max = check_resolution(l_max, m_max)
        if (l_max, m_max) == (source.l_max, source.m_max):
            ylm = source._ylm
        else:
            ylm = YlmSpherepack(l_max, m_max)
        coefficients = source._ylm.resample(source._coefficients, l_max, m_max)
        logger.debug(
            f"Resampled surface ({source.l_max},{source.m_max}) -> ({l_max},{m_max})"
        )
        return cls._build(ylm, source._center, coefficients, source._frame)

    @classmethod
    def from_coefficients(cls, coefficients: np.ndarray, source: "Strahlkorper",
                          consume: bool = False) -> "Strahlkorper":
        """Surface with the resolution, center and frame of ``source``.

        Parameters
        ----------
        coefficients : np.ndarray
            Packed coefficients in the layout :attr:`coefficients` uses
        source : Strahlkorper
            Surface providing resolution, center and frame
        consume : bool
            If True the new surface shares ``source``'s transform engine and
            adopts ``coefficients`` without copying when it is already a
            contiguous float64 vector; the caller hands over that array.
            Otherwise the values are copied and ``source`` is untouched.

        Raises
        ------
        SizeMismatchError
            If ``coefficients`` does not have ``physical_size`` entries
        """
        expected = source._ylm.spectral_size
        if consume:
            values = np.ascontiguousarray(coefficients, dtype=np.float64)
        else:
            values = np.array(coefficients, dtype=np.float64, copy=True)
        if values.shape != (expected,):
            raise SizeMismatchError(
                f"Expected {expected} coefficients for (l_max={source.l_max}, "
                f"m_max={source.m_max}), got {values.size}",
                expected=expected, actual=int(values.size),
            )
        ylm = source._ylm if consume else YlmSpherepack(source.l_max, source.m_max)
        return cls._build(ylm, source._center, values, source._frame)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def l_max(self) -> int:
        """Maximum degree of the expansion."""
        return self._ylm.l_max

    @property
    def m_max(self) -> int:
        """Maximum order of the expansion."""
        return self._ylm.m_max

    @property
    def center(self) -> np.ndarray:
        """Basepoint of the expansion (read-only array).

        It should lie inside the surface; see :meth:`physical_center` for
        an estimate of the geometric center.
        """
        return self._center

    @property
    def frame(self) -> Frame:
        return self._frame

    @property
    def ylm(self) -> YlmSpherepack:
        """Transform engine for this surface's resolution."""
        return self._ylm

    @property
    def coefficients(self) -> np.ndarray:
        """Packed coefficient vector, mutable in place.

        Entry ``ylm.packing.index(l, m)`` holds
        ``(-1)^m sqrt(2/π) Re F^{lm}`` for m >= 0 and
        ``(-1)^m sqrt(2/π) Im F^{lm}`` for m < 0.
        """
        return self._coefficients

    @coefficients.setter
    def coefficients(self, values: np.ndarray) -> None:
        values = np.asarray(values, dtype=np.float64)
        if values.shape != self._coefficients.shape:
            raise SizeMismatchError(
                f"Expected {self._coefficients.size} coefficients, got {values.size}",
                expected=int(self._coefficients.size), actual=int(values.size),
            )
        self._coefficients[...] = values

    def coefficients_view(self) -> np.ndarray:
        """Read-only view of the packed coefficient vector."""
        view = self._coefficients.view()
        view.setflags(write=False)
        return view

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    def average_radius(self) -> float:
        """Average radius, from the Y_00 coefficient alone."""
        return float(self._coefficients[self._ylm.packing.index(0, 0)] / SQRT_FOUR_PI)

    def physical_center(self) -> np.ndarray:
        """Approximate geometric center from the l = 1 coefficients.

        Hemberger et al. 2012 (arXiv:1211.6079) Eqs. 38-40: the area
        centroid of r = R + d·n to first order in the dipole d is
        ``center + d``, the R^2 area weights cancelling between the two
        integrals.
        """
        result = np.array(self._center, dtype=np.float64)
        if self.l_max < 1:
            return result
        packing = self._ylm.packing
        coefs = self._coefficients
        result[2] += _DIPOLE_Z * coefs[packing.index(1, 0)]
        if self.m_max >= 1:
            result[0] += _DIPOLE_XY * coefs[packing.index(1, 1)]
            result[1] -= _DIPOLE_XY * coefs[packing.index(1, -1)]
        return result

    def radius(self, theta: float, phi: float) -> float:
        """Radius at one angle.

        Each call evaluates every mode; use
        :meth:`radius_at_collocation_points` or
        ``ylm.evaluate_many`` when many points are needed.
        """
        return self._ylm.evaluate(self._coefficients, theta, phi)

    def point_is_contained(self, x: PointLike, frame: Optional[Union[Frame, str]] = None) -> bool:
        """Whether the Cartesian point ``x`` lies inside the surface.

        The basepoint itself is always inside. The answer assumes the
        basepoint is interior; otherwise it is still well defined but may
        not match the geometric picture. Points on the surface count as
        inside up to floating-point rounding, plus the configured
        ``containment_tolerance``.

        Raises
        ------
        FrameMismatchError
            If ``frame`` is given and differs from the surface's frame
        """
        if frame is not None:
            require_same_frame(self._frame, frame, operation="point_is_contained")
        r, theta, phi = displacement_angles(x, self._center)
        if r == 0.0:
            return True
        radius = self.radius(theta, phi)
        return bool(r <= radius * (1.0 + _BOUNDARY_SLACK) + get_config().containment_tolerance)

    def collocation_points(self) -> Tuple[np.ndarray, np.ndarray]:
        """(theta, phi) of the collocation grid."""
        return self._ylm.collocation_points()

    def radius_at_collocation_points(self) -> np.ndarray:
        """Radius on the collocation grid.

        Memoized while the coefficients are unchanged; writing through
        :attr:`coefficients` invalidates the cached values.
        """
        if not get_config().cache_collocation:
            return self._ylm.spec_to_phys(self._coefficients)
        key = self._coefficients.tobytes()
        if self._grid_cache is None or self._grid_cache[0] != key:
            self._grid_cache = (key, self._ylm.spec_to_phys(self._coefficients))
        return self._grid_cache[1].copy()

    def cartesian_collocation_points(self) -> np.ndarray:
        """Points of the surface above each collocation point, shape ``(n, 3)``."""
        theta, phi = self.collocation_points()
        radius = self.radius_at_collocation_points()
        return self._center + radius[:, None] * unit_vectors(theta, phi)

    # ------------------------------------------------------------------
    # Comparison and serialization
    # ------------------------------------------------------------------

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Strahlkorper):
            return NotImplemented
        return (self.l_max == other.l_max and self.m_max == other.m_max
                and self._frame is other._frame
                and np.array_equal(self._center, other._center)
                and np.array_equal(self._coefficients, other._coefficients))

    def __ne__(self, other: Any) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    __hash__ = None

    def __getstate__(self) -> Dict[str, Any]:
        state = self.__dict__.copy()
        state['_grid_cache'] = None
        return state

    def __setstate__(self, state: Dict[str, Any]) -> None:
        self.__dict__.update(state)
        self._center.setflags(write=False)

    def validate(self) -> bool:
        """Check the size and finiteness invariants.

        Raises
        ------
        SizeMismatchError
            If the coefficient vector no longer matches the resolution
        ValidationError
            If center or coefficients hold non-finite values
        """
        if self._coefficients.shape != (self._ylm.spectral_size,):
            raise SizeMismatchError(
                "Coefficient vector does not match resolution",
                expected=self._ylm.spectral_size, actual=int(self._coefficients.size),
            )
        if not np.all(np.isfinite(self._coefficients)):
            raise ValidationError("Coefficients contain non-finite values", field="coefficients")
        if not np.all(np.isfinite(self._center)):
            raise ValidationError("Center contains non-finite values", field="center")
        return True

    def to_dict(self) -> Dict[str, Any]:
        """Serialization hook: resolution, center, coefficients and frame.

        Floats are stored as Python floats, so the round trip through
        :meth:`from_dict` is exact.
        """
        return {
            "l_max": self.l_max,
            "m_max": self.m_max,
            "center": [float(v) for v in self._center],
            "coefficients": [float(v) for v in self._coefficients],
            "frame": self._frame.value,
            "class": self.__class__.__name__,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Strahlkorper":
        """Restore a surface written by :meth:`to_dict`.

        Raises
        ------
        ValidationError
            If a required field is missing
        SizeMismatchError
            If the coefficient count does not match the resolution
        """
        missing = [key for key in ("l_max", "m_max", "center", "coefficients") if key not in data]
        if missing:
            raise ValidationError(f"Surface data is missing fields: {missing}", field=missing[0])
        ylm = YlmSpherepack(int(data["l_max"]), int(data["m_max"]))
        coefficients = np.array(data["coefficients"], dtype=np.float64).reshape(-1)
        if coefficients.size != ylm.spectral_size:
            raise SizeMismatchError(
                f"Expected {ylm.spectral_size} coefficients, got {coefficients.size}",
                expected=ylm.spectral_size, actual=int(coefficients.size),
            )
        return cls._build(ylm, data["center"], coefficients, data.get("frame"))

    def _repr_info(self) -> str:
        return (f"l_max={self.l_max}, m_max={self.m_max}, "
                f"center={self._center.tolist()}, frame={self._frame.value}")
