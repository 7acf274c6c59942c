"""
Spherical harmonic transforms on a Gauss-Legendre grid.

This module provides the spectral engine behind surfaces: the collocation
grid for a resolution, the forward transform from grid samples to packed
coefficients, point and grid evaluation, and resampling between
resolutions. Basis functions come from scipy.
"""

from functools import lru_cache
from typing import Tuple, Union
import logging
import math

import numpy as np
from scipy.special import sph_harm_y

from ..base.exceptions import SampleCountMismatchError, SizeMismatchError
from .packing import YlmPacking, check_resolution, physical_size

logger = logging.getLogger(__name__)

ArrayLike = Union[float, np.ndarray]


@lru_cache(maxsize=64)
def _quadrature(l_max: int, m_max: int) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Colatitudes, Gauss weights and longitudes of the collocation grid."""
    n_theta = l_max + 1
    n_phi = 2 * m_max + 1
    x, w = np.polynomial.legendre.leggauss(n_theta)
    # Descending cos(theta) gives ascending theta
    theta = np.arccos(x[::-1])
    weights = w[::-1].copy()
    phi = 2.0 * np.pi * np.arange(n_phi) / n_phi
    for arr in (theta, weights, phi):
        arr.setflags(write=False)
    return theta, weights, phi


def _basis(packing: YlmPacking, theta: np.ndarray, phi: np.ndarray) -> np.ndarray:
    """Real basis functions at the given angles, shape ``(n_points, size)``.

    Column ``packing.index(l, m)`` holds the function multiplying
    ``packed(l, m)``:

        B_l0      = Y^{l0}
        B_lm      = 2 (-1)^m Re Y^{lm}     (m > 0)
        B_l,-m    = 2 Im Y^{lm}            (m > 0)

    which is Σ sqrt(2/π) F^{lm} Y^{lm} rewritten in the packed variables.
    """
    theta = np.atleast_1d(np.asarray(theta, dtype=np.float64))
    phi = np.atleast_1d(np.asarray(phi, dtype=np.float64))
    out = np.zeros((theta.size, packing.size), dtype=np.float64)

    for l in range(packing.l_max + 1):
        orders = np.arange(min(l, packing.m_max) + 1)
        ylm = sph_harm_y(l, orders[None, :], theta[:, None], phi[:, None])
        row = l * packing.n_m + packing.m_max
        out[:, row] = ylm[:, 0].real
        for m in orders[1:]:
            out[:, row + m] = 2.0 * (-1) ** m * ylm[:, m].real
            out[:, row - m] = 2.0 * ylm[:, m].imag
    return out


@lru_cache(maxsize=32)
def _grid_basis(l_max: int, m_max: int) -> np.ndarray:
    theta, _, phi = _quadrature(l_max, m_max)
    n_theta, n_phi = theta.size, phi.size
    basis = _basis(YlmPacking(l_max, m_max),
                   np.tile(theta, n_phi), np.repeat(phi, n_theta))
    basis.setflags(write=False)
    return basis


class YlmSpherepack:
    """Spectral transform engine for a fixed resolution.

    The collocation grid has ``l_max + 1`` Gauss-Legendre colatitudes and
    ``2 m_max + 1`` equally spaced longitudes; grid samples are ordered with
    theta varying fastest. The forward transform is exact for functions band
    limited to the resolution, so ``spec_to_phys(phys_to_spec(u)) == u`` for
    such functions up to rounding.

    Parameters
    ----------
    l_max : int
        Maximum degree
    m_max : int
        Maximum order, ``m_max <= l_max``
    """

    def __init__(self, l_max: int, m_max: int):
        self.l_max, self.m_max = check_resolution(l_max, m_max)
        self.packing = YlmPacking(self.l_max, self.m_max)
        self.n_theta = self.l_max + 1
        self.n_phi = 2 * self.m_max + 1

    def __repr__(self) -> str:
        return f"YlmSpherepack(l_max={self.l_max}, m_max={self.m_max})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, YlmSpherepack):
            return NotImplemented
        return self.l_max == other.l_max and self.m_max == other.m_max

    def __hash__(self) -> int:
        return hash((self.l_max, self.m_max))

    @property
    def physical_size(self) -> int:
        """Number of collocation points, equal to the packed vector length."""
        return physical_size(self.l_max, self.m_max)

    @property
    def spectral_size(self) -> int:
        return self.packing.size

    def theta_points(self) -> np.ndarray:
        """Distinct collocation colatitudes (ascending)."""
        return _quadrature(self.l_max, self.m_max)[0].copy()

    def phi_points(self) -> np.ndarray:
        """Distinct collocation longitudes."""
        return _quadrature(self.l_max, self.m_max)[2].copy()

    def collocation_points(self) -> Tuple[np.ndarray, np.ndarray]:
        """Flattened (theta, phi) of every collocation point, theta fastest."""
        return np.tile(self.theta_points(), self.n_phi), np.repeat(self.phi_points(), self.n_theta)

    def quadrature_weights(self) -> np.ndarray:
        """Solid-angle weights of the collocation points; they sum to 4π."""
        _, weights, _ = _quadrature(self.l_max, self.m_max)
        return np.tile(weights, self.n_phi) * (2.0 * np.pi / self.n_phi)

    # ------------------------------------------------------------------
    # Transforms
    # ------------------------------------------------------------------

    def phys_to_spec(self, samples: np.ndarray) -> np.ndarray:
        """Forward transform of grid samples into packed coefficients.

        Parameters
        ----------
        samples : np.ndarray
            Values at the collocation points; flat in grid order or shaped
            ``(n_theta, n_phi)``

        Raises
        ------
        SampleCountMismatchError
            If the sample count differs from the grid size
        """
        samples = np.asarray(samples, dtype=np.float64)
        if samples.ndim == 2 and samples.shape == (self.n_theta, self.n_phi):
            samples = samples.T.reshape(-1)
        if samples.ndim != 1 or samples.size != self.physical_size:
            raise SampleCountMismatchError(
                f"Expected {self.physical_size} samples on the "
                f"({self.n_theta} x {self.n_phi}) collocation grid, got {samples.size}",
                expected=self.physical_size, actual=int(samples.size),
            )

        basis = _grid_basis(self.l_max, self.m_max)
        projections = basis.T @ (self.quadrature_weights() * samples)
        norms = np.where(self.packing.orders == 0, 1.0, 2.0)
        coefficients = np.where(self.packing.mode_mask, projections / norms, 0.0)
        logger.debug(f"Forward transform at (l_max={self.l_max}, m_max={self.m_max})")
        return coefficients

    def spec_to_phys(self, coefficients: np.ndarray) -> np.ndarray:
        """Evaluate packed coefficients at every collocation point."""
        coefficients = self.packing._check_size(coefficients)
        return _grid_basis(self.l_max, self.m_max) @ coefficients

    def evaluate_many(self, coefficients: np.ndarray, theta: ArrayLike,
                      phi: ArrayLike) -> np.ndarray:
        """Evaluate packed coefficients at arbitrary angles.

        ``theta`` and ``phi`` are broadcast against each other; the result
        has their broadcast shape.
        """
        coefficients = self.packing._check_size(coefficients)
        theta, phi = np.broadcast_arrays(np.asarray(theta, dtype=np.float64),
                                         np.asarray(phi, dtype=np.float64))
        values = _basis(self.packing, theta.reshape(-1), phi.reshape(-1)) @ coefficients
        return values.reshape(theta.shape)

    def evaluate(self, coefficients: np.ndarray, theta: float, phi: float) -> float:
        """Evaluate packed coefficients at a single angle.

        Costs O(number of coefficients) per call; prefer
        :meth:`spec_to_phys` or :meth:`evaluate_many` for many points.
        """
        return float(self.evaluate_many(coefficients, theta, phi))

    def integrate(self, samples: np.ndarray) -> float:
        """Integral over the unit sphere of a function sampled on the grid."""
        samples = np.asarray(samples, dtype=np.float64).reshape(-1)
        if samples.size != self.physical_size:
            raise SampleCountMismatchError(
                f"Expected {self.physical_size} samples, got {samples.size}",
                expected=self.physical_size, actual=int(samples.size),
            )
        return float(np.dot(self.quadrature_weights(), samples))

    def resample(self, coefficients: np.ndarray, l_max: int, m_max: int) -> np.ndarray:
        """Prolong or restrict packed coefficients to another resolution.

        Modes present at both resolutions are copied, new modes are zero and
        modes absent from the target are dropped. Prolongation is therefore
        lossless and restriction is the L2-closest truncation.
        """
        coefficients = self.packing._check_size(coefficients)
        target = YlmPacking(l_max, m_max)
        source_table = coefficients.reshape(self.l_max + 1, self.packing.n_m)
        target_table = np.zeros((target.l_max + 1, target.n_m), dtype=np.float64)

        n_l = min(self.l_max, target.l_max) + 1
        n_m = min(self.m_max, target.m_max)
        target_table[:n_l, target.m_max - n_m:target.m_max + n_m + 1] = \
            source_table[:n_l, self.m_max - n_m:self.m_max + n_m + 1]

        if target.l_max < self.l_max or target.m_max < self.m_max:
            kept = float(np.sum(target_table ** 2))
            dropped = float(np.sum(coefficients ** 2)) - kept
            if dropped > 0.0:
                logger.debug(
                    f"Restriction ({self.l_max},{self.m_max}) -> ({target.l_max},{target.m_max}) "
                    f"discarded spectral power {math.sqrt(max(dropped, 0.0)):.3e}"
                )
        return target_table.reshape(-1)
