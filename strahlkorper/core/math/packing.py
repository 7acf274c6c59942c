"""
Real packing of spherical-harmonic expansions of real functions.

A real function f(θ, φ) = Σ F^{lm} Y^{lm}(θ, φ) has coefficients obeying
F^{l,-m} = (-1)^m conj(F^{lm}), so half of the complex data is redundant.
The packed vector stores one real number per (l, m):

    packed(l, m) = (-1)^m sqrt(2/π) Re(F^{lm})   for m >= 0
    packed(l, m) = (-1)^m sqrt(2/π) Im(F^{lm})   for m < 0

Storage is a rectangular (l_max + 1) x (2 m_max + 1) table flattened by
degree, so that

    index(l, m) = l * (2 m_max + 1) + (m + m_max)

Slots with |m| > l belong to no mode and hold zero.
"""

from typing import Iterator, Tuple, Union
import math

import numpy as np

from ..base.exceptions import (
    IndexOutOfRangeError,
    InvalidResolutionError,
    SizeMismatchError,
)

SQRT_2_OVER_PI = math.sqrt(2.0 / math.pi)


def _is_integer(value) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, (bool, np.bool_))


def check_resolution(l_max, m_max) -> Tuple[int, int]:
    """Validate a spectral resolution and return it as plain ints.

    Raises
    ------
    InvalidResolutionError
        If either value is not a non-negative integer or ``m_max > l_max``
    """
    if not (_is_integer(l_max) and _is_integer(m_max)):
        raise InvalidResolutionError(
            f"Resolution must be integers, got l_max={l_max!r}, m_max={m_max!r}",
            l_max=l_max, m_max=m_max,
        )
    if l_max < 0 or m_max < 0:
        raise InvalidResolutionError(
            f"Resolution must be non-negative, got l_max={l_max}, m_max={m_max}",
            l_max=l_max, m_max=m_max,
        )
    if m_max > l_max:
        raise InvalidResolutionError(
            f"m_max ({m_max}) must not exceed l_max ({l_max})",
            l_max=l_max, m_max=m_max,
        )
    return int(l_max), int(m_max)


def physical_size(l_max: int, m_max: int) -> int:
    """Length of the packed coefficient vector for a resolution.

    Equal to the number of collocation points of the transform grid.
    """
    l_max, m_max = check_resolution(l_max, m_max)
    return (l_max + 1) * (2 * m_max + 1)


class YlmPacking:
    """Bijection between complex Y_lm coefficients and the packed real vector.

    Parameters
    ----------
    l_max : int
        Maximum degree retained
    m_max : int
        Maximum order retained, ``m_max <= l_max``
    """

    def __init__(self, l_max: int, m_max: int):
        self.l_max, self.m_max = check_resolution(l_max, m_max)
        self.n_m = 2 * self.m_max + 1
        self.size = (self.l_max + 1) * self.n_m

        # (l, m) of every slot in storage order
        ell, em = np.meshgrid(np.arange(self.l_max + 1),
                              np.arange(-self.m_max, self.m_max + 1),
                              indexing="ij")
        self._ell = ell.reshape(-1)
        self._em = em.reshape(-1)
        self._valid = np.abs(self._em) <= self._ell
        self._sign = np.where(self._em % 2 == 0, 1.0, -1.0)

    def __repr__(self) -> str:
        return f"YlmPacking(l_max={self.l_max}, m_max={self.m_max})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, YlmPacking):
            return NotImplemented
        return self.l_max == other.l_max and self.m_max == other.m_max

    def __hash__(self) -> int:
        return hash((self.l_max, self.m_max))

    # ------------------------------------------------------------------
    # Index law
    # ------------------------------------------------------------------

    def contains(self, l: int, m: int) -> bool:
        """Whether (l, m) is a stored mode."""
        return 0 <= l <= self.l_max and abs(m) <= min(l, self.m_max)

    def index(self, l: int, m: int) -> int:
        """Position of mode (l, m) in the packed vector.

        Raises
        ------
        IndexOutOfRangeError
            If ``l`` is outside [0, l_max], ``m`` outside [-l, l] or
            ``|m| > m_max``
        """
        if not (_is_integer(l) and _is_integer(m)) or not self.contains(l, m):
            raise IndexOutOfRangeError(
                f"Mode (l={l}, m={m}) outside band l <= {self.l_max}, "
                f"|m| <= min(l, {self.m_max})",
                l=l, m=m,
            )
        return int(l) * self.n_m + int(m) + self.m_max

    def mode(self, index: int) -> Tuple[int, int]:
        """Inverse of :meth:`index`.

        Raises
        ------
        IndexOutOfRangeError
            If ``index`` is out of bounds or addresses a padding slot
        """
        if not _is_integer(index) or not 0 <= index < self.size or not self._valid[index]:
            raise IndexOutOfRangeError(f"Index {index} does not address a stored mode")
        return int(self._ell[index]), int(self._em[index])

    def iter_modes(self) -> Iterator[Tuple[int, int]]:
        """Stored (l, m) pairs in storage order."""
        for i in np.flatnonzero(self._valid):
            yield int(self._ell[i]), int(self._em[i])

    @property
    def mode_mask(self) -> np.ndarray:
        """Boolean mask over the packed vector, True for stored modes."""
        return self._valid.copy()

    @property
    def degrees(self) -> np.ndarray:
        """Degree l of every slot."""
        return self._ell.copy()

    @property
    def orders(self) -> np.ndarray:
        """Order m of every slot."""
        return self._em.copy()

    # ------------------------------------------------------------------
    # Single-mode codec
    # ------------------------------------------------------------------

    @staticmethod
    def conjugate_partner(m: int, value: complex) -> complex:
        """F^{l,-m} from F^{lm} through the reality condition."""
        return (-1) ** abs(m) * np.conj(complex(value))

    def pack(self, l: int, m: int, value: complex) -> float:
        """Packed real value for the complex coefficient F^{lm}."""
        self.index(l, m)
        value = complex(value)
        sign = (-1) ** abs(m)
        part = value.real if m >= 0 else value.imag
        return sign * SQRT_2_OVER_PI * part

    def unpack(self, l: int, m: int, coefficients: np.ndarray) -> complex:
        """Reconstruct F^{lm} from a packed vector.

        Reads the two slots (l, |m|) and (l, -|m|); for m < 0 the
        coefficient follows from the reality condition.
        """
        coefficients = self._check_size(coefficients)
        mm = abs(m)
        a = coefficients[self.index(l, mm)]
        if mm == 0:
            return complex(a / SQRT_2_OVER_PI, 0.0)
        b = coefficients[self.index(l, -mm)]
        sign = (-1) ** mm
        if m > 0:
            return complex(sign * a, -b) / SQRT_2_OVER_PI
        return complex(a, sign * b) / SQRT_2_OVER_PI

    # ------------------------------------------------------------------
    # Whole-table codec
    # ------------------------------------------------------------------

    def pack_all(self, table: np.ndarray) -> np.ndarray:
        """Pack a complex table indexed ``[l, m + m_max]``.

        Only Re(F^{lm}) for m >= 0 and Im(F^{lm}) for m < 0 are read;
        padding slots come out zero.
        """
        table = np.asarray(table, dtype=np.complex128)
        if table.shape != (self.l_max + 1, self.n_m):
            raise SizeMismatchError(
                f"Complex table must have shape {(self.l_max + 1, self.n_m)}, got {table.shape}",
                expected=self.size, actual=table.size,
            )
        flat = table.reshape(-1)
        part = np.where(self._em >= 0, flat.real, flat.imag)
        return np.where(self._valid, self._sign * SQRT_2_OVER_PI * part, 0.0)

    def unpack_all(self, coefficients: np.ndarray) -> np.ndarray:
        """Complex table ``[l, m + m_max]`` of F^{lm} for a packed vector."""
        coefficients = self._check_size(coefficients)
        table = coefficients.reshape(self.l_max + 1, self.n_m)
        mid = self.m_max
        out = np.zeros_like(table, dtype=np.complex128)
        out[:, mid] = table[:, mid]
        for mm in range(1, self.m_max + 1):
            a = table[:, mid + mm]
            b = table[:, mid - mm]
            sign = (-1) ** mm
            out[:, mid + mm] = sign * a - 1j * b
            out[:, mid - mm] = a + 1j * sign * b
        out[~self._valid.reshape(table.shape)] = 0.0
        return out / SQRT_2_OVER_PI

    def reality_residual(self, table: np.ndarray) -> float:
        """Largest violation of F^{l,-m} = (-1)^m conj(F^{lm}) in a table."""
        table = np.asarray(table, dtype=np.complex128)
        mid = self.m_max
        worst = float(np.max(np.abs(table[:, mid].imag), initial=0.0))
        for mm in range(1, self.m_max + 1):
            diff = table[:, mid - mm] - (-1) ** mm * np.conj(table[:, mid + mm])
            worst = max(worst, float(np.max(np.abs(diff), initial=0.0)))
        return worst

    def _check_size(self, coefficients: Union[np.ndarray, list]) -> np.ndarray:
        coefficients = np.asarray(coefficients, dtype=np.float64)
        if coefficients.shape != (self.size,):
            raise SizeMismatchError(
                f"Expected {self.size} packed coefficients for "
                f"(l_max={self.l_max}, m_max={self.m_max}), got {coefficients.size}",
                expected=self.size, actual=int(coefficients.size),
            )
        return coefficients
