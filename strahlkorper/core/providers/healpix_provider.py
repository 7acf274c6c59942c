"""
HEALPix provider implementation.

Bridges surfaces to healpy: conversion of the packed coefficient vector to
a healpy ``alm`` array and rendering of the radius on a HEALPix map.
healpy is imported on first use.
"""

from typing import Tuple
import numpy as np

from ..base.exceptions import ProviderError, ValidationError
from .base_provider import CachedProvider, LazyProvider


class HealpixProvider(LazyProvider, CachedProvider):
    """Provider for HEALPix operations using healpy.

    healpy's harmonics are orthonormal with the Condon-Shortley phase, the
    same functions the transform engine is built from, so the healpy
    coefficient of a surface is

        alm(l, m) = (-1)^m packed(l, m) - i packed(l, -m),   m >= 0

    Parameters
    ----------
    cache_size : int
        Number of pixel-direction tables kept per ``nside``
    """

    def __init__(self, cache_size: int = 8):
        super().__init__(cache_size=cache_size)
        self._healpy = None

    def _check_dependencies(self) -> None:
        self._healpy = self._lazy_import('healpy')

    def _check_nside(self, nside: int) -> None:
        if not self._healpy.isnsideok(nside):
            raise ValidationError(f"Invalid HEALPix nside: {nside}", field="nside", value=nside)

    def to_healpy_alm(self, surface) -> np.ndarray:
        """healpy ``alm`` array (``lmax=l_max``, ``mmax=m_max``) of a surface's radius.

        Raises
        ------
        ProviderError
            If healpy is not installed
        """
        self.ensure_initialized()
        self._track_usage()

        packing = surface.ylm.packing
        coefs = surface.coefficients
        alm = np.zeros(self._healpy.Alm.getsize(surface.l_max, surface.m_max), dtype=np.complex128)
        for l, m in packing.iter_modes():
            if m < 0:
                continue
            value = (-1) ** m * coefs[packing.index(l, m)]
            if m > 0:
                value = value - 1j * coefs[packing.index(l, -m)]
            alm[self._healpy.Alm.getidx(surface.l_max, l, m)] = value
        return alm

    def radius_map(self, surface, nside: int) -> np.ndarray:
        """Radius of ``surface`` on a HEALPix map (RING ordering).

        Raises
        ------
        ProviderError
            If healpy is not installed
        ValidationError
            If ``nside`` is not a valid HEALPix resolution
        """
        alm = self.to_healpy_alm(surface)
        self._check_nside(nside)
        try:
            return self._healpy.alm2map(alm, nside, lmax=surface.l_max, mmax=surface.m_max)
        except Exception as e:
            raise ProviderError(f"alm2map failed for nside={nside}: {e}",
                                provider=self.name, operation="radius_map", cause=e)

    def pixel_directions(self, nside: int) -> Tuple[np.ndarray, np.ndarray]:
        """(theta, phi) of the pixel centers of a RING-ordered map."""
        self.ensure_initialized()
        self._check_nside(nside)
        cached = self._cache_get(nside)
        if cached is None:
            npix = self._healpy.nside2npix(nside)
            cached = self._healpy.pix2ang(nside, np.arange(npix))
            self._cache_set(nside, cached)
        return cached

    def sample_radius(self, surface, nside: int) -> np.ndarray:
        """Radius of ``surface`` evaluated exactly at the pixel centers."""
        theta, phi = self.pixel_directions(nside)
        return surface.ylm.evaluate_many(surface.coefficients, theta, phi)
