import logging

import numpy as np
import pytest

from strahlkorper.core.base.exceptions import ValidationError
from strahlkorper.core.math.transforms import YlmSpherepack
from strahlkorper.core.providers.healpix_provider import HealpixProvider
from strahlkorper.core.surface import Strahlkorper

hp = pytest.importorskip("healpy")

logging.disable(logging.CRITICAL)


@pytest.fixture
def provider():
    return HealpixProvider()


@pytest.fixture
def bumpy():
    ylm = YlmSpherepack(6, 4)
    theta, phi = ylm.collocation_points()
    samples = (2.0 + 0.1 * np.cos(theta)
               + 0.05 * np.sin(theta) * np.sin(phi)
               + 0.03 * np.sin(theta) ** 2 * np.cos(2 * phi))
    return Strahlkorper.from_samples(6, 4, samples, [0.0, 0.0, 0.0])


class TestHealpixProvider:
    def test_alm_layout(self, provider, bumpy):
        alm = provider.to_healpy_alm(bumpy)
        assert alm.size == hp.Alm.getsize(6, 4)
        packing = bumpy.ylm.packing
        a00 = alm[hp.Alm.getidx(6, 0, 0)]
        assert a00.real == pytest.approx(bumpy.coefficients[packing.index(0, 0)])
        assert a00.imag == 0.0

    def test_sphere_map_is_constant(self, provider):
        sphere = Strahlkorper(4, 4, 1.5, [0, 0, 0])
        radius = provider.radius_map(sphere, nside=8)
        assert radius.size == hp.nside2npix(8)
        np.testing.assert_allclose(radius, 1.5, atol=1e-10)

    def test_map_matches_direct_evaluation(self, provider, bumpy):
        rendered = provider.radius_map(bumpy, nside=16)
        sampled = provider.sample_radius(bumpy, nside=16)
        np.testing.assert_allclose(rendered, sampled, atol=1e-10)

    def test_pixel_directions_cached(self, provider):
        first = provider.pixel_directions(4)
        assert provider.pixel_directions(4) is first
        assert provider.get_cache_info()['hits'] == 1

    def test_invalid_nside(self, provider, bumpy):
        with pytest.raises(ValidationError):
            provider.radius_map(bumpy, nside=0)
