import copy
import logging
import math
import pickle

import numpy as np
import pytest

from strahlkorper.core.base.exceptions import (
    ConfigurationError,
    FrameMismatchError,
    InvalidResolutionError,
    SampleCountMismatchError,
    SizeMismatchError,
    ValidationError,
)
from strahlkorper.core.base.frames import Frame
from strahlkorper.core.config import reset_config, update_config
from strahlkorper.core.math.transforms import YlmSpherepack
from strahlkorper.core.surface import Strahlkorper

logging.disable(logging.CRITICAL)


@pytest.fixture(autouse=True)
def clean_config():
    reset_config()
    yield
    reset_config()


@pytest.fixture
def sphere():
    return Strahlkorper(4, 4, 2.0, [0.0, 0.0, 0.0])


def displaced_sphere_samples(l_max, m_max, radius, center, true_center):
    """Distance from ``center`` to a sphere around ``true_center`` along each grid ray."""
    theta, phi = YlmSpherepack(l_max, m_max).collocation_points()
    n = np.stack([np.sin(theta) * np.cos(phi), np.sin(theta) * np.sin(phi), np.cos(theta)], axis=-1)
    d = np.asarray(true_center, dtype=float) - np.asarray(center, dtype=float)
    n_dot_d = n @ d
    return n_dot_d + np.sqrt(radius ** 2 - d @ d + n_dot_d ** 2)


class TestSphere:
    def test_only_monopole_is_set(self):
        surface = Strahlkorper(3, 2, 1.5, [1.0, 2.0, 3.0])
        index = surface.ylm.packing.index(0, 0)
        assert surface.coefficients[index] == 1.5 * math.sqrt(4 * math.pi)
        assert np.count_nonzero(surface.coefficients) == 1
        assert surface.coefficients.size == (3 + 1) * (2 * 2 + 1)

    def test_radius_is_constant(self):
        surface = Strahlkorper(5, 3, 1.5, [0.0, 0.0, 0.0])
        for theta, phi in [(0.0, 0.0), (0.7, 1.3), (math.pi, 4.0), (2.0, 6.0)]:
            assert surface.radius(theta, phi) == pytest.approx(1.5, abs=1e-13)
        np.testing.assert_allclose(surface.radius_at_collocation_points(), 1.5, atol=1e-13)

    def test_average_radius(self):
        assert Strahlkorper(6, 2, 0.75, [0, 0, 0]).average_radius() == pytest.approx(0.75, rel=1e-15)

    def test_accessors(self):
        surface = Strahlkorper(4, 2, 1.0, [1, 2, 3], frame=Frame.GRID)
        assert (surface.l_max, surface.m_max) == (4, 2)
        np.testing.assert_array_equal(surface.center, [1.0, 2.0, 3.0])
        assert surface.frame is Frame.GRID

    def test_default_frame_from_config(self):
        update_config(default_frame="Distorted")
        assert Strahlkorper(2, 2, 1.0, [0, 0, 0]).frame is Frame.DISTORTED

    def test_default_resolution_from_config(self):
        update_config(default_l_max=6, default_m_max=3)
        surface = Strahlkorper.sphere(1.0, [0, 0, 0])
        assert (surface.l_max, surface.m_max) == (6, 3)
        assert Strahlkorper.sphere(1.0, [0, 0, 0], l_max=2).m_max == 2
        assert Strahlkorper.sphere(1.0, [0, 0, 0], l_max=5, m_max=1).m_max == 1

    def test_rejected_config_update_keeps_constructors_working(self):
        with pytest.raises(ConfigurationError):
            update_config(default_frame="bogus")
        assert Strahlkorper(2, 2, 1.0, [0, 0, 0]).frame is Frame.INERTIAL
        with pytest.raises(ConfigurationError):
            update_config(default_l_max=-3)
        surface = Strahlkorper.sphere(1.0, [0, 0, 0])
        assert (surface.l_max, surface.m_max) == (8, 8)

    def test_center_is_read_only(self, sphere):
        with pytest.raises(ValueError):
            sphere.center[0] = 1.0

    def test_invalid_resolution(self):
        with pytest.raises(InvalidResolutionError):
            Strahlkorper(3, 4, 1.0, [0, 0, 0])

    @pytest.mark.parametrize("radius", [0.0, -1.0])
    def test_non_positive_radius(self, radius):
        with pytest.raises(ValidationError):
            Strahlkorper(3, 3, radius, [0, 0, 0])

    def test_bad_center(self):
        with pytest.raises(ValidationError):
            Strahlkorper(3, 3, 1.0, [0, 0])


class TestScenario:
    def test_sphere_of_radius_two(self, sphere):
        assert sphere.average_radius() == pytest.approx(2.0)
        assert sphere.point_is_contained([1.0, 1.0, 1.0])
        assert not sphere.point_is_contained([2.0, 2.0, 2.0])


class TestContainment:
    def test_center_is_contained(self, sphere):
        assert sphere.point_is_contained([0.0, 0.0, 0.0])

    @pytest.mark.parametrize("point, inside", [
        ([1.999, 0.0, 0.0], True),
        ([2.001, 0.0, 0.0], False),
        ([0.0, 0.0, -1.999], True),
        ([0.0, 0.0, 2.001], False),
        ([-1.2, 1.2, 0.5], True),
    ])
    def test_points(self, sphere, point, inside):
        assert sphere.point_is_contained(point) is inside

    def test_off_origin_center(self):
        surface = Strahlkorper(3, 3, 1.0, [5.0, -2.0, 1.0])
        assert surface.point_is_contained([5.5, -2.0, 1.0])
        assert not surface.point_is_contained([0.0, 0.0, 0.0])

    @pytest.mark.parametrize("radius", [0.1, 0.3, 1.0, 2.5, 7.7, 123.456])
    def test_points_on_sphere_are_contained(self, radius):
        surface = Strahlkorper(4, 4, radius, [0.0, 0.0, 0.0])
        diagonal = radius / math.sqrt(3.0)
        for point in ([radius, 0.0, 0.0], [-radius, 0.0, 0.0], [0.0, radius, 0.0],
                      [0.0, 0.0, radius], [0.0, 0.0, -radius],
                      [diagonal, diagonal, diagonal], [-diagonal, diagonal, -diagonal]):
            assert surface.point_is_contained(point), point
        assert not surface.point_is_contained([radius * (1.0 + 1e-9), 0.0, 0.0])

    @pytest.mark.parametrize("radius", [1.0, 2.5, 7.7])
    def test_points_on_displaced_sphere_are_contained(self, radius):
        center = np.array([0.5, -0.25, 1.0])
        surface = Strahlkorper(3, 2, radius, center)
        assert surface.point_is_contained(center + [radius, 0.0, 0.0])
        assert surface.point_is_contained(center + [0.0, 0.0, -radius])
        assert not surface.point_is_contained(center + [radius * (1.0 + 1e-9), 0.0, 0.0])

    def test_tolerance_admits_boundary_points(self, sphere):
        assert not sphere.point_is_contained([2.0 + 1e-9, 0.0, 0.0])
        update_config(containment_tolerance=1e-6)
        assert sphere.point_is_contained([2.0 + 1e-9, 0.0, 0.0])

    def test_frame_checked(self, sphere):
        assert sphere.point_is_contained([0.5, 0.0, 0.0], frame=Frame.INERTIAL)
        with pytest.raises(FrameMismatchError):
            sphere.point_is_contained([0.5, 0.0, 0.0], frame="Grid")

    def test_deformed_surface(self):
        # r = 1 + 0.5 cos(theta): longer along +z than -z
        ylm = YlmSpherepack(4, 2)
        theta, _ = ylm.collocation_points()
        surface = Strahlkorper.from_samples(4, 2, 1.0 + 0.5 * np.cos(theta), [0, 0, 0])
        assert surface.point_is_contained([0.0, 0.0, 1.4])
        assert not surface.point_is_contained([0.0, 0.0, -1.4])


class TestFromSamples:
    def test_sphere_samples_match_sphere(self):
        ylm = YlmSpherepack(4, 3)
        surface = Strahlkorper.from_samples(4, 3, np.full(ylm.physical_size, 2.0), [0, 0, 0])
        sphere = Strahlkorper(4, 3, 2.0, [0, 0, 0])
        np.testing.assert_allclose(surface.coefficients, sphere.coefficients, atol=1e-13)

    def test_round_trip_on_grid(self):
        ylm = YlmSpherepack(5, 4)
        theta, phi = ylm.collocation_points()
        samples = 1.0 + 0.1 * np.sin(theta) ** 2 * np.cos(2 * phi) + 0.05 * np.cos(theta)
        surface = Strahlkorper.from_samples(5, 4, samples, [0, 0, 0])
        np.testing.assert_allclose(surface.radius_at_collocation_points(), samples, atol=1e-12)

    def test_two_dimensional_samples(self):
        ylm = YlmSpherepack(3, 2)
        grid = np.full((ylm.n_theta, ylm.n_phi), 1.25)
        surface = Strahlkorper.from_samples(3, 2, grid, [0, 0, 0])
        assert surface.average_radius() == pytest.approx(1.25)

    def test_wrong_sample_count(self):
        with pytest.raises(SampleCountMismatchError):
            Strahlkorper.from_samples(4, 4, np.ones(44), [0, 0, 0])


class TestFromSurface:
    def test_prolongation_is_lossless(self):
        ylm = YlmSpherepack(3, 2)
        theta, phi = ylm.collocation_points()
        source = Strahlkorper.from_samples(3, 2, 2.0 + 0.2 * np.sin(theta) * np.cos(phi), [1, 0, 0],
                                           frame=Frame.GRID)
        fine = Strahlkorper.from_surface(7, 5, source)
        assert fine.frame is Frame.GRID
        np.testing.assert_array_equal(fine.center, source.center)
        for theta_i, phi_i in [(0.2, 0.1), (1.5, 3.0), (2.8, 5.5)]:
            assert fine.radius(theta_i, phi_i) == pytest.approx(source.radius(theta_i, phi_i), abs=1e-12)

    def test_prolong_then_restrict_is_identity(self):
        rng = np.random.default_rng(11)
        ylm = YlmSpherepack(4, 3)
        samples = 3.0 + 0.1 * rng.normal(size=ylm.physical_size)
        source = Strahlkorper.from_samples(4, 3, samples, [0, 0, 0])
        back = Strahlkorper.from_surface(4, 3, Strahlkorper.from_surface(9, 6, source))
        assert back == source

    def test_same_resolution_copies(self, sphere):
        copied = Strahlkorper.from_surface(4, 4, sphere)
        assert copied == sphere
        copied.coefficients[0] = 1.0
        assert copied != sphere

    def test_restriction_drops_high_modes(self):
        ylm = YlmSpherepack(4, 4)
        theta, phi = ylm.collocation_points()
        source = Strahlkorper.from_samples(4, 4, 1.0 + 0.1 * np.sin(theta) ** 3 * np.cos(3 * phi),
                                           [0, 0, 0])
        coarse = Strahlkorper.from_surface(2, 2, source)
        assert coarse.average_radius() == pytest.approx(source.average_radius())
        np.testing.assert_allclose(coarse.radius_at_collocation_points(), 1.0, atol=1e-12)

    def test_invalid_resolution(self, sphere):
        with pytest.raises(InvalidResolutionError):
            Strahlkorper.from_surface(2, 3, sphere)


class TestFromCoefficients:
    def test_copy_variant(self, sphere):
        values = sphere.coefficients * 2.0
        surface = Strahlkorper.from_coefficients(values, sphere)
        assert surface.average_radius() == pytest.approx(4.0)
        values[:] = 0.0
        assert surface.average_radius() == pytest.approx(4.0)
        assert surface.ylm is not sphere.ylm

    def test_consume_variant_adopts_storage(self, sphere):
        values = np.array(sphere.coefficients)
        surface = Strahlkorper.from_coefficients(values, sphere, consume=True)
        assert np.shares_memory(surface.coefficients, values)
        assert surface.ylm is sphere.ylm
        assert surface == sphere

    def test_source_is_untouched(self, sphere):
        before = np.array(sphere.coefficients)
        Strahlkorper.from_coefficients(np.zeros_like(before), sphere)
        np.testing.assert_array_equal(sphere.coefficients, before)

    @pytest.mark.parametrize("consume", [False, True])
    def test_wrong_size(self, sphere, consume):
        with pytest.raises(SizeMismatchError):
            Strahlkorper.from_coefficients(np.zeros(sphere.coefficients.size - 1), sphere,
                                           consume=consume)

    def test_copies_frame_and_center(self):
        source = Strahlkorper(2, 1, 1.0, [1, 2, 3], frame="Logical")
        surface = Strahlkorper.from_coefficients(source.coefficients, source)
        assert surface.frame is Frame.LOGICAL
        np.testing.assert_array_equal(surface.center, [1, 2, 3])


class TestEquality:
    def test_equal_across_constructors(self):
        sphere = Strahlkorper(3, 3, 1.0, [0, 0, 0])
        same = Strahlkorper.from_coefficients(sphere.coefficients, sphere)
        assert sphere == same
        assert not (sphere != same)

    def test_differing_coefficients(self, sphere):
        other = Strahlkorper(4, 4, 2.0, [0, 0, 0])
        other.coefficients[other.ylm.packing.index(2, 1)] = 1e-15
        assert sphere != other

    def test_differing_center(self, sphere):
        assert sphere != Strahlkorper(4, 4, 2.0, [0, 0, 1e-12])

    def test_differing_resolution(self, sphere):
        assert sphere != Strahlkorper(4, 3, 2.0, [0, 0, 0])

    def test_differing_frame(self, sphere):
        assert sphere != Strahlkorper(4, 4, 2.0, [0, 0, 0], frame=Frame.GRID)

    def test_other_types(self, sphere):
        assert sphere != "sphere"
        assert sphere.__eq__(3) is NotImplemented

    def test_unhashable(self, sphere):
        with pytest.raises(TypeError):
            hash(sphere)


class TestPhysicalCenter:
    def test_sphere_center(self):
        surface = Strahlkorper(4, 4, 1.0, [1.0, -2.0, 0.5])
        np.testing.assert_allclose(surface.physical_center(), [1.0, -2.0, 0.5])

    def test_displaced_sphere(self):
        center = [0.0, 0.0, 0.0]
        true_center = [0.05, -0.08, 0.1]
        samples = displaced_sphere_samples(12, 12, 1.0, center, true_center)
        surface = Strahlkorper.from_samples(12, 12, samples, center)
        np.testing.assert_allclose(surface.physical_center(), true_center, atol=1e-8)

    def test_axisymmetric_only_z(self):
        center = [1.0, 1.0, 1.0]
        true_center = [1.0, 1.0, 1.2]
        samples = displaced_sphere_samples(10, 0, 2.0, center, true_center)
        surface = Strahlkorper.from_samples(10, 0, samples, center)
        np.testing.assert_allclose(surface.physical_center(), true_center, atol=1e-6)

    def test_monopole_only_returns_center(self):
        surface = Strahlkorper(0, 0, 3.0, [4.0, 5.0, 6.0])
        np.testing.assert_array_equal(surface.physical_center(), [4.0, 5.0, 6.0])


class TestMutationAndCache:
    def test_writes_through_coefficients(self, sphere):
        sphere.coefficients[sphere.ylm.packing.index(0, 0)] = 3.0 * math.sqrt(4 * math.pi)
        assert sphere.average_radius() == pytest.approx(3.0)
        assert sphere.radius(1.0, 1.0) == pytest.approx(3.0)

    def test_cache_invalidated_by_mutation(self, sphere):
        np.testing.assert_allclose(sphere.radius_at_collocation_points(), 2.0)
        sphere.coefficients *= 0.5
        np.testing.assert_allclose(sphere.radius_at_collocation_points(), 1.0)

    def test_cached_values_are_copies(self, sphere):
        values = sphere.radius_at_collocation_points()
        values[:] = 0.0
        np.testing.assert_allclose(sphere.radius_at_collocation_points(), 2.0)

    def test_cache_can_be_disabled(self, sphere):
        update_config(cache_collocation=False)
        np.testing.assert_allclose(sphere.radius_at_collocation_points(), 2.0)
        assert sphere._grid_cache is None

    def test_setter_keeps_storage(self, sphere):
        storage = sphere.coefficients
        sphere.coefficients = np.zeros(storage.size)
        assert sphere.coefficients is storage
        assert sphere.average_radius() == 0.0
        with pytest.raises(SizeMismatchError):
            sphere.coefficients = np.zeros(storage.size + 1)

    def test_view_is_read_only(self, sphere):
        view = sphere.coefficients_view()
        with pytest.raises(ValueError):
            view[0] = 1.0
        sphere.coefficients[0] = 7.0
        assert view[0] == 7.0

    def test_cartesian_points_lie_on_sphere(self):
        surface = Strahlkorper(3, 2, 1.5, [1.0, 0.0, -1.0])
        points = surface.cartesian_collocation_points()
        assert points.shape == (surface.coefficients.size, 3)
        np.testing.assert_allclose(np.linalg.norm(points - surface.center, axis=1), 1.5)


class TestSerialization:
    def test_dict_round_trip_is_exact(self):
        ylm = YlmSpherepack(3, 3)
        theta, phi = ylm.collocation_points()
        surface = Strahlkorper.from_samples(3, 3, 1.0 + 0.1 * np.cos(theta) * np.sin(phi),
                                            [0.1, 0.2, 0.3], frame=Frame.DISTORTED)
        restored = Strahlkorper.from_dict(surface.to_dict())
        assert restored == surface
        assert restored.frame is Frame.DISTORTED

    def test_missing_fields(self, sphere):
        data = sphere.to_dict()
        del data["coefficients"]
        with pytest.raises(ValidationError):
            Strahlkorper.from_dict(data)

    def test_size_mismatch(self, sphere):
        data = sphere.to_dict()
        data["coefficients"] = data["coefficients"][:-1]
        with pytest.raises(SizeMismatchError):
            Strahlkorper.from_dict(data)

    def test_copy_and_pickle(self, sphere):
        sphere.radius_at_collocation_points()
        for duplicate in (sphere.copy(), copy.deepcopy(sphere), pickle.loads(pickle.dumps(sphere))):
            assert duplicate == sphere
            assert not np.shares_memory(duplicate.coefficients, sphere.coefficients)
            with pytest.raises(ValueError):
                duplicate.center[0] = 1.0

    def test_validate(self, sphere):
        assert sphere.validate()
        sphere.coefficients[0] = np.nan
        with pytest.raises(ValidationError):
            sphere.validate()

    def test_repr(self, sphere):
        assert repr(sphere).startswith("Strahlkorper(l_max=4, m_max=4")
