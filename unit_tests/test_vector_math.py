import numpy as np
import pytest
from common.units import Q_, to_degrees, to_radians
from geospatial.vector_math import (
    wrap_longitude,
    wrap_azimuth,
    circular_difference,
    vec3,
    cross,
    norm,
    normalize,
    is_zero,
    mat3,
    mat3_mul,
    mat3_mul_vec3,
    axis_angle_mat3,
    is_rotation,
)


def test_unit_conversions_through_pint():
    assert np.isclose(to_radians(180.0), np.pi)
    assert np.isclose(to_radians(Q_(30, "arcminute")), np.pi / 360)
    assert np.isclose(to_degrees(np.pi / 2), 90.0)


def test_wrap_longitude_into_half_open_range():
    assert np.isclose(wrap_longitude(0.5), 0.5)
    assert np.isclose(wrap_longitude(3 * np.pi / 2), -np.pi / 2)
    assert np.isclose(wrap_longitude(-3 * np.pi / 2), np.pi / 2)
    assert wrap_longitude(-np.pi) == pytest.approx(np.pi)


def test_wrap_azimuth_range():
    for a in np.linspace(-10, 10, 101):
        w = wrap_azimuth(a)
        assert 0.0 <= w < 2 * np.pi
    assert wrap_azimuth(-1e-300) == 0.0


def test_circular_difference_wraps_past_two_pi():
    assert np.isclose(circular_difference(0.1, 2 * np.pi - 0.1), 0.2)
    assert np.isclose(circular_difference(0.0, 1.5 * np.pi), 0.5 * np.pi)
    assert np.isclose(circular_difference(np.pi, 1.9 * np.pi), 0.9 * np.pi)


def test_circular_difference_never_exceeds_pi():
    grid = np.linspace(0, 2 * np.pi, 37, endpoint=False)
    for a in grid:
        for b in grid:
            assert 0.0 <= circular_difference(a, b) <= np.pi + 1e-12


def test_normalize_unit_length():
    v = normalize(vec3(3.0, 4.0, 0.0))
    assert np.isclose(norm(v), 1.0)
    assert np.allclose(v, [0.6, 0.8, 0.0])


def test_normalize_zero_vector_returns_zero():
    v = normalize(vec3())
    assert np.allclose(v, 0.0)
    assert is_zero(v)


def test_normalize_below_eps_returns_zero():
    v = normalize(vec3(1e-14, 0.0, 0.0), eps=1e-12)
    assert is_zero(v)


def test_cross_of_parallel_vectors_is_zero():
    a = vec3(1.0, 2.0, 3.0)
    assert is_zero(cross(a, 2 * a))


def test_mat3_is_identity_and_fresh():
    a = mat3()
    b = mat3()
    assert np.allclose(a, np.eye(3))
    a[0, 0] = 5.0
    assert b[0, 0] == 1.0


def test_mat3_mul_applies_right_operand_first():
    rz = axis_angle_mat3(vec3(0, 0, 1), np.pi / 2)
    rx = axis_angle_mat3(vec3(1, 0, 0), np.pi / 2)
    v = vec3(1.0, 0.0, 0.0)
    composed = mat3_mul_vec3(mat3_mul(rx, rz), v)
    assert np.allclose(composed, mat3_mul_vec3(rx, mat3_mul_vec3(rz, v)))
    # x -> y under rz, then y -> z under rx
    assert np.allclose(composed, [0.0, 0.0, 1.0])


def test_axis_angle_is_rotation():
    r = axis_angle_mat3(normalize(vec3(1.0, 1.0, 1.0)), 0.7)
    assert is_rotation(r)
    assert not is_rotation(2 * r)
    assert not is_rotation(np.full((3, 3), np.nan))


def test_wrap_longitude_never_returns_minus_pi():
    assert wrap_longitude(np.pi + 1e-300) == pytest.approx(np.pi)
    assert -np.pi < wrap_longitude(-5 * np.pi) <= np.pi


@pytest.mark.parametrize("a, b, expected", [
    (2 * np.pi + 0.7, 0.0, 0.7),
    (-0.3, 0.0, 0.3),
    (4 * np.pi - 0.2, 0.1, 0.3),
])
def test_circular_difference_out_of_range_bearings(a, b, expected):
    diff = circular_difference(a, b)
    assert 0.0 <= diff <= np.pi
    assert np.isclose(diff, expected)
