import numpy as np
import pytest
from common.types import GeoCoord
from geospatial.vector_math import is_rotation, norm
from geospatial.sphere_math import (
    lat_lon_is_valid,
    lat_lon_to_vec3,
    vec3_to_lat_lon,
    antipode,
    haversine,
    calc_azimuth,
    build_roll_mat,
    transform_coord,
    haversine_batch,
    calc_azimuth_batch,
    transform_coord_batch,
    vec3_to_lat_lon_batch,
)


def random_coords(n=50, seed=1):
    rng = np.random.default_rng(seed)
    lats = rng.uniform(-1.5, 1.5, n)
    lons = rng.uniform(-np.pi, np.pi, n)
    return [GeoCoord(lat=lat, lon=lon) for lat, lon in zip(lats, lons)]


def test_invalid_coordinate_sentinel():
    bad = GeoCoord.invalid()
    assert not lat_lon_is_valid(bad)
    assert np.isnan(bad.lat) and np.isnan(bad.lon)
    assert lat_lon_is_valid(GeoCoord(0.0, 0.0))


def test_finite_latitude_out_of_range_raises():
    with pytest.raises(ValueError):
        GeoCoord(lat=45.0, lon=0.0)


def test_longitude_is_reduced():
    c = GeoCoord(lat=0.0, lon=2 * np.pi + 0.25)
    assert np.isclose(c.lon, 0.25)
    assert GeoCoord(lat=0.0, lon=-np.pi).lon == pytest.approx(np.pi)


def test_lat_lon_to_vec3_axes():
    assert np.allclose(lat_lon_to_vec3(GeoCoord(0.0, 0.0)), [1, 0, 0])
    assert np.allclose(lat_lon_to_vec3(GeoCoord(0.0, np.pi / 2)), [0, 1, 0])
    assert np.allclose(lat_lon_to_vec3(GeoCoord(np.pi / 2, 0.0)), [0, 0, 1])


def test_vectors_are_unit_length():
    for c in random_coords():
        assert np.isclose(norm(lat_lon_to_vec3(c)), 1.0)


def test_lat_lon_unit_vector_round_trip():
    for c in random_coords():
        back = vec3_to_lat_lon(lat_lon_to_vec3(c))
        assert np.isclose(back.lat, c.lat, atol=1e-9)
        assert np.isclose(back.lon, c.lon, atol=1e-9)


def test_pole_longitude_is_zero():
    north = vec3_to_lat_lon(np.array([0.0, 0.0, 1.0]))
    assert np.isclose(north.lat, np.pi / 2)
    assert north.lon == 0.0
    south = vec3_to_lat_lon(np.array([0.0, 0.0, -2.0]))
    assert np.isclose(south.lat, -np.pi / 2)


def test_zero_vector_is_invalid():
    assert not vec3_to_lat_lon(np.zeros(3)).is_valid


def test_haversine_identity_and_symmetry():
    coords = random_coords(20)
    for a in coords:
        assert haversine(a, a) == 0.0
        for b in coords:
            d = haversine(a, b)
            assert 0.0 <= d <= np.pi
            assert np.isclose(d, haversine(b, a))


def test_haversine_known_distances():
    origin = GeoCoord(0.0, 0.0)
    assert np.isclose(haversine(origin, GeoCoord(0.0, np.pi / 2)), np.pi / 2)
    assert np.isclose(haversine(origin, GeoCoord(np.pi / 2, 0.0)), np.pi / 2)
    for c in random_coords(10):
        assert np.isclose(haversine(c, antipode(c)), np.pi, atol=1e-7)


def test_haversine_invalid_is_nan():
    assert np.isnan(haversine(GeoCoord.invalid(), GeoCoord(0.0, 0.0)))


def test_calc_azimuth_cardinal_directions():
    origin = GeoCoord(0.0, 0.0)
    assert np.isclose(calc_azimuth(origin, GeoCoord(np.pi / 2, 0.0)), 0.0)
    assert np.isclose(calc_azimuth(origin, GeoCoord(0.0, np.pi / 2)), np.pi / 2)
    assert np.isclose(calc_azimuth(origin, GeoCoord(-0.5, 0.0)), np.pi)
    assert np.isclose(calc_azimuth(origin, GeoCoord(0.0, -np.pi / 2)), 3 * np.pi / 2)


def test_calc_azimuth_degenerate_cases_stay_in_range():
    pole = GeoCoord(np.pi / 2, 0.0)
    cases = [(pole, GeoCoord(0.3, 1.0)), (GeoCoord(0.2, 0.2), GeoCoord(0.2, 0.2))]
    for origin, target in cases:
        az = calc_azimuth(origin, target)
        assert np.isfinite(az)
        assert 0.0 <= az < 2 * np.pi


def test_build_roll_mat_same_point_is_identity():
    for p in random_coords(10):
        assert np.allclose(build_roll_mat(p, p), np.eye(3), atol=1e-9)


def test_build_roll_mat_antipode_falls_back_to_identity():
    for p in random_coords(10):
        m = build_roll_mat(p, antipode(p))
        assert np.all(np.isfinite(m))
        assert np.allclose(m, np.eye(3))


def test_build_roll_mat_carries_anchor_onto_target():
    coords = random_coords(10)
    for anchor, target in zip(coords, coords[1:]):
        m = build_roll_mat(target, anchor)
        assert is_rotation(m)
        assert np.allclose(m @ lat_lon_to_vec3(anchor), lat_lon_to_vec3(target), atol=1e-9)


def test_transform_coord():
    c = GeoCoord(0.4, -1.1)
    same = transform_coord(c, np.eye(3))
    assert np.isclose(same.lat, c.lat) and np.isclose(same.lon, c.lon)
    assert not transform_coord(GeoCoord.invalid(), np.eye(3)).is_valid
    target = GeoCoord(-0.2, 2.0)
    moved = transform_coord(c, build_roll_mat(target, c))
    assert haversine(moved, target) < 1e-9


def test_batch_measures_match_scalar():
    coords = random_coords(40, seed=11)
    lat = np.array([c.lat for c in coords])
    lon = np.array([c.lon for c in coords])
    anchor = GeoCoord(lat=0.3, lon=-1.2)
    distances = haversine_batch(lat, lon, anchor)
    bearings = calc_azimuth_batch(lat, lon, anchor)
    for c, d, b in zip(coords, distances, bearings):
        assert np.isclose(d, haversine(c, anchor))
        expected = calc_azimuth(c, anchor)
        assert 0.0 <= b < 2 * np.pi
        assert min(abs(b - expected), 2 * np.pi - abs(b - expected)) < 1e-9


def test_transform_batch_matches_scalar_and_keeps_invalid():
    world = build_roll_mat(GeoCoord(0.4, 0.9), GeoCoord(-0.2, 0.1))
    coords = random_coords(30, seed=5)
    lat = np.array([c.lat for c in coords] + [np.nan])
    lon = np.array([c.lon for c in coords] + [np.nan])
    out_lat, out_lon = transform_coord_batch(lat, lon, world)
    for c, la, lo in zip(coords, out_lat, out_lon):
        expected = transform_coord(c, world)
        assert np.isclose(la, expected.lat)
        assert abs(np.sin((lo - expected.lon) / 2)) < 1e-9
    assert np.isnan(out_lat[-1]) and np.isnan(out_lon[-1])


def test_vec3_batch_degenerate_vectors():
    lat, lon = vec3_to_lat_lon_batch(np.array([[0.0, 0.0, 0.0], [0.0, 0.0, 2.0]]))
    assert np.isnan(lat[0]) and np.isnan(lon[0])
    assert np.isclose(lat[1], np.pi / 2) and lon[1] == 0.0
