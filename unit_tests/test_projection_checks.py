import numpy as np
from common.types import GeoCoord
from geospatial.projections import Orthographic, equirectangular, orthographic
from geospatial.sphere_math import build_roll_mat
from validation.projection_checks import (
    ProjectionContractChecker,
    check_world_matrix,
    sample_sphere,
)


def test_sample_sphere_is_reproducible():
    a = sample_sphere(10, seed=4)
    b = sample_sphere(10, seed=4)
    assert [(c.lat, c.lon) for c in a] == [(c.lat, c.lon) for c in b]


def test_equirectangular_passes_contract():
    checker = ProjectionContractChecker()
    results = checker.check_all(equirectangular, sample_sphere(100))
    assert all(r.passed for r in results), [r.message for r in results]


def test_orthographic_passes_contract():
    checker = ProjectionContractChecker(tolerance=1e-7)
    results = checker.check_all(orthographic, sample_sphere(100))
    assert all(r.passed for r in results), [r.message for r in results]


def test_off_domain_check_reports_raising_projection():
    class Fragile(Orthographic):
        def to_lat_lon(self, x, y):
            raise ZeroDivisionError("boom")

    result = ProjectionContractChecker(log_violations=False).check_off_domain(Fragile(), [(2.0, 2.0)])
    assert not result.passed
    assert len(result.details['raised']) == 1


def test_pyproj_check_with_no_visible_points():
    result = ProjectionContractChecker().check_against_pyproj(orthographic, [GeoCoord.invalid()])
    assert result.passed
    assert result.details['num_checked'] == 0


def test_world_matrix_check():
    assert check_world_matrix(np.eye(3)).passed
    roll = build_roll_mat(GeoCoord(0.3, 0.2), GeoCoord(-0.4, 1.0))
    assert check_world_matrix(roll).passed
    assert not check_world_matrix(np.full((3, 3), np.nan)).passed
