"""
Consistency Checks for Projections and Sphere Geometry.

This module verifies that projection implementations honour the capability
contract the view controller and rasterizer rely on.

Check Categories
----------------
1. Round trip: to_lat_lon(to_normal(c)) ≈ c on the drawable domain
2. Off-domain totality: points with no coordinate yield Invalid, never raise
3. Reference agreement: normalized output matches PROJ (via pyproj) on a
   unit sphere
4. Rotation sanity: world matrices stay finite and orthonormal
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple
import numpy as np

from pyproj import CRS, Transformer

from common.constants import GeometryConstants
from common.logging_config import get_logger
from common.types import GeoCoord, Mat3
from geospatial.projections import ProjectionAdapter
from geospatial.sphere_math import haversine
from geospatial.vector_math import is_rotation

logger = get_logger(__name__)

# Geographic CRS on the same unit sphere as the projections
_UNIT_SPHERE_LONGLAT = "+proj=longlat +R=1 +no_defs"


@dataclass
class ValidationResult:
    """Result of a validation check.
    
    Attributes
    ----------
    test_name : str
        Name of the check.
    passed : bool
        Whether the check passed.
    message : str
        Description of result.
    details : dict
        Additional details.
    """
    test_name: str
    passed: bool
    message: str
    details: Dict[str, Any]


def sample_sphere(num_points: int = 200, seed: int = 0) -> List[GeoCoord]:
    """Uniformly distributed coordinates on the sphere, away from the poles."""
    rng = np.random.default_rng(seed)
    lats = np.arcsin(rng.uniform(-0.999, 0.999, num_points))
    lons = rng.uniform(-np.pi, np.pi, num_points)
    return [GeoCoord(lat=lat, lon=lon) for lat, lon in zip(lats, lons)]


class ProjectionContractChecker:
    """Checker for the projection capability contract.
    
    Parameters
    ----------
    tolerance : float
        Allowed angular round-trip error in radians.
    log_violations : bool
        Whether to log failed checks.
    """
    
    def __init__(
        self,
        tolerance: float = GeometryConstants.ROUND_TRIP_TOLERANCE.value,
        log_violations: bool = True
    ):
        self.tolerance = tolerance
        self.log_violations = log_violations
        self._logger = get_logger("ProjectionContractChecker")
    
    def _report(self, result: ValidationResult) -> ValidationResult:
        if not result.passed and self.log_violations:
            self._logger.warning(f"{result.test_name} | FAIL | {result.message}")
        return result
    
    def check_all(
        self,
        projection: ProjectionAdapter,
        coords: Sequence[GeoCoord]
    ) -> List[ValidationResult]:
        """Run every projection check on a set of sample coordinates."""
        return [
            self.check_round_trip(projection, coords),
            self.check_off_domain(projection, [(-0.5, 0.5), (0.5, 1.5), (np.nan, 0.5), (0.0, 0.0)]),
            self.check_against_pyproj(projection, coords),
        ]
    
    def check_round_trip(
        self,
        projection: ProjectionAdapter,
        coords: Sequence[GeoCoord]
    ) -> ValidationResult:
        """Check to_lat_lon(to_normal(c)) ≈ c for every drawable `c`."""
        errors = []
        for coord in coords:
            if not projection.contains(coord):
                continue
            back = projection.to_lat_lon(*projection.to_normal(coord))
            errors.append(haversine(coord, back) if back.is_valid else np.inf)
        
        errors = np.asarray(errors)
        num_violations = int(np.sum(~(errors <= self.tolerance)))
        max_error = float(np.max(errors)) if errors.size else 0.0
        
        return self._report(ValidationResult(
            test_name=f"{projection.name}_round_trip",
            passed=num_violations == 0,
            message=f"Round trip check: {num_violations} of {errors.size} beyond tolerance",
            details={
                'num_checked': int(errors.size),
                'num_violations': num_violations,
                'max_error_rad': max_error,
                'tolerance_rad': self.tolerance,
            }
        ))
    
    def check_off_domain(
        self,
        projection: ProjectionAdapter,
        points: Sequence[Tuple[float, float]]
    ) -> ValidationResult:
        """Check that off-domain surface points map to Invalid without raising.
        
        Points that are inside the projection's domain (e.g. within the
        orthographic disk) are skipped by the caller's choice of samples; a
        valid result for any listed point counts as a violation.
        """
        offending = []
        raised = []
        for x, y in points:
            try:
                coord = projection.to_lat_lon(x, y)
            except Exception as e:  # contract violation, reported not raised
                raised.append(((x, y), repr(e)))
                continue
            if coord.is_valid and not self._inside_surface(projection, x, y):
                offending.append((x, y))
        
        passed = not offending and not raised
        return self._report(ValidationResult(
            test_name=f"{projection.name}_off_domain",
            passed=passed,
            message=(
                f"Off-domain check: {len(offending)} points gave a coordinate, "
                f"{len(raised)} raised"
            ),
            details={'offending': offending, 'raised': raised}
        ))
    
    @staticmethod
    def _inside_surface(projection: ProjectionAdapter, x: float, y: float) -> bool:
        if projection.name == "orthographic":
            return (2 * x - 1)**2 + (2 * y - 1)**2 <= 1.0
        # Equirectangular longitudes wrap; only latitude bounds the domain
        return 0.0 <= y <= 1.0
    
    def check_against_pyproj(
        self,
        projection: ProjectionAdapter,
        coords: Sequence[GeoCoord],
        atol: float = 1e-8
    ) -> ValidationResult:
        """Compare `to_normal` with PROJ's forward projection on a unit sphere."""
        visible = [c for c in coords if projection.contains(c)]
        if not visible:
            return ValidationResult(
                test_name=f"{projection.name}_pyproj",
                passed=True,
                message="No drawable coordinates to compare",
                details={'num_checked': 0}
            )
        
        transformer = Transformer.from_crs(
            CRS.from_proj4(_UNIT_SPHERE_LONGLAT),
            CRS.from_proj4(projection.proj4_string),
            always_xy=True
        )
        lons = np.degrees([c.lon for c in visible])
        lats = np.degrees([c.lat for c in visible])
        px, py = transformer.transform(lons, lats)
        
        (x_min, x_max), (y_min, y_max) = projection.extent
        expected = np.column_stack([
            (np.asarray(px) - x_min) / (x_max - x_min),
            (np.asarray(py) - y_min) / (y_max - y_min),
        ])
        actual = np.array([projection.to_normal(c) for c in visible])
        
        deviation = np.abs(actual - expected)
        max_dev = float(np.nanmax(deviation))
        passed = bool(np.all(deviation <= atol))
        
        return self._report(ValidationResult(
            test_name=f"{projection.name}_pyproj",
            passed=passed,
            message=f"PROJ agreement check: max deviation {max_dev:.3e}",
            details={
                'num_checked': len(visible),
                'max_deviation': max_dev,
                'atol': atol,
            }
        ))


def check_world_matrix(world: Mat3) -> ValidationResult:
    """Check that a world orientation is still a finite proper rotation."""
    passed = is_rotation(world)
    result = ValidationResult(
        test_name="world_orientation",
        passed=passed,
        message="World matrix is a rotation" if passed else "World matrix is not a rotation",
        details={'det': float(np.linalg.det(world)) if np.all(np.isfinite(world)) else float('nan')}
    )
    if not passed:
        logger.warning(f"world_orientation | FAIL | {result.message}")
    return result
