"""
Spherical Geometry on the Unit Sphere.

This module converts between geographic coordinates and unit vectors and
provides the great-circle measures used to score lines of position:
haversine distance, initial bearing, and the rotation that carries one point
of the sphere onto another (used to turn the globe under a drag gesture).

Axis Convention
---------------
- x = cos φ cos λ   (lat 0, lon 0)
- y = cos φ sin λ   (lat 0, lon 90°E)
- z = sin φ         (north pole)

Degenerate Cases
----------------
- At the poles `vec3_to_lat_lon` returns longitude 0.
- `calc_azimuth` from a pole, or between equal points, returns some value in
  [0, 2π) without raising.
- `build_roll_mat` between equal or antipodal points returns the identity.
- Invalid coordinates propagate through `transform_coord` unchanged.

References
----------
- Sinnott, R.W. (1984). Virtues of the Haversine. Sky and Telescope, 68(2), 159.
- Snyder, J.P. (1987). Map Projections - A Working Manual, §5.
"""

from typing import Tuple
import numpy as np
from numpy.typing import NDArray

from common.constants import GeometryConstants
from common.logging_config import get_logger
from common.types import GeoCoord, Vec3, Mat3
from geospatial.vector_math import (
    cross,
    dot,
    normalize,
    is_zero,
    mat3,
    mat3_mul_vec3,
    axis_angle_mat3,
    wrap_azimuth,
    wrap_azimuth_batch,
    wrap_longitude_batch,
)

logger = get_logger(__name__)


def lat_lon_is_valid(coord: GeoCoord) -> bool:
    """Check that a coordinate is not the Invalid sentinel."""
    return coord.is_valid


def lat_lon_to_vec3(coord: GeoCoord) -> Vec3:
    """Convert a geographic coordinate to a unit vector.
    
    Parameters
    ----------
    coord : GeoCoord
        Coordinate in radians. An Invalid coordinate yields a NaN vector.
        
    Returns
    -------
    ndarray
        Unit vector (3,) on the sphere.
    """
    cos_lat = np.cos(coord.lat)
    return np.array([
        cos_lat * np.cos(coord.lon),
        cos_lat * np.sin(coord.lon),
        np.sin(coord.lat),
    ], dtype=np.float64)


def vec3_to_lat_lon(v: Vec3) -> GeoCoord:
    """Convert a vector to the geographic coordinate it points at.
    
    The vector does not need to be unit length. A zero or non-finite vector
    has no direction and maps to the Invalid coordinate.
    
    Notes
    -----
    Latitude comes from the z component over the full length (clipped into
    [-1, 1] before `arcsin`); longitude from `arctan2(y, x)`, which is 0 at
    the poles where x = y = 0.
    """
    length = np.linalg.norm(v)
    if not np.isfinite(length) or length == 0.0:
        return GeoCoord.invalid()
    x, y, z = v
    lat = np.arcsin(np.clip(z / length, -1.0, 1.0))
    lon = np.arctan2(y, x) if (x != 0.0 or y != 0.0) else 0.0
    return GeoCoord(lat=lat, lon=lon)


def antipode(coord: GeoCoord) -> GeoCoord:
    """Return the point diametrically opposite `coord`."""
    if not coord.is_valid:
        return GeoCoord.invalid()
    return GeoCoord(lat=-coord.lat, lon=coord.lon + np.pi)


def haversine(a: GeoCoord, b: GeoCoord) -> float:
    """Great-circle angular distance between two coordinates.
    
    Parameters
    ----------
    a, b : GeoCoord
        End points in radians.
        
    Returns
    -------
    float
        Central angle in radians, in [0, π]. NaN if either point is Invalid.
        
    Notes
    -----
    hav(θ) = sin²(Δφ/2) + cos φ₁ cos φ₂ sin²(Δλ/2), θ = 2·atan2(√h, √(1-h)).
    The atan2 form stays accurate both for tiny separations and near
    antipodes, where an arccos of the dot product loses precision.
    """
    dlat = b.lat - a.lat
    dlon = b.lon - a.lon
    h = np.sin(dlat / 2)**2 + np.cos(a.lat) * np.cos(b.lat) * np.sin(dlon / 2)**2
    h = np.clip(h, 0.0, 1.0)
    return float(2 * np.arctan2(np.sqrt(h), np.sqrt(1 - h)))


def calc_azimuth(origin: GeoCoord, target: GeoCoord) -> float:
    """Initial great-circle bearing from `origin` toward `target`.
    
    Parameters
    ----------
    origin, target : GeoCoord
        Coordinates in radians.
        
    Returns
    -------
    float
        Bearing in radians, clockwise from north, in [0, 2π).
        
    Notes
    -----
    θ = atan2(sin Δλ cos φ₂, cos φ₁ sin φ₂ − sin φ₁ cos φ₂ cos Δλ).
    From a pole, or between identical points, the bearing is not unique;
    atan2 still returns a finite angle which is reported as is.
    """
    dlon = target.lon - origin.lon
    y = np.sin(dlon) * np.cos(target.lat)
    x = (
        np.cos(origin.lat) * np.sin(target.lat)
        - np.sin(origin.lat) * np.cos(target.lat) * np.cos(dlon)
    )
    return wrap_azimuth(float(np.arctan2(y, x)))


def build_roll_mat(target: GeoCoord, anchor: GeoCoord) -> Mat3:
    """Rotation carrying the unit vector of `anchor` onto that of `target`.
    
    The rotation turns about ``anchor × target`` by the angle between the two
    vectors, so ``build_roll_mat(t, a) @ lat_lon_to_vec3(a)`` equals
    ``lat_lon_to_vec3(t)``.
    
    Parameters
    ----------
    target : GeoCoord
        Where the anchor point should end up.
    anchor : GeoCoord
        The point being moved.
        
    Returns
    -------
    ndarray
        (3, 3) rotation matrix. The identity when the points coincide, are
        antipodal (rotation direction is ambiguous) or either one is Invalid.
    """
    if not (target.is_valid and anchor.is_valid):
        return mat3()
    a = lat_lon_to_vec3(anchor)
    t = lat_lon_to_vec3(target)
    axis = normalize(cross(a, t), eps=GeometryConstants.DEGENERATE_AXIS_EPS.value)
    if is_zero(axis):
        logger.debug("Rotation axis undefined (equal or antipodal points), using identity")
        return mat3()
    angle = np.arccos(np.clip(dot(a, t), -1.0, 1.0))
    return axis_angle_mat3(axis, angle)


def transform_coord(coord: GeoCoord, world: Mat3) -> GeoCoord:
    """Apply a world-orientation matrix to a coordinate.
    
    Invalid in, Invalid out.
    """
    if not coord.is_valid:
        return GeoCoord.invalid()
    return vec3_to_lat_lon(mat3_mul_vec3(world, lat_lon_to_vec3(coord)))


# =============================================================================
# Batch versions (arrays of latitudes and longitudes, NaN marks Invalid)
# =============================================================================

def lat_lon_to_vec3_batch(lat: NDArray, lon: NDArray) -> NDArray:
    """Vectorized `lat_lon_to_vec3`; returns an array of shape (..., 3)."""
    lat = np.asarray(lat, dtype=np.float64)
    lon = np.asarray(lon, dtype=np.float64)
    cos_lat = np.cos(lat)
    return np.stack([cos_lat * np.cos(lon), cos_lat * np.sin(lon), np.sin(lat)], axis=-1)


def vec3_to_lat_lon_batch(v: NDArray) -> Tuple[NDArray, NDArray]:
    """Vectorized `vec3_to_lat_lon` over the last axis of `v`.
    
    Returns
    -------
    Tuple[ndarray, ndarray]
        (lat, lon) in radians, NaN where the vector has no direction.
    """
    v = np.asarray(v, dtype=np.float64)
    length = np.linalg.norm(v, axis=-1)
    valid = np.isfinite(length) & (length > 0.0)
    x, y, z = v[..., 0], v[..., 1], v[..., 2]
    with np.errstate(invalid='ignore', divide='ignore'):
        lat = np.arcsin(np.clip(z / np.where(valid, length, 1.0), -1.0, 1.0))
        lon = np.where((x != 0.0) | (y != 0.0), np.arctan2(y, x), 0.0)
    lon = wrap_longitude_batch(lon)
    return np.where(valid, lat, np.nan), np.where(valid, lon, np.nan)


def transform_coord_batch(
    lat: NDArray, lon: NDArray, world: Mat3
) -> Tuple[NDArray, NDArray]:
    """Vectorized `transform_coord`; NaN in, NaN out."""
    vectors = lat_lon_to_vec3_batch(lat, lon)
    return vec3_to_lat_lon_batch(vectors @ np.asarray(world).T)


def haversine_batch(lat: NDArray, lon: NDArray, anchor: GeoCoord) -> NDArray:
    """Great-circle distance from each (lat, lon) to a single `anchor`."""
    lat = np.asarray(lat, dtype=np.float64)
    dlat = anchor.lat - lat
    dlon = anchor.lon - np.asarray(lon, dtype=np.float64)
    h = np.sin(dlat / 2)**2 + np.cos(lat) * np.cos(anchor.lat) * np.sin(dlon / 2)**2
    h = np.clip(h, 0.0, 1.0)
    return 2 * np.arctan2(np.sqrt(h), np.sqrt(1 - h))


def calc_azimuth_batch(lat: NDArray, lon: NDArray, target: GeoCoord) -> NDArray:
    """Initial bearing from each (lat, lon) toward a single `target`, in [0, 2π)."""
    lat = np.asarray(lat, dtype=np.float64)
    dlon = target.lon - np.asarray(lon, dtype=np.float64)
    y = np.sin(dlon) * np.cos(target.lat)
    x = np.cos(lat) * np.sin(target.lat) - np.sin(lat) * np.cos(target.lat) * np.cos(dlon)
    return wrap_azimuth_batch(np.arctan2(y, x))
