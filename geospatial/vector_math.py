"""
Angle, Vector and Matrix Kernel.

Pure value operations on radian angles, 3-vectors and 3x3 matrices. Vectors
and matrices are numpy float64 arrays of shape (3,) and (3, 3) and follow the
column-vector convention: a matrix `M` applies to a vector `v` as ``M @ v``,
and ``A @ B`` applies `B` first.

Degenerate Inputs
-----------------
Nothing in this module raises on degenerate geometry. `normalize` of a
zero-length vector returns the zero vector, and callers treat a zero result
as "no direction" (see `geospatial.sphere_math.build_roll_mat`).
"""

import numpy as np
from numpy.typing import NDArray

from common.constants import D180, D360, GeometryConstants
from common.types import Vec3, Mat3


# =============================================================================
# Angles
# =============================================================================

def wrap_longitude(lon: float) -> float:
    """Reduce a longitude into (-π, π]."""
    wrapped = float(-((-lon + D180) % D360) + D180)
    return D180 if wrapped <= -D180 else wrapped


def wrap_azimuth(azimuth: float) -> float:
    """Reduce an azimuth into [0, 2π)."""
    wrapped = float(azimuth % D360)
    # Float modulo of a tiny negative value can land exactly on 2π
    return 0.0 if wrapped >= D360 else wrapped


def circular_difference(a: float, b: float) -> float:
    """Absolute difference of two bearings, folded so it never exceeds π.
    
    The raw difference is reduced into [0, 2π) first, so bearings outside
    [0, 2π) still give a result in [0, π]. Anything beyond π is measured
    the other way round.

    Examples
    --------
    >>> round(circular_difference(0.1, 2 * np.pi - 0.1), 12)
    0.2
    """
    raw = wrap_azimuth(abs(a - b))
    if raw > D180:
        raw = D360 - raw
    return float(raw)


def wrap_longitude_batch(lon: NDArray) -> NDArray:
    """Vectorized `wrap_longitude`; NaN entries stay NaN."""
    with np.errstate(invalid='ignore'):
        wrapped = -np.mod(-np.asarray(lon, dtype=np.float64) + D180, D360) + D180
    return np.where(wrapped <= -D180, D180, wrapped)


def wrap_azimuth_batch(azimuth: NDArray) -> NDArray:
    """Vectorized `wrap_azimuth`; NaN entries stay NaN."""
    with np.errstate(invalid='ignore'):
        wrapped = np.mod(np.asarray(azimuth, dtype=np.float64), D360)
    return np.where(wrapped >= D360, 0.0, wrapped)


def circular_difference_batch(a: NDArray, b: NDArray) -> NDArray:
    """Vectorized `circular_difference`."""
    raw = wrap_azimuth_batch(np.abs(np.asarray(a) - np.asarray(b)))
    return np.where(raw > D180, D360 - raw, raw)


# =============================================================================
# Vectors
# =============================================================================

def vec3(x: float = 0.0, y: float = 0.0, z: float = 0.0) -> Vec3:
    return np.array([x, y, z], dtype=np.float64)


def dot(a: Vec3, b: Vec3) -> float:
    return float(np.dot(a, b))


def cross(a: Vec3, b: Vec3) -> Vec3:
    return np.cross(a, b)


def norm(v: Vec3) -> float:
    return float(np.linalg.norm(v))


def normalize(v: Vec3, eps: float = 0.0) -> Vec3:
    """Scale `v` to unit length.
    
    Parameters
    ----------
    v : ndarray
        Input vector.
    eps : float
        Magnitudes at or below this value count as zero length.
        
    Returns
    -------
    ndarray
        The unit vector along `v`, or the zero vector when `v` has no
        usable direction.
    """
    length = norm(v)
    if length <= eps or not np.isfinite(length):
        return np.zeros(3, dtype=np.float64)
    return np.asarray(v, dtype=np.float64) / length


def is_zero(v: Vec3) -> bool:
    return not np.any(v)


# =============================================================================
# Matrices
# =============================================================================

def mat3() -> Mat3:
    """Return a fresh 3x3 identity matrix."""
    return np.eye(3, dtype=np.float64)


def mat3_mul_vec3(m: Mat3, v: Vec3) -> Vec3:
    return m @ v


def mat3_mul(a: Mat3, b: Mat3) -> Mat3:
    """Compose two matrices; the result applies `b` first, then `a`."""
    return a @ b


def axis_angle_mat3(axis: Vec3, angle: float) -> Mat3:
    """Rotation matrix about a unit `axis` by `angle` (right-hand rule).
    
    Uses Rodrigues' formula: R = I + sin θ K + (1 - cos θ) K²,
    where K is the cross-product matrix of the axis.
    """
    x, y, z = axis
    k = np.array([
        [0.0, -z, y],
        [z, 0.0, -x],
        [-y, x, 0.0],
    ])
    return np.eye(3) + np.sin(angle) * k + (1.0 - np.cos(angle)) * (k @ k)


def is_rotation(
    m: Mat3,
    tol: float = GeometryConstants.ORTHONORMAL_TOLERANCE.value
) -> bool:
    """Check that `m` is a finite proper rotation (orthonormal, det = +1)."""
    if m.shape != (3, 3) or not np.all(np.isfinite(m)):
        return False
    orthonormal = np.allclose(m @ m.T, np.eye(3), atol=tol)
    return bool(orthonormal and abs(np.linalg.det(m) - 1.0) < tol)
