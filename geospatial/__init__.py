"""
Geospatial Module for the Line-of-Position Globe.

All sphere geometry in the system originates from this module:
- Angle, vector and matrix kernel
- Lat/lon <-> unit vector conversion, haversine distance, azimuth, rotations
- Equirectangular and orthographic projections
"""

from geospatial.vector_math import (
    wrap_longitude,
    wrap_azimuth,
    circular_difference,
    normalize,
    mat3,
    mat3_mul,
    mat3_mul_vec3,
    is_rotation,
)

from geospatial.sphere_math import (
    lat_lon_is_valid,
    lat_lon_to_vec3,
    vec3_to_lat_lon,
    antipode,
    haversine,
    calc_azimuth,
    build_roll_mat,
    transform_coord,
    transform_coord_batch,
    haversine_batch,
    calc_azimuth_batch,
)

from geospatial.projections import (
    ProjectionAdapter,
    Equirectangular,
    Orthographic,
    equirectangular,
    orthographic,
    get_projection,
)

__all__ = [
    # Kernel
    "wrap_longitude",
    "wrap_azimuth",
    "circular_difference",
    "normalize",
    "mat3",
    "mat3_mul",
    "mat3_mul_vec3",
    "is_rotation",
    # Sphere geometry
    "lat_lon_is_valid",
    "lat_lon_to_vec3",
    "vec3_to_lat_lon",
    "antipode",
    "haversine",
    "calc_azimuth",
    "build_roll_mat",
    "transform_coord",
    "transform_coord_batch",
    "haversine_batch",
    "calc_azimuth_batch",
    # Projections
    "ProjectionAdapter",
    "Equirectangular",
    "Orthographic",
    "equirectangular",
    "orthographic",
    "get_projection",
]
