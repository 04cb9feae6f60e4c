"""
Map Projections onto a Normalized Surface.

This module maps geographic coordinates to a normalized 2-D surface and back.
The surface is the unit square: `x` grows eastward (to the right) and `y`
grows upward, so `y = 0` is the bottom edge and `y = 1` the top edge. A
rasterizer scales the square to its canvas using the projection's `ratio`
(width / height).

Projections
-----------
- Equirectangular: longitude and latitude map linearly onto x and y over the
  whole sphere (ratio 2).
- Orthographic: the hemisphere facing a viewer on the +x axis, seen from
  infinitely far away, drawn on the disk inscribed in the square (ratio 1).

Contract
--------
For every coordinate `c` the projection can show,
``to_lat_lon(*to_normal(c)) ≈ c``. Points of the surface that do not
correspond to any coordinate yield the Invalid coordinate; no method raises
for off-domain input.

References
----------
- Snyder, J.P. (1987). Map Projections - A Working Manual. USGS Prof. Paper 1395,
  §12 (Equidistant Cylindrical) and §20 (Orthographic).
"""

from abc import ABC, abstractmethod
from typing import Dict, Tuple, Type
import numpy as np
from numpy.typing import NDArray

from common.constants import D90, D180, D360
from common.types import GeoCoord
from geospatial.sphere_math import lat_lon_to_vec3, vec3_to_lat_lon, vec3_to_lat_lon_batch
from geospatial.vector_math import wrap_longitude_batch


class ProjectionAdapter(ABC):
    """Abstract base class for projections onto the normalized surface.
    
    All projections in this system must implement this interface so the
    view controller and the rasterizer can switch between them freely.
    """
    
    @property
    @abstractmethod
    def name(self) -> str:
        """Registry name of the projection."""
        pass
    
    @property
    @abstractmethod
    def ratio(self) -> float:
        """Aspect ratio (width / height) of the output surface."""
        pass
    
    @property
    @abstractmethod
    def proj4_string(self) -> str:
        """Equivalent PROJ definition on a unit sphere."""
        pass
    
    @property
    @abstractmethod
    def extent(self) -> Tuple[Tuple[float, float], Tuple[float, float]]:
        """((x_min, x_max), (y_min, y_max)) of `proj4_string` output mapped onto the unit square."""
        pass
    
    @abstractmethod
    def to_normal(self, coord: GeoCoord) -> Tuple[float, float]:
        """Transform a geographic coordinate to the normalized surface.
        
        Parameters
        ----------
        coord : GeoCoord
            Coordinate in radians.
            
        Returns
        -------
        Tuple[float, float]
            (x, y) in the unit square (NaN for an Invalid coordinate).
        """
        pass
    
    @abstractmethod
    def to_lat_lon(self, x: float, y: float) -> GeoCoord:
        """Transform a normalized surface point to a geographic coordinate.
        
        Parameters
        ----------
        x, y : float
            Normalized surface coordinates.
            
        Returns
        -------
        GeoCoord
            The coordinate, or the Invalid coordinate if no point of the
            sphere projects to (x, y).
        """
        pass
    
    @abstractmethod
    def to_lat_lon_batch(self, x: NDArray, y: NDArray) -> Tuple[NDArray, NDArray]:
        """Vectorized `to_lat_lon`.
        
        Returns
        -------
        Tuple[ndarray, ndarray]
            (lat, lon) arrays in radians, NaN where `to_lat_lon` would give
            the Invalid coordinate.
        """
        pass
    
    @abstractmethod
    def contains(self, coord: GeoCoord) -> bool:
        """Whether `coord` is drawn by this projection."""
        pass


class Equirectangular(ProjectionAdapter):
    """Equirectangular (plate carrée) projection of the whole sphere.
    
    Longitude -π..π maps to x 0..1, latitude -π/2..π/2 maps to y 0..1
    (south pole on the bottom edge). This is also the layout of the
    background map image.
    """
    
    @property
    def name(self) -> str:
        return "equirectangular"
    
    @property
    def ratio(self) -> float:
        return 2.0
    
    @property
    def proj4_string(self) -> str:
        return "+proj=eqc +lat_ts=0 +lat_0=0 +lon_0=0 +R=1 +units=m +no_defs"
    
    @property
    def extent(self) -> Tuple[Tuple[float, float], Tuple[float, float]]:
        return (-D180, D180), (-D90, D90)
    
    def to_normal(self, coord: GeoCoord) -> Tuple[float, float]:
        x = (coord.lon + D180) / D360
        y = (coord.lat + D90) / D180
        return float(x), float(y)
    
    def to_lat_lon(self, x: float, y: float) -> GeoCoord:
        if not (np.isfinite(x) and 0.0 <= y <= 1.0):
            return GeoCoord.invalid()
        # Longitude wraps past the left/right edges
        return GeoCoord(lat=y * D180 - D90, lon=x * D360 - D180)
    
    def to_lat_lon_batch(self, x: NDArray, y: NDArray) -> Tuple[NDArray, NDArray]:
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)
        valid = np.isfinite(x) & (y >= 0.0) & (y <= 1.0)
        lat = np.where(valid, y * D180 - D90, np.nan)
        lon = np.where(valid, wrap_longitude_batch(x * D360 - D180), np.nan)
        return lat, lon
    
    def contains(self, coord: GeoCoord) -> bool:
        return coord.is_valid


class Orthographic(ProjectionAdapter):
    """Orthographic view of the hemisphere centred on lat 0, lon 0.
    
    The viewer looks down the -x axis from +x; east (+y) is to the right
    and north (+z) is up. The disk of radius 1 is rescaled into the unit
    square, so the centre of the square is the point facing the viewer.
    
    Notes
    -----
    `to_lat_lon` is the side that enforces "front hemisphere only": it
    rejects points outside the disk and always reconstructs the near root of
    the depth. `to_normal` is total and also places far-hemisphere points on
    the disk (where they coincide with their front mirror image); use
    `contains` to test visibility.
    """
    
    @property
    def name(self) -> str:
        return "orthographic"
    
    @property
    def ratio(self) -> float:
        return 1.0
    
    @property
    def proj4_string(self) -> str:
        return "+proj=ortho +lat_0=0 +lon_0=0 +R=1 +units=m +no_defs"
    
    @property
    def extent(self) -> Tuple[Tuple[float, float], Tuple[float, float]]:
        return (-1.0, 1.0), (-1.0, 1.0)
    
    def to_normal(self, coord: GeoCoord) -> Tuple[float, float]:
        _, east, north = lat_lon_to_vec3(coord)
        return float((east + 1) / 2), float((north + 1) / 2)
    
    def to_lat_lon(self, x: float, y: float) -> GeoCoord:
        dx = 2 * x - 1
        dy = 2 * y - 1
        r2 = dx * dx + dy * dy
        if not np.isfinite(r2) or r2 > 1.0:
            return GeoCoord.invalid()
        depth = np.sqrt(max(0.0, 1.0 - r2))
        return vec3_to_lat_lon(np.array([depth, dx, dy], dtype=np.float64))
    
    def to_lat_lon_batch(self, x: NDArray, y: NDArray) -> Tuple[NDArray, NDArray]:
        dx = 2 * np.asarray(x, dtype=np.float64) - 1
        dy = 2 * np.asarray(y, dtype=np.float64) - 1
        r2 = dx * dx + dy * dy
        valid = np.isfinite(r2) & (r2 <= 1.0)
        depth = np.sqrt(np.clip(1.0 - r2, 0.0, None))
        lat, lon = vec3_to_lat_lon_batch(np.stack([depth, dx, dy], axis=-1))
        return np.where(valid, lat, np.nan), np.where(valid, lon, np.nan)
    
    def contains(self, coord: GeoCoord) -> bool:
        if not coord.is_valid:
            return False
        return bool(lat_lon_to_vec3(coord)[0] >= 0.0)


_PROJECTIONS: Dict[str, Type[ProjectionAdapter]] = {
    "equirectangular": Equirectangular,
    "orthographic": Orthographic,
}

# Shared instances; projections are stateless
equirectangular = Equirectangular()
orthographic = Orthographic()


def get_projection(name: str) -> ProjectionAdapter:
    """Look up a projection by registry name.
    
    Raises
    ------
    ValueError
        If no projection has that name.
    """
    try:
        return _PROJECTIONS[name.lower()]()
    except KeyError:
        raise ValueError(
            f"Unknown projection '{name}'. "
            f"Available: {', '.join(sorted(_PROJECTIONS))}"
        ) from None
