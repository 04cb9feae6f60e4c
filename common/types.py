"""
Shared Value Types for the Line-of-Position Globe.

This module defines the coordinate type and the array aliases that flow
between the geometry kernel, the projections and the scoring engine.

Design Rationale
----------------
A point with no geographic meaning (outside the orthographic disk, beyond
the edge of the map) is represented by an *Invalid* coordinate whose
components are NaN, not by an exception. The sentinel travels through the
ordinary data path until a boundary paints it as background, which keeps
every per-point computation a total function.
"""

from dataclasses import dataclass
from typing import Tuple, Union, Callable
import numpy as np
from numpy.typing import NDArray


@dataclass
class GeoCoord:
    """A geographic coordinate on the unit sphere.
    
    Attributes
    ----------
    lat : float
        Latitude in RADIANS (not degrees). Range: [-π/2, π/2].
    lon : float
        Longitude in RADIANS, positive east. Any real value is accepted and
        reduced into (-π, π].
        
    Notes
    -----
    - `GeoCoord.invalid()` builds the sentinel; test with `is_valid`.
    - A finite latitude outside [-π/2, π/2] is a programming error and
      raises, NaN components never do.
    
    Examples
    --------
    >>> coord = GeoCoord.from_degrees(45.3876, -12.5117)
    >>> lat_deg, lon_deg = coord.to_degrees()
    >>> print(f"{lat_deg:.4f}°N, {abs(lon_deg):.4f}°W")
    45.3876°N, 12.5117°W
    """
    lat: float  # radians
    lon: float  # radians
    
    def __post_init__(self):
        """Validate latitude and reduce longitude."""
        if np.isfinite(self.lat) and not -np.pi/2 <= self.lat <= np.pi/2:
            raise ValueError(
                f"Latitude {self.lat} rad out of range [-π/2, π/2]. "
                f"Did you pass degrees instead of radians?"
            )
        if np.isfinite(self.lon):
            from geospatial.vector_math import wrap_longitude
            self.lon = wrap_longitude(self.lon)
        self.lat = float(self.lat)
        self.lon = float(self.lon)
    
    @classmethod
    def invalid(cls) -> 'GeoCoord':
        """Return the sentinel for "no coordinate corresponds to this point"."""
        return cls(lat=np.nan, lon=np.nan)
    
    @property
    def is_valid(self) -> bool:
        """False for the Invalid sentinel or any non-finite component."""
        return bool(np.isfinite(self.lat) and np.isfinite(self.lon))
    
    def to_degrees(self) -> Tuple[float, float]:
        """Convert to degrees for display.
        
        Returns
        -------
        Tuple[float, float]
            (latitude_degrees, longitude_degrees)
        """
        return float(np.degrees(self.lat)), float(np.degrees(self.lon))
    
    @classmethod
    def from_degrees(cls, lat_deg: float, lon_deg: float) -> 'GeoCoord':
        """Create coordinate from degrees (convenience constructor)."""
        return cls(lat=np.radians(lat_deg), lon=np.radians(lon_deg))


# Type aliases for array types
Vec3 = NDArray[np.float64]  # Shape: (3,), unit vector for valid coordinates
Mat3 = NDArray[np.float64]  # Shape: (3, 3), orthonormal rotation

# Any CSS-style color string understood by matplotlib ("#07f", "white", ...)
Color = str

# Caller-supplied background: a fixed color or a lazy per-coordinate lookup
Background = Union[Color, Callable[[GeoCoord], Color]]
