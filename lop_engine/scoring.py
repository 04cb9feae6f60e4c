"""
LOP Scoring Engine.

For a candidate coordinate this module measures how far the point is from
each line of position and decides the color shown there.

Compositing Rules
-----------------
1. Off-globe (Invalid) coordinates get `OFF_GLOBE_COLOR`.
2. Every LOP contributes its squared error to a running sum. An LOP whose
   error is within its tolerance paints the point; a later matching LOP
   overrides an earlier one.
3. If the min-err rule is enabled and the RMS error over all LOPs is below
   its tolerance, its color wins over any LOP band.
4. Otherwise the matched LOP color, else the caller's background.

Every function here is pure: results depend only on the arguments, so a
rasterizer may evaluate points in any order or in parallel. `evaluate_batch`
applies the same rules to whole numpy arrays of coordinates.
"""

from dataclasses import dataclass
from typing import Optional, Sequence
import numpy as np
from numpy.typing import NDArray

from common.constants import RenderDefaults
from common.types import GeoCoord, Color, Background
from geospatial.sphere_math import (
    haversine,
    calc_azimuth,
    haversine_batch,
    calc_azimuth_batch,
)
from geospatial.vector_math import circular_difference, circular_difference_batch
from lop_engine.models import RangeLOP, AzimuthLOP, LineOfPosition, MinErrConfig

OFF_GLOBE_COLOR: Color = RenderDefaults.OFF_GLOBE_COLOR


@dataclass
class ScoreResult:
    """Accumulated errors of one coordinate against an LOP sequence.
    
    Attributes
    ----------
    sum_squared_error : float
        Sum of squared per-LOP errors (radians²).
    count : int
        Number of LOPs scored.
    matched_color : str, optional
        Color of the last LOP whose band contains the point.
    """
    sum_squared_error: float = 0.0
    count: int = 0
    matched_color: Optional[Color] = None
    
    @property
    def rms(self) -> float:
        """Root-mean-square error in radians; NaN when no LOP was scored."""
        if self.count == 0:
            return float('nan')
        return float(np.sqrt(self.sum_squared_error / self.count))


def lop_error(coord: GeoCoord, lop: LineOfPosition) -> float:
    """Angular distance of `coord` from an LOP, in radians.
    
    - Range LOP: |radius - haversine(coord, anchor)|.
    - Azimuth LOP: difference between the LOP bearing and the bearing from
      `coord` to the anchor, folded into [0, π].
    """
    if isinstance(lop, RangeLOP):
        return abs(lop.radius - haversine(coord, lop.anchor))
    if isinstance(lop, AzimuthLOP):
        return circular_difference(lop.bearing, calc_azimuth(coord, lop.anchor))
    raise TypeError(f"Unsupported line of position: {type(lop).__name__}")


def score(coord: GeoCoord, lops: Sequence[LineOfPosition]) -> ScoreResult:
    """Score a coordinate against every LOP in order."""
    result = ScoreResult()
    for lop in lops:
        err = lop_error(coord, lop)
        result.sum_squared_error += err**2
        result.count += 1
        if err <= lop.tolerance:
            # No break: the last matching LOP takes precedence
            result.matched_color = lop.color
    return result


def evaluate(
    coord: GeoCoord,
    lops: Sequence[LineOfPosition],
    min_err: MinErrConfig,
    background: Background = RenderDefaults.BACKGROUND_COLOR
) -> Color:
    """Color displayed at a coordinate.
    
    Parameters
    ----------
    coord : GeoCoord
        Candidate coordinate (possibly Invalid).
    lops : sequence of RangeLOP / AzimuthLOP
        LOPs in precedence order.
    min_err : MinErrConfig
        Global best-fit highlight.
    background : str or callable
        Color used when nothing else applies, or a callable mapping the
        coordinate to such a color. The callable is only invoked in that case.
        
    Returns
    -------
    str
        The color to display.
    """
    if not coord.is_valid:
        return OFF_GLOBE_COLOR
    
    result = score(coord, lops)
    
    if min_err.enabled and result.count > 0:
        if result.rms < min_err.tolerance:
            return min_err.color
    
    if result.matched_color is not None:
        return result.matched_color
    
    if callable(background):
        return background(coord)
    return background


def lop_error_batch(lat: NDArray, lon: NDArray, lop: LineOfPosition) -> NDArray:
    """Vectorized `lop_error` over arrays of latitudes and longitudes."""
    if isinstance(lop, RangeLOP):
        return np.abs(lop.radius - haversine_batch(lat, lon, lop.anchor))
    if isinstance(lop, AzimuthLOP):
        return circular_difference_batch(lop.bearing, calc_azimuth_batch(lat, lon, lop.anchor))
    raise TypeError(f"Unsupported line of position: {type(lop).__name__}")


def evaluate_batch(
    lat: NDArray,
    lon: NDArray,
    lops: Sequence[LineOfPosition],
    min_err: MinErrConfig
) -> NDArray:
    """Apply `evaluate` to arrays of coordinates at once.
    
    Parameters
    ----------
    lat, lon : ndarray
        Coordinates in radians; NaN marks an Invalid coordinate.
    lops : sequence of RangeLOP / AzimuthLOP
        LOPs in precedence order.
    min_err : MinErrConfig
        Global best-fit highlight.
        
    Returns
    -------
    ndarray
        Object array of colors with the shape of `lat`. Entries where only
        the background applies are None, so the caller decides how (and
        whether) to sample it.
    """
    lat = np.asarray(lat, dtype=np.float64)
    lon = np.asarray(lon, dtype=np.float64)
    valid = np.isfinite(lat) & np.isfinite(lon)
    colors = np.full(lat.shape, None, dtype=object)
    
    sum_squared_error = np.zeros(lat.shape, dtype=np.float64)
    with np.errstate(invalid='ignore'):
        for lop in lops:
            err = lop_error_batch(lat, lon, lop)
            sum_squared_error += err**2
            colors[valid & (err <= lop.tolerance)] = lop.color
        
        if min_err.enabled and len(lops) > 0:
            rms = np.sqrt(sum_squared_error / len(lops))
            colors[valid & (rms < min_err.tolerance)] = min_err.color
    
    colors[~valid] = OFF_GLOBE_COLOR
    return colors
