"""
Line-of-Position Records.

A celestial sight reduces to a line of position (LOP) on the sphere: either
a circle of equal altitude around the body's geographic position (range LOP)
or a great-circle bearing toward it (azimuth LOP). Both carry a tolerance
band and the color used to paint points inside that band.

The records are plain values rebuilt from the input text on every edit; the
order of the sequence they live in is significant (later LOPs paint over
earlier ones).
"""

from dataclasses import dataclass
from typing import List, Union

from common.constants import RenderDefaults
from common.types import GeoCoord, Color


@dataclass
class RangeLOP:
    """Circle of equal altitude.
    
    Attributes
    ----------
    anchor : GeoCoord
        Geographic position of the observed body (circle centre).
    radius : float
        Angular radius of the circle in RADIANS (90° minus observed altitude).
    tolerance : float
        Half-width of the painted band in RADIANS.
    color : str
        Color of the band.
    """
    anchor: GeoCoord
    radius: float  # radians
    tolerance: float = 0.0  # radians
    color: Color = RenderDefaults.LOP_COLOR


@dataclass
class AzimuthLOP:
    """Great-circle bearing line toward a body.
    
    Attributes
    ----------
    anchor : GeoCoord
        Geographic position of the observed body.
    bearing : float
        Observed azimuth of the body in RADIANS, clockwise from north.
    tolerance : float
        Allowed bearing error in RADIANS.
    color : str
        Color of the band.
    """
    anchor: GeoCoord
    bearing: float  # radians
    tolerance: float = 0.0  # radians
    color: Color = RenderDefaults.LOP_COLOR


LineOfPosition = Union[RangeLOP, AzimuthLOP]


@dataclass
class MinErrConfig:
    """Global best-fit highlight.
    
    Points whose root-mean-square error over all LOPs is below `tolerance`
    are painted `color`, regardless of any individual LOP band. A tolerance
    of zero disables the highlight.
    """
    tolerance: float = 0.0  # radians
    color: Color = RenderDefaults.MIN_ERR_COLOR
    
    @property
    def enabled(self) -> bool:
        return self.tolerance != 0


@dataclass
class ParsedInput:
    """Everything the input text describes: the LOP sequence and min-err rule."""
    lops: List[LineOfPosition]
    min_err: MinErrConfig
