"""
Geometry and Rendering Constants for the Line-of-Position Globe.

This module provides the numeric constants shared by the geometry kernel,
the projections and the LOP scoring engine. Every tolerance used to detect a
degenerate configuration is defined here once, with a description of what it
guards.

References
----------
- Sinnott, R.W. (1984). Virtues of the Haversine. Sky and Telescope, 68(2), 159.
- Bowditch, N. (2019). The American Practical Navigator, ch. 19-20.
"""

from dataclasses import dataclass
from typing import Final
import numpy as np


@dataclass(frozen=True)
class Constant:
    """A named constant with unit and provenance.
    
    Attributes
    ----------
    value : float
        The nominal value of the constant.
    unit : str
        The unit of the constant.
    description : str
        Human-readable description of the constant.
    """
    value: float
    unit: str
    description: str


class GeometryConstants:
    """Registry of constants used by the spherical geometry code.
    
    Angles
    ------
    All angles are in RADIANS. Latitude spans [-π/2, π/2], longitude
    (-π, π], azimuth [0, 2π).
    
    Tolerances
    ----------
    Thresholds below which a vector or cross product is treated as
    degenerate, and the slack allowed when checking round trips.
    """
    
    # =========================================================================
    # Angles
    # =========================================================================
    
    HALF_PI: Final[Constant] = Constant(
        value=np.pi / 2,
        unit="rad",
        description="Latitude of the north pole"
    )
    
    PI: Final[Constant] = Constant(
        value=np.pi,
        unit="rad",
        description="Largest possible great-circle distance or bearing error"
    )
    
    TWO_PI: Final[Constant] = Constant(
        value=2 * np.pi,
        unit="rad",
        description="Full turn; period of longitude and azimuth"
    )
    
    # =========================================================================
    # Tolerances
    # =========================================================================
    
    DEGENERATE_AXIS_EPS: Final[Constant] = Constant(
        value=1e-12,
        unit="dimensionless",
        description="Cross-product magnitude below which a rotation axis is undefined"
    )
    
    ROUND_TRIP_TOLERANCE: Final[Constant] = Constant(
        value=1e-9,
        unit="rad",
        description="Allowed error of lat/lon -> vector -> lat/lon round trips"
    )
    
    ORTHONORMAL_TOLERANCE: Final[Constant] = Constant(
        value=1e-9,
        unit="dimensionless",
        description="Allowed deviation of R·Rᵀ from the identity for a rotation"
    )


class RenderDefaults:
    """Default colors used when the input text or caller does not name one."""
    
    # Painted where no coordinate exists (outside the canvas or the globe)
    OFF_GLOBE_COLOR: Final[str] = "#000"
    
    LOP_COLOR: Final[str] = "#fff"
    MIN_ERR_COLOR: Final[str] = "#fff"
    BACKGROUND_COLOR: Final[str] = "#123"
    
    CANVAS_WIDTH: Final[int] = 400


# Shorthand angles used throughout the geometry code
D90: Final[float] = GeometryConstants.HALF_PI.value
D180: Final[float] = GeometryConstants.PI.value
D360: Final[float] = GeometryConstants.TWO_PI.value
