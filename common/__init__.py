"""
Common utilities and infrastructure for the Line-of-Position Globe.

This package provides foundational components used across all modules:
- Geometry constants and render defaults
- Angle unit conversion
- Coordinate and array type definitions
- Logging infrastructure
"""

from common.constants import GeometryConstants, RenderDefaults
from common.units import Q_, dms_to_quantity, to_radians, to_degrees
from common.types import GeoCoord, Vec3, Mat3, Color
from common.logging_config import get_logger

__all__ = [
    "GeometryConstants",
    "RenderDefaults",
    "Q_",
    "dms_to_quantity",
    "to_radians",
    "to_degrees",
    "GeoCoord",
    "Vec3",
    "Mat3",
    "Color",
    "get_logger",
]
