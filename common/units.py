"""
Angle Units for Line-of-Position Input.

Navigators write angles in degrees, arc-minutes and arc-seconds, while every
computation in this package runs in radians. This module owns that boundary:
conversions go through a single `pint` unit registry so a value tagged in one
angular unit can never be silently mixed with another.

Example Usage
-------------
>>> from common.units import Q_, to_radians
>>> angle = Q_(45, 'degree') + Q_(30, 'arcminute')
>>> round(to_radians(angle), 6)
0.794125
"""

from typing import Union

import pint
from pint import UnitRegistry as PintUnitRegistry

ureg = PintUnitRegistry()

# Convenience alias for creating quantities
Q_ = ureg.Quantity


def dms_to_quantity(
    degrees: float,
    minutes: float = 0.0,
    seconds: float = 0.0,
    negative: bool = False
) -> pint.Quantity:
    """Combine degree/minute/second fields into one angular quantity.
    
    Parameters
    ----------
    degrees : float
        Non-negative whole or fractional degrees.
    minutes, seconds : float
        Non-negative arc-minutes and arc-seconds.
    negative : bool
        Whether the whole angle is negated (``-12 30`` means -12.5°).
        
    Returns
    -------
    pint.Quantity
        The angle in degrees.
    """
    total = (
        Q_(degrees, 'degree')
        + Q_(minutes, 'arcminute')
        + Q_(seconds, 'arcsecond')
    ).to('degree')
    return -total if negative else total


def to_radians(value: Union[float, pint.Quantity]) -> float:
    """Convert an angle to a bare number of radians.
    
    Parameters
    ----------
    value : float or pint.Quantity
        An angular quantity. Bare numbers are taken to be degrees.
        
    Returns
    -------
    float
        The angle in radians.
        
    Raises
    ------
    ValueError
        If the quantity is not an angle.
    """
    if not isinstance(value, pint.Quantity):
        value = Q_(value, 'degree')
    try:
        return float(value.to('radian').magnitude)
    except pint.DimensionalityError as e:
        raise ValueError(f"Expected an angle, got {value.units}") from e


def to_degrees(value: Union[float, pint.Quantity]) -> float:
    """Convert radians (or any angular quantity) to a bare number of degrees."""
    if not isinstance(value, pint.Quantity):
        value = Q_(value, 'radian')
    return float(value.to('degree').magnitude)
