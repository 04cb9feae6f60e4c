"""
Degree / Minute / Second Angle Grammar.

Angles in the LOP input are written the way they come off a sight reduction
form: ``45 23 15.5 N``, ``12°30'42"W``, ``-0.5`` or ``183 23 10``.

Grammar
-------
    angle      := [hemisphere] [sign] fields [hemisphere]
    fields     := number [sep number [sep number]]
    sep        := whitespace and/or one of  ° ' " ′ ″
    hemisphere := N | S | E | W   (case-insensitive, latitude/longitude only)

The first field is degrees, the second arc-minutes and the third
arc-seconds; minutes and seconds must lie in [0, 60). A sign and a
hemisphere letter cannot be combined.
"""

import re
from typing import List, Optional, Tuple

from common.units import dms_to_quantity

_NUMBER = re.compile(r'^(?:\d+(?:\.\d*)?|\.\d+)$')
_SEPARATORS = re.compile(r"[°'\"′″]")


def _split_hemisphere(text: str, letters: str) -> Tuple[str, Optional[str]]:
    """Remove a leading or trailing hemisphere letter from `text`."""
    if not text:
        return text, None
    head, tail = text[0].upper(), text[-1].upper()
    if tail in letters and tail.isalpha():
        return text[:-1].strip(), tail
    if head in letters and head.isalpha():
        return text[1:].strip(), head
    return text, None


def _fields(text: str) -> List[float]:
    tokens = _SEPARATORS.sub(' ', text).split()
    if not 1 <= len(tokens) <= 3:
        raise ValueError(f"Expected 1 to 3 angle fields, got {len(tokens)} in '{text}'")
    for token in tokens:
        if not _NUMBER.match(token):
            raise ValueError(f"'{token}' is not a number")
    values = [float(token) for token in tokens]
    for name, value in zip(("minutes", "seconds"), values[1:]):
        if value >= 60:
            raise ValueError(f"{name} must be below 60, got {value:g}")
    return values


def _parse(text: str, letters: str = "") -> Tuple[float, Optional[str]]:
    body, hemisphere = _split_hemisphere(text.strip(), letters)
    negative = False
    if body[:1] in ('-', '+'):
        if hemisphere is not None:
            raise ValueError(f"Use either a sign or a hemisphere letter, not both: '{text}'")
        negative = body[0] == '-'
        body = body[1:].strip()
    if not body:
        raise ValueError(f"Empty angle: '{text}'")
    quantity = dms_to_quantity(*_fields(body), negative=negative)
    return float(quantity.magnitude), hemisphere


def parse_degree(text: str) -> float:
    """Parse an unsigned-hemisphere angle into degrees.
    
    Parameters
    ----------
    text : str
        e.g. ``"71 42 11"``, ``"0.5"``, ``"183°23'10\\""``.
        
    Returns
    -------
    float
        The angle in degrees.
        
    Raises
    ------
    ValueError
        If the text does not follow the grammar.
    """
    degrees, _ = _parse(text)
    return degrees


def parse_lat(text: str) -> float:
    """Parse a latitude such as ``"30 57 16.7 S"`` into signed degrees."""
    degrees, hemisphere = _parse(text, "NS")
    if hemisphere == "S":
        degrees = -degrees
    if abs(degrees) > 90:
        raise ValueError(f"Latitude {degrees:g}° is beyond the poles")
    return degrees


def parse_lon(text: str) -> float:
    """Parse a longitude such as ``"12 30 42.0 W"`` into signed degrees."""
    degrees, hemisphere = _parse(text, "EW")
    if hemisphere == "W":
        degrees = -degrees
    if abs(degrees) > 180:
        raise ValueError(f"Longitude {degrees:g}° is out of range")
    return degrees
