"""
Parser for the LOP Input Text.

One line per line of position, as comma-separated ``key: value`` pairs::

    lat: 45 23 15.5 N, lon: 12 30 42.0 W, rad: 71 42 11,  dif: 0.5, color: #07f
    lat: 30 57 16.7 S, lon: 63 15 22.3 E, azm: 183 23 10, dif: 0.5, color: #f70
    min-err dif: 0.7, color: #fff

Keys
----
- lat, lon : body's geographic position (DMS with hemisphere letter)
- rad      : circle radius (range LOP)
- azm      : observed bearing (azimuth LOP)
- dif      : tolerance
- color    : any color matplotlib understands ("#07f", "orange", ...)

A line starting with ``min-err`` sets the global best-fit highlight from its
``dif`` and ``color``. A line giving both ``rad`` and ``azm`` produces a range
LOP followed by an azimuth LOP.

The text is re-parsed wholesale on every edit, so nothing here is
incremental. Problems are reported through `LOPParseError` carrying the
line number; the caller shows the message to the user.
"""

import re
from typing import Dict, List

from matplotlib.colors import is_color_like

from common.constants import RenderDefaults
from common.logging_config import get_logger
from common.types import GeoCoord
from common.units import to_radians
from geospatial.vector_math import wrap_azimuth
from lop_engine.dms import parse_degree, parse_lat, parse_lon
from lop_engine.models import (
    RangeLOP,
    AzimuthLOP,
    LineOfPosition,
    MinErrConfig,
    ParsedInput,
)

logger = get_logger(__name__)

MIN_ERR_TOKEN = "min-err"

LOP_KEYS = ("lat", "lon", "rad", "azm", "dif", "color")
MIN_ERR_KEYS = ("dif", "color")

DEFAULT_INPUT = "\n".join([
    "lat: 45 23 15.5 N, lon: 12 30 42.0 W, rad: 71 42 11,  dif: 0.5, color: #07f",
    "lat: 30 57 16.7 S, lon: 63 15 22.3 E, azm: 183 23 10, dif: 0.5, color: #f70",
    "lat: 30 57 16.7 S, lon: 85 50 30.5 E, azm: 157 32 3,  dif: 0.5, color: #0f7",
    "min-err dif: 0.7, color: #fff",
])

_PAIR_SEPARATOR = re.compile(r'\s*,\s*')
_KEY_SEPARATOR = re.compile(r'\s*:\s*')


class LOPParseError(ValueError):
    """Raised when a line of the LOP input cannot be understood.
    
    Attributes
    ----------
    line_number : int
        1-based line number in the input text.
    line : str
        The offending line, stripped.
    """
    
    def __init__(self, message: str, line_number: int, line: str):
        super().__init__(f"Line {line_number}: {message}")
        self.line_number = line_number
        self.line = line


def _split_pairs(body: str, allowed: tuple) -> Dict[str, str]:
    pairs: Dict[str, str] = {}
    for item in _PAIR_SEPARATOR.split(body.strip()):
        if not item:
            continue
        parts = _KEY_SEPARATOR.split(item, maxsplit=1)
        if len(parts) != 2 or not parts[1]:
            raise ValueError(f"Expected 'key: value', got '{item}'")
        key, value = parts[0].lower(), parts[1]
        if key not in allowed:
            raise ValueError(f"Unknown key '{key}' (expected one of {', '.join(allowed)})")
        pairs[key] = value
    return pairs


def _angle(text: str) -> float:
    return to_radians(parse_degree(text))


def _color(text: str) -> str:
    if not is_color_like(text):
        raise ValueError(f"'{text}' is not a color")
    return text


def parse_min_err(body: str) -> MinErrConfig:
    """Parse the part of a ``min-err`` line after the token."""
    pairs = _split_pairs(body, MIN_ERR_KEYS)
    config = MinErrConfig()
    if "dif" in pairs:
        config.tolerance = _angle(pairs["dif"])
    if "color" in pairs:
        config.color = _color(pairs["color"])
    return config


def parse_lop_line(line: str) -> List[LineOfPosition]:
    """Parse one LOP line into one or two LOP records.
    
    Raises
    ------
    ValueError
        If a key is unknown, a value is malformed, the position is missing
        or the line defines neither a radius nor a bearing.
    """
    pairs = _split_pairs(line, LOP_KEYS)
    if "lat" not in pairs or "lon" not in pairs:
        raise ValueError("Both 'lat' and 'lon' are required")
    if "rad" not in pairs and "azm" not in pairs:
        raise ValueError("Either 'rad' or 'azm' is required")
    
    anchor = GeoCoord(
        lat=to_radians(parse_lat(pairs["lat"])),
        lon=to_radians(parse_lon(pairs["lon"])),
    )
    tolerance = _angle(pairs["dif"]) if "dif" in pairs else 0.0
    color = _color(pairs["color"]) if "color" in pairs else RenderDefaults.LOP_COLOR
    
    lops: List[LineOfPosition] = []
    if "rad" in pairs:
        lops.append(RangeLOP(anchor=anchor, radius=_angle(pairs["rad"]),
                             tolerance=tolerance, color=color))
    if "azm" in pairs:
        # Bearings outside [0°, 360°) are accepted and reduced
        bearing = wrap_azimuth(_angle(pairs["azm"]))
        lops.append(AzimuthLOP(anchor=anchor, bearing=bearing,
                               tolerance=tolerance, color=color))
    return lops


def parse_input(text: str) -> ParsedInput:
    """Parse the full input text.
    
    Parameters
    ----------
    text : str
        Multi-line LOP input.
        
    Returns
    -------
    ParsedInput
        LOPs in input order and the min-err rule (disabled unless a
        ``min-err`` line sets a non-zero ``dif``; the last such line wins).
        
    Raises
    ------
    LOPParseError
        On the first line that cannot be parsed.
    """
    lops: List[LineOfPosition] = []
    min_err = MinErrConfig()
    
    for line_number, raw in enumerate(text.split("\n"), start=1):
        line = raw.strip()
        if not line:
            continue
        try:
            if line.startswith(MIN_ERR_TOKEN):
                min_err = parse_min_err(line[len(MIN_ERR_TOKEN):])
            else:
                lops.extend(parse_lop_line(line))
        except ValueError as e:
            raise LOPParseError(str(e), line_number, line) from e
    
    logger.info(
        f"Loaded {len(lops)} lines of position "
        f"(min-err {'on' if min_err.enabled else 'off'})"
    )
    return ParsedInput(lops=lops, min_err=min_err)
