"""
Line-of-Position Engine.

This package provides:
- LOP record types (range and azimuth) and the min-err highlight rule
- The DMS angle grammar and the LOP input text parser
- The scoring engine deciding the color at each coordinate
"""

from lop_engine.models import (
    RangeLOP,
    AzimuthLOP,
    LineOfPosition,
    MinErrConfig,
    ParsedInput,
)

from lop_engine.dms import parse_degree, parse_lat, parse_lon

from lop_engine.parser import (
    DEFAULT_INPUT,
    LOPParseError,
    parse_input,
)

from lop_engine.scoring import (
    OFF_GLOBE_COLOR,
    ScoreResult,
    lop_error,
    score,
    evaluate,
    lop_error_batch,
    evaluate_batch,
)

__all__ = [
    # Models
    "RangeLOP",
    "AzimuthLOP",
    "LineOfPosition",
    "MinErrConfig",
    "ParsedInput",
    # Parsing
    "parse_degree",
    "parse_lat",
    "parse_lon",
    "DEFAULT_INPUT",
    "LOPParseError",
    "parse_input",
    # Scoring
    "OFF_GLOBE_COLOR",
    "ScoreResult",
    "lop_error",
    "score",
    "evaluate",
    "lop_error_batch",
    "evaluate_batch",
]
