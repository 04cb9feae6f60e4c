"""
Validation Framework for the LOP Globe.

This module provides consistency checks for projections and world
orientation matrices.
"""

from validation.projection_checks import (
    ValidationResult,
    ProjectionContractChecker,
    check_world_matrix,
    sample_sphere,
)

__all__ = [
    "ValidationResult",
    "ProjectionContractChecker",
    "check_world_matrix",
    "sample_sphere",
]
