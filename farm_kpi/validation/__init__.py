"""Data-quality validation for KPI inputs."""

from .cycle_validator import (
    CycleValidator,
    ValidationError,
    ValidationIssue,
    ValidationSeverity,
)

__all__ = [
    "CycleValidator",
    "ValidationError",
    "ValidationIssue",
    "ValidationSeverity",
]
