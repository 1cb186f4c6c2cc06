"""
Core infrastructure for pyomnibus.

This module provides shared abstractions and utilities used by all
domain-specific submodules (assumptions, omnibus, pairwise, posthoc).

Key components:
    datasource: Sample table, ColumnRef, NaPolicy, row selection
    result: Generic Result[P] envelope and per-sub-test Outcome
    exceptions: Exception hierarchy
    validation: Input validators
    timing: Section timer
    decisions: OmnibusTest / PairwiseTest identifiers
    formatting: p-value and number formatting for reports
"""

from pyomnibus.core.datasource import Sample, ColumnRef, NaPolicy, RowSelection
from pyomnibus.core.result import Result, Outcome
from pyomnibus.core.decisions import OmnibusTest, PairwiseTest
from pyomnibus.core.formatting import format_p
from pyomnibus.core.exceptions import (
    PyOmnibusError,
    ValidationError,
    DimensionError,
    ColumnNotFoundError,
    InsufficientLevelsError,
    InsufficientDataError,
    RepeatedMeasuresLayoutError,
    NumericalError,
    EngineWarning,
)

__all__ = [
    # Data
    "Sample",
    "ColumnRef",
    "NaPolicy",
    "RowSelection",
    # Result
    "Result",
    "Outcome",
    "format_p",
    # Test identifiers
    "OmnibusTest",
    "PairwiseTest",
    # Exceptions
    "PyOmnibusError",
    "ValidationError",
    "DimensionError",
    "ColumnNotFoundError",
    "InsufficientLevelsError",
    "InsufficientDataError",
    "RepeatedMeasuresLayoutError",
    "NumericalError",
    "EngineWarning",
]
