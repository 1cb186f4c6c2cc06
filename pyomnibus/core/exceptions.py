"""
Exception hierarchy for pyomnibus.

All exceptions inherit from PyOmnibusError to allow catching any
library-specific error. Validation errors abort an analysis before any
computation; numerical errors raised by individual sub-tests are captured
by the engines and reported as warnings alongside partial results.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""


class PyOmnibusError(Exception):
    """Base exception for all pyomnibus errors."""
    pass


class ValidationError(PyOmnibusError):
    """
    Input validation failed.

    Raised when user-provided inputs fail validation checks: invalid alpha,
    unknown adjustment method or missing-data policy, malformed columns.
    """
    pass


class DimensionError(ValidationError):
    """
    Array dimensions are incorrect or inconsistent.

    Raised when columns of a sample have different lengths or when an
    array has the wrong number of dimensions.
    """
    pass


class ColumnNotFoundError(ValidationError):
    """
    A referenced column does not exist in the sample.

    Attributes:
        column: The name that was looked up
        role: What the column was meant to be ('y', 'x', 'paired_by', ...)
        available: Column names present in the sample
    """

    def __init__(
        self,
        message: str,
        column: str,
        role: str,
        available: tuple[str, ...] = (),
    ):
        super().__init__(message)
        self.column = column
        self.role = role
        self.available = available


class InsufficientLevelsError(ValidationError):
    """
    The grouping factor has the wrong number of levels.

    Omnibus comparisons need at least 3 levels; two-group comparisons need
    exactly 2.

    Attributes:
        factor: Name of the grouping column
        n_levels: Number of distinct non-missing levels observed
        required: Human-readable requirement (e.g. '>= 3', '== 2')
    """

    def __init__(self, message: str, factor: str, n_levels: int, required: str):
        super().__init__(message)
        self.factor = factor
        self.n_levels = n_levels
        self.required = required


class InsufficientDataError(ValidationError):
    """
    A group has too few non-missing observations for the requested analysis.

    Attributes:
        group: Group label (or variable name) that is too small
        n_observed: Number of usable observations
        n_required: Minimum number of observations required
    """

    def __init__(self, message: str, group: str, n_observed: int, n_required: int):
        super().__init__(message)
        self.group = group
        self.n_observed = n_observed
        self.n_required = n_required


class RepeatedMeasuresLayoutError(ValidationError):
    """
    Repeated-measures data does not have one observation per subject per level.

    Attributes:
        subject: Offending subject identifier
        level: Factor level where the count is wrong
        count: Number of observations found for (subject, level)
    """

    def __init__(self, message: str, subject: str, level: str, count: int):
        super().__init__(message)
        self.subject = subject
        self.level = level
        self.count = count


class NumericalError(PyOmnibusError):
    """
    Numerical computation failed.

    Raised by individual statistical sub-tests on degenerate input
    (e.g. constant data given to a normality test). Engines capture these
    and degrade gracefully.
    """
    pass


class EngineWarning(UserWarning):
    """Warning category for non-fatal problems reported by the engines."""
    pass
