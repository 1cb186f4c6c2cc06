"""
Tests for the pyomnibus exception hierarchy.

Validates:
    - Inheritance chain (all errors catchable via PyOmnibusError)
    - Input errors are ValidationErrors, computation errors are not
    - Diagnostic attributes on the column / level / data / layout errors
"""

import pytest

from pyomnibus.core.exceptions import (
    ColumnNotFoundError,
    DimensionError,
    EngineWarning,
    InsufficientDataError,
    InsufficientLevelsError,
    NumericalError,
    PyOmnibusError,
    RepeatedMeasuresLayoutError,
    ValidationError,
)


# ═══════════════════════════════════════════════════════════════════════
# Inheritance hierarchy
# ═══════════════════════════════════════════════════════════════════════


class TestInheritance:
    """Every input error is a ValidationError; everything is a PyOmnibusError."""

    @pytest.mark.parametrize("exc_type", [
        DimensionError,
        InsufficientDataError,
        InsufficientLevelsError,
        RepeatedMeasuresLayoutError,
        ColumnNotFoundError,
    ])
    def test_input_errors_are_validation_errors(self, exc_type):
        assert issubclass(exc_type, ValidationError)
        assert issubclass(exc_type, PyOmnibusError)

    def test_numerical_error_is_not_validation_error(self):
        assert issubclass(NumericalError, PyOmnibusError)
        assert not issubclass(NumericalError, ValidationError)

    def test_engine_warning_is_user_warning(self):
        assert issubclass(EngineWarning, UserWarning)

    def test_validation_error_catchable_as_base(self):
        with pytest.raises(PyOmnibusError):
            raise ValidationError("bad input")


# ═══════════════════════════════════════════════════════════════════════
# Diagnostic attributes
# ═══════════════════════════════════════════════════════════════════════


class TestAttributes:

    def test_insufficient_levels(self):
        err = InsufficientLevelsError("too few", factor='g', n_levels=2, required='>= 3')
        assert err.factor == 'g'
        assert err.n_levels == 2
        assert err.required == '>= 3'
        assert str(err) == "too few"

    def test_insufficient_data(self):
        err = InsufficientDataError("small", group='A', n_observed=1, n_required=3)
        assert err.group == 'A'
        assert err.n_observed == 1
        assert err.n_required == 3

    def test_layout_error(self):
        err = RepeatedMeasuresLayoutError("dup", subject='s1', level='t1', count=2)
        assert (err.subject, err.level, err.count) == ('s1', 't1', 2)
