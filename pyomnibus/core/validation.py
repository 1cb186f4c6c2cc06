"""
Input validation utilities for pyomnibus.

These validators follow the "fail fast, fail loud" principle. They raise
immediately with clear error messages rather than silently correcting
or making assumptions about user intent.

Design principles:
    - Clear, actionable error messages with actual values
    - Each function validates ONE thing
    - Parameter names included in all error messages
"""

from __future__ import annotations

from enum import Enum
from typing import Any, TypeVar

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyomnibus.core.exceptions import (
    ValidationError,
    DimensionError,
    InsufficientDataError,
)

E = TypeVar('E', bound=Enum)


def check_alpha(alpha: Any, name: str = 'alpha') -> float:
    """
    Validate a significance level.

    Args:
        alpha: Candidate significance level
        name: Parameter name for error messages

    Returns:
        alpha as float

    Raises:
        ValidationError: If alpha is not a real number strictly inside (0, 1)
    """
    if isinstance(alpha, bool) or not isinstance(alpha, (int, float, np.floating)):
        raise ValidationError(
            f"{name}: must be a number in (0, 1), got {type(alpha).__name__}"
        )
    alpha = float(alpha)
    if not (0.0 < alpha < 1.0):
        raise ValidationError(f"{name}: must be in (0, 1), got {alpha}")
    return alpha


def check_choice(value: Any, enum_cls: type[E], name: str) -> E:
    """
    Resolve a string (or enum member) to a member of enum_cls.

    Matching is on the member value. Enums may register extra spellings
    through a `_missing_` hook (e.g. 'fdr' for Benjamini-Hochberg).

    Raises:
        ValidationError: If value names no member, listing the valid choices
    """
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        valid = ", ".join(repr(m.value) for m in enum_cls)
        raise ValidationError(
            f"{name}: invalid value {value!r}. Must be one of: {valid}"
        ) from None


def check_positive_int(value: Any, name: str) -> int:
    """Verify value is a positive integer (bools rejected)."""
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise ValidationError(
            f"{name}: must be a positive integer, got {type(value).__name__}"
        )
    if value < 1:
        raise ValidationError(f"{name}: must be a positive integer, got {value}")
    return int(value)


def check_array(array: ArrayLike, name: str) -> NDArray[np.floating[Any]]:
    """
    Validate and convert input to a float64 numpy array.

    Raises:
        ValidationError: If input cannot be converted to a numeric array
    """
    try:
        result = np.asarray(array)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"{name}: cannot convert to array: {e}") from e

    if result.dtype == object or not np.issubdtype(result.dtype, np.number):
        raise ValidationError(
            f"{name}: non-numeric dtype {result.dtype}, expected numeric data"
        )

    return result.astype(np.float64, copy=False)


def check_1d(array: NDArray, name: str) -> None:
    """
    Verify array is 1-dimensional.

    Raises:
        DimensionError: If array is not 1D
    """
    if array.ndim != 1:
        raise DimensionError(
            f"{name}: expected 1D array, got {array.ndim}D with shape {array.shape}"
        )


def check_consistent_length(*arrays: NDArray, names: tuple[str, ...]) -> None:
    """
    Verify all arrays have the same length (first dimension).

    Raises:
        ValueError: If number of names doesn't match number of arrays
        DimensionError: If arrays have inconsistent lengths
    """
    if len(arrays) != len(names):
        raise ValueError(
            f"Number of arrays ({len(arrays)}) must match number of names ({len(names)})"
        )

    if len(arrays) < 2:
        return

    lengths = [arr.shape[0] for arr in arrays]
    if len(set(lengths)) > 1:
        details = ", ".join(f"{name}={length}" for name, length in zip(names, lengths))
        raise DimensionError(f"Inconsistent lengths: {details}")


def check_min_samples(array: NDArray, min_samples: int, name: str) -> None:
    """
    Verify a group has at least the minimum number of non-missing values.

    Args:
        array: Group values (NaN entries are not counted)
        min_samples: Minimum required observations
        name: Group label for error messages

    Raises:
        InsufficientDataError: If the group has fewer than min_samples values
    """
    n = int(np.sum(~np.isnan(array))) if array.dtype.kind == 'f' else array.shape[0]
    if n < min_samples:
        raise InsufficientDataError(
            f"group {name!r}: requires at least {min_samples} non-missing "
            f"observations, got {n}",
            group=str(name),
            n_observed=n,
            n_required=min_samples,
        )
