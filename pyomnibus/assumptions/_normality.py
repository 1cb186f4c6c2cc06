"""
Per-group normality tests.

Shapiro-Wilk comes from scipy.stats; the Lilliefors-corrected
Kolmogorov-Smirnov test (used for large groups) comes from statsmodels.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats
from statsmodels.stats.diagnostic import lilliefors

from pyomnibus.core.exceptions import NumericalError
from pyomnibus.assumptions._common import (
    AssumptionKey,
    GroupNormality,
    NormalityMethod,
    NormalityResult,
    SHAPIRO_MAX_N,
)


def normality_test(
    values: NDArray,
    group: str,
    method: NormalityMethod = NormalityMethod.AUTO,
) -> GroupNormality:
    """
    Test one group for normality.

    Args:
        values: 1D float array without missing values
        group: Group label recorded in the result
        method: Which test to run (AUTO picks by group size)

    Raises:
        NumericalError: If the group has fewer than 3 values or zero range
    """
    n = len(values)
    if n < 3:
        raise NumericalError(
            f"normality test for group {group!r} needs at least 3 values, got {n}"
        )
    if np.ptp(values) == 0:
        raise NumericalError(
            f"normality test for group {group!r}: all values are identical"
        )

    use_shapiro = (
        method is NormalityMethod.SHAPIRO
        or (method is NormalityMethod.AUTO and n <= SHAPIRO_MAX_N)
    )
    if use_shapiro:
        w, p = sp_stats.shapiro(values)
        return GroupNormality(
            group=group, test='Shapiro-Wilk',
            statistic=float(w), p_value=float(p), n=n,
        )

    if n < 4:
        raise NumericalError(
            f"Lilliefors test for group {group!r} needs at least 4 values, got {n}"
        )
    d, p = lilliefors(values, dist='norm', pvalmethod='table')
    return GroupNormality(
        group=group, test='Lilliefors',
        statistic=float(d), p_value=float(p), n=n,
    )


def normality_impl(
    groups: dict[str, NDArray],
    alpha: float,
    method: NormalityMethod,
) -> NormalityResult:
    """
    Test every group; the key is SIGNIFICANT if any group's p < alpha.

    A failure in any group propagates as NumericalError, so the whole
    normality sub-test fails rather than reporting a partial set.
    """
    results = tuple(
        normality_test(values, label, method) for label, values in groups.items()
    )
    any_rejected = any(r.p_value < alpha for r in results)
    key = AssumptionKey.SIGNIFICANT if any_rejected else AssumptionKey.NON_SIGNIFICANT
    return NormalityResult(groups=results, key=key)


def shapiro_p(values: NDArray) -> float | None:
    """Shapiro-Wilk p-value, or None when the test cannot be computed."""
    try:
        return normality_test(values, '', NormalityMethod.SHAPIRO).p_value
    except NumericalError:
        return None
