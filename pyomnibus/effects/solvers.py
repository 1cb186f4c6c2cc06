"""
Effect-size calculators.

The per-test calculators return an EffectSize, or None when the inputs
cannot support the measure (a group with at most one observation, an empty
table). effect_measures() is the standalone 2x2 risk analysis.
"""

from __future__ import annotations

import math
import warnings
from typing import Any

import numpy as np
from numpy.typing import ArrayLike

from pyomnibus.core.exceptions import DimensionError, EngineWarning, ValidationError
from pyomnibus.core.result import Result
from pyomnibus.core.timing import Timer
from pyomnibus.core.validation import check_alpha, check_array, check_1d
from pyomnibus.effects._common import EffectSize, EffectSizeLabel
from pyomnibus.effects._measures import risk_measures_impl
from pyomnibus.effects.solution import EffectMeasuresSolution


def _clean(values: ArrayLike, name: str) -> np.ndarray:
    arr = check_array(values, name)
    check_1d(arr, name)
    return arr[~np.isnan(arr)]


def cohens_d(group1: ArrayLike, group2: ArrayLike) -> EffectSize | None:
    """
    Absolute standardized mean difference.

    d = |mean1 - mean2| / s_pooled, with
    s_pooled^2 = ((n1-1) var1 + (n2-1) var2) / (n1 + n2 - 2).

    Returns None when either group has <= 1 observation. Two constant groups
    with equal means give d = 0; with different means d is infinite.
    """
    g1 = _clean(group1, 'group1')
    g2 = _clean(group2, 'group2')
    n1, n2 = len(g1), len(g2)
    if n1 <= 1 or n2 <= 1:
        return None

    diff = abs(float(np.mean(g1) - np.mean(g2)))
    pooled_var = (
        (n1 - 1) * np.var(g1, ddof=1) + (n2 - 1) * np.var(g2, ddof=1)
    ) / (n1 + n2 - 2)
    s_pooled = math.sqrt(float(pooled_var))

    if s_pooled == 0.0:
        d = 0.0 if diff == 0.0 else math.inf
    else:
        d = diff / s_pooled
    return EffectSize(d, EffectSizeLabel.COHENS_D)


def rank_biserial_r(u_statistic: float, n1: int, n2: int) -> EffectSize | None:
    """
    Effect size r for a Mann-Whitney U statistic.

    z = (U - n1 n2 / 2) / sqrt(n1 n2 (N + 1) / 12) and r = |z| / sqrt(N).
    Either group's U may be passed; r is symmetric in that choice.
    """
    if n1 <= 1 or n2 <= 1:
        return None
    n_total = n1 + n2
    mean_u = n1 * n2 / 2.0
    sd_u = math.sqrt(n1 * n2 * (n_total + 1) / 12.0)
    z = abs((float(u_statistic) - mean_u) / sd_u)
    return EffectSize(z / math.sqrt(n_total), EffectSizeLabel.RANK_BISERIAL_R)


def cramers_v(chi_squared: float, table: Any) -> EffectSize | None:
    """
    Cramer's V = sqrt(chi2 / N / min(r - 1, c - 1)).

    `chi_squared` is the uncorrected Pearson statistic of `table`.
    """
    table = np.asarray(table, dtype=np.float64)
    n_total = float(table.sum())
    min_dim = min(table.shape) - 1
    if n_total <= 0 or min_dim < 1 or not math.isfinite(chi_squared):
        return None
    return EffectSize(
        math.sqrt(chi_squared / n_total / min_dim), EffectSizeLabel.CRAMERS_V,
    )


def odds_ratio(estimate: float) -> EffectSize | None:
    """Wrap a conditional-MLE odds ratio from Fisher's exact test."""
    if estimate is None or math.isnan(estimate):
        return None
    return EffectSize(float(estimate), EffectSizeLabel.ODDS_RATIO)


def levene_eta_squared(f_value: float, df1: int, df2: int) -> EffectSize:
    """Eta-squared from Levene's F: F df1 / (F df1 + df2)."""
    num = f_value * df1
    denom = num + df2
    value = num / denom if denom > 0 else 0.0
    return EffectSize(value, EffectSizeLabel.ETA_SQUARED)


def bartlett_cramers_v(statistic: float, n_total: int, k: int) -> EffectSize:
    """Cramer's V analogue for Bartlett's K^2: sqrt(K^2 / (N (k - 1)))."""
    return EffectSize(
        math.sqrt(max(statistic, 0.0) / (n_total * (k - 1))),
        EffectSizeLabel.CRAMERS_V,
    )


def _check_counts(table: ArrayLike) -> np.ndarray:
    counts = check_array(table, 'table')
    if counts.shape not in ((4,), (2, 2)):
        raise DimensionError(
            f"table: expected 4 counts (a, b, c, d) or a 2x2 table, "
            f"got shape {counts.shape}"
        )
    counts = counts.reshape(2, 2)
    if np.isnan(counts).any():
        raise ValidationError("table: missing values found in data")
    if (counts < 0).any():
        raise ValidationError("table: negative counts found in data")
    if (counts != np.floor(counts)).any():
        raise ValidationError("table: counts must be whole numbers")
    return counts


def effect_measures(
    table: ArrayLike,
    *,
    alpha: float = 0.05,
    correction: bool = True,
) -> EffectMeasuresSolution:
    """
    Odds ratio, risk ratio, absolute risk difference and NNT/NNH.

    Args:
        table: Counts as (a, b, c, d) or [[a, b], [c, d]], rows exposed /
            unexposed and columns event / no event. A DataFrame in that
            layout works as well.
        alpha: Confidence intervals are at level 1 - alpha
        correction: Add 0.5 to every cell when any cell is zero

    Returns:
        EffectMeasuresSolution

    Raises:
        ValidationError: Non-integer, negative or missing counts, bad alpha,
            a zero row total, or (without correction) zeros that leave
            neither ratio computable
        DimensionError: If the table does not hold exactly four counts

    Examples:
        >>> res = effect_measures([15, 85, 5, 95])
        >>> res.risk_ratio, res.number_needed
        (3.0, 10.0)
        >>> print(res.summary())
    """
    timer = Timer()
    timer.start()

    alpha = check_alpha(alpha)
    if not isinstance(correction, (bool, np.bool_)):
        raise ValidationError(
            f"correction: expected True or False, got {correction!r}"
        )
    counts = _check_counts(table)

    with timer.section('measures'):
        params, warn_list = risk_measures_impl(counts, alpha, bool(correction))
    timer.stop()

    for message in warn_list:
        warnings.warn(message, EngineWarning, stacklevel=2)

    return EffectMeasuresSolution(_result=Result(
        params=params,
        info={
            'n_total': int(counts.sum()),
            'alpha': alpha,
            'correction': bool(correction),
        },
        timing=timer.result(),
        warnings=tuple(warn_list),
    ))
