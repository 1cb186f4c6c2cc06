"""
Homogeneity-of-variance tests.

Levene: transform y to |y_i - median(group_j)| and run a one-way ANOVA on
the transformed values (the median-centred variant, as car::leveneTest).
Bartlett: scipy.stats.bartlett.

Which one runs depends on the normality key: Levene when normality was
rejected or could not be determined, Bartlett otherwise.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats

from pyomnibus.core.exceptions import NumericalError
from pyomnibus.assumptions._common import AssumptionKey, VarianceResult
from pyomnibus.effects.solvers import bartlett_cramers_v, levene_eta_squared


def levene_impl(groups: dict[str, NDArray]) -> tuple[float, float, int, int]:
    """
    Median-centred Levene test.

    Returns:
        (F, p_value, df_between, df_within). F = 0 and p = 1 when the
        transformed values have no within-group spread.
    """
    z_groups = [np.abs(g - np.median(g)) for g in groups.values()]
    k = len(z_groups)
    n = sum(len(z) for z in z_groups)

    z_grand_mean = np.mean(np.concatenate(z_groups))
    ss_between = 0.0
    ss_within = 0.0
    for z in z_groups:
        z_mean_j = np.mean(z)
        ss_between += len(z) * (z_mean_j - z_grand_mean) ** 2
        ss_within += np.sum((z - z_mean_j) ** 2)

    df_between = k - 1
    df_within = n - k

    if df_between <= 0 or df_within <= 0 or ss_within == 0:
        return 0.0, 1.0, df_between, df_within

    f_val = (ss_between / df_between) / (ss_within / df_within)
    p_val = float(sp_stats.f.sf(f_val, df_between, df_within))
    return float(f_val), p_val, df_between, df_within


def bartlett_impl(groups: dict[str, NDArray]) -> tuple[float, float, int]:
    """
    Bartlett's K^2 test.

    Raises:
        NumericalError: If a group has zero variance (log of zero)
    """
    for label, g in groups.items():
        if np.var(g, ddof=1) == 0:
            raise NumericalError(
                f"Bartlett test: group {label!r} has zero variance"
            )
    stat, p = sp_stats.bartlett(*groups.values())
    if not np.isfinite(stat):
        raise NumericalError("Bartlett test produced a non-finite statistic")
    return float(stat), float(p), len(groups) - 1


def variance_impl(
    groups: dict[str, NDArray],
    alpha: float,
    use_levene: bool,
) -> VarianceResult:
    """Run Levene (use_levene=True) or Bartlett and attach the effect size."""
    if use_levene:
        f_val, p_val, df1, df2 = levene_impl(groups)
        return VarianceResult(
            test='Levene',
            statistic=f_val,
            p_value=p_val,
            df=(df1, df2),
            effect_size=levene_eta_squared(f_val, df1, df2),
            key=AssumptionKey.from_p(p_val, alpha),
        )

    stat, p_val, df = bartlett_impl(groups)
    n_total = sum(len(g) for g in groups.values())
    return VarianceResult(
        test='Bartlett',
        statistic=stat,
        p_value=p_val,
        df=(df,),
        effect_size=bartlett_cramers_v(stat, n_total, len(groups)),
        key=AssumptionKey.from_p(p_val, alpha),
    )
