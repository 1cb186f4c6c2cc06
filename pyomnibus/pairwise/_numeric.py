"""
Two-group test for a numeric variable.

Both groups normal (Shapiro-Wilk p > 0.05, and computable) -> Welch t-test;
otherwise Mann-Whitney U (two-sided, continuity corrected, exact for small
untied samples), as R's t.test / wilcox.test defaults.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats

from pyomnibus.core.decisions import PairwiseTest
from pyomnibus.core.exceptions import NumericalError
from pyomnibus.assumptions._common import SHAPIRO_MAX_N
from pyomnibus.assumptions._normality import shapiro_p
from pyomnibus.effects._common import EffectSize
from pyomnibus.effects.solvers import cohens_d, rank_biserial_r
from pyomnibus.pairwise._common import NORMALITY_ALPHA, NumericDetail


def group_normality(values: NDArray) -> float | None:
    """Shapiro-Wilk p-value, None outside 3..5000 values or when constant."""
    if len(values) > SHAPIRO_MAX_N:
        return None
    return shapiro_p(values)


def welch_t(a: NDArray, b: NDArray) -> tuple[float, float, float]:
    """
    Welch two-sample t-test.

    Returns:
        (t, Welch-Satterthwaite df, p_value)

    Raises:
        NumericalError: If both groups have zero variance
    """
    n1, n2 = len(a), len(b)
    v1, v2 = np.var(a, ddof=1) / n1, np.var(b, ddof=1) / n2
    if v1 + v2 == 0:
        raise NumericalError("Welch t-test: both groups have zero variance")
    df = (v1 + v2) ** 2 / (v1 ** 2 / (n1 - 1) + v2 ** 2 / (n2 - 1))
    res = sp_stats.ttest_ind(a, b, equal_var=False)
    return float(res.statistic), float(df), float(res.pvalue)


def mann_whitney(a: NDArray, b: NDArray) -> tuple[float, float]:
    """Mann-Whitney U of the first group (R's W) and its two-sided p-value."""
    res = sp_stats.mannwhitneyu(
        a, b, alternative='two-sided', use_continuity=True, method='auto',
    )
    return float(res.statistic), float(res.pvalue)


def compare_numeric(
    values: dict[str, NDArray],
    *,
    effect_size: bool = True,
) -> tuple[PairwiseTest, float, tuple[float, ...] | None, float,
           EffectSize | None, NumericDetail]:
    """
    Select and run the two-group test for numeric data.

    Args:
        values: Two groups of non-missing float values, each with >= 2
        effect_size: Whether to compute Cohen's d / r

    Returns:
        (test, statistic, df, p_value, effect size, detail)
    """
    (la, a), (lb, b) = values.items()
    norm = {la: group_normality(a), lb: group_normality(b)}
    is_normal = all(p is not None and p > NORMALITY_ALPHA for p in norm.values())

    if is_normal:
        test = PairwiseTest.WELCH_T
        stat, df, p_value = welch_t(a, b)
        dfs: tuple[float, ...] | None = (df,)
        eff = cohens_d(a, b) if effect_size else None
    else:
        test = PairwiseTest.MANN_WHITNEY_U
        stat, p_value = mann_whitney(a, b)
        dfs = None
        eff = rank_biserial_r(stat, len(a), len(b)) if effect_size else None

    detail = NumericDetail(
        normality_p=norm,
        is_normal=is_normal,
        means={la: float(np.mean(a)), lb: float(np.mean(b))},
        sds={la: float(np.std(a, ddof=1)), lb: float(np.std(b, ddof=1))},
    )
    return test, stat, dfs, p_value, eff, detail
