"""
Pairwise comparison procedures.

Tukey HSD:
    Uses the studentized range distribution (scipy.stats.studentized_range)
    for simultaneous confidence intervals and adjusted p-values. Matches
    R's TukeyHSD(aov(...)).

Pairwise tests (paired t, rank-sum, signed-rank):
    One two-sample test per unordered level pair, raw p-values adjusted
    together afterwards. Match R's pairwise.t.test(paired=TRUE) and
    pairwise.wilcox.test(paired=FALSE/TRUE).
"""

from __future__ import annotations

from itertools import combinations
from typing import Callable

import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats

from pyomnibus.core.exceptions import NumericalError
from pyomnibus.posthoc._common import AdjustMethod, PostHocComparison
from pyomnibus.posthoc._p_adjust import p_adjust

# (group1 values, group2 values) -> (estimate or None, statistic, raw p)
PairTest = Callable[[NDArray, NDArray], tuple[float | None, float, float]]


def level_pairs(levels: tuple[str, ...]) -> list[tuple[str, str]]:
    """All k(k-1)/2 unordered level pairs, in level order."""
    return list(combinations(levels, 2))


def tukey_hsd(
    groups: dict[str, NDArray],
    mse: float,
    df_error: int,
    *,
    alpha: float = 0.05,
) -> tuple[PostHocComparison, ...]:
    """
    Tukey's Honestly Significant Difference test.

    Args:
        groups: level label -> response values
        mse: Mean square error from the one-way ANOVA
        df_error: Error degrees of freedom from the ANOVA
        alpha: Intervals are built at confidence 1 - alpha

    Raises:
        NumericalError: If the ANOVA error term is zero or undefined
    """
    if not mse > 0 or df_error < 1:
        raise NumericalError(
            f"Tukey HSD needs a positive error mean square, got MSE={mse}, "
            f"df={df_error}"
        )

    k = len(groups)
    means = {level: float(np.mean(v)) for level, v in groups.items()}
    sizes = {level: len(v) for level, v in groups.items()}
    q_crit = float(sp_stats.studentized_range.ppf(1.0 - alpha, k, df_error))

    comparisons: list[PostHocComparison] = []
    for g1, g2 in level_pairs(tuple(groups)):
        diff = means[g2] - means[g1]
        # q = |diff| / sqrt(MSE / 2 * (1/n1 + 1/n2))
        se = float(np.sqrt(mse * (1.0 / sizes[g1] + 1.0 / sizes[g2]) / 2.0))
        q_stat = abs(diff) / se
        p_adj = min(float(sp_stats.studentized_range.sf(q_stat, k, df_error)), 1.0)
        margin = q_crit * se

        comparisons.append(PostHocComparison(
            group1=g1,
            group2=g2,
            estimate=diff,
            ci_lower=diff - margin,
            ci_upper=diff + margin,
            statistic=q_stat,
            p_value=None,
            p_adjusted=p_adj,
            significant=p_adj < alpha,
        ))

    return tuple(comparisons)


def paired_t(a: NDArray, b: NDArray) -> tuple[float | None, float, float]:
    """Paired t-test; estimate is mean(b - a)."""
    diff = b - a
    if np.ptp(diff) == 0:
        # constant differences: t is undefined (R: "data are essentially constant")
        return float(np.mean(diff)), float('nan'), float('nan')
    res = sp_stats.ttest_rel(b, a)
    return float(np.mean(diff)), float(res.statistic), float(res.pvalue)


def rank_sum(a: NDArray, b: NDArray) -> tuple[float | None, float, float]:
    """Wilcoxon rank-sum (Mann-Whitney) test, continuity-corrected."""
    res = sp_stats.mannwhitneyu(a, b, alternative='two-sided', use_continuity=True)
    return None, float(res.statistic), float(res.pvalue)


def signed_rank(a: NDArray, b: NDArray) -> tuple[float | None, float, float]:
    """
    Wilcoxon signed-rank test on paired values.

    Zero differences are dropped as R does; if every difference is zero the
    p-value is NaN.
    """
    diff = b - a
    if np.all(diff == 0):
        return None, float('nan'), float('nan')
    res = sp_stats.wilcoxon(b, a, zero_method='wilcox', correction=True)
    return None, float(res.statistic), float(res.pvalue)


def pairwise_tests(
    groups: dict[str, NDArray],
    test: PairTest,
    method: AdjustMethod,
    *,
    alpha: float = 0.05,
) -> tuple[PostHocComparison, ...]:
    """
    Run `test` on every level pair and adjust the p-values together.

    For paired tests every group array must be ordered by subject.
    Pairs whose raw p-value is NaN stay NaN after adjustment and are
    never marked significant.
    """
    pairs = level_pairs(tuple(groups))
    raw = [test(groups[g1], groups[g2]) for g1, g2 in pairs]
    adjusted = p_adjust([p for _, _, p in raw], method)

    return tuple(
        PostHocComparison(
            group1=g1,
            group2=g2,
            estimate=estimate,
            ci_lower=None,
            ci_upper=None,
            statistic=statistic,
            p_value=p_raw,
            p_adjusted=float(p_adj),
            significant=bool(p_adj < alpha),
        )
        for (g1, g2), (estimate, statistic, p_raw), p_adj
        in zip(pairs, raw, adjusted)
    )
