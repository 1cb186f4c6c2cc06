"""
Two-group test for a categorical variable.

Any expected count below 5 -> Fisher's exact test: exact for 2x2 tables
(with the conditional MLE odds ratio, as R's fisher.test), Monte Carlo
p-value for larger tables (as fisher.test(simulate.p.value=TRUE)).
Otherwise Pearson's chi-squared test without continuity correction.
"""

from __future__ import annotations

from math import lgamma

import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats
from scipy.optimize import brentq
from scipy.special import gammaln

from pyomnibus.core.datasource import level_label
from pyomnibus.core.decisions import PairwiseTest
from pyomnibus.core.exceptions import InsufficientDataError
from pyomnibus.effects._common import EffectSize
from pyomnibus.effects.solvers import cramers_v, odds_ratio
from pyomnibus.pairwise._common import CategoricalDetail, EXPECTED_COUNT_MIN


def contingency_table(
    values: dict[str, NDArray],
) -> tuple[NDArray, tuple[str, ...], tuple[str, ...]]:
    """
    Cross-tabulate variable levels (rows) against groups (columns).

    Only levels and groups that occur are kept, as R's table().
    """
    col_levels = tuple(label for label, v in values.items() if len(v) > 0)
    row_levels = tuple(sorted(
        {level_label(x) for v in values.values() for x in v},
    ))
    table = np.zeros((len(row_levels), len(col_levels)), dtype=np.int64)
    row_index = {level: i for i, level in enumerate(row_levels)}
    for j, col in enumerate(col_levels):
        for x in values[col]:
            table[row_index[level_label(x)], j] += 1
    return table, row_levels, col_levels


def expected_counts(table: NDArray) -> NDArray:
    """E[i, j] = row_sum[i] * col_sum[j] / total."""
    return np.outer(table.sum(axis=1), table.sum(axis=0)) / table.sum()


def pearson_chi_squared(table: NDArray) -> tuple[float, int, float]:
    """Uncorrected Pearson chi-squared: (statistic, df, p_value)."""
    expected = expected_counts(table)
    chisq = float(np.sum((table - expected) ** 2 / expected))
    df = (table.shape[0] - 1) * (table.shape[1] - 1)
    return chisq, df, float(sp_stats.chi2.sf(chisq, df))


def _log_comb(n: int, k: int) -> float:
    if k < 0 or k > n:
        return -np.inf
    return lgamma(n + 1) - lgamma(k + 1) - lgamma(n - k + 1)


def _nchg_mean(n1: int, m1: int, m2: int, or_val: float) -> float:
    """
    Mean of Fisher's noncentral hypergeometric distribution.

    P(X = k) ∝ C(m1, k) C(m2, n1 - k) or^k
    """
    ks = np.arange(max(0, n1 - m2), min(n1, m1) + 1)
    log_probs = np.array([
        _log_comb(m1, k) + _log_comb(m2, n1 - k) + k * np.log(or_val)
        for k in ks
    ])
    probs = np.exp(log_probs - np.max(log_probs))
    return float(np.sum(ks * probs) / np.sum(probs))


def conditional_mle_odds_ratio(table: NDArray) -> float:
    """
    Conditional maximum likelihood estimate of a 2x2 odds ratio.

    Differs from the sample odds ratio ad/bc; matches R's fisher.test
    estimate. NaN when a margin is empty or the estimate is indeterminate.
    """
    a, b = int(table[0, 0]), int(table[0, 1])
    c, d = int(table[1, 0]), int(table[1, 1])

    if a + b == 0 or c + d == 0 or a + c == 0 or b + d == 0:
        return float('nan')
    if (a == 0 or d == 0) and (b == 0 or c == 0):
        return float('nan')
    if a == 0 or d == 0:
        return 0.0
    if b == 0 or c == 0:
        return float('inf')

    m1, m2, n1 = a + b, c + d, a + c

    def equation(log_or: float) -> float:
        return _nchg_mean(n1, m1, m2, np.exp(log_or)) - a

    try:
        return float(np.exp(brentq(equation, -50, 50, xtol=1e-12)))
    except (ValueError, RuntimeError):
        return float(a * d) / float(b * c)


def _log_table_prob(tables: NDArray) -> NDArray:
    """
    Log-probability of contingency tables under fixed marginals, up to the
    constant shared by all tables with the same margins: -sum(lgamma(x + 1)).
    """
    return -gammaln(tables + 1.0).sum(axis=(-2, -1))


def monte_carlo_fisher_p(
    table: NDArray,
    n_simulations: int,
    seed: int | np.random.Generator | None = None,
) -> float:
    """
    Monte Carlo p-value for Fisher's exact test on an r x c table.

    Random tables with the observed margins come from
    scipy.stats.random_table (Patefield's algorithm); p is the share of
    tables at most as probable as the observed one, (count + 1) / (B + 1).
    """
    rng = np.random.default_rng(seed)
    dist = sp_stats.random_table(table.sum(axis=1), table.sum(axis=0), seed=rng)
    simulated = dist.rvs(size=n_simulations)

    observed = _log_table_prob(table.astype(np.float64))
    sim = _log_table_prob(np.asarray(simulated, dtype=np.float64))
    # observed / (1 + 64 eps) as R's fisher.test, so ties with the observed table count
    count = int(np.sum(sim <= observed / (1.0 + 64 * np.finfo(float).eps)))
    return (count + 1) / (n_simulations + 1)


def compare_categorical(
    values: dict[str, NDArray],
    variable: str,
    *,
    effect_size: bool = True,
    n_simulations: int = 2000,
    seed: int | np.random.Generator | None = None,
) -> tuple[PairwiseTest, float | None, tuple[float, ...] | None, float,
           EffectSize | None, bool, CategoricalDetail]:
    """
    Select and run the two-group test for categorical data.

    Returns:
        (test, statistic, df, p_value, effect size, approximate, detail)

    Raises:
        InsufficientDataError: If the table has fewer than 2 rows or columns
    """
    table, row_levels, col_levels = contingency_table(values)
    if min(table.shape) < 2:
        raise InsufficientDataError(
            f"variable {variable!r}: contingency table is "
            f"{table.shape[0]}x{table.shape[1]}, both dimensions must be >= 2",
            group=variable,
            n_observed=int(min(table.shape)),
            n_required=2,
        )

    expected = expected_counts(table)
    chisq, chi_df, chi_p = pearson_chi_squared(table)
    use_fisher = bool(np.any(expected < EXPECTED_COUNT_MIN))
    is_2x2 = table.shape == (2, 2)

    approximate = False
    simulations = None
    if not use_fisher:
        test, stat, dfs, p_value = PairwiseTest.CHI_SQUARED, chisq, (float(chi_df),), chi_p
    elif is_2x2:
        test, stat, dfs = PairwiseTest.FISHER_EXACT, None, None
        _, p_value = sp_stats.fisher_exact(table, alternative='two-sided')
        p_value = float(p_value)
    else:
        test, stat, dfs = PairwiseTest.FISHER_EXACT, None, None
        p_value = monte_carlo_fisher_p(table, n_simulations, seed)
        approximate = True
        simulations = n_simulations

    eff = None
    if effect_size:
        if use_fisher and is_2x2:
            eff = odds_ratio(conditional_mle_odds_ratio(table))
        else:
            eff = cramers_v(chisq, table)

    detail = CategoricalDetail(
        row_levels=row_levels,
        col_levels=col_levels,
        observed=tuple(tuple(int(v) for v in row) for row in table),
        expected=tuple(tuple(float(v) for v in row) for row in expected),
        chi_squared=chisq,
        n_simulations=simulations,
    )
    return test, stat, dfs, p_value, eff, approximate, detail
