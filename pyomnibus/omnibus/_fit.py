"""
Omnibus test computations.

One-way ANOVA:
    Cell-means linear model; F = MS_between / MS_within with
    (k - 1, N - k) degrees of freedom. Matches summary(aov(y ~ x)).

Repeated-measures ANOVA:
    Wide (subjects x conditions) layout; the subject sum of squares is
    removed from the error term. F with (k - 1, (n - 1)(k - 1)) df, plus
    Greenhouse-Geisser and Huynh-Feldt corrected p-values. Matches
    summary(aov(y ~ x + Error(subject))).

Kruskal-Wallis / Friedman:
    scipy.stats.kruskal and scipy.stats.friedmanchisquare (both tie
    corrected, as R). Chi-squared statistic with k - 1 df.
"""

from __future__ import annotations

import math
from typing import Callable

import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats

from pyomnibus.core.decisions import OmnibusTest
from pyomnibus.core.exceptions import NumericalError
from pyomnibus.assumptions._sphericity import (
    greenhouse_geisser_epsilon,
    helmert_contrasts,
    huynh_feldt_epsilon,
)
from pyomnibus.assumptions.design import GroupedDesign
from pyomnibus.omnibus._common import (
    BalanceBand,
    BalanceDiagnostic,
    OmnibusFit,
)

WELL_BALANCED_MAX = 0.16
MODERATELY_UNBALANCED_MAX = 0.33


def oneway_anova(design: GroupedDesign) -> OmnibusFit:
    """
    One-way ANOVA F test.

    Raises:
        NumericalError: If the residual sum of squares is zero
    """
    groups = list(design.groups.values())
    k = len(groups)
    n = sum(len(g) for g in groups)
    grand_mean = float(np.mean(np.concatenate(groups)))

    ss_between = float(sum(len(g) * (np.mean(g) - grand_mean) ** 2 for g in groups))
    ss_within = float(sum(np.sum((g - np.mean(g)) ** 2) for g in groups))
    df_between, df_within = k - 1, n - k

    if ss_within <= 0:
        raise NumericalError(
            "one-way ANOVA: residual sum of squares is zero (no within-group variation)"
        )

    ms_within = ss_within / df_within
    f_val = (ss_between / df_between) / ms_within
    p_val = float(sp_stats.f.sf(f_val, df_between, df_within))
    ss_total = ss_between + ss_within

    return OmnibusFit(
        statistic=float(f_val),
        df=(df_between, df_within),
        p_value=p_val,
        statistic_name='F',
        eta_squared=ss_between / ss_total,
        mse=ms_within,
        df_error=df_within,
    )


def rm_anova(design: GroupedDesign) -> OmnibusFit:
    """
    One-way repeated-measures ANOVA F test on the wide matrix.

    Raises:
        NumericalError: If the subject x condition error term is zero
    """
    Y = design.wide
    n, k = Y.shape

    grand_mean = float(np.mean(Y))
    ss_total = float(np.sum((Y - grand_mean) ** 2))
    ss_subjects = k * float(np.sum((np.mean(Y, axis=1) - grand_mean) ** 2))
    ss_condition = n * float(np.sum((np.mean(Y, axis=0) - grand_mean) ** 2))
    ss_error = ss_total - ss_subjects - ss_condition

    df_condition = k - 1
    df_error = (n - 1) * (k - 1)
    if ss_error <= 0 or df_error <= 0:
        raise NumericalError(
            "repeated measures ANOVA: error sum of squares is zero"
        )

    ms_error = ss_error / df_error
    f_val = (ss_condition / df_condition) / ms_error
    p_val = float(sp_stats.f.sf(f_val, df_condition, df_error))

    S = np.atleast_2d(np.cov(Y @ helmert_contrasts(k), rowvar=False, ddof=1))
    gg_eps = greenhouse_geisser_epsilon(S, k - 1)
    hf_eps = huynh_feldt_epsilon(gg_eps, k, n)

    return OmnibusFit(
        statistic=float(f_val),
        df=(df_condition, df_error),
        p_value=p_val,
        statistic_name='F',
        eta_squared=ss_condition / ss_total if ss_total > 0 else 0.0,
        mse=ms_error,
        df_error=df_error,
        gg_p_value=float(sp_stats.f.sf(f_val, gg_eps * df_condition, gg_eps * df_error)),
        hf_p_value=float(sp_stats.f.sf(f_val, hf_eps * df_condition, hf_eps * df_error)),
    )


def kruskal_wallis(design: GroupedDesign) -> OmnibusFit:
    """
    Kruskal-Wallis rank sum test.

    Raises:
        NumericalError: If every value is identical
    """
    values = np.concatenate(list(design.groups.values()))
    if np.ptp(values) == 0:
        raise NumericalError("Kruskal-Wallis: all observations are identical")
    h, p = sp_stats.kruskal(*design.groups.values())
    return OmnibusFit(
        statistic=float(h),
        df=(design.k - 1,),
        p_value=float(p),
        statistic_name='Kruskal-Wallis chi-squared',
    )


def friedman(design: GroupedDesign) -> OmnibusFit:
    """
    Friedman rank sum test on the wide matrix.

    Raises:
        NumericalError: If every subject's values are tied
    """
    chi2, p = sp_stats.friedmanchisquare(*design.wide.T)
    if not math.isfinite(chi2):
        raise NumericalError("Friedman: ranks are tied within every subject")
    return OmnibusFit(
        statistic=float(chi2),
        df=(design.k - 1,),
        p_value=float(p),
        statistic_name='Friedman chi-squared',
    )


FITTERS: dict[OmnibusTest, Callable[[GroupedDesign], OmnibusFit]] = {
    OmnibusTest.ONEWAY_ANOVA: oneway_anova,
    OmnibusTest.RM_ANOVA: rm_anova,
    OmnibusTest.KRUSKAL_WALLIS: kruskal_wallis,
    OmnibusTest.FRIEDMAN: friedman,
}


def balance_coefficient(groups: dict[str, NDArray]) -> BalanceDiagnostic:
    """
    sum(group SDs) / sum(group means), banded:

        <= 0.16  well balanced
        <= 0.33  moderately unbalanced
        else     highly unbalanced

    Only defined on a positive scale: band is None when the group means sum
    to zero or less.
    """
    sds = sum(float(np.std(g, ddof=1)) for g in groups.values())
    means = sum(float(np.mean(g)) for g in groups.values())
    if means == 0:
        return BalanceDiagnostic(coefficient=float('nan'), band=None)

    coef = sds / means
    if means < 0:
        return BalanceDiagnostic(coefficient=coef, band=None)
    if coef <= WELL_BALANCED_MAX:
        band = BalanceBand.WELL_BALANCED
    elif coef <= MODERATELY_UNBALANCED_MAX:
        band = BalanceBand.MODERATELY_UNBALANCED
    else:
        band = BalanceBand.HIGHLY_UNBALANCED
    return BalanceDiagnostic(coefficient=coef, band=band)
