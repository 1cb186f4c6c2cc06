"""
Mauchly's test of sphericity for a one-way repeated-measures layout.

Operates on the wide (subjects x conditions) matrix. The data are projected
onto orthonormal Helmert contrasts; sphericity holds when the covariance of
the contrast scores is proportional to the identity.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats

from pyomnibus.core.exceptions import NumericalError
from pyomnibus.assumptions._common import AssumptionKey, SphericityResult
from pyomnibus.effects._common import EffectSize, EffectSizeLabel


def helmert_contrasts(k: int) -> NDArray:
    """(k, k-1) orthonormal Helmert contrast matrix."""
    C = np.zeros((k, k - 1), dtype=np.float64)
    for j in range(k - 1):
        # level j+1 against the mean of levels 0..j
        C[:j + 1, j] = -1.0 / (j + 1)
        C[j + 1, j] = 1.0
        C[:, j] /= np.sqrt(np.sum(C[:, j] ** 2))
    return C


def greenhouse_geisser_epsilon(S: NDArray, p: int) -> float:
    """epsilon = tr(S)^2 / (p tr(S S)), clamped to [1/p, 1]."""
    trace_S2 = np.trace(S @ S)
    if trace_S2 == 0:
        return 1.0 / p
    eps = np.trace(S) ** 2 / (p * trace_S2)
    return float(max(1.0 / p, min(1.0, eps)))


def huynh_feldt_epsilon(gg_eps: float, k: int, n: int) -> float:
    """Huynh-Feldt epsilon, clamped to [gg_eps, 1]."""
    p = k - 1
    denominator = p * (n - 1.0 - p * gg_eps)
    if denominator <= 0:
        return 1.0
    hf_eps = (n * p * gg_eps - 2.0) / denominator
    return float(max(gg_eps, min(1.0, hf_eps)))


def mauchly_impl(Y_wide: NDArray, alpha: float) -> SphericityResult:
    """
    Mauchly's W with the chi-squared approximation.

    W = det(S) / (tr(S)/p)^p,  chi2 = -(1 - (2p^2 + p + 2) / (6p(n-1))) (n-1) ln W,
    df = p(p+1)/2 - 1, where S is the covariance of the contrast scores and
    p = k - 1.

    Raises:
        NumericalError: If there are too few subjects for a non-singular S,
            or the contrast scores have no variance
    """
    n, k = Y_wide.shape
    p = k - 1
    if n <= p:
        raise NumericalError(
            f"Mauchly test needs more subjects ({n}) than contrasts ({p})"
        )

    scores = Y_wide @ helmert_contrasts(k)
    S = np.atleast_2d(np.cov(scores, rowvar=False, ddof=1))

    mean_eigenvalue = np.trace(S) / p
    if mean_eigenvalue <= 0:
        raise NumericalError(
            "Mauchly test: contrast scores have zero variance"
        )

    W = float(np.linalg.det(S) / mean_eigenvalue ** p)
    W = max(0.0, min(1.0, W))

    f = 1.0 - (2.0 * p * p + p + 2.0) / (6.0 * p * (n - 1.0))
    df = p * (p + 1) // 2 - 1

    if df == 0:
        # two conditions: sphericity holds trivially
        chi_sq, p_value = 0.0, 1.0
    elif W > 0:
        chi_sq = float(-f * (n - 1.0) * np.log(W))
        p_value = float(sp_stats.chi2.sf(chi_sq, df))
    else:
        chi_sq, p_value = float('inf'), 0.0

    gg_eps = greenhouse_geisser_epsilon(S, p)
    hf_eps = huynh_feldt_epsilon(gg_eps, k, n)

    return SphericityResult(
        test='Mauchly',
        w=W,
        statistic=chi_sq,
        p_value=p_value,
        df=df,
        gg_epsilon=gg_eps,
        hf_epsilon=hf_eps,
        effect_size=EffectSize(W, EffectSizeLabel.MAUCHLY_W),
        key=AssumptionKey.from_p(p_value, alpha),
    )
