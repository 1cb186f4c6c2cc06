"""
Single-variable normality assessment.

Combines a formal test with the shape of the distribution:

    n <= 50   Shapiro-Wilk decides, skewness/kurtosis z within 1.96
              (3.29 at n = 50)
    n > 50    Lilliefors-corrected Kolmogorov-Smirnov decides,
              skewness/kurtosis z within 3.29
    n >= 300  z-scores are replaced by |skewness| <= 2 and |kurtosis| <= 4

Standard errors of skewness and excess kurtosis follow Mishra et al. (2019):
    SE_skew = sqrt(6 n (n-1) / ((n-2)(n+1)(n+3)))
    SE_kurt = sqrt(24 n (n-1)^2 / ((n-3)(n-2)(n+3)(n+5)))

Q-Q outliers are the points outside the pointwise 95% band around the
normal reference line, theoretical +- 1.96 sqrt(p(1-p)/n) / phi(theoretical).
"""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats

from pyomnibus.core.exceptions import NumericalError
from pyomnibus.core.result import Outcome
from pyomnibus.assumptions._common import NormalityAssessment, NormalityMethod
from pyomnibus.assumptions._normality import normality_test

MIN_ASSESSMENT_N = 5
KS_MIN_N = 51
LARGE_SAMPLE_N = 300
MAX_EXTREME_OUTLIERS = 4

_TEST_ERRORS = (NumericalError, ValueError)


def _moments(values: NDArray) -> tuple[float, float]:
    """Population skewness and excess kurtosis (0 for constant data)."""
    if np.ptp(values) == 0:
        return 0.0, 0.0
    return (
        float(sp_stats.skew(values, bias=True)),
        float(sp_stats.kurtosis(values, fisher=True, bias=True)),
    )


def _shape_rule(n: int) -> tuple[str, float | None]:
    if n >= LARGE_SAMPLE_N:
        return '|skewness| <= 2 and |kurtosis| <= 4', None
    threshold = 1.96 if n < 50 else 3.29
    return f"|z| <= {threshold}", threshold


def qq_outliers(values: NDArray) -> tuple[NDArray, NDArray]:
    """
    Positions (into `values`) of Q-Q points outside the 95% band.

    Returns:
        (outliers ordered by value, up to four most extreme by deviation)
    """
    n = len(values)
    sd = np.std(values, ddof=1)
    if n < 2 or sd == 0:
        empty = np.array([], dtype=np.intp)
        return empty, empty

    order = np.argsort(values, kind='stable')
    standardized = (values[order] - values.mean()) / sd

    a = 3.0 / 8.0 if n <= 10 else 0.5
    probs = (np.arange(1, n + 1) - a) / (n + 1 - 2 * a)
    theoretical = sp_stats.norm.ppf(probs)
    half_width = (
        np.sqrt(probs * (1 - probs) / n) / sp_stats.norm.pdf(theoretical)
        * sp_stats.norm.ppf(0.975)
    )
    outside = np.abs(standardized - theoretical) > half_width

    deviation = np.abs(standardized[outside] - theoretical[outside])
    ranked = np.argsort(-deviation, kind='stable')[:MAX_EXTREME_OUTLIERS]
    return order[outside], order[np.flatnonzero(outside)[ranked]]


def assessment_impl(
    values: NDArray,
    variable: str,
    alpha: float,
    positions: NDArray | None = None,
) -> NormalityAssessment:
    """
    Assess one variable; `values` must already be free of missing entries.

    positions maps each value back to its row in the caller's data, so the
    reported outliers are row positions there.
    """
    n = len(values)

    shapiro = Outcome.attempt(
        normality_test, values, variable, NormalityMethod.SHAPIRO,
        catch=_TEST_ERRORS, label='Shapiro-Wilk test failed',
    )
    ks = None
    if n >= KS_MIN_N:
        ks = Outcome.attempt(
            normality_test, values, variable, NormalityMethod.LILLIEFORS,
            catch=_TEST_ERRORS, label='Kolmogorov-Smirnov test failed',
        )
    primary = ks if ks is not None else shapiro

    skewness, kurtosis = _moments(values)
    skew_se = math.sqrt(6 * n * (n - 1) / ((n - 2) * (n + 1) * (n + 3)))
    kurt_se = math.sqrt(
        24 * n * (n - 1) ** 2 / ((n - 3) * (n - 2) * (n + 3) * (n + 5))
    )
    skewness_z = skewness / skew_se
    kurtosis_z = kurtosis / kurt_se

    rule, threshold = _shape_rule(n)
    if threshold is None:
        shape_normal = abs(skewness) <= 2 and abs(kurtosis) <= 4
    else:
        shape_normal = abs(skewness_z) <= threshold and abs(kurtosis_z) <= threshold

    test_normal = primary.ok and primary.unwrap().p_value > alpha
    outliers, extreme = qq_outliers(values)
    if positions is not None:
        outliers, extreme = positions[outliers], positions[extreme]

    return NormalityAssessment(
        variable=variable,
        n=n,
        mean=float(np.mean(values)),
        sd=float(np.std(values, ddof=1)),
        median=float(np.median(values)),
        iqr=float(np.subtract(*np.percentile(values, [75, 25]))),
        shapiro=shapiro,
        ks=ks,
        skewness=skewness,
        kurtosis=kurtosis,
        skewness_z=skewness_z,
        kurtosis_z=kurtosis_z,
        shape_rule=rule,
        shape_normal=shape_normal,
        normal=test_normal and shape_normal,
        alpha=alpha,
        outliers=tuple(int(i) for i in outliers),
        extreme_outliers=tuple(int(i) for i in extreme),
    )
