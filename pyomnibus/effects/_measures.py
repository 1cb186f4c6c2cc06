"""
Risk and odds measures for a 2x2 exposure-by-outcome table.

Layout (rows exposure, columns outcome):

                 Event   No event
    Exposed        a        b
    Unexposed      c        d

Wald intervals on the log scale:
    OR  exp(log(ad/bc) +- z sqrt(1/a + 1/b + 1/c + 1/d))
    RR  exp(log(RR) +- z sqrt(b/(a(a+b)) + d/(c(c+d))))
"""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats

from pyomnibus.core.exceptions import ValidationError
from pyomnibus.effects._common import RiskMeasures

CONTINUITY_CORRECTION = 0.5


def _log_interval(estimate: float, se: float, z: float) -> tuple[float, float] | None:
    if not (estimate > 0 and math.isfinite(estimate) and math.isfinite(se)):
        return None
    centre = math.log(estimate)
    return math.exp(centre - z * se), math.exp(centre + z * se)


def _ratio(num: float, den: float) -> float | None:
    return num / den if den > 0 else None


def risk_measures_impl(
    counts: NDArray,
    alpha: float,
    correction: bool,
) -> tuple[RiskMeasures, list[str]]:
    """
    Odds ratio, risk ratio, risk difference and NNT/NNH with intervals.

    With `correction`, 0.5 is added to every cell when any cell is zero.
    Without it, a measure whose denominator is zero is reported as None;
    when neither ratio can be formed ValidationError is raised.

    Returns:
        (measures, warning messages)
    """
    has_zero = bool(np.any(counts == 0))
    cells = counts.astype(np.float64)
    warn_list: list[str] = []

    if has_zero and correction:
        cells = cells + CONTINUITY_CORRECTION
    elif has_zero:
        warn_list.append("zero cells present; a 0.5 continuity correction is recommended")

    a, b, c, d = (float(v) for v in cells.ravel())
    if a + b == 0 or c + d == 0:
        raise ValidationError(
            "cannot calculate risks: the exposed or unexposed row total is zero"
        )

    or_value = _ratio(a * d, b * c)
    exposed_risk = a / (a + b)
    unexposed_risk = c / (c + d)
    rr_value = _ratio(exposed_risk, unexposed_risk)

    if or_value is None and rr_value is None:
        raise ValidationError(
            "cannot calculate: odds ratio, risk ratio. One or more zero values "
            "found in data; use correction=True"
        )
    if or_value is None:
        warn_list.append("odds ratio not computed: zero in the b or c cell")
    if rr_value is None:
        warn_list.append("risk ratio not computed: no events among the unexposed")

    z = float(sp_stats.norm.ppf(1.0 - alpha / 2.0))
    or_ci = None
    if or_value is not None and a > 0 and d > 0:
        or_ci = _log_interval(or_value, math.sqrt(1/a + 1/b + 1/c + 1/d), z)
    rr_ci = None
    if rr_value is not None and a > 0:
        rr_ci = _log_interval(rr_value, math.sqrt(b / (a * (a + b)) + d / (c * (c + d))), z)

    difference = exposed_risk - unexposed_risk
    measures = RiskMeasures(
        table=((a, b), (c, d)),
        odds_ratio=or_value,
        or_ci=or_ci,
        risk_ratio=rr_value,
        rr_ci=rr_ci,
        exposed_risk=exposed_risk,
        unexposed_risk=unexposed_risk,
        risk_difference=difference,
        number_needed=1.0 / abs(difference) if difference != 0 else math.inf,
        harm=difference > 0,
        conf_level=1.0 - alpha,
        corrected=has_zero and correction,
    )
    return measures, warn_list
