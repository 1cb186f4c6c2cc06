"""
Omnibus comparison of three or more groups.

Public API:
    omnibus(data, y, x, ...) -> OmnibusSolution

Pipeline:
    design validation -> assumption evaluation -> test selection ->
    test fit -> post-hoc dispatch (only when p < alpha) -> balance diagnostic
"""

import warnings
from typing import Any

from pyomnibus.core.datasource import NaPolicy
from pyomnibus.core.decisions import OmnibusTest
from pyomnibus.core.exceptions import EngineWarning, NumericalError
from pyomnibus.core.result import Outcome, Result
from pyomnibus.core.timing import Timer
from pyomnibus.core.validation import check_alpha, check_choice
from pyomnibus.assumptions._common import NormalityMethod
from pyomnibus.assumptions.design import GroupedDesign
from pyomnibus.assumptions.solvers import evaluate_assumptions
from pyomnibus.posthoc._common import AdjustMethod
from pyomnibus.posthoc.solvers import dispatch_post_hoc
from pyomnibus.omnibus._common import OmnibusParams
from pyomnibus.omnibus._fit import FITTERS, balance_coefficient
from pyomnibus.omnibus._selection import select_from_assumptions
from pyomnibus.omnibus.solution import OmnibusSolution

MIN_LEVELS = 3
MIN_GROUP_SIZE = 3

_POSTHOC_ERRORS = (NumericalError, FloatingPointError, ValueError)


def _formula(test: OmnibusTest, design: GroupedDesign) -> str:
    y, x = design.y.name, design.x.name
    if test is OmnibusTest.RM_ANOVA:
        return f"{y} ~ {x} + Error({design.paired_by.name})"
    if test is OmnibusTest.FRIEDMAN:
        return f"{y} ~ {x} | {design.paired_by.name}"
    return f"{y} ~ {x}"


def omnibus(
    data: Any,
    y: str,
    x: str,
    *,
    paired_by: str | None = None,
    alpha: float = 0.05,
    method: str = 'holm',
    na_action: str = 'omit',
    normality: str = 'auto',
) -> OmnibusSolution:
    """
    Compare three or more groups with an assumption-driven omnibus test.

    Normality (per group), homogeneity of variance and, for repeated
    measures, sphericity are tested first. When every assumption holds the
    parametric test runs (one-way or repeated-measures ANOVA); otherwise the
    rank-based alternative (Kruskal-Wallis or Friedman). An assumption that
    could not be tested counts as violated. If the omnibus p-value is below
    alpha the matching post-hoc procedure runs.

    Args:
        data: pandas DataFrame, mapping of columns, or Sample (long format)
        y: Numeric response column
        x: Grouping factor column with at least 3 levels
        paired_by: Subject column; when given the design is repeated
            measures with exactly one row per subject per level
        alpha: Significance level in (0, 1), used for assumptions, the
            omnibus test and the post-hoc markers
        method: p-value adjustment for pairwise post-hoc tests:
            'holm', 'hochberg', 'hommel', 'bonferroni', 'BH', 'BY',
            'fdr' (alias for BH), 'none'. Tukey HSD ignores it.
        na_action: 'omit' drops incomplete rows; 'exclude' keeps the row
            count and reports the excluded rows
        normality: 'auto', 'shapiro' or 'lilliefors'

    Returns:
        OmnibusSolution

    Raises:
        ValidationError: Invalid alpha/method/na_action/normality, unknown
            columns, fewer than 3 levels, a group with fewer than 3
            observations, or a malformed repeated-measures layout
        NumericalError: If the selected omnibus test itself cannot be
            computed (e.g. every observation identical)

    Examples:
        >>> result = omnibus(df, 'score', 'arm')
        >>> result.test
        <OmnibusTest.ONEWAY_ANOVA: 'One-way ANOVA'>
        >>> result.p_value, result.significant
        >>> print(result.summary())
    """
    timer = Timer()
    timer.start()

    alpha = check_alpha(alpha)
    adjust = check_choice(method, AdjustMethod, 'method')
    norm_method = check_choice(normality, NormalityMethod, 'normality')
    check_choice(na_action, NaPolicy, 'na_action')

    with timer.section('design'):
        design = GroupedDesign.build(
            data, y, x,
            paired_by=paired_by,
            na_action=na_action,
            min_levels=MIN_LEVELS,
            min_group_size=MIN_GROUP_SIZE,
        )

    assumptions, warn_list = evaluate_assumptions(design, alpha, norm_method, timer)
    if design.n_dropped_subjects:
        warn_list.append(
            f"{design.n_dropped_subjects} subject(s) dropped for missing "
            f"'{design.y.name}' values"
        )

    test = select_from_assumptions(assumptions)
    with timer.section('test'):
        fit = FITTERS[test](design)
    significant = fit.p_value < alpha

    post_hoc = None
    if significant:
        with timer.section('post_hoc'):
            post_hoc = Outcome.attempt(
                dispatch_post_hoc, test, design.groups, alpha, adjust,
                mse=fit.mse, df_error=fit.df_error,
                catch=_POSTHOC_ERRORS, label='post-hoc test failed',
            )
        if not post_hoc.ok:
            warn_list.append(post_hoc.error)

    params = OmnibusParams(
        test=test,
        fit=fit,
        significant=significant,
        alpha=alpha,
        adjust_method=adjust,
        assumptions=assumptions,
        post_hoc=post_hoc,
        balance=balance_coefficient(design.groups),
        group_sizes={label: len(v) for label, v in design.groups.items()},
        group_means={label: float(v.mean()) for label, v in design.groups.items()},
        formula=_formula(test, design),
        groups=design.groups,
    )

    timer.stop()

    for message in warn_list:
        warnings.warn(message, EngineWarning, stacklevel=2)

    result = Result(
        params=params,
        info={
            'design_type': design.design_type.value,
            'y': design.y.name,
            'x': design.x.name,
            'paired_by': design.paired_by.name if design.paired_by else None,
            'levels': design.levels,
            'n_subjects': len(design.subjects) if design.subjects else None,
            'method': adjust.value,
            'normality_method': norm_method.value,
            **design.rows.info(),
        },
        timing=timer.result(),
        warnings=tuple(warn_list),
    )
    return OmnibusSolution(_result=result)
