"""
Assumption evaluation.

Public API:
    check_assumptions(data, y, x, ...) -> AssumptionSolution
    assess_normality(data, x, ...) -> NormalityAssessmentSolution

evaluate_assumptions() is the shared step used by the omnibus engine: it
runs normality, variance homogeneity and (for repeated designs) sphericity
on an already validated GroupedDesign and never raises for a failing
sub-test; failures become failed Outcomes plus warning strings.
"""

import warnings
from typing import Any

import numpy as np

from pyomnibus.core.datasource import NaPolicy, Sample
from pyomnibus.core.exceptions import (
    EngineWarning,
    InsufficientDataError,
    NumericalError,
    ValidationError,
)
from pyomnibus.core.result import Outcome, Result
from pyomnibus.core.timing import Timer
from pyomnibus.core.validation import check_alpha, check_choice
from pyomnibus.assumptions._common import (
    AssumptionKey,
    AssumptionParams,
    NormalityMethod,
)
from pyomnibus.assumptions._assessment import MIN_ASSESSMENT_N, assessment_impl
from pyomnibus.assumptions._normality import normality_impl
from pyomnibus.assumptions._sphericity import mauchly_impl
from pyomnibus.assumptions._variance import variance_impl
from pyomnibus.assumptions.design import GroupedDesign
from pyomnibus.assumptions.solution import (
    AssumptionSolution,
    NormalityAssessmentSolution,
)

_SUBTEST_ERRORS = (NumericalError, FloatingPointError, ValueError)


def evaluate_assumptions(
    design: GroupedDesign,
    alpha: float,
    normality: NormalityMethod,
    timer: Timer | None = None,
) -> tuple[AssumptionParams, list[str]]:
    """
    Run every applicable assumption test on a validated design.

    Levene's test is used when normality was rejected or could not be
    determined; Bartlett's test otherwise.

    Returns:
        (params, warning messages for failed sub-tests)
    """
    timer = timer or Timer()
    warn_list: list[str] = []

    with timer.section('normality'):
        norm = Outcome.attempt(
            normality_impl, design.groups, alpha, normality,
            catch=_SUBTEST_ERRORS, label='normality test failed',
        )

    use_levene = not norm.ok or norm.unwrap().key is AssumptionKey.SIGNIFICANT
    with timer.section('variance'):
        variance = Outcome.attempt(
            variance_impl, design.groups, alpha, use_levene,
            catch=_SUBTEST_ERRORS, label='variance homogeneity test failed',
        )

    sphericity = None
    if design.is_repeated:
        with timer.section('sphericity'):
            sphericity = Outcome.attempt(
                mauchly_impl, design.wide, alpha,
                catch=_SUBTEST_ERRORS, label='sphericity test failed',
            )

    for outcome in (norm, variance, sphericity):
        if outcome is not None and not outcome.ok:
            warn_list.append(outcome.error)

    params = AssumptionParams(
        normality=norm,
        variance=variance,
        sphericity=sphericity,
        alpha=alpha,
        design_type=design.design_type,
        n_groups=design.k,
    )
    return params, warn_list


def check_assumptions(
    data: Any,
    y: str,
    x: str,
    *,
    paired_by: str | None = None,
    alpha: float = 0.05,
    na_action: str = 'omit',
    normality: str = 'auto',
) -> AssumptionSolution:
    """
    Evaluate the distributional assumptions of a grouped numeric variable.

    Args:
        data: pandas DataFrame, mapping of columns, or Sample
        y: Numeric response column
        x: Grouping factor column (at least 2 levels)
        paired_by: Subject column for repeated measures, or None
        alpha: Significance level for every assumption test
        na_action: 'omit' or 'exclude'
        normality: 'auto', 'shapiro' or 'lilliefors'

    Returns:
        AssumptionSolution with normality, variance and sphericity outcomes

    Raises:
        ValidationError: Bad alpha or option strings, unknown columns,
            fewer than 2 levels, a group with fewer than 3 observations,
            or a malformed repeated-measures layout

    Examples:
        >>> result = check_assumptions(df, 'score', 'arm')
        >>> result.normality_key
        <AssumptionKey.NON_SIGNIFICANT: 'non_significant'>
        >>> print(result.summary())
    """
    timer = Timer()
    timer.start()

    alpha = check_alpha(alpha)
    method = check_choice(normality, NormalityMethod, 'normality')
    with timer.section('design'):
        design = GroupedDesign.build(
            data, y, x, paired_by=paired_by, na_action=na_action,
        )

    params, warn_list = evaluate_assumptions(design, alpha, method, timer)
    if design.n_dropped_subjects:
        warn_list.append(
            f"{design.n_dropped_subjects} subject(s) dropped for missing "
            f"'{design.y.name}' values"
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
            'normality_method': method.value,
            **design.rows.info(),
        },
        timing=timer.result(),
        warnings=tuple(warn_list),
    )
    return AssumptionSolution(_result=result)


def assess_normality(
    data: Any,
    x: str,
    *,
    alpha: float = 0.05,
) -> NormalityAssessmentSolution:
    """
    Assess whether a single numeric variable is normally distributed.

    Shapiro-Wilk decides up to 50 observations, the Lilliefors-corrected
    Kolmogorov-Smirnov test beyond that. The formal test must not reject
    normality and skewness and kurtosis must lie within the shape rule
    for the sample size. Missing values are dropped.

    Args:
        data: pandas DataFrame, mapping of columns, or Sample
        x: Numeric column to assess
        alpha: Significance level of the formal test

    Returns:
        NormalityAssessmentSolution with test outcomes, shape statistics
        and Q-Q outliers as row positions in `data`

    Raises:
        ValidationError: Bad alpha, unknown or non-numeric column
        InsufficientDataError: Fewer than 5 non-missing values

    Examples:
        >>> result = assess_normality(df, 'score')
        >>> result.normal
        True
        >>> print(result.summary())
    """
    timer = Timer()
    timer.start()

    alpha = check_alpha(alpha)
    with timer.section('design'):
        sample = Sample.build(data)
        ref = sample.ref(x, role='x')
        if not ref.numeric:
            raise ValidationError(f"x: column {x!r} must be numeric")
        rows = sample.select((ref,))
        values = sample.values(ref, rows)
        positions = np.flatnonzero(rows.mask)

    n = len(values)
    if n < MIN_ASSESSMENT_N:
        raise InsufficientDataError(
            f"{x!r} has {n} non-missing value(s); at least "
            f"{MIN_ASSESSMENT_N} are required",
            group=x,
            n_observed=n,
            n_required=MIN_ASSESSMENT_N,
        )

    warn_list: list[str] = []
    if np.ptp(values) == 0:
        warn_list.append("only constant values; normality tests may be unreliable")

    with timer.section('assessment'):
        params = assessment_impl(values, x, alpha, positions)

    for outcome in (params.shapiro, params.ks):
        if outcome is not None and not outcome.ok:
            warn_list.append(outcome.error)

    timer.stop()

    for message in warn_list:
        warnings.warn(message, EngineWarning, stacklevel=2)

    result = Result(
        params=params,
        info={
            'variable': x,
            'n_missing': rows.n_missing,
            'n_rows': rows.n_total,
        },
        timing=timer.result(),
        warnings=tuple(warn_list),
    )
    return NormalityAssessmentSolution(_result=result)
