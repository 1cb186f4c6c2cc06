"""
Two-group comparisons and the per-variable summary table.

Public API:
    compare_groups(data, y, x, ...) -> PairwiseSolution
    summary_table(data, group_var, ...) -> SummaryTable
"""

import warnings
from typing import Any, Sequence

import numpy as np

from pyomnibus.core.datasource import NaPolicy, Sample
from pyomnibus.core.exceptions import EngineWarning, InsufficientDataError
from pyomnibus.core.formatting import format_p
from pyomnibus.core.result import Result
from pyomnibus.core.timing import Timer
from pyomnibus.core.validation import (
    check_alpha,
    check_choice,
    check_min_samples,
    check_positive_int,
)
from pyomnibus.pairwise._categorical import compare_categorical
from pyomnibus.pairwise._common import PairwiseParams, VariableKind
from pyomnibus.pairwise._describe import describe
from pyomnibus.pairwise._numeric import compare_numeric, group_normality
from pyomnibus.pairwise.design import PairwiseDesign
from pyomnibus.pairwise.solution import PairwiseSolution, SummaryRow, SummaryTable

INSUFFICIENT_DATA = 'Insufficient data'


def analyze_variable(
    design: PairwiseDesign,
    alpha: float,
    *,
    effect_size: bool = True,
    n_simulations: int = 2000,
    seed: int | np.random.Generator | None = None,
) -> PairwiseParams:
    """
    Run the two-group comparison for one validated variable.

    A constant variable is skipped (test None).

    Raises:
        InsufficientDataError: If a numeric group has fewer than 2 values
            or the contingency table has a dimension below 2
    """
    base = dict(
        variable=design.variable.name,
        group_var=design.group.name,
        kind=design.kind,
        levels=design.levels,
        alpha=alpha,
        group_sizes={label: len(v) for label, v in design.values.items()},
        group_missing=dict(design.missing),
    )

    if design.is_constant:
        return PairwiseParams(
            **base, test=None, statistic=None, df=None, p_value=None,
            significant=False, effect_size=None, approximate=False,
            numeric=None, categorical=None,
        )

    if design.kind is VariableKind.NUMERIC:
        for label, values in design.values.items():
            check_min_samples(values, 2, label)
        test, stat, df, p_value, eff, detail = compare_numeric(
            design.values, effect_size=effect_size,
        )
        return PairwiseParams(
            **base, test=test, statistic=stat, df=df, p_value=p_value,
            significant=p_value < alpha, effect_size=eff, approximate=False,
            numeric=detail, categorical=None,
        )

    test, stat, df, p_value, eff, approximate, detail = compare_categorical(
        design.values, design.variable.name,
        effect_size=effect_size, n_simulations=n_simulations, seed=seed,
    )
    return PairwiseParams(
        **base, test=test, statistic=stat, df=df, p_value=p_value,
        significant=p_value < alpha, effect_size=eff, approximate=approximate,
        numeric=None, categorical=detail,
    )


def compare_groups(
    data: Any,
    y: str,
    x: str,
    *,
    alpha: float = 0.05,
    na_action: str = 'omit',
    effect_size: bool = True,
    n_simulations: int = 2000,
    seed: int | np.random.Generator | None = None,
) -> PairwiseSolution:
    """
    Compare one variable between two groups.

    Numeric variables: Welch t-test when both groups pass Shapiro-Wilk
    (p > 0.05), else Mann-Whitney U; effect size Cohen's d or r.
    Categorical variables: Fisher's exact test when any expected count is
    below 5 (Monte Carlo p-value beyond 2x2), else Pearson chi-squared
    without continuity correction; effect size odds ratio (Fisher 2x2) or
    Cramer's V.

    Args:
        data: pandas DataFrame, mapping of columns, or Sample
        y: Variable to compare (numeric or categorical)
        x: Grouping column with exactly 2 levels
        alpha: Significance level in (0, 1)
        na_action: 'omit' or 'exclude' (rows with a missing group)
        effect_size: Whether to compute the effect size
        n_simulations: Monte Carlo replicates for Fisher beyond 2x2
        seed: Seed for the Monte Carlo p-value

    Returns:
        PairwiseSolution; `test` is None when the variable is constant

    Raises:
        ValidationError: Invalid options, unknown columns, a group column
            without exactly 2 levels, a numeric group with fewer than 2
            values, or a contingency table smaller than 2x2

    Examples:
        >>> res = compare_groups(df, 'age', 'arm')
        >>> res.test, res.p_value, res.effect_size
    """
    timer = Timer()
    timer.start()

    alpha = check_alpha(alpha)
    check_choice(na_action, NaPolicy, 'na_action')
    n_simulations = check_positive_int(n_simulations, 'n_simulations')

    with timer.section('design'):
        design = PairwiseDesign.build(data, y, x, na_action=na_action)
    with timer.section('test'):
        params = analyze_variable(
            design, alpha,
            effect_size=effect_size, n_simulations=n_simulations, seed=seed,
        )

    warn_list: list[str] = []
    if params.skipped:
        warn_list.append(
            f"variable {y!r} has fewer than 2 distinct values; no test performed"
        )

    timer.stop()
    for message in warn_list:
        warnings.warn(message, EngineWarning, stacklevel=2)

    return PairwiseSolution(_result=Result(
        params=params,
        info={
            'y': design.variable.name,
            'x': design.group.name,
            'kind': design.kind.value,
            **design.rows.info(),
        },
        timing=timer.result(),
        warnings=tuple(warn_list),
    ))


def _overall_row(sample: Sample, name: str, all_stats: bool) -> SummaryRow:
    ref = sample.ref(name, role='variable')
    missing = sample.missing(ref)
    clean = sample.values(ref)[~missing]
    normality = format_p(group_normality(clean)) if ref.numeric else 'NA'
    return SummaryRow(
        variable=name,
        n={'overall': int(missing.shape[0])},
        missing={'overall': int(missing.sum())},
        summaries={'overall': describe(clean, numeric=ref.numeric, all_stats=all_stats)},
        normality=normality,
        test=None,
        p_value=None,
        effect_size=None,
        comparison=None,
    )


def _group_row(
    design: PairwiseDesign,
    alpha: float,
    all_stats: bool,
    effect_size: bool,
    n_simulations: int,
    seed: Any,
) -> SummaryRow:
    numeric = design.kind is VariableKind.NUMERIC
    n = {label: len(v) + design.missing[label] for label, v in design.values.items()}

    try:
        params = analyze_variable(
            design, alpha,
            effect_size=effect_size, n_simulations=n_simulations, seed=seed,
        )
    except InsufficientDataError:
        params = None

    is_normal = True
    normality = 'NA'
    if params is not None and params.numeric is not None:
        is_normal = params.numeric.is_normal
        normality = ", ".join(
            f"{label}: {format_p(p)}" for label, p in params.numeric.normality_p.items()
        )

    summaries = {
        label: describe(
            values, numeric=numeric, all_stats=all_stats,
            force_median=numeric and not is_normal,
        )
        for label, values in design.values.items()
    }

    if params is None:
        test, p_value, eff = INSUFFICIENT_DATA, None, None
    else:
        test = params.test.value if params.test is not None else None
        p_value, eff = params.p_value, params.effect_size

    return SummaryRow(
        variable=design.variable.name,
        n=n,
        missing=dict(design.missing),
        summaries=summaries,
        normality=normality,
        test=test,
        p_value=p_value,
        effect_size=eff,
        comparison=params,
    )


def summary_table(
    data: Any,
    group_var: str | None = None,
    *,
    variables: Sequence[str] | None = None,
    exclude: Sequence[str] | None = None,
    effect_size: bool = False,
    all_stats: bool = False,
    alpha: float = 0.05,
    na_action: str = 'omit',
    n_simulations: int = 2000,
    seed: int | np.random.Generator | None = None,
) -> SummaryTable:
    """
    Per-variable descriptive table, optionally comparing two groups.

    Without group_var every variable gets n, missing count, a descriptive
    summary and a normality p-value. With group_var (exactly 2 levels) each
    variable is summarized per group and compared with compare_groups()
    logic. A variable with too little data is reported as
    'Insufficient data' instead of aborting the table; a constant variable
    gets no test.

    Args:
        data: pandas DataFrame, mapping of columns, or Sample
        group_var: Two-level grouping column, or None for an overall table
        variables: Columns to include (default: all but group_var)
        exclude: Columns to leave out
        effect_size: Add effect sizes to grouped rows
        all_stats: Report mean, SD, median, quartiles and range
        alpha: Significance level for the comparisons
        na_action: 'omit' or 'exclude' (rows with a missing group)
        n_simulations, seed: Monte Carlo settings for Fisher beyond 2x2

    Returns:
        SummaryTable

    Raises:
        ValidationError: Unknown columns, invalid options, or a group_var
            without exactly 2 levels

    Examples:
        >>> table = summary_table(df, 'arm', effect_size=True)
        >>> table.to_frame()
    """
    alpha = check_alpha(alpha)
    check_choice(na_action, NaPolicy, 'na_action')
    n_simulations = check_positive_int(n_simulations, 'n_simulations')

    sample = Sample.build(data)
    grp_ref = sample.ref(group_var, role='group_var') if group_var is not None else None

    names = list(variables) if variables is not None else list(sample.columns)
    skip = set(exclude or ())
    if group_var is not None:
        skip.add(group_var)
    names = [name for name in names if name not in skip]

    rows: list[SummaryRow] = []
    levels: tuple[str, ...] = ('overall',)
    for name in names:
        if grp_ref is None:
            rows.append(_overall_row(sample, name, all_stats))
            continue
        design = PairwiseDesign.from_sample(
            sample, sample.ref(name, role='variable'), grp_ref, na_action,
        )
        levels = design.levels
        rows.append(_group_row(
            design, alpha, all_stats, effect_size, n_simulations, seed,
        ))

    return SummaryTable(
        rows=tuple(rows),
        group_var=group_var,
        levels=levels,
        effect_size=effect_size,
    )
