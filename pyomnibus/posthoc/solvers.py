"""
Post-hoc dispatch.

Public API:
    post_hoc(result, ...) -> PostHocSolution
    p_adjust(p, method) -> ndarray

dispatch_post_hoc() is the shared step used by the omnibus engine. The
procedure is chosen by the omnibus test through a strategy map:

    One-way ANOVA           -> Tukey HSD at confidence 1 - alpha
    Repeated measures ANOVA -> pairwise paired t-tests, adjusted
    Kruskal-Wallis          -> pairwise rank-sum tests, adjusted
    Friedman                -> pairwise signed-rank tests, adjusted
"""

from __future__ import annotations

from typing import Callable, TYPE_CHECKING

from numpy.typing import NDArray

from pyomnibus.core.decisions import OmnibusTest
from pyomnibus.core.exceptions import ValidationError
from pyomnibus.core.result import Result
from pyomnibus.core.timing import Timer
from pyomnibus.core.validation import check_choice
from pyomnibus.posthoc._common import AdjustMethod, PostHocParams
from pyomnibus.posthoc._procedures import (
    paired_t,
    pairwise_tests,
    rank_sum,
    signed_rank,
    tukey_hsd,
)
from pyomnibus.posthoc.solution import PostHocSolution

if TYPE_CHECKING:
    from pyomnibus.omnibus.solution import OmnibusSolution


def _tukey(groups, alpha, method, mse, df_error) -> PostHocParams:
    return PostHocParams(
        procedure='Tukey HSD',
        omnibus_test=OmnibusTest.ONEWAY_ANOVA,
        adjust_method=None,
        comparisons=tukey_hsd(groups, mse, df_error, alpha=alpha),
        alpha=alpha,
        conf_level=1.0 - alpha,
    )


def _pairwise(procedure: str, test: OmnibusTest, pair_test) -> Callable[..., PostHocParams]:
    def run(groups, alpha, method, mse, df_error) -> PostHocParams:
        return PostHocParams(
            procedure=procedure,
            omnibus_test=test,
            adjust_method=method,
            comparisons=pairwise_tests(groups, pair_test, method, alpha=alpha),
            alpha=alpha,
            conf_level=None,
        )
    return run


_STRATEGIES: dict[OmnibusTest, Callable[..., PostHocParams]] = {
    OmnibusTest.ONEWAY_ANOVA: _tukey,
    OmnibusTest.RM_ANOVA: _pairwise(
        'Paired t-test', OmnibusTest.RM_ANOVA, paired_t,
    ),
    OmnibusTest.KRUSKAL_WALLIS: _pairwise(
        'Wilcoxon rank-sum test', OmnibusTest.KRUSKAL_WALLIS, rank_sum,
    ),
    OmnibusTest.FRIEDMAN: _pairwise(
        'Wilcoxon signed-rank test', OmnibusTest.FRIEDMAN, signed_rank,
    ),
}


def dispatch_post_hoc(
    test: OmnibusTest,
    groups: dict[str, NDArray],
    alpha: float,
    method: AdjustMethod,
    *,
    mse: float | None = None,
    df_error: int | None = None,
) -> PostHocParams:
    """
    Run the post-hoc procedure that matches an omnibus test.

    Args:
        test: The omnibus test that was run
        groups: level label -> values (ordered by subject for paired tests)
        alpha: Significance level; comparisons are marked p_adj < alpha
        method: Adjustment for the pairwise procedures (ignored by Tukey)
        mse, df_error: ANOVA error term, required for Tukey

    Raises:
        NumericalError, ValueError: If a procedure cannot be computed
    """
    return _STRATEGIES[test](groups, alpha, method, mse, df_error)


def post_hoc(
    result: 'OmnibusSolution',
    *,
    method: str | None = None,
) -> PostHocSolution:
    """
    Run the post-hoc procedure for a significant omnibus result.

    Args:
        result: Solution returned by omnibus()
        method: Adjustment method; defaults to the one the omnibus call used.
            One of 'holm', 'hochberg', 'hommel', 'bonferroni', 'BH', 'BY',
            'fdr' (alias for BH), 'none'.

    Returns:
        PostHocSolution with all k(k-1)/2 comparisons

    Raises:
        ValidationError: If the omnibus result is not significant or the
            method is invalid

    Examples:
        >>> res = omnibus(df, 'score', 'arm')
        >>> ph = post_hoc(res, method='bonferroni')
        >>> print(ph.summary())
    """
    if not result.significant:
        raise ValidationError(
            f"post-hoc comparisons require a significant omnibus result "
            f"(p = {result.p_value:.4g}, alpha = {result.alpha})"
        )
    adjust = check_choice(
        method if method is not None else result.info['method'],
        AdjustMethod,
        'method',
    )

    timer = Timer()
    timer.start()
    with timer.section('post_hoc'):
        params = dispatch_post_hoc(
            result.test,
            result.params.groups,
            result.alpha,
            adjust,
            mse=result.params.mse,
            df_error=result.params.df_error,
        )
    timer.stop()

    return PostHocSolution(_result=Result(
        params=params,
        info={'x': result.info['x'], 'y': result.info['y']},
        timing=timer.result(),
    ))
