"""
Common data types for omnibus comparisons.

Contains the frozen parameter payloads that go inside Result[P] envelopes.
"""

from dataclasses import dataclass, field
from enum import Enum

from numpy.typing import NDArray

from pyomnibus.core.decisions import OmnibusTest
from pyomnibus.core.result import Outcome
from pyomnibus.assumptions._common import AssumptionParams
from pyomnibus.posthoc._common import AdjustMethod, PostHocParams


class BalanceBand(str, Enum):
    WELL_BALANCED = 'well balanced'
    MODERATELY_UNBALANCED = 'moderately unbalanced'
    HIGHLY_UNBALANCED = 'highly unbalanced'


@dataclass(frozen=True)
class BalanceDiagnostic:
    """
    Descriptive balance coefficient: sum(group SDs) / sum(group means).

    band is None when the group means sum to zero (coefficient NaN) or to
    a negative number. Never used for test selection.
    """
    coefficient: float
    band: BalanceBand | None


@dataclass(frozen=True)
class OmnibusFit:
    """
    Statistic of the selected omnibus test.

    df holds (numerator, denominator) for the ANOVA family and a single
    value for the chi-squared family. mse/df_error are the ANOVA error term
    (None for rank tests); gg/hf p-values are only set for RM ANOVA.
    """
    statistic: float
    df: tuple[float, ...]
    p_value: float
    statistic_name: str
    eta_squared: float | None = None
    mse: float | None = None
    df_error: int | None = None
    gg_p_value: float | None = None
    hf_p_value: float | None = None


@dataclass(frozen=True)
class OmnibusParams:
    """
    Parameter payload for omnibus().

    post_hoc is None when the omnibus test was not significant, and a
    failed Outcome when the post-hoc procedure could not be computed.
    groups holds the analysed outcome values per level (subject-aligned for
    repeated designs) so post-hoc procedures can be re-run.
    """
    test: OmnibusTest
    fit: OmnibusFit
    significant: bool
    alpha: float
    adjust_method: AdjustMethod
    assumptions: AssumptionParams
    post_hoc: Outcome[PostHocParams] | None
    balance: BalanceDiagnostic
    group_sizes: dict[str, int]
    group_means: dict[str, float]
    formula: str
    groups: dict[str, NDArray] = field(
        default_factory=dict, repr=False, compare=False,
    )

    @property
    def statistic(self) -> float:
        return self.fit.statistic

    @property
    def df(self) -> tuple[float, ...]:
        return self.fit.df

    @property
    def p_value(self) -> float:
        return self.fit.p_value

    @property
    def mse(self) -> float | None:
        return self.fit.mse

    @property
    def df_error(self) -> int | None:
        return self.fit.df_error
