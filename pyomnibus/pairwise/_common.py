"""
Common data types for two-group comparisons.

Contains the frozen parameter payloads that go inside Result[P] envelopes.
"""

from dataclasses import dataclass
from enum import Enum

from pyomnibus.core.decisions import PairwiseTest
from pyomnibus.effects._common import EffectSize

# Shapiro-Wilk threshold used to call a group normal, independent of the
# caller's alpha for the comparison itself.
NORMALITY_ALPHA = 0.05

EXPECTED_COUNT_MIN = 5


class VariableKind(str, Enum):
    NUMERIC = 'numeric'
    CATEGORICAL = 'categorical'


@dataclass(frozen=True)
class NumericDetail:
    """
    Numeric-path details.

    normality_p holds the Shapiro-Wilk p-value per group, None where the
    test cannot be computed (fewer than 3 values, more than 5000, constant).
    """
    normality_p: dict[str, float | None]
    is_normal: bool
    means: dict[str, float]
    sds: dict[str, float]


@dataclass(frozen=True)
class CategoricalDetail:
    """Categorical-path details: observed and expected tables."""
    row_levels: tuple[str, ...]
    col_levels: tuple[str, ...]
    observed: tuple[tuple[int, ...], ...]
    expected: tuple[tuple[float, ...], ...]
    chi_squared: float            # uncorrected Pearson statistic
    n_simulations: int | None     # Monte Carlo replicates, if simulated


@dataclass(frozen=True)
class PairwiseParams:
    """
    Parameter payload for compare_groups().

    test is None when the variable is constant (skipped); statistic, df,
    p_value and effect_size are then None too. df is (df,) for t and
    chi-squared, None for rank and exact tests. approximate is True when
    the p-value comes from Monte Carlo simulation.
    """
    variable: str
    group_var: str
    kind: VariableKind
    levels: tuple[str, str]
    test: PairwiseTest | None
    statistic: float | None
    df: tuple[float, ...] | None
    p_value: float | None
    significant: bool
    alpha: float
    effect_size: EffectSize | None
    approximate: bool
    group_sizes: dict[str, int]        # non-missing values per group
    group_missing: dict[str, int]      # missing values per group
    numeric: NumericDetail | None
    categorical: CategoricalDetail | None

    @property
    def skipped(self) -> bool:
        return self.test is None
