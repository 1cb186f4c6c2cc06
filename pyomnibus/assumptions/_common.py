"""
Common data types for assumption checks.

Contains the frozen parameter payloads that go inside Result[P] envelopes.
Each payload is a pure data container; the classification helpers on the
enums are the only logic here.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pyomnibus.core.result import Outcome
from pyomnibus.effects._common import EffectSize


class AssumptionKey(str, Enum):
    """Whether an assumption test rejected its null at the caller's alpha."""
    SIGNIFICANT = 'significant'
    NON_SIGNIFICANT = 'non_significant'

    @classmethod
    def from_p(cls, p_value: float, alpha: float) -> 'AssumptionKey':
        """SIGNIFICANT iff p < alpha (strict)."""
        return cls.SIGNIFICANT if p_value < alpha else cls.NON_SIGNIFICANT


class DesignType(str, Enum):
    INDEPENDENT = 'independent'
    REPEATED = 'repeated'


class NormalityMethod(str, Enum):
    """
    Which normality test to run per group.

    AUTO uses Shapiro-Wilk up to SHAPIRO_MAX_N observations and the
    Lilliefors-corrected Kolmogorov-Smirnov test above that.
    """
    AUTO = 'auto'
    SHAPIRO = 'shapiro'
    LILLIEFORS = 'lilliefors'


SHAPIRO_MAX_N = 5000


@dataclass(frozen=True)
class GroupNormality:
    """Normality test result for one group."""
    group: str
    test: str               # 'Shapiro-Wilk' or 'Lilliefors'
    statistic: float        # W or D
    p_value: float
    n: int


@dataclass(frozen=True)
class NormalityResult:
    """Per-group normality tests and the combined key."""
    groups: tuple[GroupNormality, ...]
    key: AssumptionKey      # SIGNIFICANT if any group's p < alpha


@dataclass(frozen=True)
class VarianceResult:
    """Homogeneity-of-variance test (Levene or Bartlett)."""
    test: str                        # 'Levene' or 'Bartlett'
    statistic: float                 # F (Levene) or K^2 (Bartlett)
    p_value: float
    df: tuple[int, ...]              # (df1, df2) for Levene, (df,) for Bartlett
    effect_size: EffectSize
    key: AssumptionKey


@dataclass(frozen=True)
class SphericityResult:
    """Mauchly's test of sphericity with epsilon corrections."""
    test: str                        # 'Mauchly'
    w: float
    statistic: float                 # chi-squared approximation
    p_value: float
    df: int
    gg_epsilon: float
    hf_epsilon: float
    effect_size: EffectSize
    key: AssumptionKey


@dataclass(frozen=True)
class AssumptionParams:
    """
    Parameter payload for an assumption evaluation.

    Each sub-result is an Outcome: it either holds the test result or the
    message of the error that prevented it. sphericity is None for
    independent designs, where it does not apply.
    """
    normality: Outcome[NormalityResult]
    variance: Outcome[VarianceResult]
    sphericity: Outcome[SphericityResult] | None
    alpha: float
    design_type: DesignType
    n_groups: int


@dataclass(frozen=True)
class NormalityAssessment:
    """
    Parameter payload for assess_normality().

    ks is None below 51 observations, where Shapiro-Wilk is the deciding
    test. normal requires the deciding test's p > alpha and the shape rule.
    outliers and extreme_outliers are row positions in the input data.
    """
    variable: str
    n: int
    mean: float
    sd: float
    median: float
    iqr: float
    shapiro: Outcome[GroupNormality]
    ks: Outcome[GroupNormality] | None
    skewness: float
    kurtosis: float
    skewness_z: float
    kurtosis_z: float
    shape_rule: str
    shape_normal: bool
    normal: bool
    alpha: float
    outliers: tuple[int, ...]
    extreme_outliers: tuple[int, ...]

    @property
    def deciding_test(self) -> Outcome[GroupNormality]:
        return self.ks if self.ks is not None else self.shapiro
