"""
Common data types for post-hoc comparisons.

Contains the frozen parameter payloads that go inside Result[P] envelopes.
"""

from dataclasses import dataclass
from enum import Enum

from pyomnibus.core.decisions import OmnibusTest


class AdjustMethod(str, Enum):
    """p-value adjustment methods (the p.adjust family)."""
    HOLM = 'holm'
    HOCHBERG = 'hochberg'
    HOMMEL = 'hommel'
    BONFERRONI = 'bonferroni'
    BH = 'BH'
    BY = 'BY'
    NONE = 'none'

    @classmethod
    def _missing_(cls, value):
        # 'fdr' is R's alias for Benjamini-Hochberg
        if value == 'fdr':
            return cls.BH
        return None


@dataclass(frozen=True)
class PostHocComparison:
    """
    One pairwise contrast.

    estimate is the mean difference group2 - group1 where the procedure
    produces one (Tukey, paired t); the bounds are only set by Tukey.
    p_value is the unadjusted p-value and is None for Tukey, whose
    p-values are adjusted by construction.
    """
    group1: str
    group2: str
    estimate: float | None
    ci_lower: float | None
    ci_upper: float | None
    statistic: float | None
    p_value: float | None
    p_adjusted: float
    significant: bool

    @property
    def contrast(self) -> str:
        return f"{self.group2} - {self.group1}"


@dataclass(frozen=True)
class PostHocParams:
    """Parameter payload for a post-hoc procedure."""
    procedure: str                       # 'Tukey HSD', 'Paired t-test', ...
    omnibus_test: OmnibusTest
    adjust_method: AdjustMethod | None   # None for Tukey (built-in adjustment)
    comparisons: tuple[PostHocComparison, ...]
    alpha: float
    conf_level: float | None             # Tukey only
