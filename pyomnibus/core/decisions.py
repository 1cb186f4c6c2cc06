"""
Closed sets of test identifiers.

The omnibus engine, the pairwise engine and the post-hoc dispatcher all key
their strategy maps on these enums. They live in core so that the engines
can share them without importing one another.
"""

from enum import Enum


class OmnibusTest(str, Enum):
    """Omnibus test chosen for a k-group comparison."""
    ONEWAY_ANOVA = 'One-way ANOVA'
    RM_ANOVA = 'Repeated measures ANOVA'
    KRUSKAL_WALLIS = 'Kruskal-Wallis'
    FRIEDMAN = 'Friedman'

    @property
    def is_parametric(self) -> bool:
        return self in (OmnibusTest.ONEWAY_ANOVA, OmnibusTest.RM_ANOVA)


class PairwiseTest(str, Enum):
    """Two-group test chosen for one variable."""
    WELCH_T = 'Welch t-test'
    MANN_WHITNEY_U = 'Mann-Whitney U'
    CHI_SQUARED = 'Chi-squared'
    FISHER_EXACT = 'Fisher'
